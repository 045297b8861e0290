from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Cross Matrix room server is running.'})


@main.route('/api/rooms/<string:room_id>', methods=['GET'])
def room_status(room_id):
    """Returns the member counts of a live room."""
    registry = current_app.extensions['room_registry']
    if room_id not in registry:
        return jsonify({'error': 'Room not found'}), 404
    payload = {'roomId': room_id}
    payload.update(registry.status(room_id))
    return jsonify(payload)
