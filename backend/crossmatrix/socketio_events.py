from flask import current_app, request
from flask_socketio import join_room, leave_room, emit
from crossmatrix import socketio
from crossmatrix.services.rooms import (
    ROLES,
    RoomError,
    RoomRegistry,
)

SIGNAL_TYPES = ('offer', 'answer', 'candidate')


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _registry() -> RoomRegistry:
    return current_app.extensions['room_registry']


def _channel(room_id: str) -> str:
    return f"room:{room_id}"


def _may_send(room_id: str, sid: str) -> bool:
    """Stricter deployments only accept gameplay traffic from seated players."""
    if not current_app.config.get('ENFORCE_PLAYER_ROLE'):
        return True
    return _registry().is_player_in(sid, room_id)


def _announce_departure(result) -> None:
    room_id = result.room.room_id
    channel = _channel(room_id)
    if result.was_player:
        emit('player_left', result.sid, to=channel, include_self=False)
    if not result.swept:
        emit('room_update', result.status, to=channel, include_self=False)
    current_app.logger.info(
        f"[leave] room={room_id} sid={result.sid} role={result.role} swept={result.swept}"
    )


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    result = _registry().leave(sid)
    if result is None:
        return
    _announce_departure(result)


def handle_join_room(data):
    data = data or {}
    room_id = data.get('roomId')
    role = data.get('role')
    sid = _get_sid()

    if not isinstance(room_id, str) or not room_id:
        emit('error_message', 'roomId is required')
        return
    room_id = room_id.strip()
    id_length = int(current_app.config.get('ROOM_ID_LENGTH', 4))
    if len(room_id) != id_length:
        emit('error_message', f'Room ID must be {id_length} characters')
        return
    if role not in ROLES:
        emit('error_message', f'Unknown role: {role}')
        return

    try:
        result = _registry().join(room_id, sid, role)
    except RoomError as exc:
        current_app.logger.info(f"[join-rejected] room={room_id} sid={sid} role={role} reason={exc}")
        emit('error_message', str(exc))
        return

    if result.previous is not None:
        leave_room(_channel(result.previous.room.room_id))
        _announce_departure(result.previous)

    channel = _channel(room_id)
    join_room(channel)
    current_app.logger.info(
        f"[join] room={room_id} sid={sid} role={result.role} "
        f"players={result.status['playerCount']} spectators={result.status['spectatorCount']}"
    )
    emit('room_update', result.status, to=channel)

    for player_sid in result.notify_players:
        emit('player_joined', {'newPlayerId': sid}, to=player_sid)

    if result.sync_from:
        current_app.logger.info(f"[sync-request] room={room_id} from={result.sync_from} for={sid}")
        emit('request_state', {'requesterId': sid}, to=result.sync_from)


def handle_leave_room(data=None):
    sid = _get_sid()
    result = _registry().leave(sid)
    if result is None:
        return
    leave_room(_channel(result.room.room_id))
    _announce_departure(result)


def handle_game_action(data):
    data = data or {}
    room_id = data.get('roomId')
    action = data.get('action')
    sid = _get_sid()
    if not room_id or not action:
        current_app.logger.info(f"[action-malformed] sid={sid} room={room_id} action={action}")
        return
    if not _may_send(room_id, sid):
        current_app.logger.info(f"[action-dropped] room={room_id} sid={sid} action={action}")
        return
    emit('game_update', {
        'action': action,
        'payload': data.get('payload') or {},
        'from': sid,
    }, to=_channel(room_id), include_self=False)


def handle_sync_state(data):
    data = data or {}
    target_id = data.get('targetId')
    sid = _get_sid()
    if not target_id:
        current_app.logger.info(f"[sync-malformed] sid={sid} missing targetId")
        return
    registry = _registry()
    room_id = registry.room_of(target_id)
    if room_id is None:
        # Requester went away before the snapshot arrived
        return
    if not _may_send(room_id, sid):
        current_app.logger.info(f"[sync-dropped] room={room_id} sid={sid} target={target_id}")
        return
    current_app.logger.info(f"[sync-relay] room={room_id} from={sid} to={target_id}")
    emit('state_synced', data.get('state') or {}, to=target_id)


def handle_signal(data):
    data = data or {}
    room_id = data.get('roomId')
    signal_type = data.get('type')
    sid = _get_sid()
    if not current_app.config.get('ENABLE_SIGNALING', True):
        return
    if signal_type not in SIGNAL_TYPES:
        current_app.logger.info(f"[signal-dropped] room={room_id} sid={sid} type={signal_type}")
        return
    if not room_id or not _may_send(room_id, sid):
        return
    for peer_sid in _registry().other_players(room_id, sid):
        emit('signal', {
            'type': signal_type,
            'payload': data.get('payload'),
            'from': sid,
        }, to=peer_sid)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the configured namespace.

    The socketio object outlives any one app, so feature flags such as
    ENABLE_SIGNALING are read per event rather than at registration.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_room', handle_join_room, namespace=namespace)
    socketio.on_event('leave_room', handle_leave_room, namespace=namespace)
    socketio.on_event('game_action', handle_game_action, namespace=namespace)
    socketio.on_event('sync_state', handle_sync_state, namespace=namespace)
    socketio.on_event('signal', handle_signal, namespace=namespace)
