from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _allowed_origins(raw):
    if not raw or raw.strip() == '*':
        return '*'
    return [o.strip() for o in raw.split(',') if o.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per server process, reached through current_app by handlers
    from crossmatrix.services.rooms import RoomRegistry
    flask_app.extensions['room_registry'] = RoomRegistry(
        max_players=flask_app.config.get('MAX_PLAYERS_PER_ROOM', 2),
        sweep_empty=flask_app.config.get('SWEEP_EMPTY_ROOMS', True),
        sync_late_players=flask_app.config.get('SYNC_LATE_PLAYERS', False),
    )

    from crossmatrix.main import main
    flask_app.register_blueprint(main)

    if flask_app.config.get('ENABLE_CATALOG_API', True):
        from crossmatrix.api.catalog import catalog
        flask_app.register_blueprint(catalog, url_prefix='/api')

    from crossmatrix.socketio_events import register_socketio_handlers
    register_socketio_handlers(
        namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'),
    )

    @click.command('load-catalog')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    @click.option('--reset', is_flag=True, help='Drop and recreate tables first.')
    def load_catalog_command(path, reset):
        """Loads card definitions from a cards.json file into the catalog."""
        from crossmatrix.models import load_cards_from_file
        with flask_app.app_context():
            if reset:
                db.drop_all()
            db.create_all()
            count = load_cards_from_file(path)
            print(f'Loaded {count} cards into the catalog.')

    flask_app.cli.add_command(load_catalog_command)

    return flask_app
