import os
import sys
import pytest

# Ensure the backend root (containing the `crossmatrix` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from crossmatrix import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    MAX_PLAYERS_PER_ROOM = 2
    ROOM_ID_LENGTH = 4
    ENABLE_SIGNALING = True
    ENABLE_CATALOG_API = True
    SWEEP_EMPTY_ROOMS = True
    SYNC_LATE_PLAYERS = False
    ENFORCE_PLAYER_ROLE = False


def make_app(**overrides):
    config = type('OverrideConfig', (TestConfig,), overrides)
    return create_app(config)


@pytest.fixture()
def app_overrides():
    return {}


@pytest.fixture()
def flask_app(app_overrides):
    application = make_app(**app_overrides)
    with application.app_context():
        # Ensure models are imported so tables are created
        import crossmatrix.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['room_registry']


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients; all are disconnected at teardown."""
    opened = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/'
        )
        opened.append(test_client)
        return test_client

    yield _connect
    for test_client in opened:
        try:
            if test_client.is_connected('/'):
                test_client.disconnect(namespace='/')
        except Exception:
            pass


@pytest.fixture()
def sio_client(connect):
    return connect()
