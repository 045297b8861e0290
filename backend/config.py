import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///crossmatrix.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma separated list; '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'http://localhost:3000,http://127.0.0.1:3000')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Room capacity and identifier shape
    MAX_PLAYERS_PER_ROOM = int(os.environ.get('MAX_PLAYERS_PER_ROOM', '2'))
    ROOM_ID_LENGTH = int(os.environ.get('ROOM_ID_LENGTH', '4'))
    # Feature flags (1 enables, 0 disables)
    ENABLE_SIGNALING = os.environ.get('ENABLE_SIGNALING', '1') == '1'
    ENABLE_CATALOG_API = os.environ.get('ENABLE_CATALOG_API', '1') == '1'
    # Drop a room record once nobody is left in it
    SWEEP_EMPTY_ROOMS = os.environ.get('SWEEP_EMPTY_ROOMS', '1') == '1'
    # Policy switch: also request a board snapshot for late-joining players
    SYNC_LATE_PLAYERS = os.environ.get('SYNC_LATE_PLAYERS', '0') == '1'
    # Optional stricter layer: only players may send actions, signals and snapshots
    ENFORCE_PLAYER_ROLE = os.environ.get('ENFORCE_PLAYER_ROLE', '0') == '1'
