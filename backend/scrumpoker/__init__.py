from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)

EXTENSION_KEY = 'scrumpoker'


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per app; tests build as many independent apps as they like
    from scrumpoker.services.rooms import RoomRegistry
    from scrumpoker.socketio_events import ConnectionTracker
    flask_app.extensions[EXTENSION_KEY] = {
        'rooms': RoomRegistry(),
        'connections': ConnectionTracker(),
    }

    from scrumpoker.main import main
    flask_app.register_blueprint(main)

    from scrumpoker.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/poker'))

    flask_app.logger.info(
        f"[app-init] namespace={flask_app.config.get('SOCKETIO_NAMESPACE')} origins={allowed_origins}"
    )
    return flask_app


def get_rooms(app=None):
    """Room registry bound to ``app`` (defaults to the current app)."""
    return (app or current_app).extensions[EXTENSION_KEY]['rooms']


def get_connections(app=None):
    return (app or current_app).extensions[EXTENSION_KEY]['connections']
