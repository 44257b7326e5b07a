import os
import sys
import pytest

# Ensure the backend root (containing the `scrumpoker` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from scrumpoker import create_app, socketio
from scrumpoker.models import User
from scrumpoker.services.rooms import RoomRegistry

NAMESPACE = '/poker'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = NAMESPACE
    LOG_LEVEL = 'DEBUG'
    ENFORCE_SINGLE_CONNECTION = True


class RecordingBroadcaster:
    """Stands in for the Socket.IO broadcaster and keeps every emit."""

    def __init__(self):
        self.emitted = []

    def to(self, room_id):
        broadcaster = self

        class _Channel:
            def emit(self, event, payload=None):
                broadcaster.emitted.append((room_id, event, payload))

        return _Channel()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def make_sio_client(flask_app, user_id, name):
    return socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace=NAMESPACE,
        auth={'userId': user_id, 'name': name},
    )


@pytest.fixture()
def sio_client(flask_app):
    test_client = make_sio_client(flask_app, 'u-alice', 'Alice')
    yield test_client
    try:
        test_client.disconnect(namespace=NAMESPACE)
    except Exception:
        pass


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def alice():
    return User(id='u-alice', name='Alice')


@pytest.fixture()
def bob():
    return User(id='u-bob', name='Bob')


@pytest.fixture()
def carol():
    return User(id='u-carol', name='Carol')
