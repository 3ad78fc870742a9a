import os
import sys
import pytest

# Ensure the backend root (containing the `tictac` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tictac import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = ['http://localhost:3000']
    SOCKETIO_NAMESPACE = '/'
    MATCH_ID_LENGTH = 6
    MATCH_ID_MAX_ATTEMPTS = 20
    NAME_MAX_LENGTH = 32
    CHAT_MAX_LENGTH = 500
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients, optionally identified by name.

    Initial packets (connected, joinable_matches) are flushed.
    """
    opened = []

    def _connect(name=None):
        sio_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
        )
        if name is not None:
            sio_client.emit('identify', {'name': name})
        sio_client.get_received()
        opened.append(sio_client)
        return sio_client

    yield _connect
    for sio_client in opened:
        try:
            if sio_client.is_connected():
                sio_client.disconnect()
        except Exception:
            pass


def payloads(received, name):
    """Return the first argument of every received packet called `name`."""
    return [pkt['args'][0] for pkt in received if pkt['name'] == name]
