import os
import sys
import pytest

# Ensure the backend root (containing the `runner` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import GameConfig
from runner import create_app, socketio
from runner.models import Player


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    REQUIRED_PLAYERS = 3
    START_DELAY_MS = 3000
    SOCKETIO_NAMESPACE = '/ws'
    DEFAULT_ROOM_ID = 'TEAM_ARENA_01'
    SERVER_URL = 'http://localhost:5000'


class CalmGameConfig(GameConfig):
    """Flat level with no pits or crates."""
    PIT_PROBABILITY = 0.0
    OBSTACLE_PROBABILITY = 0.0
    MAX_COINS_PER_PLATFORM = 0


class FakeTransport:
    """Stands in for SessionTransport; tests push events and read commands."""

    def __init__(self, sid='me'):
        self.sid = sid
        self.events = []
        self.sent = []
        self.opened = None
        self.closed = False
        self.fail_open = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def open(self, room_id, name):
        if self.fail_open:
            raise self.fail_open
        self.opened = (room_id, name)

    def toggle_ready(self):
        self.sent.append(('toggle_ready',))

    def start_game(self):
        self.sent.append(('start_game',))

    def update_player(self, score, status):
        self.sent.append(('update_player', score, status))

    def poll(self):
        events, self.events = self.events, []
        return events

    def close(self):
        self.closed = True


def make_player(pid, name=None, ready=False, score=0):
    return Player(id=pid, name=name or pid, is_ready=ready, score=score)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        application.extensions['room_registry'].close()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Creates Socket.IO test clients and disconnects them afterwards."""
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['room_registry']


@pytest.fixture()
def fake_transport():
    return FakeTransport()
