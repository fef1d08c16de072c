import os
import sys
from collections import defaultdict

import pytest

# Ensure the backend root (containing the `quiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from quiz import create_app, db, socketio
from quiz.services import get_services
from quiz.services.game import BroadcastRouter, GameController, GameSession, TokenRegistry
from quiz.services.game.controller import GameSettings

ADMIN = 'admin@example.com'


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ADMIN_IDENTITY = ADMIN
    RUN_COUNTDOWNS = False
    FALLBACK_DIRECTORY = {
        ADMIN: 'janvier 2020',
        'alice@example.com': 'mars 2021',
        'bob@example.com': 'juin 2025',
    }
    GENIE_HOST = ''
    GENIE_TOKEN = ''
    GENIE_SPACE_ID = ''


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import quiz.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def services(flask_app):
    return get_services(flask_app)


def make_sio_client(flask_app):
    return socketio.test_client(flask_app, flask_test_client=flask_app.test_client())


@pytest.fixture()
def sio_client(flask_app):
    test_client = make_sio_client(flask_app)
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass


class RecordingSocketIO:
    """Stands in for the Socket.IO server: tracks rooms, records who got what."""

    def __init__(self):
        self.server = self
        self.rooms = defaultdict(set)
        self.log = []

    def enter_room(self, sid, room, namespace=None):
        self.rooms[room].add(sid)

    def close_room(self, room, namespace=None):
        self.rooms.pop(room, None)

    def emit(self, event, data, to=None, namespace=None):
        recipients = set(self.rooms.get(to, ())) if ':' in to else {to}
        self.log.append((event, data, recipients))

    def received(self, sid, event=None):
        return [
            (name, data) for name, data, recipients in self.log
            if sid in recipients and (event is None or name == event)
        ]

    def payloads(self, sid, event):
        return [data for _, data in self.received(sid, event)]

    def names(self):
        return [name for name, _, _ in self.log]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeSink:
    def __init__(self):
        self.appended = []
        self.cleared = []

    def append(self, game_id, records):
        self.appended.append((game_id, list(records)))
        return True

    def clear(self, game_id):
        self.cleared.append(game_id)
        return True


class Room:
    """A controller wired to fakes, with helpers to play a game by hand."""

    def __init__(self, photo_seconds=10, question_seconds=10, run_countdowns=False):
        self.sio = RecordingSocketIO()
        self.clock = FakeClock()
        self.sink = FakeSink()
        self.tokens = TokenRegistry()
        self.session = GameSession(room_id='test', photo_seconds=photo_seconds,
                                   question_seconds=question_seconds)
        self.router = BroadcastRouter(self.sio, self.session.roster, 'test')
        settings = GameSettings(admin_identity=ADMIN, game_id='test', photo_seconds=photo_seconds,
                                question_seconds=question_seconds, run_countdowns=run_countdowns)
        self.controller = GameController(self.session, self.tokens, self.router, settings,
                                         results_sink=self.sink, clock=self.clock,
                                         sleep=self.clock.advance)
        self.admin_token = self.tokens.issue(ADMIN)

    def connect(self, sid):
        self.controller.connect(sid)

    def join_admin(self, sid='admin-sid'):
        self.connect(sid)
        self.controller.join(sid, self.admin_token, ADMIN)
        return sid

    def join_player(self, identity, sid=None):
        sid = sid or f"sid-{identity}"
        self.connect(sid)
        self.controller.join(sid, self.tokens.issue(identity), identity)
        return sid

    def start(self, sid='admin-sid'):
        return self.controller.start_game(sid, self.admin_token, ADMIN)

    def run_photos(self):
        for _ in range(self.session.photo_seconds):
            self.clock.advance(1)
            self.controller.tick()


@pytest.fixture()
def room():
    return Room()
