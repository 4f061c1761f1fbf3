import os
import sys
import random
import pytest

# Ensure the backend root (containing the `pacman` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from pacman import create_app, db, socketio
from pacman.game.entities import Direction, Position
from pacman.game.grid import GhostSpawn, GridTemplate, MazeLayout
from pacman.services.games.lobby import Lobby


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    ALLOWED_ORIGINS = ''
    TICK_INTERVAL_MS = 150
    POWER_MODE_DURATION_MS = 5000
    DEFAULT_GHOST_COUNT = 4
    GHOST_RNG_SEED = 1234
    LOBBY_STATS_INTERVAL_SEC = 0
    SESSION_TOKEN_TTL_HOURS = 24
    SCOREBOARD_LIMIT = 10


# One corridor: dot at x=2, pellet at x=3, ghost walking left from x=9
CORRIDOR = GridTemplate.from_strings([
    "###########",
    "# .o      #",
    "###########",
])

CORRIDOR_LAYOUT = MazeLayout(
    template=CORRIDOR,
    player_spawns=(Position(1, 1), Position(4, 1)),
    ghost_spawns=(GhostSpawn(1, Position(9, 1), Direction.LEFT, 'red'),),
)


class RecordingTransport:
    """Collects everything the lobby sends instead of emitting it."""

    def __init__(self):
        self.sent = []

    def send(self, sid, event, payload):
        self.sent.append((sid, event, payload))

    def broadcast(self, event, payload):
        self.sent.append((None, event, payload))

    def events_for(self, sid, event=None):
        return [p for s, e, p in self.sent if s == sid and (event is None or e == event)]

    def broadcasts(self, event=None):
        return [p for s, e, p in self.sent if s is None and (event is None or e == event)]

    def clear(self):
        self.sent.clear()


class RecordingScoreboard:
    def __init__(self):
        self.singles = []
        self.pairs = []

    def submit_score(self, nickname, score, ghost_count):
        self.singles.append((nickname, score, ghost_count))

    def submit_pair_score(self, player1, player2, score):
        self.pairs.append((player1, player2, score))


@pytest.fixture()
def rng():
    return random.Random(42)


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def scoreboard():
    return RecordingScoreboard()


@pytest.fixture()
def lobby(transport, scoreboard):
    instance = Lobby(transport=transport, scoreboard=scoreboard, seed=7)
    yield instance
    instance.shutdown()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import pacman.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def signup(client, nickname, password='password'):
    res = client.post('/api/signup', json={'nickname': nickname, 'password': password})
    assert res.status_code == 201, res.get_json()
    return res.get_json()['token']


@pytest.fixture()
def token(client):
    return signup(client, 'alice')


@pytest.fixture()
def sio_client(flask_app, token):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws',
        auth={'token': token},
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


def connect_as(flask_app, client, nickname):
    """Sign up a fresh account and open a /ws connection for it."""
    issued = signup(client, nickname)
    return socketio.test_client(flask_app, namespace='/ws', auth={'token': issued})
