import os
import sys
import pytest

# Ensure the backend root (containing the `tabgame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tabgame import create_app, db, socketio
from tabgame.services.games.state import BLUE, RED, Game, Piece

PASSWORD = 'password1'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PASSWORD_SECRET = 'test-secret'
    BCRYPT_LOG_ROUNDS = 4
    BCRYPT_HANDLE_LONG_PASSWORDS = True
    WAITING_TIMEOUT_SEC = 300
    TURN_TIMEOUT_SEC = 120
    TIMERS_ENABLED = False
    RANKING_LIMIT = 10
    TWO_CLICK_MOVES = False
    CORS_ORIGINS = ['*']


class FixedSticks:
    """Stands in for ``random``: each queued throw shows ``light`` light sticks."""

    def __init__(self, *lights):
        self._values = []
        for light in lights:
            self.queue(light)

    def queue(self, light):
        self._values.extend([0.0] * light + [0.99] * (4 - light))

    def random(self):
        return self._values.pop(0)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application
    application.extensions['tab'].close()
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def engine(flask_app):
    return flask_app.extensions['tab']


@pytest.fixture()
def sticks(engine):
    rng = FixedSticks()
    engine.rng = rng
    return rng


@pytest.fixture()
def players(engine):
    engine.register('alice', PASSWORD)
    engine.register('bob', PASSWORD)
    return 'alice', 'bob'


@pytest.fixture()
def game_id(engine, players):
    """A size-3 game in progress: alice is Blue and plays first."""
    waiting = engine.join('alice', PASSWORD, 3, 1)['game']
    paired = engine.join('bob', PASSWORD, 3, 1)['game']
    assert paired == waiting
    return paired


@pytest.fixture()
def arrange(engine):
    """Rewrite a stored game's board: ``arrange(game_id, blue=[...], red=[...])``."""

    def _arrange(game_id, blue=(), red=(), turn=None):
        game = Game.from_dict(engine.get_game(game_id))
        blue_nick = next(nick for nick, color in game.players.items() if color == BLUE)
        red_nick = next(nick for nick, color in game.players.items() if color == RED)
        game.pieces = [None] * game.cells
        for cell in blue:
            game.pieces[cell] = Piece(BLUE, blue_nick)
        for cell in red:
            game.pieces[cell] = Piece(RED, red_nick)
        if turn:
            game.turn = turn
        engine.store.set('games', game_id, game.to_dict())
        return game

    return _arrange
