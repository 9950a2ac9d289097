from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
socketio = SocketIO(async_mode=None)


def get_engine():
    """The TabEngine bound to the current app."""
    return current_app.extensions['tab']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ORIGINS') or '*'
    if origins == ['*']:
        origins = '*'

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from tabgame.main import main
    flask_app.register_blueprint(main)

    from tabgame.api.games import games
    flask_app.register_blueprint(games)

    from tabgame.socketio_events import push_update, register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from tabgame.auth import Credentials
    from tabgame.store import RecordStore
    from tabgame.services.games import TabEngine
    from tabgame.services.games.scheduler import TimeoutManager

    store = RecordStore()
    store.open(flask_app)
    timers = TimeoutManager(
        spawn=socketio.start_background_task if flask_app.config.get('TIMERS_ENABLED', True) else None,
        sleep=socketio.sleep,
        logger=flask_app.logger,
    )
    engine = TabEngine(
        store,
        Credentials(bcrypt, flask_app.config.get('PASSWORD_SECRET', '')),
        timers,
        waiting_timeout=flask_app.config.get('WAITING_TIMEOUT_SEC', 300),
        turn_timeout=flask_app.config.get('TURN_TIMEOUT_SEC', 120),
        ranking_limit=flask_app.config.get('RANKING_LIMIT', 10),
        two_click=flask_app.config.get('TWO_CLICK_MOVES', False),
        logger=flask_app.logger,
    )
    engine.add_listener(push_update)
    engine.resume_timers()
    flask_app.extensions['tab'] = engine

    @click.command('store-reset')
    def store_reset_command():
        """Drops every user, game and ranking record."""
        engine.reset()
        click.echo('Record store has been reset!')

    flask_app.cli.add_command(store_reset_command)

    return flask_app
