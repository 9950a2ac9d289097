from flask import Blueprint, jsonify, request
from tabgame import get_engine
from tabgame.api import validators
from tabgame.errors import GameNotFound
from tabgame.services.games.state import Game, update_payload


games = Blueprint('games', __name__)


@games.route('/join', methods=['POST'])
def join_game():
    data = request.get_json(silent=True) or {}
    nick, password = validators.credentials(data)
    group = validators.as_int(data.get('group'), 'group')
    size = validators.as_int(data.get('size'), 'size')
    return jsonify(get_engine().join(nick, password, size, group))


@games.route('/leave', methods=['POST'])
def leave_game():
    data = request.get_json(silent=True) or {}
    nick, password = validators.credentials(data)
    return jsonify(get_engine().leave(nick, password, validators.game_ref(data)))


@games.route('/roll', methods=['POST'])
def roll_dice():
    data = request.get_json(silent=True) or {}
    nick, password = validators.credentials(data)
    return jsonify(get_engine().roll(nick, password, validators.game_ref(data)))


@games.route('/pass', methods=['POST'])
def pass_turn():
    data = request.get_json(silent=True) or {}
    nick, password = validators.credentials(data)
    return jsonify(get_engine().pass_turn(nick, password, validators.game_ref(data)))


@games.route('/notify', methods=['POST'])
def notify_move():
    data = request.get_json(silent=True) or {}
    nick, password = validators.credentials(data)
    game_id = validators.game_ref(data)
    cell = validators.cell(data)
    return jsonify(get_engine().notify(nick, password, game_id, cell))


@games.route('/games/<string:game_id>', methods=['GET'])
def get_game_state(game_id):
    record = get_engine().get_game(game_id)
    if record is None:
        raise GameNotFound()
    return jsonify(update_payload(Game.from_dict(record)))
