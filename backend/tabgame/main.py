from flask import Blueprint, request, jsonify
from tabgame import get_engine
from tabgame.api import validators
from tabgame.errors import GameError

main = Blueprint('main', __name__)


@main.app_errorhandler(GameError)
def handle_game_error(error):
    return jsonify(error.to_dict()), error.status_code


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Tâb game server!'})


@main.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    nick, password = validators.registration(data)
    return jsonify(get_engine().register(nick, password))


@main.route('/ranking', methods=['GET', 'POST'])
def ranking():
    data = request.args if request.method == 'GET' else (request.get_json(silent=True) or {})
    group = validators.as_int(data.get('group'), 'group')
    size = validators.as_int(data.get('size'), 'size')
    return jsonify({'ranking': get_engine().get_ranking(group, size)})
