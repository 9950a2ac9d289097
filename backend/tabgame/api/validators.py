import re

from tabgame.errors import InvalidCell, InvalidRequest

NICK_PATTERN = re.compile(r'^[A-Za-z0-9_]{3,20}$')
MIN_PASSWORD_LENGTH = 6


def as_int(value, name):
    """Accept JSON integers and digit strings (query args); reject everything else."""
    if value is None or value == '':
        raise InvalidRequest(f'Undefined {name}')
    if isinstance(value, bool):
        raise InvalidRequest(f"Invalid {name} '{value}'")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and re.fullmatch(r'-?\d+', value.strip()):
        return int(value)
    raise InvalidRequest(f"Invalid {name} '{value}'")


def credentials(data):
    nick = data.get('nick')
    password = data.get('password')
    if not nick or not password:
        raise InvalidRequest('Nick and password are required')
    if not isinstance(nick, str) or not isinstance(password, str):
        raise InvalidRequest('Nick and password must be strings')
    return nick, password


def registration(data):
    nick, password = credentials(data)
    if not NICK_PATTERN.match(nick):
        raise InvalidRequest('Nick must have 3-20 letters, digits or underscores')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidRequest(f'Password must have at least {MIN_PASSWORD_LENGTH} characters')
    return nick, password


def game_ref(data):
    game_id = data.get('game')
    if not game_id or not isinstance(game_id, str):
        raise InvalidRequest('Undefined game')
    return game_id


def cell(data):
    value = data.get('cell')
    if value is None:
        raise InvalidCell('cell is undefined')
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidCell('cell is not an integer')
    if value < 0:
        raise InvalidCell('cell is negative')
    return value
