from flask_socketio import join_room, leave_room, emit
from tabgame import socketio, get_engine
from tabgame.services.games.state import Game, update_payload


def room_for(game_id: str) -> str:
    return f"game:{game_id}"


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_update(data):
    """Subscribe a player to a game's updates and send the current state."""
    game_id = (data or {}).get('game')
    nick = (data or {}).get('nick')
    if not game_id or not nick:
        emit('error', {'message': 'game and nick are required'})
        return
    record = get_engine().get_game(game_id)
    if record is None:
        emit('error', {'message': 'Invalid game reference'})
        return
    if nick not in record['players']:
        emit('error', {'message': 'Player is not part of this game'})
        return
    join_room(room_for(game_id))
    emit('update', update_payload(Game.from_dict(record)))


def handle_unsubscribe(data):
    game_id = (data or {}).get('game')
    if not game_id:
        emit('error', {'message': 'game is required'})
        return
    room = room_for(game_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def push_update(game_id: str, payload):
    """Engine listener: forward every change to the game's room."""
    if payload is None:
        payload = {'game': game_id, 'closed': True}
    socketio.emit('update', payload, to=room_for(game_id), namespace='/ws')


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('update', handle_update, namespace=namespace)
        socketio.on_event('unsubscribe', handle_unsubscribe, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
