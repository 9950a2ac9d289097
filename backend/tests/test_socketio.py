PASSWORD = 'password1'


def events_named(sio_client, name):
    return [pkt['args'][0] for pkt in sio_client.get_received('/ws') if pkt['name'] == name]


def test_socket_connect_and_ping(sio_client):
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    assert events_named(sio_client, 'connected')

    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    assert events_named(sio_client, 'pong') == [{'n': 1}]


def test_subscribe_receives_state_and_pushes(engine, players, sio_client):
    sio_client.get_received('/ws')  # flush
    game_id = engine.join('alice', PASSWORD, 3, 1)['game']

    sio_client.emit('update', {'game': game_id, 'nick': 'alice'}, namespace='/ws')
    assert events_named(sio_client, 'update') == [{'status': 'waiting', 'players': {'alice': None}}]

    engine.join('bob', PASSWORD, 3, 1)
    updates = events_named(sio_client, 'update')
    assert updates[-1]['status'] == 'playing'
    assert updates[-1]['turn'] == 'alice'


def test_expired_game_pushes_closed(engine, players, sio_client):
    game_id = engine.join('alice', PASSWORD, 3, 1)['game']
    sio_client.emit('update', {'game': game_id, 'nick': 'alice'}, namespace='/ws')
    sio_client.get_received('/ws')

    engine.timers.fire(engine.timers.timers_for(game_id).waiting)
    assert events_named(sio_client, 'update') == [{'game': game_id, 'closed': True}]


def test_unsubscribe_stops_pushes(engine, players, sio_client):
    game_id = engine.join('alice', PASSWORD, 3, 1)['game']
    sio_client.emit('update', {'game': game_id, 'nick': 'alice'}, namespace='/ws')
    sio_client.emit('unsubscribe', {'game': game_id}, namespace='/ws')
    assert events_named(sio_client, 'left') == [{'room': f'game:{game_id}'}]

    engine.join('bob', PASSWORD, 3, 1)
    assert events_named(sio_client, 'update') == []


def test_subscribe_errors(engine, players, sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('update', {'game': 'nope', 'nick': 'alice'}, namespace='/ws')
    assert events_named(sio_client, 'error') == [{'message': 'Invalid game reference'}]

    game_id = engine.join('alice', PASSWORD, 3, 1)['game']
    sio_client.emit('update', {'game': game_id, 'nick': 'bob'}, namespace='/ws')
    assert events_named(sio_client, 'error') == [{'message': 'Player is not part of this game'}]

    sio_client.emit('update', {}, namespace='/ws')
    assert events_named(sio_client, 'error') == [{'message': 'game and nick are required'}]
