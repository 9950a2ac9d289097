PASSWORD = 'password1'


def register(client, nick, password=PASSWORD):
    return client.post('/register', json={'nick': nick, 'password': password})


def join(client, nick, size=3, group=1):
    return client.post('/join', json={'nick': nick, 'password': PASSWORD, 'size': size, 'group': group})


def start_game(client):
    register(client, 'alice')
    register(client, 'bob')
    game_id = join(client, 'alice').get_json()['game']
    join(client, 'bob')
    return game_id


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_register(client):
    res = register(client, 'alice')
    assert res.status_code == 200
    assert res.get_json() == {}
    # same credentials log in again
    assert register(client, 'alice').status_code == 200

    res = register(client, 'alice', 'other-password')
    assert res.status_code == 401
    assert 'error' in res.get_json()


def test_register_validation(client):
    assert client.post('/register', json={}).status_code == 400
    assert register(client, 'ab').status_code == 400
    assert register(client, 'bad nick!').status_code == 400
    res = register(client, 'carol', '123')
    assert res.status_code == 400
    assert 'Password' in res.get_json()['error']


def test_join_and_state(client):
    register(client, 'alice')
    register(client, 'bob')
    res = join(client, 'alice')
    assert res.status_code == 200
    game_id = res.get_json()['game']

    state = client.get(f'/games/{game_id}').get_json()
    assert state == {'status': 'waiting', 'players': {'alice': None}}

    assert join(client, 'bob').get_json() == {'game': game_id}
    state = client.get(f'/games/{game_id}').get_json()
    assert state['status'] == 'playing'
    assert state['turn'] == 'alice'
    assert state['step'] == 'from'
    assert len(state['pieces']) == 12


def test_join_validation(client):
    register(client, 'alice')
    res = join(client, 'alice', size=4)
    assert res.status_code == 400
    assert 'Invalid size' in res.get_json()['error']
    assert join(client, 'alice', size='x').status_code == 400
    res = client.post('/join', json={'nick': 'alice', 'password': PASSWORD, 'size': 3})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Undefined group'
    res = client.post('/join', json={'nick': 'alice', 'password': 'wrong-password', 'size': 3, 'group': 1})
    assert res.status_code == 401


def test_notify_validation(client):
    game_id = start_game(client)
    body = {'nick': 'alice', 'password': PASSWORD, 'game': game_id}

    res = client.post('/notify', json={**body, 'cell': 'a'})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'cell is not an integer'
    res = client.post('/notify', json={**body, 'cell': -1})
    assert res.get_json()['error'] == 'cell is negative'
    assert client.post('/notify', json=body).get_json()['error'] == 'cell is undefined'
    assert client.post('/notify', json={**body, 'cell': 12}).status_code == 400

    res = client.post('/notify', json={**body, 'nick': 'bob', 'cell': 9})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Not your turn to play'

    res = client.post('/notify', json={**body, 'cell': 2})
    assert res.get_json()['error'] == 'You must roll the dice first'


def test_roll_and_notify(client, sticks):
    game_id = start_game(client)
    body = {'nick': 'alice', 'password': PASSWORD, 'game': game_id}

    sticks.queue(1)
    res = client.post('/roll', json=body)
    assert res.status_code == 200
    rolled = res.get_json()
    assert rolled['dice']['value'] == 1
    assert rolled['turn'] == 'alice'

    res = client.post('/notify', json={**body, 'cell': 2})
    assert res.status_code == 200
    assert res.get_json()['turn'] == 'bob'


def test_pass_rejected_with_moves(client, sticks):
    game_id = start_game(client)
    body = {'nick': 'alice', 'password': PASSWORD, 'game': game_id}
    sticks.queue(2)
    client.post('/roll', json=body)
    res = client.post('/pass', json=body)
    assert res.status_code == 400
    assert res.get_json()['error'] == 'You have valid moves, cannot pass'


def test_leave_and_ranking(client):
    game_id = start_game(client)
    res = client.post('/leave', json={'nick': 'bob', 'password': PASSWORD, 'game': game_id})
    assert res.status_code == 200
    assert client.get(f'/games/{game_id}').get_json()['winner'] == 'alice'

    expected = [
        {'nick': 'alice', 'victories': 1, 'games': 1},
        {'nick': 'bob', 'victories': 0, 'games': 1},
    ]
    res = client.get('/ranking?group=1&size=3')
    assert res.status_code == 200
    assert res.get_json() == {'ranking': expected}
    assert client.post('/ranking', json={'group': 1, 'size': 3}).get_json() == {'ranking': expected}


def test_ranking_validation(client):
    res = client.get('/ranking?size=3')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Undefined group'
    assert client.get('/ranking?group=1&size=4').status_code == 400


def test_unknown_game(client):
    register(client, 'alice')
    assert client.get('/games/nope').status_code == 404
    res = client.post('/roll', json={'nick': 'alice', 'password': PASSWORD, 'game': 'nope'})
    assert res.status_code == 404
    assert res.get_json()['error'] == 'Invalid game reference'
    res = client.post('/roll', json={'nick': 'alice', 'password': PASSWORD})
    assert res.status_code == 400


def test_store_reset_command(flask_app, client, engine):
    register(client, 'alice')
    result = flask_app.test_cli_runner().invoke(args=['store-reset'])
    assert 'Record store has been reset!' in result.output
    assert engine.store.get('users', 'alice') is None


def test_unknown_user_rejected(client):
    res = join(client, 'nobody')
    assert res.status_code == 401
    assert res.get_json() == {'error': "Unknown user 'nobody'"}
