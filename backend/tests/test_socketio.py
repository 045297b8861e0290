import pytest


def received(sio_client, name=None):
    events = sio_client.get_received('/')
    if name is None:
        return events
    return [e['args'][0] if e['args'] else None for e in events if e['name'] == name]


def join(sio_client, room_id, role):
    sio_client.emit('join_room', {'roomId': room_id, 'role': role}, namespace='/')


def test_socket_connect_and_join(sio_client, registry):
    assert sio_client.is_connected('/')
    join(sio_client, '4821', 'player')
    updates = received(sio_client, 'room_update')
    assert updates == [{'playerCount': 1, 'spectatorCount': 0}]
    assert registry.status('4821') == {'playerCount': 1, 'spectatorCount': 0}


def test_room_update_reaches_every_member(connect):
    a, b, z = connect(), connect(), connect()
    join(a, '4821', 'player')
    join(b, '4821', 'player')
    join(z, '4821', 'spectator')
    assert received(a, 'room_update')[-1] == {'playerCount': 2, 'spectatorCount': 1}
    assert received(b, 'room_update')[-1] == {'playerCount': 2, 'spectatorCount': 1}
    assert received(z, 'room_update') == [{'playerCount': 2, 'spectatorCount': 1}]


def test_third_player_rejected_but_spectators_accepted(connect, registry):
    a, b, c, z = connect(), connect(), connect(), connect()
    join(a, '4821', 'player')
    join(b, '4821', 'player')
    received(a)
    join(c, '4821', 'player')
    errors = received(c, 'error_message')
    assert len(errors) == 1
    assert 'full' in errors[0].lower()
    assert registry.status('4821') == {'playerCount': 2, 'spectatorCount': 0}
    # Rejected connection is in no room at all, so existing members hear nothing
    assert received(a) == []

    join(z, '4821', 'spectator')
    assert received(z, 'error_message') == []
    assert registry.status('4821') == {'playerCount': 2, 'spectatorCount': 1}


def test_invalid_join_payloads(sio_client, registry):
    sio_client.emit('join_room', {'role': 'player'}, namespace='/')
    sio_client.emit('join_room', {'roomId': '12345', 'role': 'player'}, namespace='/')
    sio_client.emit('join_room', {'roomId': '1234', 'role': 'referee'}, namespace='/')
    assert len(received(sio_client, 'error_message')) == 3
    assert len(registry) == 0


def test_spectator_join_requests_state_from_first_player(connect, registry):
    x, y, z = connect(), connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    received(x), received(y)

    join(z, '4821', 'spectator')
    z_sid = registry.get('4821').spectators[0]
    assert received(x, 'request_state') == [{'requesterId': z_sid}]
    assert received(y, 'request_state') == []

    board = [[{'id': 'c1-1-aa', 'power': 3}]] + [[] for _ in range(19)]
    x.emit('sync_state', {'targetId': z_sid, 'state': {'board': board}}, namespace='/')
    assert received(z, 'state_synced') == [{'board': board}]
    assert received(y, 'state_synced') == []


def test_spectator_in_empty_room_gets_no_sync(connect):
    z = connect()
    join(z, '4821', 'spectator')
    assert received(z, 'request_state') == []


def test_second_player_is_not_synced_by_default(connect):
    x, y = connect(), connect()
    join(x, '4821', 'player')
    received(x)
    join(y, '4821', 'player')
    assert received(x, 'request_state') == []


@pytest.mark.parametrize('app_overrides', [{'SYNC_LATE_PLAYERS': True}])
def test_second_player_synced_when_policy_enabled(connect, registry):
    x, y = connect(), connect()
    join(x, '4821', 'player')
    received(x)
    join(y, '4821', 'player')
    y_sid = registry.players('4821')[1]
    assert received(x, 'request_state') == [{'requesterId': y_sid}]


def test_second_player_triggers_player_joined_for_seated_player(connect, registry):
    x, y, z = connect(), connect(), connect()
    join(x, '4821', 'player')
    join(z, '4821', 'spectator')
    received(x), received(z)
    join(y, '4821', 'player')
    y_sid = registry.players('4821')[1]
    assert received(x, 'player_joined') == [{'newPlayerId': y_sid}]
    assert received(y, 'player_joined') == []
    assert received(z, 'player_joined') == []


def test_game_action_relayed_to_others_only(connect, registry):
    x, y, z = connect(), connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    join(z, '4821', 'spectator')
    for c in (x, y, z):
        received(c)
    x_sid = registry.players('4821')[0]

    payload = {'fromIndex': 0, 'fromCardIndex': 0, 'toIndex': 5}
    x.emit('game_action', {'roomId': '4821', 'action': 'move_card', 'payload': payload}, namespace='/')
    expected = {'action': 'move_card', 'payload': payload, 'from': x_sid}
    assert received(y, 'game_update') == [expected]
    assert received(z, 'game_update') == [expected]
    assert received(x, 'game_update') == []


def test_game_actions_keep_sender_order(connect):
    x, y = connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    received(y)
    for i in range(5):
        x.emit('game_action', {'roomId': '4821', 'action': 'remove_stack', 'payload': {'cellIndex': i}},
               namespace='/')
    updates = received(y, 'game_update')
    assert [u['payload']['cellIndex'] for u in updates] == [0, 1, 2, 3, 4]


def test_actions_do_not_leak_between_rooms(connect):
    x, other = connect(), connect()
    join(x, '4821', 'player')
    join(other, '1111', 'player')
    received(other)
    x.emit('game_action', {'roomId': '4821', 'action': 'remove_stack', 'payload': {'cellIndex': 0}},
           namespace='/')
    assert received(other, 'game_update') == []


@pytest.mark.parametrize('app_overrides', [{'ENFORCE_PLAYER_ROLE': True}])
def test_spectator_actions_dropped_when_roles_enforced(connect):
    x, z = connect(), connect()
    join(x, '4821', 'player')
    join(z, '4821', 'spectator')
    received(x), received(z)
    z.emit('game_action', {'roomId': '4821', 'action': 'remove_stack', 'payload': {'cellIndex': 0}},
           namespace='/')
    assert received(x, 'game_update') == []
    x.emit('game_action', {'roomId': '4821', 'action': 'remove_stack', 'payload': {'cellIndex': 0}},
           namespace='/')
    assert len(received(z, 'game_update')) == 1


def test_signal_relayed_to_other_player_only(connect, registry):
    x, y, z = connect(), connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    join(z, '4821', 'spectator')
    for c in (x, y, z):
        received(c)
    x_sid = registry.players('4821')[0]

    offer = {'type': 'offer', 'sdp': 'v=0'}
    x.emit('signal', {'roomId': '4821', 'type': 'offer', 'payload': offer}, namespace='/')
    assert received(y, 'signal') == [{'type': 'offer', 'payload': offer, 'from': x_sid}]
    assert received(z, 'signal') == []
    assert received(x, 'signal') == []


def test_unknown_signal_type_dropped(connect, registry):
    x, y = connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    received(x), received(y)
    x.emit('signal', {'roomId': '4821', 'type': 'renegotiate', 'payload': {}}, namespace='/')
    assert received(x, 'error_message') == []
    assert received(y, 'signal') == []
    assert registry.status('4821') == {'playerCount': 2, 'spectatorCount': 0}


def test_malformed_gameplay_events_dropped_silently(connect, registry):
    x, y = connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    received(x), received(y)
    x.emit('game_action', {'roomId': '4821'}, namespace='/')
    x.emit('game_action', {'action': 'place_card', 'payload': {}}, namespace='/')
    x.emit('sync_state', {'state': {'board': []}}, namespace='/')
    assert received(x) == []
    assert received(y) == []
    assert registry.status('4821') == {'playerCount': 2, 'spectatorCount': 0}


@pytest.mark.parametrize('app_overrides', [{'ENABLE_SIGNALING': False}])
def test_signaling_can_be_disabled(connect):
    x, y = connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    received(y)
    x.emit('signal', {'roomId': '4821', 'type': 'offer', 'payload': {}}, namespace='/')
    assert received(y, 'signal') == []


def test_player_disconnect_notifies_remaining_members(connect, registry):
    x, y, z = connect(), connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    join(z, '4821', 'spectator')
    for c in (y, z):
        received(c)
    x_sid = registry.players('4821')[0]

    x.disconnect(namespace='/')
    assert received(y, 'player_left') == [x_sid]
    assert received(z, 'player_left') == [x_sid]
    assert registry.status('4821') == {'playerCount': 1, 'spectatorCount': 1}


def test_spectator_leave_sends_no_player_left(connect, registry):
    x, z = connect(), connect()
    join(x, '4821', 'player')
    join(z, '4821', 'spectator')
    received(x)
    z.emit('leave_room', {}, namespace='/')
    events = received(x)
    assert not any(e['name'] == 'player_left' for e in events)
    assert [e['args'][0] for e in events if e['name'] == 'room_update'] == [
        {'playerCount': 1, 'spectatorCount': 0}
    ]
    assert registry.status('4821') == {'playerCount': 1, 'spectatorCount': 0}


def test_freed_seat_can_be_taken(connect, registry):
    x, y, c = connect(), connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    y.disconnect(namespace='/')
    join(c, '4821', 'player')
    assert received(c, 'error_message') == []
    assert registry.status('4821')['playerCount'] == 2


def test_empty_room_is_swept(connect, registry, client):
    x = connect()
    join(x, '4821', 'player')
    assert client.get('/api/rooms/4821').status_code == 200
    x.disconnect(namespace='/')
    assert '4821' not in registry
    assert client.get('/api/rooms/4821').status_code == 404


@pytest.mark.parametrize('app_overrides', [{'SWEEP_EMPTY_ROOMS': False}])
def test_empty_room_kept_without_sweep(connect, registry):
    x = connect()
    join(x, '4821', 'player')
    x.disconnect(namespace='/')
    assert '4821' in registry
    assert registry.status('4821') == {'playerCount': 0, 'spectatorCount': 0}


def test_joining_another_room_leaves_the_first(connect, registry):
    x, y = connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    received(y)
    join(x, '1111', 'player')
    x_sid = registry.players('1111')[0]
    assert received(y, 'player_left') == [x_sid]
    assert registry.status('4821') == {'playerCount': 1, 'spectatorCount': 0}
    assert registry.room_of(x_sid) == '1111'


def test_rejoin_with_other_role_rejected(connect, registry):
    x, y = connect(), connect()
    join(x, '4821', 'player')
    join(y, '4821', 'player')
    received(x), received(y)
    join(x, '4821', 'spectator')
    errors = received(x, 'error_message')
    assert len(errors) == 1
    assert 'already in room' in errors[0].lower()
    assert received(y) == []
    assert registry.status('4821') == {'playerCount': 2, 'spectatorCount': 0}
