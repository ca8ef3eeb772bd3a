import pytest
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from runner.client.transport import EventKind, SessionTransport, TransportError
from runner.models import Player, PlayerStatus


class FakeSioClient:
    """Records emits and lets tests fire server events by name."""

    def __init__(self, sid='abc', refuse=False):
        self.handlers = {}
        self.emitted = []
        self.connected = False
        self.disconnects = 0
        self._sid = sid
        self.refuse = refuse

    def on(self, event, handler=None, namespace=None):
        self.handlers[(event, namespace)] = handler

    def connect(self, url, namespaces=None, wait_timeout=None):
        if self.refuse:
            raise SocketIOConnectionError('refused')
        self.connected = True
        self.fire('connect', namespace=namespaces[0])

    def disconnect(self):
        self.disconnects += 1
        self.connected = False
        self.fire('disconnect', 'client disconnect')

    def get_sid(self, namespace=None):
        return self._sid if self.connected else None

    def emit(self, event, data=None, namespace=None):
        self.emitted.append((event, data, namespace))

    def fire(self, event, *args, namespace='/ws'):
        return self.handlers[(event, namespace)](*args)


@pytest.fixture()
def sio():
    return FakeSioClient()


@pytest.fixture()
def transport(sio):
    t = SessionTransport('http://test', client=sio)
    t.open('ROOM', 'Alice')
    return t


def test_open_joins_the_room_on_connect(transport, sio):
    assert sio.emitted == [('join_room', {'roomId': 'ROOM', 'name': 'Alice'}, '/ws')]
    events = transport.poll()
    assert [e.kind for e in events] == [EventKind.CONNECTED]
    assert events[0].payload == 'abc'
    assert transport.sid == 'abc'
    assert transport.room_id == 'ROOM'


def test_room_update_becomes_players(transport, sio):
    transport.poll()
    sio.fire('room_update', [
        {'id': 'a', 'name': 'Alice', 'isReady': True, 'score': 4, 'status': 'ALIVE'},
        {'id': 'b', 'name': 'Bob', 'isReady': False, 'score': 0, 'status': 'DEAD'},
    ])
    (event,) = transport.poll()
    assert event.kind == EventKind.ROOM_UPDATE
    assert all(isinstance(p, Player) for p in event.payload)
    assert event.payload[0].is_ready is True
    assert event.payload[1].status == PlayerStatus.DEAD


def test_start_game_carries_integer_timestamp(transport, sio):
    transport.poll()
    sio.fire('start_game', {'startTime': 1700000003000.0})
    (event,) = transport.poll()
    assert event.kind == EventKind.START_GAME
    assert event.payload == 1700000003000
    assert isinstance(event.payload, int)


def test_player_updated_and_error_messages(transport, sio):
    transport.poll()
    sio.fire('player_updated', {'id': 'b', 'name': 'Bob', 'isReady': True, 'score': 7, 'status': 'FINISHED'})
    sio.fire('error_msg', 'Team is full (Max 10 Agents).')
    updated, error = transport.poll()
    assert updated.kind == EventKind.PLAYER_UPDATED
    assert updated.payload.score == 7
    assert (error.kind, error.payload) == (EventKind.ERROR, 'Team is full (Max 10 Agents).')


def test_commands_are_scoped_to_the_room(transport, sio):
    transport.toggle_ready()
    transport.start_game()
    transport.update_player(12, PlayerStatus.DEAD)
    assert sio.emitted[1:] == [
        ('toggle_ready', 'ROOM', '/ws'),
        ('start_game', 'ROOM', '/ws'),
        ('update_player', {'roomId': 'ROOM', 'score': 12, 'status': 'DEAD'}, '/ws'),
    ]


def test_poll_drains_in_arrival_order(transport, sio):
    transport.poll()
    sio.fire('error_msg', 'one')
    sio.fire('error_msg', 'two')
    assert [e.payload for e in transport.poll()] == ['one', 'two']
    assert transport.poll() == []


def test_server_disconnect_is_reported(transport, sio):
    transport.poll()
    sio.fire('disconnect', 'transport close')
    (event,) = transport.poll()
    assert (event.kind, event.payload) == (EventKind.DISCONNECTED, 'transport close')


def test_close_is_idempotent_and_quiet(transport, sio):
    transport.poll()
    transport.close()
    transport.close()
    assert sio.disconnects == 1
    assert transport.poll() == []


def test_commands_after_close_are_skipped(transport, sio):
    transport.close()
    transport.toggle_ready()
    transport.update_player(1, PlayerStatus.ALIVE)
    assert [e[0] for e in sio.emitted] == ['join_room']


def test_connection_refused_raises_transport_error():
    transport = SessionTransport('http://nowhere', client=FakeSioClient(refuse=True))
    with pytest.raises(TransportError):
        transport.open('ROOM', 'Alice')


def test_closed_transport_cannot_reopen(sio):
    with SessionTransport('http://test', client=sio) as transport:
        transport.open('ROOM', 'Alice')
    with pytest.raises(TransportError):
        transport.open('ROOM', 'Alice')
    assert not sio.connected


@pytest.mark.parametrize('event, payload', [
    ('start_game', None),
    ('start_game', {}),
    ('start_game', {'startTime': 'soon'}),
    ('room_update', [{'name': 'no id'}]),
    ('room_update', ['Alice']),
    ('player_updated', {'id': 'b', 'status': 'FLYING'}),
    ('player_updated', None),
])
def test_malformed_payloads_are_dropped(transport, sio, event, payload):
    transport.poll()
    sio.fire(event, payload)
    assert transport.poll() == []
    # The channel keeps working afterwards
    sio.fire('start_game', {'startTime': 5})
    assert [e.payload for e in transport.poll()] == [5]
