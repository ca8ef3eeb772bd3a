"""Client side of the Socket.IO channel.

python-socketio delivers events on its own background thread. The adapter
only converts them into TransportEvents and queues them; the session drains
the queue from its tick loop, so game state is touched by one thread only.
"""

import logging
import queue
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from runner.models import Player, PlayerStatus

log = logging.getLogger(__name__)

# Raised while reading a malformed server payload
PAYLOAD_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


class TransportError(Exception):
    pass


class EventKind(str, Enum):
    CONNECTED = 'CONNECTED'
    CONNECT_FAILED = 'CONNECT_FAILED'
    DISCONNECTED = 'DISCONNECTED'
    ROOM_UPDATE = 'ROOM_UPDATE'
    START_GAME = 'START_GAME'
    PLAYER_UPDATED = 'PLAYER_UPDATED'
    ERROR = 'ERROR'


@dataclass(frozen=True)
class TransportEvent:
    kind: EventKind
    payload: Any = None


class SessionTransport:
    def __init__(self, url: str, namespace: str = '/ws', client: Optional[socketio.Client] = None,
                 connect_timeout: float = 60):
        self.url = url
        self.namespace = namespace
        self.connect_timeout = connect_timeout
        # Dropped connections are not retried; the player has to join again
        self._sio = client if client is not None else socketio.Client(reconnection=False)
        self._events: 'queue.Queue[TransportEvent]' = queue.Queue()
        self._room_id: Optional[str] = None
        self._name: Optional[str] = None
        self._closed = False
        self._register()

    def _register(self) -> None:
        ns = self.namespace
        self._sio.on('connect', self._on_connect, namespace=ns)
        self._sio.on('connect_error', self._on_connect_error, namespace=ns)
        self._sio.on('disconnect', self._on_disconnect, namespace=ns)
        self._sio.on('room_update', self._on_room_update, namespace=ns)
        self._sio.on('start_game', self._on_start_game, namespace=ns)
        self._sio.on('player_updated', self._on_player_updated, namespace=ns)
        self._sio.on('error_msg', self._on_error_msg, namespace=ns)

    @property
    def sid(self) -> Optional[str]:
        return self._sio.get_sid(self.namespace)

    @property
    def room_id(self) -> Optional[str]:
        return self._room_id

    def open(self, room_id: str, name: str) -> None:
        """Connect and join room_id; the join is sent from the connect handler."""
        if self._closed:
            raise TransportError('transport already closed')
        self._room_id = room_id
        self._name = name
        log.info(f"[connect] url={self.url} namespace={self.namespace} room={room_id}")
        try:
            self._sio.connect(self.url, namespaces=[self.namespace], wait_timeout=self.connect_timeout)
        except SocketIOConnectionError as exc:
            raise TransportError(f'Could not connect to {self.url}: {exc}') from exc

    def toggle_ready(self) -> None:
        self._send('toggle_ready', self._room_id)

    def start_game(self) -> None:
        self._send('start_game', self._room_id)

    def update_player(self, score: int, status: PlayerStatus) -> None:
        self._send('update_player', {'roomId': self._room_id, 'score': score, 'status': PlayerStatus(status).value})

    def poll(self) -> List[TransportEvent]:
        events = []
        while True:
            try:
                events.append(self._events.get_nowait())
            except queue.Empty:
                return events

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._sio.connected:
            self._sio.disconnect()
        log.info(f"[close] room={self._room_id}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _send(self, event: str, data) -> None:
        if self._closed or not self._sio.connected:
            log.debug(f"[send-skip] event={event} not connected")
            return
        self._sio.emit(event, data, namespace=self.namespace)

    def _push(self, kind: EventKind, payload=None) -> None:
        self._events.put(TransportEvent(kind, payload))

    def _on_connect(self):
        self._push(EventKind.CONNECTED, self.sid)
        self._sio.emit('join_room', {'roomId': self._room_id, 'name': self._name}, namespace=self.namespace)

    def _on_connect_error(self, data=None):
        log.warning(f"[connect-error] url={self.url} data={data}")
        self._push(EventKind.CONNECT_FAILED, data)

    def _on_disconnect(self, reason=None):
        if not self._closed:
            self._push(EventKind.DISCONNECTED, reason)

    def _on_room_update(self, players):
        try:
            roster = [Player.from_dict(p) for p in players or []]
        except PAYLOAD_ERRORS as exc:
            log.warning(f"[payload-skip] event=room_update error={exc!r}")
            return
        self._push(EventKind.ROOM_UPDATE, roster)

    def _on_start_game(self, data):
        try:
            start_time = int(data['startTime'])
        except PAYLOAD_ERRORS as exc:
            log.warning(f"[payload-skip] event=start_game data={data!r} error={exc!r}")
            return
        self._push(EventKind.START_GAME, start_time)

    def _on_player_updated(self, data):
        try:
            player = Player.from_dict(data)
        except PAYLOAD_ERRORS as exc:
            log.warning(f"[payload-skip] event=player_updated data={data!r} error={exc!r}")
            return
        self._push(EventKind.PLAYER_UPDATED, player)

    def _on_error_msg(self, message):
        self._push(EventKind.ERROR, str(message))
