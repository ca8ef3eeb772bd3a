"""In-memory room registry.

The registry is the authoritative table of rooms for one server process. It
knows nothing about Socket.IO: every operation returns what has to be
broadcast, and the event handlers decide who receives it.
"""

import logging
import time
from typing import Dict, List, Optional, Tuple

from runner.models import Player, PlayerStatus, Room, RoomStatus, default_player_name

log = logging.getLogger(__name__)


class RoomError(Exception):
    """A join was rejected; `message` is shown to the offending client."""

    message = 'Unable to join room.'

    def __init__(self, room_id: str, message: Optional[str] = None):
        self.room_id = room_id
        if message:
            self.message = message
        super().__init__(self.message)


class RoomFull(RoomError):
    message = 'Team is full.'


class RoomInProgress(RoomError):
    message = 'Mission already in progress. Access Denied.'


def now_ms() -> int:
    return int(time.time() * 1000)


class RoomRegistry:
    def __init__(self, required_players: int, start_delay_ms: int = 3000):
        self.required_players = required_players
        self.start_delay_ms = start_delay_ms
        self.rooms: Dict[str, Room] = {}

    def get(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def join(self, room_id: str, player_id: str, name: Optional[str] = None) -> List[Player]:
        """Add a player to a room, creating the room on first join.

        Raises RoomInProgress when the room is already playing and RoomFull
        when the roster is at capacity. Returns the full roster.
        """
        room = self.rooms.get(room_id)
        if room is None:
            room = Room(room_id=room_id)
            self.rooms[room_id] = room
            log.info(f"[room-create] room={room_id}")

        if room.find_player(player_id):
            return list(room.players)
        if room.status == RoomStatus.PLAYING:
            raise RoomInProgress(room_id)
        if len(room.players) >= self.required_players:
            raise RoomFull(room_id, f'Team is full (Max {self.required_players} Agents).')

        room.players.append(Player(id=player_id, name=name or default_player_name(player_id)))
        log.info(f"[join] room={room_id} player={player_id} roster={len(room.players)}/{self.required_players}")
        return list(room.players)

    def toggle_ready(self, room_id: str, player_id: str) -> Optional[List[Player]]:
        room = self.rooms.get(room_id)
        player = room.find_player(player_id) if room else None
        if not player:
            log.debug(f"[ready-skip] room={room_id} player={player_id} not found")
            return None
        player.is_ready = not player.is_ready
        return list(room.players)

    def start(self, room_id: str, now: Optional[int] = None) -> Optional[int]:
        """Apply the ready gate. Returns the shared start timestamp (epoch ms)
        or None when the room may not start."""
        room = self.rooms.get(room_id)
        if not room:
            log.debug(f"[start-skip] room={room_id} not found")
            return None
        if room.status != RoomStatus.LOBBY:
            log.info(f"[start-skip] room={room_id} already {room.status.value}")
            return None
        count = len(room.players)
        if count != self.required_players:
            log.info(f"[start-skip] room={room_id} only {count}/{self.required_players} players connected")
            return None
        if not room.all_ready:
            log.info(f"[start-skip] room={room_id} not all players are ready")
            return None

        room.status = RoomStatus.PLAYING
        start_time = (now if now is not None else now_ms()) + self.start_delay_ms
        log.info(f"[start] room={room_id} start_time={start_time}")
        return start_time

    def update_player(self, room_id: str, player_id: str, score, status) -> Optional[Player]:
        room = self.rooms.get(room_id)
        player = room.find_player(player_id) if room else None
        if not player:
            log.debug(f"[update-skip] room={room_id} player={player_id} not found")
            return None
        try:
            new_status = PlayerStatus(status)
            new_score = max(0, int(score))
        except (TypeError, ValueError):
            log.warning(f"[update-skip] room={room_id} player={player_id} bad payload score={score!r} status={status!r}")
            return None
        player.score = new_score
        player.status = new_status
        return player

    def leave(self, player_id: str) -> List[Tuple[str, List[Player]]]:
        """Remove a player from every room holding it.

        Empty rooms are destroyed. Returns (room_id, roster) for each room
        that still has members and therefore needs a roster broadcast.
        """
        remaining = []
        for room_id, room in list(self.rooms.items()):
            player = room.find_player(player_id)
            if not player:
                continue
            room.players.remove(player)
            if not room.players:
                del self.rooms[room_id]
                log.info(f"[room-destroy] room={room_id}")
            else:
                remaining.append((room_id, list(room.players)))
        return remaining

    def close(self) -> None:
        if self.rooms:
            log.info(f"[shutdown] dropping {len(self.rooms)} room(s)")
        self.rooms.clear()
