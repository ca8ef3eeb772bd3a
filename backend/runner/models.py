from dataclasses import dataclass, field
from enum import Enum
from typing import List


class RoomStatus(str, Enum):
    LOBBY = 'LOBBY'
    PLAYING = 'PLAYING'


class PlayerStatus(str, Enum):
    ALIVE = 'ALIVE'
    DEAD = 'DEAD'
    FINISHED = 'FINISHED'


def default_player_name(player_id: str) -> str:
    return f"Agent {player_id[:4]}"


@dataclass
class Player:
    id: str
    name: str
    is_ready: bool = False
    score: int = 0
    status: PlayerStatus = PlayerStatus.ALIVE

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'isReady': self.is_ready,
            'score': self.score,
            'status': self.status.value,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data.get('name') or default_player_name(data['id']),
            is_ready=bool(data.get('isReady', False)),
            score=int(data.get('score', 0)),
            status=PlayerStatus(data.get('status', PlayerStatus.ALIVE.value)),
        )


@dataclass
class Room:
    room_id: str
    status: RoomStatus = RoomStatus.LOBBY
    players: List[Player] = field(default_factory=list)

    def find_player(self, player_id: str):
        return next((p for p in self.players if p.id == player_id), None)

    @property
    def all_ready(self) -> bool:
        return all(p.is_ready for p in self.players)
