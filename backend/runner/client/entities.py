import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class ObstacleKind(str, Enum):
    CRATE = 'CRATE'


class CoinKind(str, Enum):
    NORMAL = 'NORMAL'
    SPECIAL = 'SPECIAL'


@dataclass
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def overlaps(self, other: 'Box', pad: float = 0.0, other_pad: float = 0.0) -> bool:
        """Axis-aligned overlap test with each box shrunk inward by its padding.

        Negative padding grows the box instead.
        """
        return (
            self.x + pad < other.right - other_pad
            and self.right - pad > other.x + other_pad
            and self.y + pad < other.bottom - other_pad
            and self.bottom - pad > other.y + other_pad
        )


@dataclass
class PlayerEntity(Box):
    vy: float = 0.0
    is_jumping: bool = False


@dataclass
class Platform(Box):
    id: int = 0


@dataclass
class Obstacle(Box):
    id: int = 0
    kind: ObstacleKind = ObstacleKind.CRATE


@dataclass
class Coin(Box):
    id: int = 0
    kind: CoinKind = CoinKind.NORMAL
    collected: bool = False


@dataclass
class SimulationContext:
    """Everything one playthrough mutates, passed explicitly to each step."""

    player: PlayerEntity
    rng: random.Random
    platforms: List[Platform] = field(default_factory=list)
    obstacles: List[Obstacle] = field(default_factory=list)
    coins: List[Coin] = field(default_factory=list)
    score: int = 0
    distance: float = 0.0
    ticks: int = 0
    last_id: int = 0
    # Right edge of the generated level, trailing pit included
    frontier_x: float = 0.0
    after_pit: bool = False

    def next_id(self) -> int:
        self.last_id += 1
        return self.last_id
