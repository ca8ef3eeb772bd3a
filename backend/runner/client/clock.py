"""Session timing.

Solo runs count simulation ticks. Team runs measure local wall-clock time
against the start timestamp the server handed out, so every client reaches
zero at the same wall-clock moment regardless of frame rate. Skew between
client and server clocks is not compensated.
"""

import time
from enum import Enum
from typing import Callable, Optional


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class ClockMode(str, Enum):
    SOLO = 'SOLO'
    TEAM = 'TEAM'


class SessionClock:
    def __init__(self, duration_seconds: float, ticks_per_second: int = 60,
                 now: Callable[[], int] = wall_clock_ms):
        self.duration = duration_seconds
        self.ticks_per_second = ticks_per_second
        self.now = now
        self.mode: Optional[ClockMode] = None
        self.start_time: Optional[int] = None
        self.remaining = float(duration_seconds)
        self._ticks = 0

    def start_solo(self) -> None:
        self.mode = ClockMode.SOLO
        self.start_time = None
        self._ticks = 0
        self.remaining = float(self.duration)

    def start_team(self, start_time_ms: int) -> None:
        self.mode = ClockMode.TEAM
        self.start_time = int(start_time_ms)
        self.remaining = float(self.duration)

    @property
    def deadline(self) -> Optional[int]:
        if self.start_time is None:
            return None
        return self.start_time + int(self.duration * 1000)

    @property
    def has_started(self) -> bool:
        if self.mode == ClockMode.SOLO:
            return True
        return self.start_time is not None and self.now() >= self.start_time

    @property
    def countdown(self) -> float:
        """Seconds left in the grace window before a team run begins."""
        if self.mode != ClockMode.TEAM or self.start_time is None:
            return 0.0
        return max(0.0, (self.start_time - self.now()) / 1000)

    @property
    def expired(self) -> bool:
        return self.mode is not None and self.remaining <= 0

    def tick(self) -> float:
        if self.mode == ClockMode.SOLO:
            self._ticks += 1
            remaining = self.duration - self._ticks / self.ticks_per_second
        elif self.mode == ClockMode.TEAM:
            elapsed = (self.now() - self.start_time) / 1000
            remaining = self.duration - elapsed
        else:
            return self.remaining
        # Clamped on both sides so the value never rises between ticks
        self.remaining = min(self.remaining, max(0.0, remaining))
        return self.remaining

    def reset(self) -> None:
        self.mode = None
        self.start_time = None
        self._ticks = 0
        self.remaining = float(self.duration)
