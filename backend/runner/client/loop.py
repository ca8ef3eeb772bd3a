import logging
import time
from typing import Callable, Optional

log = logging.getLogger(__name__)


class TickLoop:
    """Fixed-rate driver for a session.

    With realtime=False ticks run back to back, which is how headless
    simulations and tests drive a run.
    """

    def __init__(self, session, ticks_per_second: int, realtime: bool = True,
                 before_tick: Optional[Callable] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 monotonic: Callable[[], float] = time.monotonic):
        self.session = session
        self.interval = 1 / ticks_per_second
        self.realtime = realtime
        self.before_tick = before_tick
        self.sleep = sleep
        self.monotonic = monotonic
        self.ticks = 0
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    def run(self, until: Optional[Callable] = None, max_ticks: Optional[int] = None) -> int:
        self._stopped = False
        next_frame = self.monotonic()
        while not self._stopped:
            if until is not None and until(self.session):
                break
            if max_ticks is not None and self.ticks >= max_ticks:
                break
            if self.before_tick:
                self.before_tick(self.session)
            self.session.tick(self.interval)
            self.ticks += 1

            if self.realtime:
                next_frame += self.interval
                delay = next_frame - self.monotonic()
                if delay > 0:
                    self.sleep(delay)
                else:
                    # Fell behind; don't try to catch up with a burst of ticks
                    next_frame = self.monotonic()
        log.debug(f"[loop-exit] ticks={self.ticks} status={getattr(self.session, 'status', None)}")
        return self.ticks
