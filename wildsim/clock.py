"""Clocks that stamp ticks.

The orchestrator reads its clock exactly once per tick. That instant drives
time-of-day behaviour, environment drift and reading timestamps.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

Clock = Callable[[], datetime]


def wall_clock() -> datetime:
    """Local time with its UTC offset, so hours match the agents' daylight."""
    return datetime.now().astimezone()


class SimulatedClock:
    """Clock that advances by a fixed step on every read.

    Used for fast-forward runs and tests: each tick observes a time exactly
    ``step_seconds`` after the previous one, independent of wall time.
    """

    def __init__(self, start: Optional[datetime] = None, step_seconds: float = 3.0):
        self.current = start or datetime.now().astimezone()
        self.step = timedelta(seconds=step_seconds)
        self._started = False

    def __call__(self) -> datetime:
        if self._started:
            self.current = self.current + self.step
        self._started = True
        return self.current
