"""
Per-run shared state: the in-flight dispatch counter and the stop signal.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional


class InFlightCounter:
    """Counter of running dispatches with blocking waits."""

    def __init__(self):
        self._count = 0
        self._cond = threading.Condition()

    @property
    def value(self) -> int:
        with self._cond:
            return self._count

    def increment(self):
        with self._cond:
            self._count += 1

    def decrement(self):
        with self._cond:
            self._count -= 1
            self._cond.notify_all()

    def wait_below(self, limit: int, timeout: Optional[float] = None) -> bool:
        """Block until fewer than `limit` dispatches are in flight.

        Returns:
            False if the timeout expired first
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._count < limit, timeout=timeout)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until nothing is in flight."""
        return self.wait_below(1, timeout=timeout)


@dataclass
class RunContext:
    """State shared by every worker of one simulation run."""
    in_flight: InFlightCounter = field(default_factory=InFlightCounter)
    stop: threading.Event = field(default_factory=threading.Event)

    @property
    def running(self) -> bool:
        return not self.stop.is_set()
