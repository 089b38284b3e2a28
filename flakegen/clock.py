"""
Clock sources for the generator.

The generator consumes two primitives:
- ``now_millis()``: current UNIX time in milliseconds
- ``wait_until_after(millis)``: block until ``now_millis() > millis``

``SystemClock`` implements both over the wall clock. Tests substitute a
scripted clock with the same shape.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Protocol


class Clock(Protocol):
    """Protocol for millisecond clock sources."""

    def now_millis(self) -> int:
        """Return the current UNIX time in milliseconds."""
        ...

    def wait_until_after(self, millis: int) -> int:
        """
        Block the calling thread until the clock reports a value greater than ``millis``.

        Args:
            millis: Millisecond value to wait past

        Returns:
            The first observed millisecond greater than ``millis``.
        """
        ...


class ClockPolicy(str, Enum):
    """What a generator does when the clock reports an earlier millisecond."""

    WAIT = "wait"  # block until the clock catches up with the last issued ms
    RAISE = "raise"  # reject with ClockMovedBackwardsError


class SystemClock:
    """Wall clock backed by ``time.time_ns()``."""

    def now_millis(self) -> int:
        return time.time_ns() // 1_000_000

    def wait_until_after(self, millis: int) -> int:
        now = self.now_millis()
        while now <= millis:
            remaining_ms = millis + 1 - now
            # Sleep off whole milliseconds, then yield until the tick lands.
            time.sleep((remaining_ms - 1) / 1000 if remaining_ms > 1 else 0)
            now = self.now_millis()
        return now
