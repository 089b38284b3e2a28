"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from flakegen.generator import SnowflakeGenerator
from flakegen.layout import EPOCH_MS


class FakeClock:
    """
    Scripted millisecond clock.

    ``now_millis`` returns queued readings first, then the current value.
    ``wait_until_after`` records the call and jumps the clock forward just
    enough to satisfy the contract (the next reading is > millis).
    """

    def __init__(self, start: int = EPOCH_MS + 10, readings: list[int] | None = None):
        self.current = start
        self.readings = list(readings or [])
        self.waits: list[int] = []

    def now_millis(self) -> int:
        if self.readings:
            self.current = self.readings.pop(0)
        return self.current

    def wait_until_after(self, millis: int) -> int:
        self.waits.append(millis)
        self.readings = [r for r in self.readings if r > millis]
        if self.current <= millis:
            self.current = millis + 1
        return self.current

    def set(self, millis: int) -> None:
        self.current = millis

    def advance(self, millis: int = 1) -> None:
        self.current += millis


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock frozen 10 ms after the epoch."""
    return FakeClock()


@pytest.fixture
def generator(clock: FakeClock) -> SnowflakeGenerator:
    """Generator with node id 5 on the fake clock."""
    return SnowflakeGenerator(5, clock=clock)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep FLAKEGEN_* variables from the outer environment out of tests."""
    for var in (
        "FLAKEGEN_NODE_ID",
        "FLAKEGEN_CLOCK_POLICY",
        "FLAKEGEN_MAX_BACKWARD_MS",
        "FLAKEGEN_NODE_ID_SOURCE",
        "FLAKEGEN_CONFIG",
    ):
        monkeypatch.delenv(var, raising=False)
