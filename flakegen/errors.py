"""
Exception taxonomy for flakegen.

Sequence overflow is handled inside the generator and never surfaces here.
"""

from __future__ import annotations


class FlakegenError(Exception):
    """Base class for all flakegen errors."""


class ParseError(FlakegenError, ValueError):
    """An encoded identifier could not be parsed."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"cannot parse identifier {text!r}: {reason}")
        self.text = text
        self.reason = reason


class ConfigurationError(FlakegenError):
    """Invalid generator configuration."""


class ClockMovedBackwardsError(FlakegenError):
    """The clock source reported a millisecond earlier than the last issued one."""

    def __init__(self, last_ms: int, now_ms: int) -> None:
        super().__init__(f"clock moved backwards by {last_ms - now_ms} ms (last={last_ms}, now={now_ms})")
        self.last_ms = last_ms
        self.now_ms = now_ms

    @property
    def drift_ms(self) -> int:
        return self.last_ms - self.now_ms
