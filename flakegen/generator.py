"""
Snowflake identifier generator.

One generator per node. All three identifier families share the same state
(last issued millisecond, sequence counter) and the same lock, so calls to
different families from different threads serialize against each other.

Per-millisecond capacity:
- id64: 4 ids (2-bit sequence), then wait for the next millisecond
- id64_nil: 1 id (no sequence), then wait for the next millisecond
- id128: 65536 ids (16-bit sequence), then wait for the next millisecond
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from . import codec
from .clock import Clock, ClockPolicy, SystemClock
from .errors import ClockMovedBackwardsError, ConfigurationError
from .identity import NodeIdProvider, provider_for, resolve_node_id
from .layout import (
    EPOCH_MS,
    MASK_NODE_ID_64,
    MASK_NODE_ID_64NIL,
    MASK_NODE_ID_128,
    MASK_SEQUENCE_64,
    MASK_SEQUENCE_128,
    MASK_TIMESTAMP_64,
    MASK_TIMESTAMP_64NIL,
    MAX_SEQUENCE_64,
    MAX_SEQUENCE_128,
    SHIFT_NODE_ID_64,
    SHIFT_NODE_ID_128,
    SHIFT_TIMESTAMP_64,
    SHIFT_TIMESTAMP_64NIL,
)

if TYPE_CHECKING:
    from .config import GeneratorConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_BACKWARD_MS = 5000


class SnowflakeGenerator:
    """Thread-safe generator for id64, id64_nil and id128 identifiers."""

    def __init__(
        self,
        node_id: int = 0,
        *,
        clock: Clock | None = None,
        node_id_provider: NodeIdProvider | None = None,
        clock_policy: ClockPolicy | str = ClockPolicy.WAIT,
        max_backward_ms: int = DEFAULT_MAX_BACKWARD_MS,
    ) -> None:
        """
        Create a generator.

        Args:
            node_id: Identity of this generator; 0 defers to ``node_id_provider``
            clock: Millisecond clock (defaults to the wall clock)
            node_id_provider: Default node id source, consulted only when ``node_id`` is 0
            clock_policy: Reaction to a clock that reports an earlier millisecond
            max_backward_ms: Largest regression the WAIT policy will sit out

        Raises:
            ConfigurationError: negative node id, unknown policy or negative ``max_backward_ms``.
        """
        try:
            self._clock_policy = ClockPolicy(clock_policy)
        except ValueError:
            raise ConfigurationError(f"unknown clock policy {clock_policy!r} (expected wait or raise)") from None
        if max_backward_ms < 0:
            raise ConfigurationError(f"max_backward_ms must be non-negative, got {max_backward_ms}")

        self._node_id = resolve_node_id(node_id, node_id_provider)
        self._clock: Clock = clock if clock is not None else SystemClock()
        self._max_backward_ms = max_backward_ms
        self._lock = threading.Lock()

        self._template64 = (self._node_id & MASK_NODE_ID_64) << SHIFT_NODE_ID_64
        self._template64_nil = self._node_id & MASK_NODE_ID_64NIL
        self._template128 = (self._node_id & MASK_NODE_ID_128) << SHIFT_NODE_ID_128

        self._sequence_millisec = 0
        self._last_timestamp_millisec = 0

        logger.info("Snowflake generator ready (node_id=%d, clock_policy=%s)", self._node_id, self._clock_policy.value)

    @classmethod
    def from_config(cls, config: GeneratorConfig, *, clock: Clock | None = None) -> SnowflakeGenerator:
        """Build a generator from a loaded ``GeneratorConfig``."""
        return cls(
            config.node_id,
            clock=clock,
            node_id_provider=provider_for(config.node_id_source),
            clock_policy=config.clock_policy,
            max_backward_ms=config.max_backward_ms,
        )

    @property
    def node_id(self) -> int:
        return self._node_id

    @property
    def sequence_millisec(self) -> int:
        return self._sequence_millisec

    @property
    def last_timestamp_millisec(self) -> int:
        return self._last_timestamp_millisec

    @property
    def clock_policy(self) -> ClockPolicy:
        return self._clock_policy

    def __repr__(self) -> str:
        return f"SnowflakeGenerator(node_id={self._node_id})"

    # -------------------------------------------------------------------------
    # Shared state machine (caller holds the lock)
    # -------------------------------------------------------------------------

    def _read_clock(self) -> int:
        """Read the clock, sitting out or rejecting a backwards step."""
        while True:
            timestamp = self._clock.now_millis()
            last = self._last_timestamp_millisec
            if timestamp >= last:
                return timestamp

            drift = last - timestamp
            if self._clock_policy is ClockPolicy.RAISE or drift > self._max_backward_ms:
                logger.error("Clock moved backwards by %d ms; refusing to issue ids", drift)
                raise ClockMovedBackwardsError(last, timestamp)

            logger.warning("Clock moved backwards by %d ms; waiting for it to catch up", drift)
            # Returns once the clock reaches `last`, which then takes the same-millisecond path.
            self._clock.wait_until_after(last - 1)

    def _next_sequenced(self, max_sequence: int) -> tuple[int, int]:
        """Claim the next (timestamp, sequence) slot for a sequenced layout."""
        while True:
            timestamp = self._read_clock()
            if timestamp == self._last_timestamp_millisec:
                sequence = self._sequence_millisec + 1
                if sequence > max_sequence:
                    # Millisecond exhausted.
                    self._sequence_millisec = 0
                    logger.debug("Sequence exhausted at %d ms; waiting for the next tick", timestamp)
                    self._clock.wait_until_after(timestamp)
                    continue
                self._sequence_millisec = sequence
            else:
                sequence = 0
                self._sequence_millisec = sequence
                self._last_timestamp_millisec = timestamp
            return timestamp, sequence

    def _next_unsequenced(self) -> int:
        """Claim a millisecond no other id has used."""
        while True:
            timestamp = self._read_clock()
            if timestamp == self._last_timestamp_millisec:
                logger.debug("Millisecond %d already used; waiting for the next tick", timestamp)
                self._clock.wait_until_after(timestamp)
                continue
            self._sequence_millisec = 0
            self._last_timestamp_millisec = timestamp
            return timestamp

    # -------------------------------------------------------------------------
    # id64: <41 bits: timestamp - epoch><21 bits: node id><2 bits: sequence>
    # -------------------------------------------------------------------------

    def generate_id64(self) -> int:
        """Generate a 64-bit id with a 2-bit sequence."""
        with self._lock:
            timestamp, sequence = self._next_sequenced(MAX_SEQUENCE_64)
            timestamp_part = (timestamp - EPOCH_MS) & MASK_TIMESTAMP_64
            return (timestamp_part << SHIFT_TIMESTAMP_64) | self._template64 | (sequence & MASK_SEQUENCE_64)

    def generate_id64_hex(self) -> str:
        return codec.format_hex(self.generate_id64())

    def generate_id64_bin(self) -> str:
        return codec.format_bin(self.generate_id64())

    # -------------------------------------------------------------------------
    # id64_nil: <41 bits: timestamp - epoch><23 bits: node id>
    # -------------------------------------------------------------------------

    def generate_id64_nil(self) -> int:
        """
        Generate a 64-bit id without a sequence field.

        Only one such id fits in a millisecond, so a second call within the
        same millisecond blocks until the next one.
        """
        with self._lock:
            timestamp = self._next_unsequenced()
            timestamp_part = (timestamp - EPOCH_MS) & MASK_TIMESTAMP_64NIL
            return (timestamp_part << SHIFT_TIMESTAMP_64NIL) | self._template64_nil

    def generate_id64_nil_hex(self) -> str:
        return codec.format_hex(self.generate_id64_nil())

    def generate_id64_nil_bin(self) -> str:
        return codec.format_bin(self.generate_id64_nil())

    # -------------------------------------------------------------------------
    # id128: <64 bits: timestamp><48 bits: node id><16 bits: sequence>
    # -------------------------------------------------------------------------

    def generate_id128(self) -> tuple[int, int]:
        """Generate a 128-bit id as a (timestamp, node/sequence) pair of 64-bit words."""
        with self._lock:
            timestamp, sequence = self._next_sequenced(MAX_SEQUENCE_128)
            return timestamp, self._template128 | (sequence & MASK_SEQUENCE_128)

    def generate_id128_hex(self) -> str:
        """Hex of the high word followed by the low word zero-padded to 16 characters."""
        return codec.format_id128_hex(self.generate_id128())

    def generate_id128_bin(self) -> str:
        """Binary of the high word followed by the low word zero-padded to 64 characters."""
        return codec.format_id128_bin(self.generate_id128())

    # -------------------------------------------------------------------------
    # Extraction
    # -------------------------------------------------------------------------

    extract_timestamp64 = staticmethod(codec.extract_timestamp64)
    extract_timestamp64_hex = staticmethod(codec.extract_timestamp64_hex)
    extract_timestamp64_as_datetime = staticmethod(codec.extract_timestamp64_as_datetime)
    extract_timestamp64_hex_as_datetime = staticmethod(codec.extract_timestamp64_hex_as_datetime)

    extract_timestamp64_nil = staticmethod(codec.extract_timestamp64_nil)
    extract_timestamp64_nil_hex = staticmethod(codec.extract_timestamp64_nil_hex)
    extract_timestamp64_nil_as_datetime = staticmethod(codec.extract_timestamp64_nil_as_datetime)
    extract_timestamp64_nil_hex_as_datetime = staticmethod(codec.extract_timestamp64_nil_hex_as_datetime)

    extract_timestamp128 = staticmethod(codec.extract_timestamp128)
    extract_timestamp128_hex = staticmethod(codec.extract_timestamp128_hex)
    extract_timestamp128_as_datetime = staticmethod(codec.extract_timestamp128_as_datetime)
    extract_timestamp128_hex_as_datetime = staticmethod(codec.extract_timestamp128_hex_as_datetime)
