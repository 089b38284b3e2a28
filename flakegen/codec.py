"""
String encodings and timestamp extraction for generated identifiers.

Everything here is pure: no generator state, no lock. Hex parsing is strict
so that a malformed id fails with ParseError instead of decoding to garbage.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .errors import ParseError
from .layout import (
    EPOCH_MS,
    ID64,
    ID64_NIL,
    ID128,
    LOW_WORD_BIN_CHARS,
    LOW_WORD_HEX_CHARS,
    MASK_NODE_ID_64,
    MASK_NODE_ID_64NIL,
    MASK_NODE_ID_128,
    MASK_SEQUENCE_64,
    MASK_SEQUENCE_128,
    SHIFT_NODE_ID_64,
    SHIFT_NODE_ID_128,
    SHIFT_TIMESTAMP_64,
    SHIFT_TIMESTAMP_64NIL,
    WORD_BITS,
)

_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class IdParts:
    """The fields recovered from an identifier."""

    layout: str
    timestamp_ms: int
    node_id: int
    sequence: int | None = None

    @property
    def as_datetime(self) -> datetime:
        return millis_to_datetime(self.timestamp_ms)

    def to_dict(self) -> dict:
        return {
            "layout": self.layout,
            "timestamp_ms": self.timestamp_ms,
            "datetime": self.as_datetime.isoformat(),
            "node_id": self.node_id,
            "sequence": self.sequence,
        }


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------


def format_hex(value: int, width: int = 0) -> str:
    """Lower-case base 16, zero-padded to ``width`` characters."""
    return format(value, "x").zfill(width)


def format_bin(value: int, width: int = 0) -> str:
    """Base 2, zero-padded to ``width`` characters."""
    return format(value, "b").zfill(width)


def format_id128_hex(id128: tuple[int, int]) -> str:
    high, low = id128
    return format_hex(high) + format_hex(low, LOW_WORD_HEX_CHARS)


def format_id128_bin(id128: tuple[int, int]) -> str:
    high, low = id128
    return format_bin(high) + format_bin(low, LOW_WORD_BIN_CHARS)


# -----------------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------------


def parse_hex(text: str, bits: int = WORD_BITS) -> int:
    """
    Parse an unsigned hexadecimal string.

    Only hex digits are accepted: no sign, ``0x`` prefix, whitespace or
    underscores.

    Args:
        text: Hex digits
        bits: Maximum width of the result

    Raises:
        ParseError: if ``text`` is not hex or does not fit in ``bits`` bits.
    """
    if not isinstance(text, str):
        raise ParseError(repr(text), "expected a string")
    if not _HEX_RE.fullmatch(text):
        raise ParseError(text, "not a hexadecimal string")
    value = int(text, 16)
    if value >> bits:
        raise ParseError(text, f"value does not fit in {bits} bits")
    return value


def parse_id128_hex(text: str) -> tuple[int, int]:
    """
    Split an id128 hex string into its (high, low) words.

    The low word is always the last 16 characters; the timestamp is
    whatever precedes it.
    """
    if not isinstance(text, str):
        raise ParseError(repr(text), "expected a string")
    if not LOW_WORD_HEX_CHARS < len(text) <= 2 * LOW_WORD_HEX_CHARS:
        raise ParseError(text, f"expected {LOW_WORD_HEX_CHARS + 1} to {2 * LOW_WORD_HEX_CHARS} hex characters")
    split = len(text) - LOW_WORD_HEX_CHARS
    return parse_hex(text[:split]), parse_hex(text[split:])


def _check_word(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(repr(value), "expected an integer")
    if value < 0 or value >> WORD_BITS:
        raise ParseError(str(value), "not an unsigned 64-bit integer")
    return value


# -----------------------------------------------------------------------------
# Extraction
# -----------------------------------------------------------------------------


def millis_to_datetime(millis: int) -> datetime:
    """
    UNIX milliseconds to an aware UTC datetime.

    Raises:
        ParseError: if the timestamp falls outside what ``datetime`` can represent.
    """
    try:
        return _UNIX_EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        raise ParseError(str(millis), "timestamp outside the datetime range") from None


def extract_timestamp64(id64: int) -> int:
    """UNIX timestamp (ms) of an id from ``generate_id64``."""
    return EPOCH_MS + (_check_word(id64) >> SHIFT_TIMESTAMP_64)


def extract_timestamp64_hex(id_hex: str) -> int:
    return extract_timestamp64(parse_hex(id_hex))


def extract_timestamp64_as_datetime(id64: int) -> datetime:
    return millis_to_datetime(extract_timestamp64(id64))


def extract_timestamp64_hex_as_datetime(id_hex: str) -> datetime:
    return millis_to_datetime(extract_timestamp64_hex(id_hex))


def extract_timestamp64_nil(id64_nil: int) -> int:
    """UNIX timestamp (ms) of an id from ``generate_id64_nil``."""
    return EPOCH_MS + (_check_word(id64_nil) >> SHIFT_TIMESTAMP_64NIL)


def extract_timestamp64_nil_hex(id_hex: str) -> int:
    return extract_timestamp64_nil(parse_hex(id_hex))


def extract_timestamp64_nil_as_datetime(id64_nil: int) -> datetime:
    return millis_to_datetime(extract_timestamp64_nil(id64_nil))


def extract_timestamp64_nil_hex_as_datetime(id_hex: str) -> datetime:
    return millis_to_datetime(extract_timestamp64_nil_hex(id_hex))


def extract_timestamp128(id128: tuple[int, int]) -> int:
    """UNIX timestamp (ms) of an id from ``generate_id128``: the high word."""
    high, _low = id128
    return _check_word(high)


def extract_timestamp128_hex(id_hex: str) -> int:
    """UNIX timestamp (ms) of an id from ``generate_id128_hex``."""
    high, _low = parse_id128_hex(id_hex)
    return high


def extract_timestamp128_as_datetime(id128: tuple[int, int]) -> datetime:
    return millis_to_datetime(extract_timestamp128(id128))


def extract_timestamp128_hex_as_datetime(id_hex: str) -> datetime:
    return millis_to_datetime(extract_timestamp128_hex(id_hex))


# -----------------------------------------------------------------------------
# Decomposition
# -----------------------------------------------------------------------------


def decode_id64(id64: int) -> IdParts:
    value = _check_word(id64)
    return IdParts(
        layout=ID64.name,
        timestamp_ms=EPOCH_MS + (value >> SHIFT_TIMESTAMP_64),
        node_id=(value >> SHIFT_NODE_ID_64) & MASK_NODE_ID_64,
        sequence=value & MASK_SEQUENCE_64,
    )


def decode_id64_nil(id64_nil: int) -> IdParts:
    value = _check_word(id64_nil)
    return IdParts(
        layout=ID64_NIL.name,
        timestamp_ms=EPOCH_MS + (value >> SHIFT_TIMESTAMP_64NIL),
        node_id=value & MASK_NODE_ID_64NIL,
    )


def decode_id128(id128: tuple[int, int]) -> IdParts:
    high, low = id128
    _check_word(low)
    return IdParts(
        layout=ID128.name,
        timestamp_ms=extract_timestamp128(id128),
        node_id=(low >> SHIFT_NODE_ID_128) & MASK_NODE_ID_128,
        sequence=low & MASK_SEQUENCE_128,
    )
