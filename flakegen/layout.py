"""
Bit layouts for the three identifier families.

* id64:     <41 bits: timestamp - epoch><21 bits: node id><2 bits: sequence>
* id64_nil: <41 bits: timestamp - epoch><23 bits: node id>
* id128:    <64 bits: timestamp><48 bits: node id><16 bits: sequence>

Timestamps are UNIX milliseconds. The constants here are part of the wire
format and must never change.
"""

from __future__ import annotations

from dataclasses import dataclass

# 2016-03-01T00:00:00Z
EPOCH_MS = 1456790400000

WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1

MASK_TIMESTAMP_64 = (1 << 41) - 1
MASK_NODE_ID_64 = (1 << 21) - 1
MASK_SEQUENCE_64 = (1 << 2) - 1
MAX_SEQUENCE_64 = MASK_SEQUENCE_64
SHIFT_TIMESTAMP_64 = 21 + 2
SHIFT_NODE_ID_64 = 2

MASK_TIMESTAMP_64NIL = (1 << 41) - 1
MASK_NODE_ID_64NIL = (1 << 23) - 1
SHIFT_TIMESTAMP_64NIL = 23

MASK_NODE_ID_128 = (1 << 48) - 1
MASK_SEQUENCE_128 = (1 << 16) - 1
MAX_SEQUENCE_128 = MASK_SEQUENCE_128
SHIFT_TIMESTAMP_128 = 64
SHIFT_NODE_ID_128 = 16

# Hex/binary width of the low word of an id128.
LOW_WORD_HEX_CHARS = WORD_BITS // 4
LOW_WORD_BIN_CHARS = WORD_BITS


@dataclass(frozen=True)
class BitLayout:
    """Field widths of one identifier family."""

    name: str
    total_bits: int
    timestamp_bits: int
    node_id_bits: int
    sequence_bits: int
    epoch_relative: bool

    @property
    def node_id_shift(self) -> int:
        return self.sequence_bits

    @property
    def timestamp_shift(self) -> int:
        return self.node_id_bits + self.sequence_bits

    @property
    def node_id_mask(self) -> int:
        return (1 << self.node_id_bits) - 1

    @property
    def sequence_mask(self) -> int:
        return (1 << self.sequence_bits) - 1

    @property
    def max_sequence(self) -> int:
        return self.sequence_mask

    @property
    def ids_per_millisecond(self) -> int:
        return 1 << self.sequence_bits


ID64 = BitLayout("id64", 64, 41, 21, 2, epoch_relative=True)
ID64_NIL = BitLayout("id64-nil", 64, 41, 23, 0, epoch_relative=True)
ID128 = BitLayout("id128", 128, 64, 48, 16, epoch_relative=False)

LAYOUTS: dict[str, BitLayout] = {layout.name: layout for layout in (ID64, ID64_NIL, ID128)}


def get_layout(name: str) -> BitLayout:
    """Look up a layout by name (``id64``, ``id64-nil`` or ``id128``; underscores accepted)."""
    key = name.strip().lower().replace("_", "-")
    try:
        return LAYOUTS[key]
    except KeyError:
        raise KeyError(f"unknown layout {name!r} (expected one of: {', '.join(LAYOUTS)})") from None
