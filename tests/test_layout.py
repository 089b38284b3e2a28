"""Tests for the bit layout constants."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from flakegen.layout import (
    EPOCH_MS,
    ID64,
    ID64_NIL,
    ID128,
    MASK_NODE_ID_64,
    MASK_NODE_ID_64NIL,
    MASK_NODE_ID_128,
    MAX_SEQUENCE_64,
    MAX_SEQUENCE_128,
    SHIFT_NODE_ID_64,
    SHIFT_NODE_ID_128,
    SHIFT_TIMESTAMP_64,
    SHIFT_TIMESTAMP_64NIL,
    get_layout,
)


def test_epoch_is_first_of_march_2016():
    assert EPOCH_MS == 1456790400000
    assert EPOCH_MS == int(datetime(2016, 3, 1, tzinfo=timezone.utc).timestamp() * 1000)


def test_field_widths_fill_the_word():
    for layout in (ID64, ID64_NIL, ID128):
        assert layout.timestamp_bits + layout.node_id_bits + layout.sequence_bits == layout.total_bits


def test_constants_match_descriptors():
    assert ID64.timestamp_shift == SHIFT_TIMESTAMP_64 == 23
    assert ID64.node_id_shift == SHIFT_NODE_ID_64 == 2
    assert ID64.node_id_mask == MASK_NODE_ID_64
    assert ID64.max_sequence == MAX_SEQUENCE_64 == 3
    assert ID64_NIL.timestamp_shift == SHIFT_TIMESTAMP_64NIL == 23
    assert ID64_NIL.node_id_mask == MASK_NODE_ID_64NIL
    assert ID64_NIL.ids_per_millisecond == 1
    assert ID128.node_id_shift == SHIFT_NODE_ID_128 == 16
    assert ID128.node_id_mask == MASK_NODE_ID_128
    assert ID128.max_sequence == MAX_SEQUENCE_128 == 65535


@pytest.mark.parametrize("name, expected", [("id64", ID64), ("ID64_NIL", ID64_NIL), (" id128 ", ID128)])
def test_get_layout(name, expected):
    assert get_layout(name) is expected


def test_get_layout_unknown():
    with pytest.raises(KeyError, match="unknown layout"):
        get_layout("id32")
