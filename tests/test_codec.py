"""Tests for identifier encoding, parsing and timestamp extraction."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from flakegen.codec import (
    IdParts,
    decode_id64,
    decode_id64_nil,
    decode_id128,
    extract_timestamp64,
    extract_timestamp64_as_datetime,
    extract_timestamp64_hex,
    extract_timestamp64_hex_as_datetime,
    extract_timestamp64_nil,
    extract_timestamp64_nil_as_datetime,
    extract_timestamp64_nil_hex,
    extract_timestamp64_nil_hex_as_datetime,
    extract_timestamp128,
    extract_timestamp128_as_datetime,
    extract_timestamp128_hex,
    extract_timestamp128_hex_as_datetime,
    format_bin,
    format_hex,
    format_id128_bin,
    format_id128_hex,
    millis_to_datetime,
    parse_hex,
    parse_id128_hex,
)
from flakegen.errors import ParseError
from flakegen.generator import SnowflakeGenerator
from flakegen.layout import EPOCH_MS

EPOCH_PLUS_10MS = datetime(2016, 3, 1, 0, 0, 0, 10_000, tzinfo=timezone.utc)


class TestFormatting:
    def test_hex_unpadded_by_default(self):
        assert format_hex(0x14) == "14"

    def test_hex_padded(self):
        assert format_hex(0x14, 16) == "0000000000000014"

    def test_bin_padded(self):
        assert format_bin(5, 8) == "00000101"

    def test_id128_hex_zero_low_word(self):
        assert format_id128_hex((0x1, 0)) == "1" + "0" * 16

    def test_id128_bin_zero_low_word(self):
        assert format_id128_bin((0b11, 0)) == "11" + "0" * 64


class TestParseHex:
    @pytest.mark.parametrize("text", ["", "0x10", "-1", "+1", " 10", "10 ", "1_0", "xyz", "12g4"])
    def test_rejects_malformed(self, text: str):
        with pytest.raises(ParseError):
            parse_hex(text)

    def test_rejects_overflow(self):
        with pytest.raises(ParseError, match="64 bits"):
            parse_hex("1" + "0" * 16)

    def test_rejects_non_string(self):
        with pytest.raises(ParseError):
            parse_hex(123)  # type: ignore[arg-type]

    def test_accepts_upper_case(self):
        assert parse_hex("FF") == 255

    def test_accepts_full_word(self):
        assert parse_hex("f" * 16) == (1 << 64) - 1

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_hex("nope")


class TestId64Extraction:
    def test_extract_known_value(self):
        assert extract_timestamp64(83886100) == EPOCH_MS + 10

    def test_extract_hex(self):
        assert extract_timestamp64_hex("5000014") == EPOCH_MS + 10

    def test_extract_as_datetime(self):
        assert extract_timestamp64_as_datetime(83886100) == EPOCH_PLUS_10MS
        assert extract_timestamp64_hex_as_datetime("5000014") == EPOCH_PLUS_10MS

    def test_extract_hex_rejects_garbage(self):
        with pytest.raises(ParseError):
            extract_timestamp64_hex("not-hex")

    @pytest.mark.parametrize("value", [-1, 1 << 64])
    def test_extract_rejects_out_of_range(self, value: int):
        with pytest.raises(ParseError):
            extract_timestamp64(value)

    def test_decode(self):
        assert decode_id64(83886100) == IdParts("id64", EPOCH_MS + 10, 5, 0)
        assert decode_id64(83886103).sequence == 3


class TestId64NilExtraction:
    def test_extract(self):
        assert extract_timestamp64_nil((10 << 23) | 5) == EPOCH_MS + 10
        assert extract_timestamp64_nil_hex("5000005") == EPOCH_MS + 10

    def test_extract_as_datetime(self):
        assert extract_timestamp64_nil_as_datetime((10 << 23) | 5) == EPOCH_PLUS_10MS
        assert extract_timestamp64_nil_hex_as_datetime("5000005") == EPOCH_PLUS_10MS

    def test_decode(self):
        parts = decode_id64_nil((10 << 23) | 5)
        assert parts.node_id == 5
        assert parts.sequence is None


class TestId128Extraction:
    def test_extract_hex_with_zero_low_word(self):
        encoded = format_hex(EPOCH_MS + 10) + "0" * 16
        assert extract_timestamp128_hex(encoded) == EPOCH_MS + 10

    def test_extract_hex_short_timestamp(self):
        assert extract_timestamp128_hex("7" + "f" * 16) == 7

    def test_extract_pair(self):
        assert extract_timestamp128((EPOCH_MS, 123)) == EPOCH_MS

    def test_extract_as_datetime(self):
        encoded = format_id128_hex((EPOCH_MS + 10, 5 << 16))
        assert extract_timestamp128_hex_as_datetime(encoded) == EPOCH_PLUS_10MS
        assert extract_timestamp128_as_datetime((EPOCH_MS + 10, 0)) == EPOCH_PLUS_10MS

    @pytest.mark.parametrize("text", ["", "0" * 16, "1" * 33, "zz" + "0" * 16, "1" + "0" * 15 + "g"])
    def test_extract_hex_rejects_malformed(self, text: str):
        with pytest.raises(ParseError):
            extract_timestamp128_hex(text)

    def test_parse_words(self):
        assert parse_id128_hex("abc" + "0000000000050007") == (0xABC, (5 << 16) | 7)

    def test_decode(self):
        parts = decode_id128((EPOCH_MS + 10, (5 << 16) | 7))
        assert (parts.timestamp_ms, parts.node_id, parts.sequence) == (EPOCH_MS + 10, 5, 7)


class TestDatetime:
    def test_epoch(self):
        assert millis_to_datetime(EPOCH_MS) == datetime(2016, 3, 1, tzinfo=timezone.utc)

    def test_unix_zero(self):
        assert millis_to_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_parts_to_dict(self):
        data = decode_id64(83886100).to_dict()
        assert data == {
            "layout": "id64",
            "timestamp_ms": EPOCH_MS + 10,
            "datetime": "2016-03-01T00:00:00.010000+00:00",
            "node_id": 5,
            "sequence": 0,
        }

    @pytest.mark.parametrize("millis", [1 << 50, 1 << 63, -(1 << 63)])
    def test_out_of_range_is_parse_error(self, millis: int):
        with pytest.raises(ParseError, match="datetime range"):
            millis_to_datetime(millis)

    def test_id128_far_future_timestamp(self):
        # a full 64-bit timestamp word extracts fine but cannot be dated
        encoded = "f" * 16 + "0" * 16
        assert extract_timestamp128_hex(encoded) == (1 << 64) - 1
        with pytest.raises(ParseError):
            extract_timestamp128_hex_as_datetime(encoded)
        with pytest.raises(ParseError):
            decode_id128(parse_id128_hex(encoded)).to_dict()


class TestStaticExtractors:
    """The generator exposes extraction as static methods."""

    def test_static_methods_match_module_functions(self):
        assert SnowflakeGenerator.extract_timestamp64(83886100) == EPOCH_MS + 10
        assert SnowflakeGenerator.extract_timestamp64_nil_hex("5000005") == EPOCH_MS + 10
        assert SnowflakeGenerator.extract_timestamp128_hex("1" + "0" * 16) == 1
