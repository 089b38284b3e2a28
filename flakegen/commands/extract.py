"""Extract command implementation - decode timestamp, node id and sequence."""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table

from .. import codec
from ..errors import FlakegenError, ParseError
from ..layout import WORD_BITS, WORD_MASK, get_layout


def decode(value: str, layout: str, input_format: str = "hex") -> codec.IdParts:
    """
    Decode an encoded identifier.

    Raises:
        ParseError: malformed input for the given layout/format.
    """
    layout = get_layout(layout).name
    value = value.strip()
    if layout == "id128":
        if input_format == "hex":
            return codec.decode_id128(codec.parse_id128_hex(value))
        joined = _parse_int(value, 2 * WORD_BITS)
        return codec.decode_id128((joined >> WORD_BITS, joined & WORD_MASK))

    number = codec.parse_hex(value) if input_format == "hex" else _parse_int(value, WORD_BITS)
    if layout == "id64":
        return codec.decode_id64(number)
    return codec.decode_id64_nil(number)


def _parse_int(text: str, bits: int) -> int:
    if not (text.isascii() and text.isdigit()):
        raise ParseError(text, "not a decimal integer")
    number = int(text)
    if number >> bits:
        raise ParseError(text, f"value does not fit in {bits} bits")
    return number


def run_extract(value: str, layout: str = "id64", input_format: str = "hex", output_json: bool = False) -> int:
    """Print the fields embedded in an identifier.

    Returns:
        Exit code (0 = success, 1 = value could not be parsed or dated)
    """
    console = Console(stderr=True)

    try:
        parts = decode(value, layout, input_format)
        data = parts.to_dict()
    except FlakegenError as e:
        console.print(f"Error: {e}", style="bold red", markup=False)
        return 1

    if output_json:
        print(json.dumps(data, indent=2))
        return 0

    table = Table(title=f"{layout} {value}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("timestamp_ms", str(parts.timestamp_ms))
    table.add_row("datetime", data["datetime"])
    table.add_row("node_id", str(parts.node_id))
    table.add_row("sequence", "-" if parts.sequence is None else str(parts.sequence))
    Console().print(table)
    return 0
