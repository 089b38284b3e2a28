"""Generate command implementation - mint identifiers from the command line."""

from __future__ import annotations

import json
from typing import Callable

from rich.console import Console

from ..config import GeneratorConfig
from ..errors import FlakegenError
from ..generator import SnowflakeGenerator
from ..layout import get_layout

OUTPUT_FORMATS = ("int", "hex", "bin")


def _minter(generator: SnowflakeGenerator, layout: str, output_format: str) -> Callable[[], str]:
    layout = get_layout(layout).name
    if layout == "id64":
        mint = {"int": generator.generate_id64, "hex": generator.generate_id64_hex, "bin": generator.generate_id64_bin}
    elif layout == "id64-nil":
        mint = {
            "int": generator.generate_id64_nil,
            "hex": generator.generate_id64_nil_hex,
            "bin": generator.generate_id64_nil_bin,
        }
    else:
        mint = {
            "int": lambda: _join_words(generator.generate_id128()),
            "hex": generator.generate_id128_hex,
            "bin": generator.generate_id128_bin,
        }
    fn = mint[output_format]
    return lambda: str(fn())


def _join_words(id128: tuple[int, int]) -> int:
    high, low = id128
    return (high << 64) | low


def run_generate(
    config: GeneratorConfig,
    layout: str = "id64",
    output_format: str = "hex",
    count: int = 1,
    output_json: bool = False,
    generator: SnowflakeGenerator | None = None,
) -> int:
    """Generate identifiers and print one per line.

    Args:
        config: Generator configuration
        layout: Identifier family ("id64", "id64-nil", "id128")
        output_format: "int", "hex" or "bin"; id128 ints are the joined 128-bit value
        count: Number of ids to generate
        output_json: Print a JSON document instead of bare lines
        generator: Pre-built generator (for testing)

    Returns:
        Exit code (0 = success, 1 = generation failed)
    """
    console = Console(stderr=True)

    if count < 1:
        console.print("Error: --count must be at least 1", style="bold red")
        return 1

    try:
        generator = generator or SnowflakeGenerator.from_config(config)
        mint = _minter(generator, layout, output_format)
        ids = [mint() for _ in range(count)]
    except FlakegenError as e:
        console.print(f"Error: {e}", style="bold red", markup=False)
        return 1

    if output_json:
        print(
            json.dumps(
                {"layout": layout, "format": output_format, "node_id": generator.node_id, "ids": ids},
                indent=2,
            )
        )
    else:
        for value in ids:
            print(value)
    return 0
