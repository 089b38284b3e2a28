"""Info command implementation - show resolved configuration and layouts."""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table

from ..codec import millis_to_datetime
from ..config import GeneratorConfig
from ..errors import FlakegenError
from ..generator import SnowflakeGenerator
from ..layout import EPOCH_MS, LAYOUTS


def run_info(config: GeneratorConfig, output_json: bool = False) -> int:
    """Show the node id this configuration resolves to and the bit layouts.

    Returns:
        Exit code (0 = success, 1 = configuration could not be resolved)
    """
    try:
        generator = SnowflakeGenerator.from_config(config)
    except FlakegenError as e:
        Console(stderr=True).print(f"Error: {e}", style="bold red", markup=False)
        return 1

    layouts = [
        {
            "name": layout.name,
            "total_bits": layout.total_bits,
            "timestamp_bits": layout.timestamp_bits,
            "node_id_bits": layout.node_id_bits,
            "sequence_bits": layout.sequence_bits,
            "ids_per_ms": layout.ids_per_millisecond,
            "epoch_relative": layout.epoch_relative,
            "node_id_field": generator.node_id & layout.node_id_mask,
        }
        for layout in LAYOUTS.values()
    ]

    if output_json:
        print(
            json.dumps(
                {"config": config.to_dict(), "node_id": generator.node_id, "epoch_ms": EPOCH_MS, "layouts": layouts},
                indent=2,
            )
        )
        return 0

    console = Console()
    console.print(f"[bold]node_id[/]: {generator.node_id}")
    console.print(f"[bold]epoch[/]: {EPOCH_MS} ({millis_to_datetime(EPOCH_MS).isoformat()})")
    console.print(f"[bold]clock_policy[/]: {config.clock_policy} (max_backward_ms={config.max_backward_ms})")

    table = Table(title="Layouts")
    for column in ("Layout", "Bits", "Timestamp", "Node id", "Sequence", "Ids/ms", "Node field"):
        table.add_column(column)
    for row in layouts:
        table.add_row(
            row["name"],
            str(row["total_bits"]),
            str(row["timestamp_bits"]),
            str(row["node_id_bits"]),
            str(row["sequence_bits"]),
            str(row["ids_per_ms"]),
            str(row["node_id_field"]),
        )
    console.print(table)
    return 0
