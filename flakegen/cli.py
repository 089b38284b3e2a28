"""CLI entrypoint for flakegen."""

import logging
import sys
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console

from . import __version__
from .commands.generate import OUTPUT_FORMATS
from .config import load_config
from .errors import ConfigurationError
from .layout import LAYOUTS, get_layout

LAYOUT_HELP = f"Identifier family ({', '.join(LAYOUTS)})"


def _layout_option(ctx: click.Context, param: click.Parameter, value: str) -> str:
    """Normalize --layout through get_layout so id64_nil and ID64 are accepted."""
    try:
        return get_layout(value).name
    except KeyError:
        raise click.BadParameter(f"{value!r} is not one of {', '.join(LAYOUTS)}") from None


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, console=Console(stderr=True))],
    )


@click.group()
@click.version_option(__version__, prog_name="flakegen")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    envvar="FLAKEGEN_CONFIG",
    help="YAML config file (also FLAKEGEN_CONFIG)",
)
@click.option(
    "--node-id",
    "-n",
    type=click.IntRange(min=0),
    default=None,
    help="Node id for this generator (overrides config and FLAKEGEN_NODE_ID)",
)
@click.option("--verbose", "-V", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, node_id: int | None, verbose: bool) -> None:
    """flakegen - Snowflake identifier generator.

    Generate 64-bit and 128-bit time-ordered ids and decode existing ones.
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    if node_id is not None:
        config = replace(config, node_id=node_id)

    ctx.obj["config"] = config


@cli.command()
@click.option("--layout", "-l", default="id64", show_default=True, callback=_layout_option, help=LAYOUT_HELP)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(list(OUTPUT_FORMATS)),
    default="hex",
    show_default=True,
    help="Output encoding",
)
@click.option("--count", "-c", type=click.IntRange(min=1), default=1, show_default=True, help="Number of ids")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def generate(ctx: click.Context, layout: str, output_format: str, count: int, output_json: bool) -> None:
    """Generate identifiers, one per line.

    Examples:

        flakegen --node-id 5 generate

        flakegen generate --layout id128 --count 10

        flakegen generate --layout id64-nil --format int --json
    """
    from .commands.generate import run_generate

    exit_code = run_generate(ctx.obj["config"], layout, output_format, count, output_json)
    sys.exit(exit_code)


@cli.command()
@click.argument("value")
@click.option("--layout", "-l", default="id64", show_default=True, callback=_layout_option, help=LAYOUT_HELP)
@click.option(
    "--hex/--int",
    "is_hex",
    default=True,
    show_default=True,
    help="Whether VALUE is hex (default) or decimal",
)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
def extract(value: str, layout: str, is_hex: bool, output_json: bool) -> None:
    """Decode the timestamp, node id and sequence embedded in VALUE.

    Examples:

        flakegen extract 5000014

        flakegen extract --int 83886100

        flakegen extract --layout id128 "$(flakegen generate --layout id128)"
    """
    from .commands.extract import run_extract

    exit_code = run_extract(value, layout, "hex" if is_hex else "int", output_json)
    sys.exit(exit_code)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def info(ctx: click.Context, output_json: bool) -> None:
    """Show the resolved node id, epoch and bit layouts."""
    from .commands.info import run_info

    exit_code = run_info(ctx.obj["config"], output_json)
    sys.exit(exit_code)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
