"""Validate command for execbeat CLI."""

from pathlib import Path

import typer

from execbeat.cli import app, console
from execbeat.cli.utils import load_config_or_exit
from execbeat.engine import split_args
from execbeat.scheduler import next_fire_times, parse_schedule


@app.command()
def validate(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: $EXECBEAT_CONFIG or ~/.execbeat/execbeat.yaml)",
    ),
    count: int = typer.Option(
        5,
        "--next",
        "-n",
        min=0,
        help="Number of upcoming run times to show",
    ),
) -> None:
    """Validate a config file and preview its schedule.

    Checks that the config:
    - Has valid YAML syntax
    - Conforms to the execbeat schema
    - Has a schedule expression that can be parsed
    """
    config = load_config_or_exit(config_path)
    exec_config = config.exec

    console.print(f"[green]✓[/] Config for [cyan]{exec_config.command.strip()}[/] is valid")
    console.print()
    console.print(f"  [dim]Arguments:[/] {' '.join(split_args(exec_config.args)) or '(none)'}")
    console.print(f"  [dim]Schedule:[/] {exec_config.schedule}")
    console.print(f"  [dim]Document type:[/] {exec_config.document_type}")
    console.print(f"  [dim]Split lines:[/] {exec_config.split_lines}")
    console.print(f"  [dim]Timeout:[/] {exec_config.timeout or 'none'}")
    console.print(f"  [dim]Fields:[/] {exec_config.fields or '(none)'}")
    console.print(f"  [dim]Output:[/] {config.output.type}")

    if count:
        trigger = parse_schedule(exec_config.schedule, exec_config.timezone)
        console.print()
        console.print("  [dim]Next runs:[/]")
        for fire_time in next_fire_times(trigger, count):
            console.print(f"    - {fire_time.isoformat()}")
