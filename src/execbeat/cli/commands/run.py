"""Run command for execbeat CLI."""

import logging
from pathlib import Path

import typer

from execbeat.cli import app, console
from execbeat.cli.utils import load_config_or_exit, setup_logging, setup_signal_handlers
from execbeat.engine import Beat, create_scheduler
from execbeat.output import create_sink

logger = logging.getLogger(__name__)


@app.command()
def run(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: $EXECBEAT_CONFIG or ~/.execbeat/execbeat.yaml)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
) -> None:
    """Run the command on its schedule until stopped.

    Every tick executes the command once and publishes its output as one
    or more events. Stop with Ctrl+C or SIGTERM; runs already in flight
    are allowed to finish.

    Examples:
        execbeat run
        execbeat run --config ./execbeat.yaml --debug
    """
    config = load_config_or_exit(config_path)
    setup_logging(config.logging, debug)

    sink = create_sink(config.output)
    beat = Beat(config.exec, sink)

    try:
        scheduler = create_scheduler(beat, scheduler_type="blocking")
    except ValueError as e:
        sink.close()
        console.print(f"[red]✗[/] Invalid schedule: {e}")
        raise typer.Exit(1)

    setup_signal_handlers(scheduler)

    console.print(
        f"[cyan]▶[/] Running [bold]{config.exec.command}[/] on schedule "
        f"[cyan]{config.exec.schedule}[/]"
    )
    console.print("[dim]Press Ctrl+C to stop[/]")

    try:
        scheduler.start()
    except KeyboardInterrupt:
        scheduler.stop()
    finally:
        sink.close()
        logger.info("execbeat stopped")
