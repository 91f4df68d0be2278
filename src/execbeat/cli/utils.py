"""Utility functions for execbeat CLI."""

from __future__ import annotations

import logging
import signal
from pathlib import Path
from typing import TYPE_CHECKING

import typer

from execbeat.cli import console
from execbeat.config import ConfigError, load_config, resolve_config_path

if TYPE_CHECKING:
    from types import FrameType

    from execbeat.models import BeatConfig, LoggingConfig
    from execbeat.scheduler import ExecScheduler

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_config_or_exit(path: Path | None) -> BeatConfig:
    """Load the configuration, printing errors and exiting on failure.

    Args:
        path: Explicit config path, or None for the default lookup.

    Returns:
        The validated configuration.

    Raises:
        typer.Exit: If the configuration is missing or invalid.
    """
    config_path = resolve_config_path(path)

    try:
        return load_config(config_path)
    except FileNotFoundError:
        console.print(f"[red]Error:[/] Config file not found: {config_path}")
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]✗[/] Invalid config [cyan]{config_path}[/]:")
        if e.errors:
            for error in e.errors:
                console.print(f"  [red]•[/] [yellow]{error['location']}[/]: {error['message']}")
        else:
            console.print(f"  {e}")
        raise typer.Exit(1)


def setup_logging(config: LoggingConfig, debug: bool = False) -> None:
    """Set up logging for the process.

    Args:
        config: Logging configuration.
        debug: Force debug logging.
    """
    level = logging.DEBUG if debug else getattr(logging, config.level)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        log_file = Path(config.file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    # APScheduler logs every tick at INFO
    logging.getLogger("apscheduler").setLevel(logging.DEBUG if debug else logging.WARNING)


def setup_signal_handlers(scheduler: ExecScheduler) -> None:
    """Stop the scheduler on SIGINT/SIGTERM.

    In-flight runs finish before the scheduler returns.
    """

    def handle_signal(signum: int, frame: FrameType | None) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        scheduler.stop()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)
