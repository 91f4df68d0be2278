"""CLI commands for execbeat."""

# Import command modules to register them with the app
# These imports have side effects (register commands via @app.command())
from execbeat.cli.commands import once, run, validate

__all__ = ["once", "run", "validate"]
