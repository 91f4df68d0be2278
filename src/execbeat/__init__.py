"""execbeat: run a command on a schedule and ship its output as events."""

__version__ = "0.1.0"
