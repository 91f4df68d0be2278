"""execbeat data models."""

from .config import (
    DEFAULT_DOCUMENT_TYPE,
    DEFAULT_SCHEDULE,
    BeatConfig,
    ExecConfig,
    LoggingConfig,
    OutputConfig,
)
from .events import CombinedOutput, EventRecord, ExecOutput, StderrOutput, StdoutLine

__all__ = [
    "DEFAULT_DOCUMENT_TYPE",
    "DEFAULT_SCHEDULE",
    "BeatConfig",
    "CombinedOutput",
    "EventRecord",
    "ExecConfig",
    "ExecOutput",
    "LoggingConfig",
    "OutputConfig",
    "StderrOutput",
    "StdoutLine",
]
