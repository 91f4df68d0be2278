"""Error classification for execbeat runs and event delivery."""

from __future__ import annotations

import errno
import signal
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Exit code recorded when the command could not be started at all
SPAWN_FAILURE_EXIT_CODE = 127


class ErrorCategory(str, Enum):
    """Classification of errors for handling decisions."""

    CONFIGURATION = "configuration"  # Fatal: abort startup
    SPAWN = "spawn"  # Command failed to start, published as exit 127
    TERMINATION = "termination"  # Non-zero exit or killed by a signal
    DELIVERY = "delivery"  # Sink could not deliver an event


@dataclass
class ExecbeatError(Exception):
    """Base error with classification and context."""

    message: str
    category: ErrorCategory
    retryable: bool = False
    retry_after: int | None = None  # Seconds to wait before retry
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class SinkError(ExecbeatError):
    """Errors while delivering an event to its destination."""

    category: ErrorCategory = ErrorCategory.DELIVERY


def describe_spawn_error(error: OSError | ValueError) -> str:
    """Describe why a command could not be started.

    Args:
        error: The OSError raised while spawning, or the ValueError raised
            for a command or argument containing a NUL byte.

    Returns:
        Human-readable reason.
    """
    if not isinstance(error, OSError):
        return str(error)
    if isinstance(error, FileNotFoundError):
        return "executable not found"
    if isinstance(error, PermissionError):
        return "permission denied"
    if error.errno == errno.ENOEXEC:
        return "exec format error"
    return error.strerror or str(error)


def exit_code_from_returncode(returncode: int) -> int:
    """Map a subprocess return code to a shell-style exit code.

    A negative return code means the child was killed by a signal; it is
    reported as 128 + signal number.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


def classify_exit(exit_code: int) -> ErrorCategory | None:
    """Classify a run by its exit code.

    Returns:
        None for a successful run, otherwise SPAWN or TERMINATION.
    """
    if exit_code == 0:
        return None
    if exit_code == SPAWN_FAILURE_EXIT_CODE:
        return ErrorCategory.SPAWN
    return ErrorCategory.TERMINATION


def signal_name(exit_code: int) -> str | None:
    """Name the signal behind a 128+N exit code, if there is one."""
    if exit_code <= 128:
        return None
    try:
        return signal.Signals(exit_code - 128).name
    except ValueError:
        return None


def classify_http_status(status_code: int) -> tuple[bool, int | None]:
    """Classify an HTTP response status from a collector.

    Args:
        status_code: HTTP status code.

    Returns:
        Tuple of (retryable, retry_after_seconds).
    """
    # Rate limiting
    if status_code == 429:
        return True, 60

    # Server errors (5xx) - transient, retry
    if 500 <= status_code < 600:
        return True, 5

    if status_code == 408:  # Request Timeout
        return True, 5

    # Other 4xx - the event itself is rejected
    if 400 <= status_code < 500:
        return False, None

    return True, 5
