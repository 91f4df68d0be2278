"""execbeat execution engine."""

from .beat import Beat, create_scheduler
from .errors import (
    SPAWN_FAILURE_EXIT_CODE,
    ErrorCategory,
    ExecbeatError,
    SinkError,
    classify_exit,
    classify_http_status,
    describe_spawn_error,
    exit_code_from_returncode,
)
from .events import build_events, segment_output
from .result import RunResult
from .runner import CommandRunner, split_args

__all__ = [
    "SPAWN_FAILURE_EXIT_CODE",
    "Beat",
    "CommandRunner",
    "ErrorCategory",
    "ExecbeatError",
    "RunResult",
    "SinkError",
    "build_events",
    "classify_exit",
    "classify_http_status",
    "create_scheduler",
    "describe_spawn_error",
    "exit_code_from_returncode",
    "segment_output",
    "split_args",
]
