"""Outcome of a single command run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .errors import SPAWN_FAILURE_EXIT_CODE


@dataclass
class RunResult:
    """Captured output and exit status of one command run.

    Created fresh for every tick and discarded once its events are built.
    """

    command: str
    started_at: datetime
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    args: list[str] = field(default_factory=list)
    duration_ms: int = 0
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        """Whether the command exited with status 0."""
        return self.exit_code == 0

    @property
    def spawn_failed(self) -> bool:
        """Whether the command could not be started."""
        return self.exit_code == SPAWN_FAILURE_EXIT_CODE and not self.stdout and not self.stderr

    @classmethod
    def spawn_failure(
        cls, command: str, args: list[str], started_at: datetime, duration_ms: int = 0
    ) -> RunResult:
        """Create the result recorded when a command fails to start."""
        return cls(
            command=command,
            args=args,
            started_at=started_at,
            exit_code=SPAWN_FAILURE_EXIT_CODE,
            duration_ms=duration_ms,
        )
