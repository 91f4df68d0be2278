"""Command runner for execbeat."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from datetime import UTC, datetime

from .errors import describe_spawn_error, exit_code_from_returncode, signal_name
from .result import RunResult

logger = logging.getLogger(__name__)

# Seconds to wait for the pipes to close after a timed-out command is killed
DRAIN_TIMEOUT = 2.0


def split_args(args: str | None) -> list[str]:
    """Split an argument string on single spaces.

    There is no quoting or escaping: every space separates two arguments,
    so an argument cannot itself contain a space and two consecutive
    spaces produce an empty argument.

    Args:
        args: Argument string, may be None or blank.

    Returns:
        The argument list, empty if there are no arguments.
    """
    if args is None:
        return []
    trimmed = args.strip()
    if not trimmed:
        return []
    return trimmed.split(" ")


class CommandRunner:
    """Execute a command and capture its output.

    The command is started directly (no shell), stdout and stderr are
    captured into separate buffers and the call blocks until the process
    exits. Without a timeout a hung command blocks its run indefinitely.
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize the runner.

        Args:
            timeout: Seconds to wait before killing the command, None to wait forever.
        """
        self.timeout = timeout

    def run(
        self,
        command: str,
        args: str | None = None,
        started_at: datetime | None = None,
    ) -> RunResult:
        """Run a command once.

        Failures to start the command are recorded as exit code 127 with
        empty output, never raised.

        Args:
            command: Executable name or path.
            args: Space-separated argument string.
            started_at: Invocation timestamp, defaults to now.

        Returns:
            RunResult with captured output and exit code.
        """
        name = command.strip()
        argv = split_args(args)
        started_at = started_at or datetime.now(UTC)

        if argv:
            logger.debug(f"Executing command: [{name}] with args {argv}")
        else:
            logger.debug(f"Executing command: [{name}]")

        try:
            # Own process group, so a timeout can kill everything the command started
            proc = subprocess.Popen(
                [name, *argv],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            logger.error(f"Could not start command [{name}]: {describe_spawn_error(e)}")
            return RunResult.spawn_failure(
                name, argv, started_at, duration_ms=self._duration_ms(started_at)
            )

        timed_out = False
        try:
            stdout_bytes, stderr_bytes = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            timed_out = True
            logger.warning(f"Command [{name}] timed out after {self.timeout}s and was killed")
            stdout_bytes, stderr_bytes = self._kill_and_drain(proc)

        exit_code = exit_code_from_returncode(proc.returncode)
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")

        if proc.returncode < 0:
            sig = signal_name(exit_code) or f"signal {-proc.returncode}"
            logger.warning(f"Command [{name}] terminated by {sig} (exit code {exit_code})")
        elif exit_code != 0:
            logger.warning(f"Command [{name}] exited with code {exit_code}")

        logger.info(
            f"Executed command [{name}]: exit code {exit_code}, "
            f"{len(stdout)} chars stdout, {len(stderr)} chars stderr"
        )

        return RunResult(
            command=name,
            args=argv,
            started_at=started_at,
            stdout=stdout,
            stderr=stderr,
            exit_code=exit_code,
            duration_ms=self._duration_ms(started_at),
            timed_out=timed_out,
        )

    @staticmethod
    def _kill_and_drain(proc: subprocess.Popen[bytes]) -> tuple[bytes, bytes]:
        """Kill a timed-out command with its process group and collect its output.

        Output written before the kill is kept. If a process that left the
        group still holds the pipes open, they are closed after a short grace
        period and whatever was read so far is returned.
        """
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            # Group already gone, kill the child directly
            proc.kill()

        try:
            return proc.communicate(timeout=DRAIN_TIMEOUT)
        except subprocess.TimeoutExpired as e:
            for pipe in (proc.stdout, proc.stderr):
                if pipe is not None:
                    pipe.close()
            proc.wait()
            return e.output or b"", e.stderr or b""

    @staticmethod
    def _duration_ms(started_at: datetime) -> int:
        """Calculate duration in milliseconds."""
        return int((datetime.now(started_at.tzinfo) - started_at).total_seconds() * 1000)
