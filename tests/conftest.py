"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

from execbeat.engine import RunResult
from execbeat.models import EventRecord


class RecordingSink:
    """Sink that keeps every published record in memory."""

    def __init__(self) -> None:
        self.records: list[EventRecord] = []
        self.closed = False

    def publish(self, record: EventRecord) -> None:
        self.records.append(record)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Create a sink that records published events."""
    return RecordingSink()


@pytest.fixture
def started_at() -> datetime:
    """A fixed run start time."""
    return datetime(2024, 1, 1, 9, 0, 0, tzinfo=UTC)


@pytest.fixture
def make_result(started_at: datetime) -> Callable[..., RunResult]:
    """Build RunResults with sensible defaults."""

    def _make(stdout: str = "", stderr: str = "", exit_code: int = 0) -> RunResult:
        return RunResult(
            command="check",
            started_at=started_at,
            stdout=stdout,
            stderr=stderr,
            exit_code=exit_code,
        )

    return _make


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[..., Path]:
    """Write an executable shell script and return its path."""

    def _make(body: str, name: str = "script.sh") -> Path:
        path = tmp_path / name
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(0o755)
        return path

    return _make


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[..., Path]:
    """Write a config dictionary as YAML and return its path."""

    def _write(data: dict, name: str = "execbeat.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return path

    return _write
