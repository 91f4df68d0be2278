"""Tests for the scheduler service."""

import logging
import threading
import time
from datetime import datetime
from types import SimpleNamespace

import pytest
from apscheduler.events import (
    EVENT_JOB_ERROR,
    EVENT_JOB_EXECUTED,
    EVENT_JOB_MAX_INSTANCES,
    EVENT_JOB_MISSED,
)

from execbeat.scheduler import ExecScheduler


class TestExecScheduler:
    """Tests for ExecScheduler."""

    def test_invalid_schedule(self) -> None:
        """Test that invalid schedules fail at construction."""
        with pytest.raises(ValueError):
            ExecScheduler("not a schedule", lambda: None)

    def test_not_running_initially(self) -> None:
        """Test the initial state."""
        scheduler = ExecScheduler("@every 10s", lambda: None)

        assert not scheduler.is_running
        assert scheduler.get_next_run() is None

    def test_stop_before_start(self) -> None:
        """Test that stopping an idle scheduler is a no-op."""
        scheduler = ExecScheduler("@every 10s", lambda: None)

        scheduler.stop()

        assert not scheduler.is_running

    def test_start_and_stop(self) -> None:
        """Test starting and stopping a background scheduler."""
        scheduler = ExecScheduler("@hourly", lambda: None)

        scheduler.start()
        try:
            assert scheduler.is_running
            assert isinstance(scheduler.get_next_run(), datetime)
            scheduler.start()  # second start is ignored
        finally:
            scheduler.stop()

        assert not scheduler.is_running

    def test_fires_on_interval(self) -> None:
        """Test that the callback runs on an interval schedule."""
        fired = threading.Event()
        scheduler = ExecScheduler("@every 1s", fired.set)

        scheduler.start()
        try:
            assert fired.wait(timeout=5)
        finally:
            scheduler.stop()

    def test_runs_overlap(self) -> None:
        """Test that a new tick starts while the previous run is in flight."""
        release = threading.Event()
        lock = threading.Lock()
        in_flight = 0
        peak = 0

        def slow_run() -> None:
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            release.wait(timeout=10)
            with lock:
                in_flight -= 1

        scheduler = ExecScheduler("@every 1s", slow_run, max_overlapping_runs=5)
        scheduler.start()
        try:
            deadline = time.monotonic() + 6
            while peak < 2 and time.monotonic() < deadline:
                time.sleep(0.1)
        finally:
            release.set()
            scheduler.stop()

        assert peak >= 2


class TestJobEventLogging:
    """Tests for scheduler event logging."""

    def test_error_event(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that job errors are logged."""
        event = SimpleNamespace(code=EVENT_JOB_ERROR, exception=RuntimeError("boom"))

        with caplog.at_level(logging.ERROR, logger="execbeat.scheduler.service"):
            ExecScheduler._on_job_event(event)  # type: ignore[arg-type]

        assert "boom" in caplog.text

    def test_max_instances_event(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that skipped ticks are logged."""
        event = SimpleNamespace(code=EVENT_JOB_MAX_INSTANCES)

        with caplog.at_level(logging.WARNING, logger="execbeat.scheduler.service"):
            ExecScheduler._on_job_event(event)  # type: ignore[arg-type]

        assert "Skipped tick" in caplog.text

    def test_missed_event(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that missed runs are logged."""
        event = SimpleNamespace(code=EVENT_JOB_MISSED, scheduled_run_time="09:00")

        with caplog.at_level(logging.WARNING, logger="execbeat.scheduler.service"):
            ExecScheduler._on_job_event(event)  # type: ignore[arg-type]

        assert "Missed scheduled run at 09:00" in caplog.text

    def test_executed_event_logs_next_run(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a finished run logs when the next one is due."""
        scheduler = ExecScheduler("@hourly", lambda: None)
        scheduler.start()
        try:
            with caplog.at_level(logging.DEBUG, logger="execbeat.scheduler.service"):
                event = SimpleNamespace(code=EVENT_JOB_EXECUTED)
                scheduler._on_job_executed(event)  # type: ignore[arg-type]
            next_run = scheduler.get_next_run()
        finally:
            scheduler.stop()

        assert f"next run at {next_run}" in caplog.text
