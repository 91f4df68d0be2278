"""APScheduler service driving the execbeat schedule."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal

from apscheduler.events import (
    EVENT_JOB_ERROR,
    EVENT_JOB_EXECUTED,
    EVENT_JOB_MAX_INSTANCES,
    EVENT_JOB_MISSED,
)
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

from .triggers import parse_schedule

if TYPE_CHECKING:
    from datetime import datetime

    from apscheduler.events import JobEvent
    from apscheduler.schedulers.base import BaseScheduler

logger = logging.getLogger(__name__)

JOB_ID = "execbeat:tick"
DEFAULT_MAX_OVERLAPPING_RUNS = 10


class ExecScheduler:
    """Invokes a callback on every tick of a schedule expression.

    The expression is parsed at construction so malformed schedules fail
    before anything is started. Ticks are dispatched on their own schedule
    even when a previous run is still in flight, up to
    ``max_overlapping_runs`` concurrent runs.
    """

    def __init__(
        self,
        schedule: str,
        callback: Callable[[], Any],
        timezone: str = "local",
        max_overlapping_runs: int = DEFAULT_MAX_OVERLAPPING_RUNS,
        scheduler_type: Literal["background", "blocking"] = "background",
    ) -> None:
        """Initialize the scheduler.

        Args:
            schedule: Cron expression, '@every <duration>' or descriptor.
            callback: Zero-argument callable invoked on each tick.
            timezone: Timezone for cron expressions ("local" for host time).
            max_overlapping_runs: Maximum number of concurrently running ticks.
            scheduler_type: "background" runs ticks off the calling thread,
                "blocking" takes over the calling thread in start().

        Raises:
            ValueError: If the schedule expression is invalid.
        """
        # Validate eagerly, the trigger itself is rebuilt on start
        parse_schedule(schedule, timezone)

        self._schedule = schedule
        self._timezone = timezone
        self._callback = callback

        executors = {"default": ThreadPoolExecutor(max_overlapping_runs)}
        job_defaults = {
            "coalesce": False,  # Every tick is its own run
            "max_instances": max_overlapping_runs,
            "misfire_grace_time": None,
        }

        scheduler_class: type[BaseScheduler] = (
            BlockingScheduler if scheduler_type == "blocking" else BackgroundScheduler
        )

        self._scheduler: BaseScheduler = scheduler_class(
            executors=executors,
            job_defaults=job_defaults,
        )
        self._scheduler.add_listener(
            self._on_job_event,
            EVENT_JOB_ERROR | EVENT_JOB_MISSED | EVENT_JOB_MAX_INSTANCES,
        )
        self._scheduler.add_listener(self._on_job_executed, EVENT_JOB_EXECUTED)
        self._running = False

    @property
    def schedule(self) -> str:
        """The schedule expression."""
        return self._schedule

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running

    def start(self) -> None:
        """Start dispatching ticks.

        With a blocking scheduler this call returns only after stop().
        """
        if self._running:
            return

        trigger = parse_schedule(self._schedule, self._timezone)
        self._scheduler.add_job(
            self._callback,
            trigger=trigger,
            id=JOB_ID,
            name=self._schedule,
            replace_existing=True,
        )

        self._running = True
        logger.info(f"Scheduler started with schedule: {self._schedule}")
        self._scheduler.start()

    def stop(self, wait: bool = True) -> None:
        """Stop dispatching ticks.

        In-flight runs are never interrupted. A no-op if never started.

        Args:
            wait: Whether to wait for in-flight runs to complete.
        """
        if not self._running:
            return

        self._running = False
        self._scheduler.shutdown(wait=wait)
        logger.info("Scheduler stopped")

    def get_next_run(self) -> datetime | None:
        """Get the next tick time, None if not scheduled."""
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def _on_job_executed(self, event: JobEvent) -> None:
        logger.debug(f"Run finished, next run at {self.get_next_run()}")

    @staticmethod
    def _on_job_event(event: JobEvent) -> None:
        if event.code == EVENT_JOB_ERROR:
            logger.error(f"Scheduled run raised: {event.exception}")
        elif event.code == EVENT_JOB_MAX_INSTANCES:
            logger.warning("Skipped tick: too many overlapping runs still in flight")
        else:
            logger.warning(f"Missed scheduled run at {event.scheduled_run_time}")
