"""The per-tick pipeline: run the command, build events, publish them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from execbeat.scheduler import ExecScheduler

from .events import build_events
from .runner import CommandRunner

if TYPE_CHECKING:
    from execbeat.models import EventRecord, ExecConfig
    from execbeat.output import EventSink

    from .result import RunResult

logger = logging.getLogger(__name__)


class Beat:
    """Executes the configured command and hands its events to a sink.

    A Beat holds no per-run state: every call to run_once() produces a
    fresh RunResult and its own event records, so overlapping ticks do
    not interfere with each other.
    """

    def __init__(
        self,
        config: ExecConfig,
        sink: EventSink,
        runner: CommandRunner | None = None,
    ) -> None:
        """Initialize the beat.

        Args:
            config: Command and event settings.
            sink: Destination for event records.
            runner: Command runner, defaults to one using the configured timeout.
        """
        self.config = config
        self.sink = sink
        self.runner = runner or CommandRunner(timeout=config.timeout)

    def execute(self) -> RunResult:
        """Run the command once without publishing anything."""
        return self.runner.run(self.config.command, self.config.args)

    def run_once(self) -> list[EventRecord]:
        """Run the command once and publish its events.

        Returns:
            The published event records, in publication order.
        """
        result = self.execute()
        events = build_events(
            result,
            split_lines=self.config.split_lines,
            document_type=self.config.document_type,
            fields=self.config.fields,
        )

        for event in events:
            self.sink.publish(event)

        logger.debug(f"Published {len(events)} event(s) for [{result.command}]")
        return events

    def tick(self) -> None:
        """Scheduler callback. Errors stay within the tick."""
        try:
            self.run_once()
        except Exception as e:
            logger.exception(f"Scheduled run of [{self.config.command}] failed: {e}")


def create_scheduler(
    beat: Beat,
    scheduler_type: Literal["background", "blocking"] = "background",
) -> ExecScheduler:
    """Create a scheduler that ticks a beat on its configured schedule.

    Args:
        beat: The beat to drive.
        scheduler_type: "background" or "blocking".

    Returns:
        An ExecScheduler, not yet started.

    Raises:
        ValueError: If the schedule expression is invalid.
    """
    return ExecScheduler(
        beat.config.schedule,
        beat.tick,
        timezone=beat.config.timezone,
        max_overlapping_runs=beat.config.max_overlapping_runs,
        scheduler_type=scheduler_type,
    )
