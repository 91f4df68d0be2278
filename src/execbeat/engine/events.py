"""Segmentation of run output into event records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from execbeat.models import (
    DEFAULT_DOCUMENT_TYPE,
    CombinedOutput,
    EventRecord,
    StderrOutput,
    StdoutLine,
)

if TYPE_CHECKING:
    from execbeat.models import ExecOutput

    from .result import RunResult


def segment_output(result: RunResult, split_lines: bool) -> list[ExecOutput]:
    """Partition a run's output according to the segmentation policy.

    Combined mode yields exactly one CombinedOutput. Split mode yields a
    StderrOutput when stderr is non-empty, followed by one StdoutLine per
    non-empty stdout line. Blank lines are skipped and do not consume a
    line offset, so a run without any output yields nothing.

    Args:
        result: The run to segment.
        split_lines: Whether to emit stdout line by line.

    Returns:
        Ordered list of exec payloads.
    """
    if not split_lines:
        return [
            CombinedOutput(
                command=result.command,
                stdout=result.stdout,
                stderr=result.stderr,
                exit_code=result.exit_code,
            )
        ]

    outputs: list[ExecOutput] = []

    if result.stderr:
        outputs.append(
            StderrOutput(
                command=result.command,
                stderr=result.stderr,
                exit_code=result.exit_code,
            )
        )

    line_offset = 0
    for line in result.stdout.split("\n"):
        if not line:
            continue
        outputs.append(
            StdoutLine(
                command=result.command,
                stdout_line=line,
                line_offset=line_offset,
                exit_code=result.exit_code,
            )
        )
        line_offset += 1

    return outputs


def build_events(
    result: RunResult,
    split_lines: bool = False,
    document_type: str = DEFAULT_DOCUMENT_TYPE,
    fields: Mapping[str, str] | None = None,
) -> list[EventRecord]:
    """Build the event records for one run.

    Every record shares the run's start time, document type, exit code
    and static annotations.
    """
    annotations = dict(fields) if fields is not None else None
    return [
        EventRecord(
            timestamp=result.started_at,
            document_type=document_type,
            fields=annotations,
            exec=output,
        )
        for output in segment_output(result, split_lines)
    ]
