"""execbeat event outputs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .queued import QueuedSink
from .sinks import ConsoleSink, EventSink, FileSink, HttpSink, encode_event

if TYPE_CHECKING:
    from execbeat.models import OutputConfig


def create_sink(config: OutputConfig) -> QueuedSink:
    """Create the sink described by an output configuration.

    The sink is wrapped in a QueuedSink so publishing never blocks.

    Args:
        config: Output configuration.

    Returns:
        A started QueuedSink around the configured sink.
    """
    sink: EventSink
    if config.type == "file":
        sink = FileSink(config.path or "")
    elif config.type == "http":
        sink = HttpSink(
            config.url or "",
            headers=config.headers,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )
    else:
        sink = ConsoleSink()

    return QueuedSink(sink, queue_size=config.queue_size)


__all__ = [
    "ConsoleSink",
    "EventSink",
    "FileSink",
    "HttpSink",
    "QueuedSink",
    "create_sink",
    "encode_event",
]
