"""Non-blocking publishing through a background worker."""

from __future__ import annotations

import logging
import queue
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from execbeat.models import EventRecord

    from .sinks import EventSink

logger = logging.getLogger(__name__)

# Marks the end of the queue for the worker thread
_STOP = object()


class QueuedSink:
    """Wrap a sink so that publish() never blocks the caller.

    Records are buffered in a bounded queue and delivered in order by a
    single worker thread. When the queue is full the record is dropped
    with a warning. Delivery errors are logged and the worker moves on.
    """

    def __init__(self, sink: EventSink, queue_size: int = 1000) -> None:
        """Initialize and start the worker.

        Args:
            sink: The sink doing the actual delivery.
            queue_size: Maximum number of buffered records.
        """
        self.sink = sink
        self._queue: queue.Queue[object] = queue.Queue(maxsize=queue_size)
        self._lock = threading.Lock()
        self._closed = False
        self._dropped = 0
        self._worker = threading.Thread(
            target=self._run, name="execbeat-publisher", daemon=True
        )
        self._worker.start()

    @property
    def dropped(self) -> int:
        """Number of records dropped because the queue was full or closed."""
        return self._dropped

    def publish(self, record: EventRecord) -> None:
        with self._lock:
            if self._closed:
                self._dropped += 1
                logger.warning("Dropped event: publisher is closed")
                return
            try:
                self._queue.put_nowait(record)
            except queue.Full:
                self._dropped += 1
                logger.warning(
                    f"Dropped event: publish queue full ({self._queue.maxsize} pending)"
                )

    def flush(self) -> None:
        """Block until every queued record has been handed to the sink."""
        self._queue.join()

    def close(self, timeout: float | None = None) -> None:
        """Drain the queue, stop the worker and close the wrapped sink.

        The wrapped sink is closed by the worker once the queue is drained,
        so a worker still busy after ``timeout`` keeps its sink usable.

        Args:
            timeout: Seconds to wait for the worker, None to wait until drained.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning(f"Publisher still busy after {timeout}s, leaving it to drain")
            return
        self._worker.join(timeout)
        if self._worker.is_alive():
            logger.warning(f"Publisher still busy after {timeout}s, leaving it to drain")

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    self._close_sink()
                    return
                self.sink.publish(item)  # type: ignore[arg-type]
            except Exception as e:
                logger.error(f"Failed to deliver event: {e}")
            finally:
                self._queue.task_done()

    def _close_sink(self) -> None:
        try:
            self.sink.close()
        except Exception as e:
            logger.error(f"Failed to close sink: {e}")
