"""Event sinks for execbeat."""

from __future__ import annotations

import json
import logging
import sys
import threading
from pathlib import Path
from typing import IO, TYPE_CHECKING, Protocol, runtime_checkable

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from execbeat.engine.errors import SinkError, classify_http_status

if TYPE_CHECKING:
    from execbeat.models import EventRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class EventSink(Protocol):
    """Destination for event records."""

    def publish(self, record: EventRecord) -> None:
        """Deliver one event record."""
        ...

    def close(self) -> None:
        """Release resources held by the sink."""
        ...


def encode_event(record: EventRecord) -> str:
    """Encode an event record as a single JSON line (without newline)."""
    return json.dumps(record.to_event(), ensure_ascii=False, separators=(",", ":"))


class ConsoleSink:
    """Write each event as a JSON line to a stream (stdout by default)."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def publish(self, record: EventRecord) -> None:
        stream = self._stream or sys.stdout
        line = encode_event(record)
        with self._lock:
            stream.write(line + "\n")
            stream.flush()

    def close(self) -> None:
        pass


class FileSink:
    """Append each event as a JSON line to a file."""

    def __init__(self, path: Path | str) -> None:
        """Initialize the sink, creating parent directories.

        Args:
            path: JSON-lines file to append to (~ is expanded).
        """
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file: IO[str] | None = None
        self._lock = threading.Lock()

    def publish(self, record: EventRecord) -> None:
        line = encode_event(record)
        with self._lock:
            if self._file is None:
                self._file = open(self.path, "a", encoding="utf-8")  # noqa: SIM115
            self._file.write(line + "\n")
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None


class wait_retry_after(wait_base):
    """Wait as long as the failed delivery asked for, else use a fallback wait.

    A SinkError carrying ``retry_after`` (from a Retry-After header or the
    status classification) sets the delay; other failures back off with the
    fallback strategy.
    """

    def __init__(self, fallback: wait_base) -> None:
        self.fallback = fallback

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        error = outcome.exception() if outcome is not None else None
        if isinstance(error, SinkError) and error.retry_after is not None:
            return float(error.retry_after)
        return self.fallback(retry_state)


class HttpSink:
    """POST each event as JSON to a collector endpoint.

    Transient failures (connection errors, timeouts, 5xx, 429, 408) are
    retried with exponential backoff and jitter, or after the delay the
    collector asks for. Other 4xx responses are not retried. When all
    attempts fail a SinkError is raised.
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
        respect_retry_after: bool = True,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the sink.

        Args:
            url: Collector URL.
            headers: Extra HTTP headers sent with every request.
            timeout: Request timeout in seconds.
            max_retries: Maximum delivery attempts per event.
            initial_delay: First backoff delay in seconds.
            max_delay: Maximum backoff delay in seconds.
            respect_retry_after: Wait the delay requested by the collector
                (Retry-After, or the default for the status) instead of backing off.
            client: Optional pre-configured httpx client.
        """
        self.url = url
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.respect_retry_after = respect_retry_after
        self._client = client or httpx.Client(timeout=timeout, headers=headers or {})

    def publish(self, record: EventRecord) -> None:
        """Deliver one event.

        Raises:
            SinkError: If the event could not be delivered.
        """
        retryer = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=self._wait_strategy(),
            retry=retry_if_exception(self._should_retry),
            reraise=True,
        )

        for attempt in retryer:
            with attempt:
                number = attempt.retry_state.attempt_number
                logger.debug(f"Posting event to {self.url}, attempt {number}")
                self._post(record)

    def close(self) -> None:
        self._client.close()

    def _wait_strategy(self) -> wait_base:
        backoff = wait_exponential_jitter(
            initial=self.initial_delay,
            max=self.max_delay,
            jitter=self.max_delay / 2 if self.max_delay else 0,
        )
        if self.respect_retry_after:
            return wait_retry_after(backoff)
        return backoff

    def _post(self, record: EventRecord) -> None:
        try:
            response = self._client.post(self.url, json=record.to_event())
        except httpx.TimeoutException as e:
            raise SinkError(f"Request to {self.url} timed out", retryable=True) from e
        except httpx.TransportError as e:
            raise SinkError(f"Connection to {self.url} failed: {e}", retryable=True) from e

        if response.is_success:
            return

        retryable, retry_after = classify_http_status(response.status_code)
        requested = _parse_retry_after(response.headers.get("Retry-After"))
        if retryable and requested is not None:
            retry_after = requested
        raise SinkError(
            f"HTTP {response.status_code}: {response.reason_phrase}",
            retryable=retryable,
            retry_after=retry_after,
            context={"status_code": response.status_code},
        )

    @staticmethod
    def _should_retry(exc: BaseException) -> bool:
        return isinstance(exc, SinkError) and exc.retryable


def _parse_retry_after(value: str | None) -> int | None:
    """Parse a Retry-After header given in seconds (HTTP dates are ignored)."""
    if value is None or not value.strip().isdigit():
        return None
    return int(value.strip())
