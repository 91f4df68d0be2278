"""Schedule expression parsing for APScheduler integration."""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Any

from apscheduler.triggers.cron import CronTrigger as APCronTrigger
from apscheduler.triggers.interval import IntervalTrigger as APIntervalTrigger

EVERY_PREFIX = "@every "

# Predefined schedules, as understood by classic cron implementations
DESCRIPTORS: dict[str, dict[str, Any]] = {
    "@yearly": {"month": 1, "day": 1, "hour": 0, "minute": 0, "second": 0},
    "@annually": {"month": 1, "day": 1, "hour": 0, "minute": 0, "second": 0},
    "@monthly": {"day": 1, "hour": 0, "minute": 0, "second": 0},
    "@weekly": {"day_of_week": "sun", "hour": 0, "minute": 0, "second": 0},
    "@daily": {"hour": 0, "minute": 0, "second": 0},
    "@midnight": {"hour": 0, "minute": 0, "second": 0},
    "@hourly": {"minute": 0, "second": 0},
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

ScheduleTrigger = APCronTrigger | APIntervalTrigger


def parse_duration(value: str) -> timedelta:
    """Parse a Go-style duration string such as '10s', '1m30s' or '1.5h'.

    Args:
        value: Duration string.

    Returns:
        The duration as a timedelta.

    Raises:
        ValueError: If the string is not a valid duration.
    """
    text = value.strip()
    if not text:
        raise ValueError("Invalid duration: empty string")

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position != len(text):
        msg = f"Invalid duration: {value!r}. Use format like '30s', '5m', '1h30m'"
        raise ValueError(msg)

    return timedelta(seconds=total)


def parse_every(expression: str, timezone: str | None = None) -> APIntervalTrigger:
    """Parse an '@every <duration>' expression into an interval trigger.

    Sub-second precision is dropped and the interval is never shorter than
    one second.
    """
    duration = parse_duration(expression[len(EVERY_PREFIX) :])
    seconds = max(int(duration.total_seconds()), 1)
    return APIntervalTrigger(seconds=seconds, timezone=timezone)


def parse_cron(expression: str, timezone: str | None = None) -> APCronTrigger:
    """Parse a 5 or 6 field cron expression.

    Args:
        expression: Cron expression. Six fields put seconds first.
        timezone: Timezone name, None for local time.

    Returns:
        APScheduler CronTrigger instance.

    Raises:
        ValueError: If cron expression is invalid.
    """
    parts = expression.split()

    if len(parts) == 5:
        # Standard cron: minute hour day month day_of_week
        minute, hour, day, month, day_of_week = parts
        return APCronTrigger(
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone=timezone,
        )
    elif len(parts) == 6:
        # Extended cron: second minute hour day month day_of_week
        second, minute, hour, day, month, day_of_week = parts
        return APCronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone=timezone,
        )
    else:
        msg = f"Invalid cron expression: {expression}. Expected 5 or 6 fields."
        raise ValueError(msg)


def parse_schedule(expression: str, timezone: str = "local") -> ScheduleTrigger:
    """Parse any supported schedule expression to an APScheduler trigger.

    Supports 5/6 field cron, '@every <duration>' and the predefined
    descriptors ('@hourly', '@daily', ...).

    Args:
        expression: Schedule expression.
        timezone: Timezone name, or "local" for the host timezone.

    Returns:
        APScheduler trigger instance.

    Raises:
        ValueError: If the expression cannot be parsed.
    """
    expr = expression.strip()
    tz = timezone if timezone != "local" else None

    if not expr:
        raise ValueError("Schedule expression is empty")

    if expr.startswith(EVERY_PREFIX):
        return parse_every(expr, tz)

    if expr.startswith("@"):
        descriptor = DESCRIPTORS.get(expr.lower())
        if descriptor is None:
            msg = f"Unrecognized schedule descriptor: {expr}"
            raise ValueError(msg)
        return APCronTrigger(timezone=tz, **descriptor)

    return parse_cron(expr, tz)


def next_fire_times(
    trigger: ScheduleTrigger,
    count: int,
    now: datetime | None = None,
) -> list[datetime]:
    """Compute the next fire times of a trigger.

    Args:
        trigger: APScheduler trigger.
        count: Number of fire times to compute.
        now: Reference time, defaults to the current time in the trigger timezone.

    Returns:
        Up to ``count`` upcoming fire times, in order.
    """
    current = now or datetime.now(trigger.timezone)
    previous: datetime | None = None
    fire_times: list[datetime] = []

    while len(fire_times) < count:
        fire_time = trigger.get_next_fire_time(previous, current)
        if fire_time is None:
            break
        fire_times.append(fire_time)
        previous = fire_time
        current = fire_time + timedelta(microseconds=1)

    return fire_times
