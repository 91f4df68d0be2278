"""execbeat scheduling.

APScheduler-based tick dispatch for cron expressions, '@every' intervals
and the predefined '@hourly'/'@daily'/... descriptors.
"""

from .service import DEFAULT_MAX_OVERLAPPING_RUNS, ExecScheduler
from .triggers import next_fire_times, parse_cron, parse_duration, parse_every, parse_schedule

__all__ = [
    "DEFAULT_MAX_OVERLAPPING_RUNS",
    "ExecScheduler",
    "next_fire_times",
    "parse_cron",
    "parse_duration",
    "parse_every",
    "parse_schedule",
]
