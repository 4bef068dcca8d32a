"""
Schedule matching for the cron trigger.

Schedules are wall-clock times in REFERENCE_TIMEZONE, whatever the server
clock is set to. The trigger is expected to fire every window_minutes; a
slot is due when its most recent occurrence falls inside the last window,
so each slot fires exactly once per day (or week).
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from newsbrief.config import REFERENCE_TIMEZONE, SCHEDULE_WINDOW_MINUTES, WEEKLY_WEEKDAY
from newsbrief.storage.models import ScheduleFrequency


def reference_tz() -> ZoneInfo:
    return ZoneInfo(REFERENCE_TIMEZONE)


def reference_now() -> datetime:
    return datetime.now(reference_tz())


def _parse_hhmm(value: str) -> time:
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def last_occurrence(schedule_time: str, now: datetime) -> datetime:
    """Most recent instant at or before now with the given wall-clock time."""
    local_now = now.astimezone(reference_tz())
    slot = _parse_hhmm(schedule_time)
    candidate = local_now.replace(hour=slot.hour, minute=slot.minute, second=0, microsecond=0)
    if candidate > local_now:
        candidate -= timedelta(days=1)
    return candidate


def is_due(
    schedule_time: str,
    frequency: str,
    now: datetime | None = None,
    window_minutes: int = SCHEDULE_WINDOW_MINUTES,
) -> bool:
    """
    Whether a schedule should fire for a trigger arriving at now.

    Args:
        schedule_time: HH:MM in the reference timezone
        frequency: daily, weekly or none
        now: trigger instant (timezone-aware); defaults to the current time
        window_minutes: trigger interval

    Weekly schedules fire only when the occurrence falls on WEEKLY_WEEKDAY.
    """
    frequency = ScheduleFrequency(frequency)
    if frequency is ScheduleFrequency.NONE:
        return False

    now = now or reference_now()
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    occurrence = last_occurrence(schedule_time, now)
    if now.astimezone(reference_tz()) - occurrence >= timedelta(minutes=window_minutes):
        return False

    if frequency is ScheduleFrequency.WEEKLY:
        return occurrence.weekday() == WEEKLY_WEEKDAY
    return True
