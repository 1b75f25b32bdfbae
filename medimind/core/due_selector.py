"""
MediMind Due Selector

Point-in-time query run once per minute tick: which schedules fire now?

A schedule is due iff:
- it is active on the reference date
- its scheduled time equals the reference time (exact minute, no tolerance)
- it has not been notified on the reference date
"""

from datetime import datetime
from typing import Iterable, List, Optional

from .active_window import is_active_on
from .schedule_models import (
    ClockLike,
    DayLike,
    ScheduleRecord,
    parse_clock,
    parse_day,
)


def is_due(schedule: ScheduleRecord, reference_date: DayLike, reference_time: ClockLike) -> bool:
    """Check a single schedule against a reference (date, HH:MM)"""
    day = parse_day(reference_date)
    clock = parse_clock(reference_time)

    if not schedule.scheduled_time:
        return False
    if schedule.scheduled_time != clock:
        return False
    if schedule.last_notified_date == day:
        return False
    return is_active_on(schedule, day)


def select_due(
    schedules: Optional[Iterable[ScheduleRecord]],
    reference_date: DayLike,
    reference_time: ClockLike
) -> List[ScheduleRecord]:
    """
    Select the schedules that should trigger a notification now.

    Args:
        schedules: Snapshot of schedules (None or empty yields [])
        reference_date: date or YYYY-MM-DD
        reference_time: time or HH:MM

    Returns:
        Due schedules, in input order

    Raises:
        ScheduleValidationError: If a reference value is malformed
    """
    day = parse_day(reference_date)
    clock = parse_clock(reference_time)

    if not schedules:
        return []

    return [s for s in schedules if is_due(s, day, clock)]


def select_due_at(
    schedules: Optional[Iterable[ScheduleRecord]],
    now: datetime
) -> List[ScheduleRecord]:
    """select_due for the minute containing `now`"""
    return select_due(schedules, now.date(), now.time())
