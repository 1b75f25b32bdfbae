"""
MediMind Overdue Classifier

Answers "has today's dose time already passed without acknowledgment?"
for the persistent UI indicator.

Per schedule, per day:
    PENDING -> DUE -> OVERDUE -> ACKNOWLEDGED

ACKNOWLEDGED is reached only when the store records today's date as
last_notified_date.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, Optional

from .active_window import is_active_on
from .schedule_models import ScheduleRecord, clock_to_time, parse_clock


class DoseState(Enum):
    """Dose lifecycle for a single schedule on a single day"""
    INACTIVE = "inactive"            # No time set, or outside the active window
    PENDING = "pending"              # Scheduled time not reached yet
    DUE = "due"                      # Within the scheduled minute
    OVERDUE = "overdue"              # Passed without acknowledgment
    ACKNOWLEDGED = "acknowledged"    # Notified today


def _naive(now: datetime) -> datetime:
    # Single implicit local time zone; drop tzinfo so comparisons never mix
    return now.replace(tzinfo=None) if now.tzinfo else now


def scheduled_instant(schedule: ScheduleRecord, now: datetime) -> datetime:
    """Today's (per `now`) dose time as a naive local datetime"""
    return datetime.combine(now.date(), clock_to_time(parse_clock(schedule.scheduled_time)))


def is_overdue(schedule: ScheduleRecord, now: datetime) -> bool:
    """
    Check if a schedule's dose for today has passed unacknowledged.

    Strictly "now is later than": at the exact scheduled instant this is
    still False.

    Args:
        schedule: Schedule to check
        now: Current naive local datetime

    Returns:
        True if active today, past scheduled time, and not notified today
    """
    if not schedule.scheduled_time:
        return False

    now = _naive(now)
    today = now.date()
    if not is_active_on(schedule, today):
        return False

    return now > scheduled_instant(schedule, now) and schedule.last_notified_date != today


def dose_state(schedule: ScheduleRecord, now: datetime) -> DoseState:
    """
    Place a schedule in the per-day state machine.

    DUE spans the whole scheduled minute, matching the minute-tick selector.
    is_overdue() is already True inside that minute once now passes the
    exact instant; dose_state reports OVERDUE from the next minute on.
    """
    if not schedule.scheduled_time:
        return DoseState.INACTIVE

    now = _naive(now)
    today = now.date()
    if not is_active_on(schedule, today):
        return DoseState.INACTIVE
    if schedule.last_notified_date == today:
        return DoseState.ACKNOWLEDGED

    target = scheduled_instant(schedule, now)
    current_minute = now.replace(second=0, microsecond=0)
    if current_minute < target:
        return DoseState.PENDING
    if current_minute == target:
        return DoseState.DUE
    return DoseState.OVERDUE


def overdue_flags(
    schedules: Optional[Iterable[ScheduleRecord]],
    now: datetime
) -> Dict[str, bool]:
    """Overdue flag per schedule id, recomputed on every render tick"""
    if not schedules:
        return {}
    return {s.id: is_overdue(s, now) for s in schedules}
