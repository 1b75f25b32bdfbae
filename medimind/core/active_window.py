"""
MediMind Active Window

Decides whether a medication schedule is in effect on a given calendar day.

Rules:
- Window is [start_date, start_date + duration_days - 1], both ends inclusive
- duration_days of 0 or None means no upper bound
- No start_date means no lower bound, and duration is ignored
- Days are pure calendar dates; no timezone shifting
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from .schedule_models import DayLike, ScheduleRecord, parse_day


class WindowStatus(Enum):
    """Where a day falls relative to a schedule's active window"""
    UPCOMING = "upcoming"      # Before start_date
    ACTIVE = "active"
    COMPLETED = "completed"    # After the last active day


@dataclass(frozen=True)
class ActiveWindow:
    """Inclusive date range; None means the bound is open"""
    start: Optional[date]
    end: Optional[date]

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


def active_window(schedule: ScheduleRecord) -> ActiveWindow:
    """
    Compute the active date range of a schedule.

    A positive duration without a start date cannot be anchored, so the
    window stays unbounded in that case.
    """
    if schedule.start_date is None:
        return ActiveWindow(start=None, end=None)

    end = None
    if schedule.has_bounded_duration:
        # Duration counts the start day as day 1
        end = schedule.start_date + timedelta(days=schedule.duration_days - 1)
    return ActiveWindow(start=schedule.start_date, end=end)


def is_active_on(schedule: ScheduleRecord, day: DayLike) -> bool:
    """
    Check if a schedule is in effect on a calendar day.

    Args:
        schedule: Schedule to check
        day: date or YYYY-MM-DD string

    Returns:
        True if day falls inside the schedule's active window

    Raises:
        ScheduleValidationError: If day is malformed
    """
    return active_window(schedule).contains(parse_day(day))


def window_status(schedule: ScheduleRecord, day: DayLike) -> WindowStatus:
    """Classify a day as before, inside or after the active window"""
    day = parse_day(day)
    window = active_window(schedule)

    if window.start is not None and day < window.start:
        return WindowStatus.UPCOMING
    if window.end is not None and day > window.end:
        return WindowStatus.COMPLETED
    return WindowStatus.ACTIVE
