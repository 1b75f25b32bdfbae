"""
MediMind Schedule Models

Data structures for medication schedules.

Philosophy:
- Immutable snapshots only
- Garbage in is rejected, never guessed at
- Missing optional fields have defined defaults
- Pure data representation
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Tuple, Union


TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DayLike = Union[date, str]
ClockLike = Union[time, str]


class ScheduleValidationError(ValueError):
    """Raised when a schedule field or reference value is malformed"""
    pass


def parse_day(value: DayLike) -> date:
    """
    Coerce a calendar day into a date.

    Args:
        value: date object or YYYY-MM-DD string

    Returns:
        date with no time component

    Raises:
        ScheduleValidationError: If value is not a valid calendar day
    """
    # datetime is a date subclass but carries a time component
    if isinstance(value, datetime):
        raise ScheduleValidationError(f"Expected a calendar day, got datetime: {value!r}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ScheduleValidationError(f"Date must be YYYY-MM-DD: {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ScheduleValidationError(f"Invalid calendar date: {value!r}") from e


def parse_clock(value: ClockLike) -> str:
    """
    Normalize a wall-clock time to HH:MM.

    Seconds and microseconds on a time object are dropped (minute resolution).
    Strings are never coerced: they must already be HH:MM.
    """
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ScheduleValidationError(f"Time must be HH:MM (24-hour): {value!r}")
    return value


def clock_to_time(value: str) -> time:
    """Convert a validated HH:MM string into a time object"""
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def _optional_day(value: Optional[DayLike]) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_day(value)


@dataclass(frozen=True)
class ScheduleRecord:
    """
    A single medication schedule as read from persistence.

    The evaluator only ever classifies these; updates (edits, marking
    notified) produce a new record via the store.

    Attributes:
        id: Opaque identifier, stable for the record's lifetime
        name: Display label
        scheduled_time: Local wall-clock time HH:MM, or None if unset
        start_date: First active day, None for "always started"
        duration_days: Active days counting start_date as day 1; 0/None = unbounded
        last_notified_date: Day of the last due notification, None if never
        original_input: Free text the schedule was entered from
        frequency_description: Human description, e.g. "twice a day"
    """
    id: str
    name: str
    scheduled_time: Optional[str] = None
    start_date: Optional[date] = None
    duration_days: Optional[int] = None
    last_notified_date: Optional[date] = None
    original_input: Optional[str] = None
    frequency_description: Optional[str] = None

    def __post_init__(self):
        """Validate schedule data"""
        if not self.id or not isinstance(self.id, str):
            raise ScheduleValidationError("Schedule ID cannot be empty")
        if not self.name or not isinstance(self.name, str) or not self.name.strip():
            raise ScheduleValidationError("Schedule name cannot be empty")
        # Frozen: normalize time and dates in place
        if self.scheduled_time:
            object.__setattr__(self, 'scheduled_time', parse_clock(self.scheduled_time))
        object.__setattr__(self, 'start_date', _optional_day(self.start_date))
        object.__setattr__(self, 'last_notified_date', _optional_day(self.last_notified_date))
        if self.duration_days is not None:
            # bool is an int subclass
            if isinstance(self.duration_days, bool) or not isinstance(self.duration_days, int):
                raise ScheduleValidationError(
                    f"duration_days must be an integer: {self.duration_days!r}"
                )
            if self.duration_days < 0:
                raise ScheduleValidationError(
                    f"duration_days cannot be negative: {self.duration_days}"
                )

    @property
    def has_bounded_duration(self) -> bool:
        return bool(self.duration_days) and self.duration_days > 0

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict"""
        return {
            'id': self.id,
            'name': self.name,
            'scheduled_time': self.scheduled_time,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'duration_days': self.duration_days,
            'last_notified_date': (
                self.last_notified_date.isoformat() if self.last_notified_date else None
            ),
            'original_input': self.original_input,
            'frequency_description': self.frequency_description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ScheduleRecord':
        """
        Create ScheduleRecord from dict.

        Accepts both this model's keys and the database column names
        (`time`, `last_notified`). A SQL time value such as "08:00:00" is
        truncated to minute resolution.

        Raises:
            ScheduleValidationError: If any field is malformed
        """
        scheduled_time = data.get('scheduled_time', data.get('time'))
        if isinstance(scheduled_time, str) and len(scheduled_time) == 8 and scheduled_time[5] == ':':
            scheduled_time = scheduled_time[:5]

        last_notified = data.get('last_notified_date', data.get('last_notified'))

        raw_id = data.get('id')
        return cls(
            id=str(raw_id) if raw_id is not None else '',
            name=data.get('name') or '',
            scheduled_time=scheduled_time or None,
            start_date=_optional_day(data.get('start_date')),
            duration_days=data.get('duration_days'),
            last_notified_date=_optional_day(last_notified),
            original_input=data.get('original_input'),
            frequency_description=data.get('frequency_description'),
        )


def schedule_sort_key(record: ScheduleRecord) -> Tuple[date, str]:
    """
    Sort key for listing: start date first, then time of day.

    Schedules without a start date sort as the oldest.
    """
    return (record.start_date or date.min, record.scheduled_time or "")

