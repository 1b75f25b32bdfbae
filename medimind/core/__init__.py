"""
MediMind Core - Reminder Evaluator

Pure temporal logic: active windows, due selection, overdue classification.
No I/O, no clocks, no mutation.
"""

from .schedule_models import (
    ScheduleRecord,
    ScheduleValidationError,
    parse_day,
    parse_clock,
    schedule_sort_key,
)
from .active_window import (
    ActiveWindow,
    WindowStatus,
    active_window,
    is_active_on,
    window_status,
)
from .due_selector import is_due, select_due, select_due_at
from .overdue_classifier import (
    DoseState,
    dose_state,
    is_overdue,
    overdue_flags,
)

__all__ = [
    # Models
    'ScheduleRecord',
    'ScheduleValidationError',
    'parse_day',
    'parse_clock',
    'schedule_sort_key',
    # Active window
    'ActiveWindow',
    'WindowStatus',
    'active_window',
    'is_active_on',
    'window_status',
    # Due selection
    'is_due',
    'select_due',
    'select_due_at',
    # Overdue classification
    'DoseState',
    'dose_state',
    'is_overdue',
    'overdue_flags',
]
