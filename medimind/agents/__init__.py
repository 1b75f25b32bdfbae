"""
MediMind Agents - Reminder Services

Services that drive the evaluator from a store and a clock.
"""

from .reminder_agent import ReminderAgent, describe_duration, format_display_time
from .reminder_ticker import ReminderTicker, next_boundary

__all__ = [
    'ReminderAgent',
    'ReminderTicker',
    'describe_duration',
    'format_display_time',
    'next_boundary',
]
