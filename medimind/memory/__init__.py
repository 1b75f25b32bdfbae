"""
MediMind Memory - Schedule Storage

Data-access collaborators passed explicitly to the reminder agent.
"""

from .schedule_store import ScheduleStore, ScheduleStoreError
from .rest_store import (
    RestScheduleStore,
    RestStoreError,
    RestStoreConnectionError,
    RestStoreTimeoutError,
    RestStoreResponseError,
)

__all__ = [
    'ScheduleStore',
    'ScheduleStoreError',
    'RestScheduleStore',
    'RestStoreError',
    'RestStoreConnectionError',
    'RestStoreTimeoutError',
    'RestStoreResponseError',
]
