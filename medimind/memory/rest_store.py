"""
MediMind REST Schedule Store - PostgREST / Supabase Client

Responsibilities:
- Read schedule snapshots from the `medications` table over HTTP
- Record notifications (last_notified) for a single schedule
- Add and delete schedules
- Explicit error handling for all failure modes

Same public surface as ScheduleStore, so the agent can take either.
The client is constructed explicitly and passed in; there is no module
level connection.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from medimind.core.schedule_models import ScheduleRecord, parse_day

logger = logging.getLogger(__name__)


class RestStoreError(Exception):
    """Base exception for all REST store errors"""
    pass


class RestStoreConnectionError(RestStoreError):
    """Raised when the REST endpoint cannot be reached"""
    pass


class RestStoreTimeoutError(RestStoreError):
    """Raised when a request exceeds its timeout"""
    pass


class RestStoreResponseError(RestStoreError):
    """Raised on non-2xx status or a malformed body"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def record_to_row(record: ScheduleRecord) -> Dict[str, Any]:
    """Map a ScheduleRecord to the medications table columns"""
    return {
        'id': record.id,
        'name': record.name,
        'time': record.scheduled_time,
        'start_date': record.start_date.isoformat() if record.start_date else None,
        # 0 is stored as null (indefinite)
        'duration_days': record.duration_days or None,
        'last_notified': (
            record.last_notified_date.isoformat() if record.last_notified_date else None
        ),
        'original_input': record.original_input,
        'frequency_description': record.frequency_description,
    }


class RestScheduleStore:
    """
    HTTP-backed schedule storage.

    Example:
        >>> store = RestScheduleStore(
        ...     base_url="https://project.supabase.co",
        ...     api_key="anon-key",
        ... )
        >>> schedules = store.list_schedules()
    """

    TABLE = "medications"
    DEFAULT_TIMEOUT = 10  # seconds

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize REST store.

        Args:
            base_url: Project URL (the /rest/v1 prefix is added here)
            api_key: API key sent as `apikey` and bearer token
            timeout: Per-request timeout in seconds
            session: Optional preconfigured requests session

        Note:
            Does not validate the connection on initialization (lazy failure).
        """
        if not base_url:
            raise ValueError("base_url cannot be empty")
        if not api_key:
            raise ValueError("api_key cannot be empty")

        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'apikey': api_key,
            'Authorization': f'Bearer {api_key}',
            'Accept': 'application/json',
            'Content-Type': 'application/json',
        })

        logger.info(f"RestScheduleStore initialized (base_url={self.base_url}, timeout={timeout}s)")

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.TABLE}"

    def _request(
        self,
        method: str,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Make an HTTP request against the table endpoint.

        Returns:
            Parsed JSON body, or None for an empty body

        Raises:
            RestStoreConnectionError: Connection failed
            RestStoreTimeoutError: Request timed out
            RestStoreResponseError: Non-2xx status or invalid JSON
        """
        try:
            response = self.session.request(
                method,
                self.table_url,
                params=params,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.error(f"{method} {self.table_url} timed out after {self.timeout}s")
            raise RestStoreTimeoutError(f"Request timed out after {self.timeout}s") from e
        except requests.ConnectionError as e:
            logger.error(f"Cannot connect to {self.base_url}: {e}")
            raise RestStoreConnectionError(f"Cannot connect to {self.base_url}: {e}") from e

        if not response.ok:
            logger.error(f"{method} {self.table_url} failed: HTTP {response.status_code} {response.text[:200]}")
            raise RestStoreResponseError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RestStoreResponseError(f"Invalid JSON response: {e}") from e

    def _rows_to_records(self, rows: Any) -> List[ScheduleRecord]:
        if not isinstance(rows, list):
            raise RestStoreResponseError(f"Expected a list of rows, got {type(rows).__name__}")

        records = []
        for row in rows:
            try:
                records.append(ScheduleRecord.from_dict(row))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping invalid schedule row: {e}")
        return records

    def list_schedules(self) -> List[ScheduleRecord]:
        """Fresh snapshot of every valid schedule, ordered by time"""
        rows = self._request('GET', params={'select': '*', 'order': 'time.asc'})
        records = self._rows_to_records(rows or [])
        logger.debug(f"Fetched {len(records)} schedules")
        return records

    def get_schedule(self, schedule_id: str) -> Optional[ScheduleRecord]:
        rows = self._request('GET', params={'select': '*', 'id': f'eq.{schedule_id}'})
        records = self._rows_to_records(rows or [])
        return records[0] if records else None

    def add_schedule(self, schedule: ScheduleRecord) -> bool:
        """Insert a schedule; returns True if the row was created"""
        rows = self._request(
            'POST',
            payload=record_to_row(schedule),
            headers={'Prefer': 'return=representation'},
        )
        created = bool(rows)
        if created:
            logger.info(f"Added schedule: {schedule.id} - {schedule.name}")
        return created

    def update_schedule(self, schedule: ScheduleRecord) -> bool:
        row = record_to_row(schedule)
        row.pop('id')
        rows = self._request(
            'PATCH',
            params={'id': f'eq.{schedule.id}'},
            payload=row,
            headers={'Prefer': 'return=representation'},
        )
        if not rows:
            logger.warning(f"Schedule {schedule.id} not found for update")
            return False
        logger.info(f"Updated schedule: {schedule.id}")
        return True

    def mark_notified(self, schedule_id: str, day: date) -> bool:
        """
        Set last_notified for one schedule to the evaluation day.

        Returns:
            True if a row was updated, False if the ID does not exist
        """
        day = parse_day(day)
        rows = self._request(
            'PATCH',
            params={'id': f'eq.{schedule_id}'},
            payload={'last_notified': day.isoformat()},
            headers={'Prefer': 'return=representation'},
        )
        if not rows:
            logger.warning(f"Cannot mark notified: schedule {schedule_id} not found")
            return False
        return True

    def delete_schedule(self, schedule_id: str) -> bool:
        rows = self._request(
            'DELETE',
            params={'id': f'eq.{schedule_id}'},
            headers={'Prefer': 'return=representation'},
        )
        if not rows:
            logger.warning(f"Schedule {schedule_id} not found for deletion")
            return False
        logger.info(f"Deleted schedule: {schedule_id}")
        return True
