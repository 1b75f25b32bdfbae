"""
MediMind Schedule Store - Persistent JSON Storage

Handles reading and writing schedules to ~/.medimind/schedules.json

Design:
- Simple JSON file storage
- Graceful corruption recovery
- Every list call returns a fresh snapshot
- One lock per store: the ticker thread and the command loop share it
- Transparent and auditable by user
"""

import dataclasses
import json
import logging
import tempfile
import threading
from datetime import date
from pathlib import Path
from typing import List, Optional

from medimind.core.schedule_models import ScheduleRecord, parse_day

logger = logging.getLogger(__name__)


class ScheduleStoreError(Exception):
    """Base exception for schedule storage errors"""
    pass


def _normalize_duration(record: ScheduleRecord) -> ScheduleRecord:
    # 0 and None both mean indefinite; persist as null
    if record.duration_days == 0:
        return dataclasses.replace(record, duration_days=None)
    return record


class ScheduleStore:
    """
    File-based schedule storage using JSON.

    Storage location: ~/.medimind/schedules.json

    Philosophy:
    - User can inspect/edit file directly
    - Corruption is handled gracefully
    - No hidden state or caching

    Every public method holds the store lock for its whole
    load-modify-save cycle, so concurrent callers never lose updates.
    """

    DEFAULT_STORAGE_DIR = Path.home() / ".medimind"
    DEFAULT_STORAGE_FILE = "schedules.json"

    def __init__(self, storage_path: Optional[Path] = None):
        """
        Initialize schedule store.

        Args:
            storage_path: Custom storage file path (default: ~/.medimind/schedules.json)
        """
        if storage_path:
            self.storage_path = Path(storage_path)
        else:
            self.storage_path = self.DEFAULT_STORAGE_DIR / self.DEFAULT_STORAGE_FILE

        # Reentrant: mark_notified reads and updates under one hold
        self._lock = threading.RLock()

        self.storage_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.storage_path.exists():
            self._initialize_storage()

        logger.info(f"ScheduleStore initialized: {self.storage_path}")

    def _initialize_storage(self):
        """Create empty storage file"""
        self._write_atomically({"schedules": []})
        logger.info("Initialized empty schedule storage")

    def _write_atomically(self, data: dict):
        """
        Write JSON to a unique temp file beside the store, then rename.

        Raises:
            ScheduleStoreError: If storage cannot be written
        """
        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                'w',
                dir=self.storage_path.parent,
                prefix=f"{self.storage_path.name}.",
                suffix='.tmp',
                delete=False,
            ) as f:
                temp_path = Path(f.name)
                json.dump(data, f, indent=2)
            temp_path.replace(self.storage_path)
        except OSError as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            logger.error(f"Failed to write storage: {e}", exc_info=True)
            raise ScheduleStoreError(f"Cannot write storage: {e}") from e

    def _load_schedules(self) -> List[ScheduleRecord]:
        """
        Load all schedules from storage.

        Returns:
            List of ScheduleRecord objects

        Raises:
            ScheduleStoreError: If storage cannot be read
        """
        try:
            with open(self.storage_path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupted JSON in schedule storage: {e}")
            self._backup_and_reset()
            return []
        except FileNotFoundError:
            logger.warning("Storage file not found, initializing")
            self._initialize_storage()
            return []
        except OSError as e:
            logger.error(f"Failed to load schedules: {e}", exc_info=True)
            raise ScheduleStoreError(f"Cannot load schedules: {e}") from e

        schedules = []
        for schedule_dict in data.get('schedules', []):
            try:
                schedules.append(ScheduleRecord.from_dict(schedule_dict))
            except (ValueError, TypeError, AttributeError) as e:
                # Invalid records never reach the evaluator
                logger.warning(f"Skipping invalid schedule: {e}")
        return schedules

    def _save_schedules(self, schedules: List[ScheduleRecord]):
        """
        Save all schedules to storage.

        Raises:
            ScheduleStoreError: If storage cannot be written
        """
        self._write_atomically({
            "schedules": [s.to_dict() for s in schedules]
        })
        logger.debug(f"Saved {len(schedules)} schedules")

    def _backup_and_reset(self):
        """
        Backup corrupted file and create fresh storage.

        Raises:
            ScheduleStoreError: If the corrupted file cannot be moved aside
        """
        backup_path = self.storage_path.with_suffix('.json.bak')

        try:
            if self.storage_path.exists():
                self.storage_path.replace(backup_path)
                logger.warning(f"Backed up corrupted storage to: {backup_path}")
        except OSError as e:
            logger.error(f"Failed to back up corrupted storage: {e}", exc_info=True)
            raise ScheduleStoreError(f"Cannot back up corrupted storage: {e}") from e

        self._initialize_storage()
        logger.info("Created fresh schedule storage")

    def list_schedules(self) -> List[ScheduleRecord]:
        """Fresh snapshot of every valid schedule, in storage order"""
        with self._lock:
            return self._load_schedules()

    def get_schedule(self, schedule_id: str) -> Optional[ScheduleRecord]:
        """
        Get a specific schedule by ID.

        Returns:
            ScheduleRecord if found, None otherwise
        """
        with self._lock:
            for schedule in self._load_schedules():
                if schedule.id == schedule_id:
                    return schedule
        return None

    def add_schedule(self, schedule: ScheduleRecord) -> bool:
        """
        Add a new schedule to storage.

        Returns:
            True if added, False if the ID already exists

        Raises:
            ScheduleStoreError: If operation fails
        """
        with self._lock:
            schedules = self._load_schedules()

            if any(s.id == schedule.id for s in schedules):
                logger.warning(f"Schedule with ID {schedule.id} already exists")
                return False

            schedules.append(_normalize_duration(schedule))
            self._save_schedules(schedules)

        logger.info(f"Added schedule: {schedule.id} - {schedule.name}")
        return True

    def update_schedule(self, schedule: ScheduleRecord) -> bool:
        """
        Replace an existing schedule.

        Returns:
            True if successful, False if not found
        """
        with self._lock:
            schedules = self._load_schedules()

            for i, s in enumerate(schedules):
                if s.id == schedule.id:
                    schedules[i] = _normalize_duration(schedule)
                    self._save_schedules(schedules)
                    logger.info(f"Updated schedule: {schedule.id}")
                    return True

        logger.warning(f"Schedule {schedule.id} not found for update")
        return False

    def mark_notified(self, schedule_id: str, day: date) -> bool:
        """
        Record that a schedule's due notification went out on `day`.

        Args:
            schedule_id: ID of schedule to mark
            day: The evaluation day the notification was fired for

        Returns:
            True if successful
        """
        day = parse_day(day)
        with self._lock:
            schedule = self.get_schedule(schedule_id)
            if not schedule:
                logger.warning(f"Cannot mark notified: schedule {schedule_id} not found")
                return False

            return self.update_schedule(dataclasses.replace(schedule, last_notified_date=day))

    def delete_schedule(self, schedule_id: str) -> bool:
        """
        Delete a schedule permanently.

        Returns:
            True if deleted, False if not found
        """
        with self._lock:
            schedules = self._load_schedules()

            original_count = len(schedules)
            schedules = [s for s in schedules if s.id != schedule_id]

            if len(schedules) == original_count:
                logger.warning(f"Schedule {schedule_id} not found for deletion")
                return False

            self._save_schedules(schedules)

        logger.info(f"Deleted schedule: {schedule_id}")
        return True
