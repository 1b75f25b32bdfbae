"""
MediMind Reminder Agent - Medication Reminder Service

Responsibilities:
- Create and edit schedules (after validation)
- Run the per-minute due check and acknowledge fired reminders
- Compute overdue flags for display
- Format schedules for the user

Decisions are delegated to medimind.core; this module only moves
snapshots in and acknowledgments out.
"""

import logging
import uuid
from collections import Counter
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from medimind.core import (
    DoseState,
    ScheduleRecord,
    WindowStatus,
    dose_state,
    overdue_flags,
    parse_clock,
    parse_day,
    schedule_sort_key,
    select_due,
    window_status,
)
from medimind.memory import RestStoreError, ScheduleStoreError

logger = logging.getLogger(__name__)

Notifier = Callable[[ScheduleRecord], None]


def format_display_time(value: Optional[str]) -> str:
    """HH:MM (24-hour) to 12-hour display, e.g. "8:05 PM" """
    if not value:
        return "N/A"
    hours, minutes = (int(part) for part in value.split(":"))
    suffix = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {suffix}"


def describe_duration(duration_days: Optional[int]) -> str:
    if not duration_days:
        return "Ongoing"
    return f"For {duration_days} day{'s' if duration_days > 1 else ''}"


class ReminderAgent:
    """
    Service wiring a schedule store, the evaluator and a notifier.

    Design principles:
    - Store is injected (JSON file or REST, same interface)
    - Every check takes a fresh snapshot
    - `now` is injectable everywhere for testability
    - Acknowledgment uses exactly the evaluation day
    """

    def __init__(self, store, notify: Optional[Notifier] = None):
        """
        Initialize reminder agent.

        Args:
            store: ScheduleStore or RestScheduleStore
            notify: Called once per due schedule (default: log only)
        """
        self.store = store
        self.notify = notify or self._log_notification
        logger.info("ReminderAgent initialized")

    @staticmethod
    def _log_notification(schedule: ScheduleRecord):
        logger.info(f"Time to take your {schedule.name}!")

    def create_schedule(
        self,
        name: str,
        scheduled_time: str,
        start_date: Optional[date] = None,
        duration_days: Optional[int] = 0,
        original_input: Optional[str] = None,
        frequency_description: Optional[str] = None,
        today: Optional[date] = None
    ) -> ScheduleRecord:
        """
        Create and store a new schedule.

        Args:
            name: Medication name
            scheduled_time: HH:MM, 24-hour
            start_date: First active day (default: today)
            duration_days: Active days, 0 for ongoing
            original_input: Free text the schedule came from
            frequency_description: e.g. "twice a day"
            today: Injected current day

        Returns:
            Created ScheduleRecord

        Raises:
            ScheduleValidationError: If any field is malformed
            RuntimeError: If the store refuses the record
        """
        if not name or not name.strip():
            raise ValueError("Medication name cannot be empty")

        today = today or date.today()
        schedule = ScheduleRecord(
            id=str(uuid.uuid4()),
            name=name.strip(),
            scheduled_time=parse_clock(scheduled_time),
            start_date=parse_day(start_date) if start_date else today,
            duration_days=duration_days,
            original_input=original_input,
            frequency_description=frequency_description,
        )

        if not self.store.add_schedule(schedule):
            logger.error(f"Failed to store schedule: {schedule.id}")
            raise RuntimeError("Failed to store schedule")

        logger.info(f"Created schedule: {schedule.name} at {schedule.scheduled_time}")
        return schedule

    def check_due(self, now: Optional[datetime] = None) -> List[ScheduleRecord]:
        """
        Fire reminders for the minute containing `now`.

        Each due schedule is handed to the notifier, then marked notified
        with the evaluation day. A schedule whose notifier raised is not
        marked. A store error while marking one schedule is logged and the
        remaining schedules are still processed.

        Args:
            now: Current datetime (default: datetime.now())

        Returns:
            Schedules that were notified and acknowledged
        """
        if now is None:
            now = datetime.now()

        reference_date = now.date()
        reference_time = now.strftime("%H:%M")

        due = select_due(self.store.list_schedules(), reference_date, reference_time)
        logger.info(f"Found {len(due)} due schedules at {reference_date} {reference_time}")

        fired = []
        for schedule in due:
            try:
                self.notify(schedule)
            except Exception as e:
                logger.error(f"Notification failed for {schedule.id}: {e}", exc_info=True)
                continue

            try:
                marked = self.store.mark_notified(schedule.id, reference_date)
            except (ScheduleStoreError, RestStoreError) as e:
                logger.error(f"Notified {schedule.id} but marking failed: {e}", exc_info=True)
                continue

            if marked:
                fired.append(schedule)
            else:
                logger.warning(f"Notified {schedule.id} but could not mark it")

        return fired

    def overdue_flags(self, now: Optional[datetime] = None) -> Dict[str, bool]:
        """Overdue flag per schedule id"""
        if now is None:
            now = datetime.now()
        return overdue_flags(self.store.list_schedules(), now)

    def list_schedules(self) -> List[ScheduleRecord]:
        """All schedules, oldest start date first, then by time"""
        schedules = sorted(self.store.list_schedules(), key=schedule_sort_key)
        logger.debug(f"Listed {len(schedules)} schedules")
        return schedules

    def get_schedule(self, schedule_id: str) -> Optional[ScheduleRecord]:
        return self.store.get_schedule(schedule_id)

    def update_schedule(self, schedule: ScheduleRecord) -> bool:
        success = self.store.update_schedule(schedule)

        if success:
            logger.info(f"Updated schedule {schedule.id}")
        else:
            logger.warning(f"Failed to update schedule {schedule.id}")

        return success

    def mark_notified(self, schedule_id: str, day: Optional[date] = None) -> bool:
        """
        Acknowledge a schedule for a day (default: today).

        Returns:
            True if successful
        """
        day = day or date.today()
        success = self.store.mark_notified(schedule_id, day)

        if success:
            logger.info(f"Marked schedule {schedule_id} as notified for {day}")
        else:
            logger.warning(f"Failed to mark schedule {schedule_id} as notified")

        return success

    def delete_schedule(self, schedule_id: str) -> bool:
        success = self.store.delete_schedule(schedule_id)

        if success:
            logger.info(f"Deleted schedule {schedule_id}")
        else:
            logger.warning(f"Failed to delete schedule {schedule_id}")

        return success

    def get_stats(self, now: Optional[datetime] = None) -> dict:
        """
        Get schedule statistics.

        Returns:
            Dict with total and a count per dose state
        """
        if now is None:
            now = datetime.now()

        schedules = self.store.list_schedules()
        counts = Counter(dose_state(s, now) for s in schedules)

        stats = {'total': len(schedules)}
        for state in DoseState:
            stats[state.value] = counts.get(state, 0)
        return stats

    def format_schedule_for_user(
        self,
        schedule: ScheduleRecord,
        today: Optional[date] = None,
        overdue: bool = False
    ) -> str:
        """
        Format a schedule for display.

        Args:
            schedule: Schedule to format
            today: Injected current day
            overdue: Whether to show the OVERDUE badge

        Returns:
            Multi-line string for display
        """
        today = today or date.today()

        title = schedule.name
        status = window_status(schedule, today)
        if status is WindowStatus.COMPLETED:
            title += " (Completed)"
        elif status is WindowStatus.UPCOMING:
            title += f" (Starts {schedule.start_date.strftime('%b %d, %Y')})"
        if overdue:
            title += "  [OVERDUE]"

        lines = [title, f"  Scheduled Time: {format_display_time(schedule.scheduled_time)}"]
        if schedule.frequency_description:
            lines.append(f"  Frequency: {schedule.frequency_description}")
        if schedule.start_date:
            lines.append(f"  Starts: {schedule.start_date.strftime('%b %d, %Y')}")
        lines.append(f"  Duration: {describe_duration(schedule.duration_days)}")
        if schedule.original_input:
            lines.append(f'  From: "{schedule.original_input}"')

        return "\n".join(lines)
