"""
MediMind Start - Main Entry Point

This wires:
- Settings (.env + environment)
- Schedule store (JSON file or REST backend)
- ReminderAgent (due check, overdue flags, formatting)
- ReminderTicker (minute-boundary checks in a background thread)
- A small command loop for managing schedules
"""

import logging
import shlex
from datetime import datetime
from typing import List

from medimind.agents import ReminderAgent, ReminderTicker
from medimind.config import ConfigError, Settings, load_env_file
from medimind.core import ScheduleRecord, ScheduleValidationError
from medimind.memory import RestScheduleStore, ScheduleStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def console_notify(schedule: ScheduleRecord):
    """Print a reminder to the console"""
    print("\n" + "=" * 70)
    print("⏰ MEDIMIND REMINDER")
    print("=" * 70)
    print(f"\nTime to take your {schedule.name}! ({schedule.scheduled_time})\n")
    print("=" * 70 + "\n")


def build_store(settings: Settings):
    if settings.backend == "rest":
        return RestScheduleStore(
            base_url=settings.rest_url,
            api_key=settings.rest_api_key,
            timeout=settings.rest_timeout,
        )
    return ScheduleStore(storage_path=settings.storage_path)


def show_schedules(agent: ReminderAgent):
    schedules = agent.list_schedules()
    if not schedules:
        print("\n📭 Your schedule is clear\n")
        return

    now = datetime.now()
    flags = agent.overdue_flags(now)
    print(f"\n📋 You have {len(schedules)} reminders:\n")
    for schedule in schedules:
        print(agent.format_schedule_for_user(schedule, today=now.date(), overdue=flags.get(schedule.id, False)))
        print(f"  ID: {schedule.id}\n")


def handle_add(agent: ReminderAgent, args: List[str]):
    """add NAME HH:MM [YYYY-MM-DD] [DAYS]"""
    if len(args) < 2:
        print("Usage: add NAME HH:MM [YYYY-MM-DD] [DAYS]")
        return

    name, scheduled_time = args[0], args[1]
    start_date = args[2] if len(args) > 2 else None
    try:
        duration_days = int(args[3]) if len(args) > 3 else 0
    except ValueError:
        print(f"Duration must be a whole number of days, got {args[3]!r}")
        return

    try:
        schedule = agent.create_schedule(
            name=name,
            scheduled_time=scheduled_time,
            start_date=start_date,
            duration_days=duration_days,
        )
    except (ScheduleValidationError, ValueError) as e:
        print(f"Invalid schedule: {e}")
        return

    print(f"✓ Reminder added: {schedule.name} at {schedule.scheduled_time}")


def process_command(agent: ReminderAgent, line: str) -> bool:
    """
    Run one command.

    Returns:
        False when the loop should exit
    """
    parts = shlex.split(line)
    command, args = parts[0].lower(), parts[1:]

    if command in ("quit", "exit", "q"):
        return False
    if command in ("list", "reminders"):
        show_schedules(agent)
    elif command == "add":
        handle_add(agent, args)
    elif command == "delete" and args:
        if agent.delete_schedule(args[0]):
            print("✓ Deleted")
        else:
            print("Reminder not found")
    elif command == "stats":
        print(f"\n{agent.get_stats()}\n")
    else:
        print("Commands: list | add NAME HH:MM [YYYY-MM-DD] [DAYS] | delete ID | stats | quit")
    return True


def main() -> int:
    load_env_file()

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"\n❌ Configuration error: {e}")
        return 1

    logging.getLogger().setLevel(settings.log_level)

    agent = ReminderAgent(build_store(settings), notify=console_notify)
    ticker = ReminderTicker(agent.check_due, interval=settings.tick_seconds)
    ticker.start()

    print("✓ MediMind is running")
    print("Commands: list | add NAME HH:MM [YYYY-MM-DD] [DAYS] | delete ID | stats | quit")

    while True:
        try:
            line = input("MediMind: ").strip()
            if not line:
                continue
            if not process_command(agent, line):
                print("\nGoodbye!")
                break
        except (KeyboardInterrupt, EOFError):
            print("\n\nInterrupted. Goodbye!")
            break
        except Exception as e:
            logger.error(f"Error in main loop: {e}", exc_info=True)
            print(f"\nError: {e}\n")

    ticker.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
