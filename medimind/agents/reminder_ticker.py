"""
MediMind Reminder Ticker - Minute-Boundary Scheduler

Calls a callback once per interval, aligned to the interval boundary
(by default the start of each minute). The evaluator itself has no notion
of timers; this thread is the only clock-driven piece.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def next_boundary(now: datetime, interval: float = 60.0) -> datetime:
    """
    First interval boundary strictly after `now`.

    Boundaries are counted from midnight, so a 60s interval yields
    HH:MM:00 instants.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed = (now - midnight).total_seconds()
    ticks = int(elapsed // interval) + 1
    return midnight + timedelta(seconds=ticks * interval)


class ReminderTicker:
    """
    Background thread firing `on_tick(now)` at every boundary.

    Example:
        >>> ticker = ReminderTicker(agent.check_due)
        >>> ticker.start()
        >>> ...
        >>> ticker.stop()
    """

    def __init__(
        self,
        on_tick: Callable[[datetime], object],
        interval: float = 60.0,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Args:
            on_tick: Called with the tick instant
            interval: Seconds between ticks
            clock: Source of the current time
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        self.on_tick = on_tick
        self.interval = interval
        self.clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.is_running:
            logger.warning("ReminderTicker already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="reminder-ticker", daemon=True)
        self._thread.start()
        logger.info(f"ReminderTicker started (interval={self.interval}s)")

    def stop(self, timeout: Optional[float] = 5.0):
        """
        Signal the thread to stop and wait up to `timeout` seconds.

        If a tick is still running when the timeout expires, the thread is
        kept: `is_running` stays true and `start` will not spawn a second
        one until it has finished.
        """
        self._stop_event.set()
        if self._thread is None:
            return

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning(f"ReminderTicker still finishing a tick after {timeout}s")
            return

        self._thread = None
        logger.info("ReminderTicker stopped")

    def tick(self, now: Optional[datetime] = None):
        """Run the callback once; errors are logged, never propagated"""
        now = now or self.clock()
        try:
            self.on_tick(now)
        except Exception as e:
            logger.error(f"Reminder tick failed at {now}: {e}", exc_info=True)

    def _run(self):
        # Initial check so a freshly started process does not wait a full interval
        self.tick()

        while not self._stop_event.is_set():
            now = self.clock()
            target = next_boundary(now, self.interval)
            if self._stop_event.wait((target - now).total_seconds()):
                break
            # Event.wait may return a hair early; never report the previous minute
            self.tick(max(self.clock(), target))
