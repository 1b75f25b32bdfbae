"""
Tests for MediMind Reminder Ticker

Boundary arithmetic is tested directly; the thread is exercised with a
short interval.
"""

import threading
from datetime import datetime

import pytest

from medimind.agents import ReminderTicker, next_boundary


def test_next_boundary_minutes():
    assert next_boundary(datetime(2024, 3, 15, 8, 0, 0)) == datetime(2024, 3, 15, 8, 1)
    assert next_boundary(datetime(2024, 3, 15, 8, 0, 59, 999999)) == datetime(2024, 3, 15, 8, 1)
    assert next_boundary(datetime(2024, 3, 15, 23, 59, 30)) == datetime(2024, 3, 16, 0, 0)


def test_next_boundary_custom_interval():
    assert next_boundary(datetime(2024, 3, 15, 8, 0, 7), interval=5) == datetime(2024, 3, 15, 8, 0, 10)


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        ReminderTicker(lambda now: None, interval=0)


def test_tick_logs_and_survives_errors():
    calls = []

    def flaky(now):
        calls.append(now)
        raise RuntimeError("store unreachable")

    ticker = ReminderTicker(flaky)
    instant = datetime(2024, 3, 15, 8, 0)

    ticker.tick(instant)
    ticker.tick(instant)

    assert calls == [instant, instant]


def test_thread_runs_and_stops():
    ticked = threading.Event()
    ticker = ReminderTicker(lambda now: ticked.set(), interval=0.05)

    ticker.start()
    try:
        assert ticked.wait(2.0)
        assert ticker.is_running
    finally:
        ticker.stop()

    assert not ticker.is_running


def test_stop_timeout_keeps_busy_thread():
    """A tick outliving the stop timeout keeps the ticker marked running"""
    entered = threading.Event()
    release = threading.Event()
    calls = []

    def slow_tick(now):
        calls.append(now)
        entered.set()
        release.wait(5.0)

    ticker = ReminderTicker(slow_tick, interval=0.05)
    ticker.start()
    try:
        assert entered.wait(2.0)
        first_thread = ticker._thread

        ticker.stop(timeout=0.05)
        assert ticker.is_running
        assert ticker._thread is first_thread

        ticker.start()
        assert ticker._thread is first_thread
        assert len(calls) == 1
    finally:
        release.set()
        ticker.stop()

    assert not ticker.is_running
    assert ticker._thread is None
