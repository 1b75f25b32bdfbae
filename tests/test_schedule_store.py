"""
Tests for MediMind Schedule Store

Tests the JSON file store:
- Add / get / update / delete
- Marking notified with an explicit day
- Persistence across store instances
- Corruption recovery and invalid record skipping
- Concurrent writers sharing one store
"""

import json
import threading
from datetime import date
from pathlib import Path

import pytest

from medimind.core import ScheduleRecord
from medimind.memory import ScheduleStore, ScheduleStoreError

TODAY = date(2024, 3, 15)


def make_schedule(schedule_id: str = "med-1", **overrides) -> ScheduleRecord:
    fields = dict(id=schedule_id, name="Vitamin D", scheduled_time="09:00", start_date=TODAY)
    fields.update(overrides)
    return ScheduleRecord(**fields)


def test_store_crud(tmp_path):
    """Add, read, update and delete schedules"""
    storage_path = tmp_path / "schedules.json"
    store = ScheduleStore(storage_path=storage_path)

    print(f"\n[1.1] Testing with storage: {storage_path}")
    assert store.list_schedules() == []

    print("\n[1.2] Testing add schedule...")
    schedule = make_schedule()
    assert store.add_schedule(schedule)
    assert not store.add_schedule(schedule), "Duplicate IDs must be refused"
    print("✓ Schedule added, duplicate refused")

    print("\n[1.3] Testing get schedule...")
    assert store.get_schedule("med-1") == schedule
    assert store.get_schedule("missing") is None

    print("\n[1.4] Testing update schedule...")
    updated = make_schedule(scheduled_time="10:30")
    assert store.update_schedule(updated)
    assert store.get_schedule("med-1").scheduled_time == "10:30"
    assert not store.update_schedule(make_schedule("missing"))

    print("\n[1.5] Testing delete schedule...")
    assert store.delete_schedule("med-1")
    assert not store.delete_schedule("med-1")
    assert store.list_schedules() == []
    print("✓ CRUD works")


def test_mark_notified_uses_given_day(tmp_path):
    store = ScheduleStore(storage_path=tmp_path / "schedules.json")
    store.add_schedule(make_schedule())

    assert store.mark_notified("med-1", TODAY)
    assert store.get_schedule("med-1").last_notified_date == TODAY

    assert store.mark_notified("med-1", "2024-03-16")
    assert store.get_schedule("med-1").last_notified_date == date(2024, 3, 16)

    assert not store.mark_notified("missing", TODAY)


def test_persistence_across_instances(tmp_path):
    storage_path = tmp_path / "schedules.json"
    ScheduleStore(storage_path=storage_path).add_schedule(make_schedule(duration_days=5))

    reloaded = ScheduleStore(storage_path=storage_path).list_schedules()

    assert len(reloaded) == 1
    assert reloaded[0].duration_days == 5
    assert reloaded[0].start_date == TODAY


def test_zero_duration_stored_as_null(tmp_path):
    storage_path = tmp_path / "schedules.json"
    store = ScheduleStore(storage_path=storage_path)
    store.add_schedule(make_schedule(duration_days=0))

    raw = json.loads(storage_path.read_text())
    assert raw["schedules"][0]["duration_days"] is None


def test_corrupted_file_is_backed_up(tmp_path):
    storage_path = tmp_path / "schedules.json"
    storage_path.write_text("{not json")

    store = ScheduleStore(storage_path=storage_path)

    assert store.list_schedules() == []
    assert (tmp_path / "schedules.json.bak").read_text() == "{not json"
    assert json.loads(storage_path.read_text()) == {"schedules": []}


def test_invalid_records_are_skipped(tmp_path):
    storage_path = tmp_path / "schedules.json"
    storage_path.write_text(json.dumps({"schedules": [
        {"id": "ok", "name": "Valid", "scheduled_time": "08:00"},
        {"id": "bad-time", "name": "Invalid", "scheduled_time": "8 o'clock"},
        {"id": "bad-date", "name": "Invalid", "scheduled_time": "08:00", "start_date": "2024-02-31"},
    ]}))

    schedules = ScheduleStore(storage_path=storage_path).list_schedules()

    assert [s.id for s in schedules] == ["ok"]


def test_backup_failure_raises_store_error(tmp_path, monkeypatch):
    storage_path = tmp_path / "schedules.json"
    storage_path.write_text("{not json")
    store = ScheduleStore(storage_path=storage_path)

    def refuse_replace(self, target):
        raise OSError("Permission denied")

    monkeypatch.setattr(Path, "replace", refuse_replace)

    with pytest.raises(ScheduleStoreError):
        store.list_schedules()
    assert storage_path.read_text() == "{not json"


def test_concurrent_writers_keep_every_update(tmp_path):
    """Ticker acknowledgments and command-loop adds interleave without loss"""
    storage_path = tmp_path / "schedules.json"
    store = ScheduleStore(storage_path=storage_path)
    store.add_schedule(make_schedule("ticked"))

    done = threading.Event()
    errors = []

    def acknowledge_loop():
        while not done.wait(0.001):
            try:
                store.mark_notified("ticked", TODAY)
            except Exception as e:
                errors.append(e)
                return

    print("\n[2.1] Testing adds while another thread marks notified...")
    worker = threading.Thread(target=acknowledge_loop)
    worker.start()
    try:
        for i in range(200):
            assert store.add_schedule(make_schedule(f"med-{i}"))
    finally:
        done.set()
        worker.join(5.0)

    assert errors == []
    ids = {s.id for s in ScheduleStore(storage_path=storage_path).list_schedules()}
    assert "ticked" in ids
    assert all(f"med-{i}" in ids for i in range(200))
    assert list(tmp_path.glob("*.tmp")) == []
    print("✓ No lost updates")
