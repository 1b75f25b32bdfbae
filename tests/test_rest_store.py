"""
Tests for MediMind REST Schedule Store

HTTP is replaced by a mocked requests session.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from medimind.core import ScheduleRecord
from medimind.memory import (
    RestScheduleStore,
    RestStoreConnectionError,
    RestStoreResponseError,
    RestStoreTimeoutError,
)

BASE_URL = "https://project.supabase.co/"
TABLE_URL = "https://project.supabase.co/rest/v1/medications"


def make_response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.content = b"" if body is None else b"x"
    response.text = "" if body is None else str(body)
    response.json.return_value = body
    return response


def make_store(*responses):
    session = MagicMock()
    session.headers = {}
    session.request.side_effect = list(responses)
    store = RestScheduleStore(base_url=BASE_URL, api_key="anon-key", timeout=3, session=session)
    return store, session


def test_headers_and_url():
    store, session = make_store()
    assert store.table_url == TABLE_URL
    assert session.headers["apikey"] == "anon-key"
    assert session.headers["Authorization"] == "Bearer anon-key"


def test_constructor_requires_url_and_key():
    with pytest.raises(ValueError):
        RestScheduleStore(base_url="", api_key="key", session=MagicMock())
    with pytest.raises(ValueError):
        RestScheduleStore(base_url=BASE_URL, api_key="", session=MagicMock())


def test_list_schedules_maps_rows_and_skips_invalid():
    rows = [
        {"id": "a", "name": "Aspirin", "time": "08:00:00", "start_date": "2024-03-01",
         "duration_days": 7, "last_notified": None},
        {"id": "b", "name": "Broken", "time": "25:00:00"},
    ]
    store, session = make_store(make_response(body=rows))

    schedules = store.list_schedules()

    assert [s.id for s in schedules] == ["a"]
    assert schedules[0].scheduled_time == "08:00"
    assert schedules[0].duration_days == 7

    method, url = session.request.call_args.args
    assert (method, url) == ("GET", TABLE_URL)
    assert session.request.call_args.kwargs["params"] == {"select": "*", "order": "time.asc"}
    assert session.request.call_args.kwargs["timeout"] == 3


def test_mark_notified_patches_last_notified():
    store, session = make_store(
        make_response(body=[{"id": "a", "name": "Aspirin", "last_notified": "2024-03-15"}]),
        make_response(body=[]),
    )

    assert store.mark_notified("a", date(2024, 3, 15))
    kwargs = session.request.call_args.kwargs
    assert session.request.call_args.args[0] == "PATCH"
    assert kwargs["params"] == {"id": "eq.a"}
    assert kwargs["json"] == {"last_notified": "2024-03-15"}

    assert not store.mark_notified("missing", date(2024, 3, 15))


def test_add_schedule_stores_zero_duration_as_null():
    store, session = make_store(make_response(status_code=201, body=[{"id": "a"}]))
    record = ScheduleRecord(id="a", name="Aspirin", scheduled_time="08:00", duration_days=0)

    assert store.add_schedule(record)
    payload = session.request.call_args.kwargs["json"]
    assert payload["duration_days"] is None
    assert payload["time"] == "08:00"


def test_delete_schedule():
    store, _ = make_store(make_response(body=[{"id": "a"}]), make_response(body=[]))
    assert store.delete_schedule("a")
    assert not store.delete_schedule("a")


def test_http_error_is_mapped():
    store, _ = make_store(make_response(status_code=500, body={"message": "boom"}))

    with pytest.raises(RestStoreResponseError) as excinfo:
        store.list_schedules()
    assert excinfo.value.status_code == 500


def test_timeout_and_connection_errors_are_mapped():
    store, session = make_store()
    session.request.side_effect = requests.Timeout("slow")
    with pytest.raises(RestStoreTimeoutError):
        store.list_schedules()

    session.request.side_effect = requests.ConnectionError("down")
    with pytest.raises(RestStoreConnectionError):
        store.list_schedules()


def test_non_list_body_is_rejected():
    store, _ = make_store(make_response(body={"unexpected": True}))
    with pytest.raises(RestStoreResponseError):
        store.list_schedules()
