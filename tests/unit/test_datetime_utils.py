"""Calendar-day helpers used by the overdue sweep and same-day dedup."""

import time as time_module
from datetime import UTC, datetime, timedelta

import pytest

from agencyflow.shared.utils.datetime import day_bounds, ensure_utc

# US Eastern rules as a POSIX TZ string; no tz database needed.
EASTERN = "EST5EDT,M3.2.0,M11.1.0"

pytestmark = pytest.mark.skipif(
    not hasattr(time_module, "tzset"), reason="process timezone cannot be switched here"
)


@pytest.fixture
def eastern(monkeypatch):
    monkeypatch.setenv("TZ", EASTERN)
    time_module.tzset()
    yield
    monkeypatch.undo()
    time_module.tzset()


def test_utc_moment_gets_utc_day() -> None:
    start, end = day_bounds(datetime(2026, 3, 10, 18, 30, tzinfo=UTC))
    assert start == datetime(2026, 3, 10, tzinfo=UTC)
    assert end == datetime(2026, 3, 11, tzinfo=UTC)


def test_local_day_on_spring_forward_is_23_hours(eastern) -> None:
    """Both bounds are local midnight even though the offset changes during the day."""
    start, end = day_bounds(datetime(2026, 3, 8, 12, 0).astimezone())
    assert start == datetime(2026, 3, 8, 5, 0, tzinfo=UTC)
    assert end == datetime(2026, 3, 9, 4, 0, tzinfo=UTC)
    assert end - start == timedelta(hours=23)


def test_local_day_on_fall_back_is_25_hours(eastern) -> None:
    start, end = day_bounds(datetime(2026, 11, 1, 12, 0).astimezone())
    assert start == datetime(2026, 11, 1, 4, 0, tzinfo=UTC)
    assert end - start == timedelta(hours=25)


def test_late_evening_local_moment_stays_on_its_local_day(eastern) -> None:
    """23:30 local is already the next day in UTC but belongs to the local day."""
    moment = datetime(2026, 6, 15, 23, 30).astimezone()
    start, end = day_bounds(moment)
    assert start <= moment < end
    assert start == datetime(2026, 6, 16, 4, 0, tzinfo=UTC) - timedelta(days=1)


def test_ensure_utc() -> None:
    assert ensure_utc(None) is None
    assert ensure_utc(datetime(2026, 1, 1)) == datetime(2026, 1, 1, tzinfo=UTC)
    assert ensure_utc(datetime(2026, 1, 1, 12).astimezone()).tzinfo is UTC
