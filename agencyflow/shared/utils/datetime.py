"""
Datetime utilities for consistent timezone handling.

Persisted timestamps are timezone-aware UTC. Calendar-day logic
(overdue detection, same-day dedup) uses the process-local timezone,
exposed through local_now() and local_today() so it can be injected
and replaced in tests.
"""

from datetime import UTC, date, datetime, time, timedelta


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def local_now() -> datetime:
    """Return the current time as an aware datetime in the process-local timezone."""
    return datetime.now().astimezone()


def local_today() -> date:
    """Return today's date in the process-local timezone."""
    return local_now().date()


def day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """
    Return [start, end) of the calendar day containing moment.

    Moments in UTC get UTC days. Anything else (naive, or a local time
    from local_now()) is a process-local day: each bound is local midnight
    resolved on its own, so a day with a DST change is 23 or 25 hours.

    Args:
        moment: Any datetime (aware datetimes recommended)

    Returns:
        Tuple of aware datetimes (start of day, start of next day)
    """
    day = moment.date()
    if moment.tzinfo is UTC:
        start = datetime.combine(day, time(), tzinfo=UTC)
        return start, start + timedelta(days=1)
    return (
        datetime.combine(day, time()).astimezone(),
        datetime.combine(day + timedelta(days=1), time()).astimezone(),
    )


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume it's UTC and attach timezone
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)
