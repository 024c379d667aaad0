# onward_app/core/utils.py

from datetime import date, datetime, time, timedelta

from onward_app.config.constants import SECONDS_PER_DAY


def clamp01(x: float) -> float:
    """Clamp a float to the 0.0–1.0 range."""
    return max(0.0, min(1.0, x))


def capped(value: float, cap: float) -> float:
    """Clamp a score component to [0, cap]."""
    return max(0.0, min(cap, value))


def elapsed_days(start: datetime, now: datetime) -> int:
    """
    Whole 24-hour periods between start and now. A start in the future
    counts as zero elapsed days.
    """
    seconds = (now - start).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // SECONDS_PER_DAY)


def elapsed_months(start: datetime, now: datetime) -> int:
    """Completed calendar months between start and now."""
    if now <= start:
        return 0
    months = (now.year - start.year) * 12 + (now.month - start.month)
    # Month not yet completed if we're earlier in the month than the anchor
    if (now.day, now.time()) < (start.day, start.time()):
        months -= 1
    return max(0, months)


def start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def previous_day(d: date) -> date:
    return d - timedelta(days=1)


def parse_datetime(value) -> datetime:
    """Accepts a datetime or an ISO‑8601 string."""
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def parse_date(value) -> date:
    """Accepts a date, a datetime or an ISO‑8601 string; returns the calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(value).date()


def to_naive_local(value) -> datetime:
    """
    Normalises a date or datetime to a naive local datetime, the form the
    profile record stores. Plain dates map to local midnight.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return start_of_day(value)
    return to_naive_local(datetime.fromisoformat(value))
