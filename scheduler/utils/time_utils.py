import re
from datetime import date, time, datetime, timedelta
from typing import Optional

_DATE_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
_TIME_RE = re.compile(r"([0-9]{2}):([0-9]{2})(?::([0-9]{2}))?")


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a strict yyyy-MM-dd string. Returns None for anything that is not
    a real calendar date ("9999-99-99", "2026-2-30", "").
    """
    if not value:
        return None
    match = _DATE_RE.fullmatch(value)
    if not match:
        return None
    try:
        return date(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def parse_iso_time(value: Optional[str]) -> Optional[time]:
    """
    Parse HH:mm or HH:mm:ss. Returns None for out-of-range values such as "25:00".
    """
    if not value:
        return None
    match = _TIME_RE.fullmatch(value)
    if not match:
        return None
    hour, minute, second = match.groups()
    try:
        return time(int(hour), int(minute), int(second or 0))
    except ValueError:
        return None


def add_minutes(value: time, minutes: int) -> time:
    return (datetime.combine(date.min, value) + timedelta(minutes=minutes)).time()


def minutes_between(a: time, b: time) -> int:
    """Absolute distance between two times of day, truncated to whole minutes."""
    delta = datetime.combine(date.min, a) - datetime.combine(date.min, b)
    return int(abs(delta.total_seconds()) // 60)
