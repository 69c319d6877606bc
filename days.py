"""
Calendar-day helpers.

Every completion, "today" comparison and weekly bucket in the engine is keyed by
a local calendar day in ISO form (YYYY-MM-DD). Keys sort lexicographically in
chronological order. Days are never derived from elapsed seconds, so a
daylight-saving shift can still make one wall-clock day look like two; that is
a known limitation.
"""

from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Union

Clock = Callable[[], datetime]

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

DayLike = Union[datetime, date, str]


def system_clock() -> datetime:
    return datetime.now()


def day_key(value: DayLike) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            # Aware timestamps are converted to the local zone first
            value = value.astimezone()
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        if len(value) == 10:
            return parse_day(value).isoformat()
        return day_key(parse_moment(value))
    raise TypeError(f"Cannot derive a day key from {type(value).__name__}")


def parse_day(key: str) -> date:
    try:
        if len(key) != 10:
            raise ValueError(key)
        return date.fromisoformat(key)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid day key: {key!r}")


def parse_moment(text: str) -> datetime:
    """Parse a full ISO timestamp, honouring any UTC offset it carries."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid timestamp: {text!r}")


def today_key(clock: Optional[Clock] = None) -> str:
    return day_key((clock or system_clock)())


def shift_day(key: str, days: int) -> str:
    return (parse_day(key) + timedelta(days=days)).isoformat()


def days_between(start: str, end: str) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (parse_day(end) - parse_day(start)).days


def week_days(key: str) -> List[str]:
    # ISO Monday start
    d = parse_day(key)
    start = d - timedelta(days=d.weekday())
    return [(start + timedelta(days=i)).isoformat() for i in range(7)]


def day_range(end: str, length: int) -> List[str]:
    """The ``length`` day keys ending at ``end`` inclusive, oldest first."""
    return [shift_day(end, -offset) for offset in range(length - 1, -1, -1)]
