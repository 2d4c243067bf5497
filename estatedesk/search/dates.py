"""Local calendar-day timestamp helpers.

All timestamps are Unix seconds. Day boundaries are computed in the local
timezone, matching what a user picks in a date input. Malformed input yields
None instead of raising; callers treat None as "no constraint".
"""

import math
from datetime import date, datetime, time
from typing import Any

SECONDS_PER_DAY = 24 * 60 * 60
# Upper bound used to close open-ended NOT ranges.
MAX_TIMESTAMP = 9999999999
# Millisecond timestamps are larger than any realistic seconds value.
_MS_THRESHOLD = 1_000_000_000_000

RELATIVE_DAYS: dict[str, int] = {"7d": 7, "30d": 30, "90d": 90}
RELATIVE_TOKENS = ("today", *RELATIVE_DAYS)


def parse_timestamp(value: Any) -> int | None:
    """Coerce a seconds (or milliseconds) timestamp given as str/int/float to int seconds."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or math.isnan(value) or math.isinf(value):
        return None
    if value > _MS_THRESHOLD:
        value = value / 1000
    return math.floor(value)


def parse_date(value: Any) -> date | None:
    """Parse YYYY-MM-DD strings, ISO datetimes, date objects or timestamps to a local date."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        ts = parse_timestamp(value)
        if ts is None:
            return None
        try:
            return datetime.fromtimestamp(ts).date()
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _is_number(text):
            return parse_date(parse_timestamp(text))
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def start_of_day(value: Any) -> int | None:
    """Unix seconds for 00:00:00 local time on the given day."""
    day = parse_date(value)
    if day is None:
        return None
    return math.floor(datetime.combine(day, time.min).timestamp())


def end_of_day(value: Any) -> int | None:
    """Unix seconds for 23:59:59.999 local time on the given day, floored."""
    day = parse_date(value)
    if day is None:
        return None
    return math.floor(datetime.combine(day, time(23, 59, 59, 999000)).timestamp())


def range_start(value: Any) -> int | None:
    """Lower bound of a calendar range. Timestamps are used as given, dates start at local midnight."""
    if _is_timestamp(value):
        return parse_timestamp(value)
    return start_of_day(value)


def range_end(value: Any) -> int | None:
    """Upper bound of a calendar range. Timestamps are used as given, dates end at 23:59:59 local."""
    if _is_timestamp(value):
        return parse_timestamp(value)
    return end_of_day(value)


def _is_timestamp(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and _is_number(value.strip())


def unix_to_date_string(value: Any) -> str | None:
    """Local calendar date (YYYY-MM-DD) for a Unix timestamp."""
    ts = parse_timestamp(value)
    if ts is None:
        return None
    try:
        return datetime.fromtimestamp(ts).strftime("%Y-%m-%d")
    except (OverflowError, OSError, ValueError):
        return None


def relative_start(token: str | None, now: datetime | None = None) -> int | None:
    """Start timestamp for a relative shortcut: today, 7d, 30d, 90d. Unknown token: None."""
    if not token:
        return None
    now = now or datetime.now()
    if token == "today":
        return math.floor(datetime.combine(now.date(), time.min).timestamp())
    days = RELATIVE_DAYS.get(token)
    if days is None:
        return None
    return math.floor(now.timestamp()) - days * SECONDS_PER_DAY
