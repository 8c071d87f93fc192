from __future__ import annotations

import re
from datetime import datetime

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])?\s*$")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def minute_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def to_epoch_millis(value: datetime) -> int:
    return int(round(value.timestamp() * 1000))


def from_epoch_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000)


def parse_clock_minutes(value: str) -> int:
    """Parse "09:00", "13:30" or "01:00 PM" into minutes since midnight."""

    match = _CLOCK_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid time of day: {value!r}")

    hour = int(match.group(1))
    minute = int(match.group(2))
    meridiem = (match.group(3) or "").upper()

    if minute > 59:
        raise ValueError(f"Invalid time of day: {value!r}")
    if meridiem:
        if not 1 <= hour <= 12:
            raise ValueError(f"Invalid time of day: {value!r}")
        hour = hour % 12 + (12 if meridiem == "PM" else 0)
    elif hour > 23:
        raise ValueError(f"Invalid time of day: {value!r}")

    return hour * 60 + minute


def format_clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
