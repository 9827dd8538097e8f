"""
Date helpers shared by the transformations.

Timestamps are rendered as YYYY-MM-DDTHH:mm:ss±HH:mm using the offset of
the process's local timezone, whatever timezone the source value carried.
"""

from datetime import date, datetime
from typing import Any


def to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    raise TypeError(f"Cannot interpret {type(value).__name__} as a date")


def format_date_to_iso_string(value: Any) -> str:
    """
    Render a date in local time with a fixed offset.

    Naive datetimes are taken to already be in local time.

    Raises:
        TypeError: If the value is not a date, datetime or string
        ValueError: If a string is not ISO-8601
    """
    local = to_datetime(value).astimezone()
    offset_minutes = int(local.utcoffset().total_seconds() // 60)
    sign = "+" if offset_minutes >= 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"{local:%Y-%m-%dT%H:%M:%S}{sign}{hours:02d}:{minutes:02d}"
