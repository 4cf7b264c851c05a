"""Timestamp helpers shared by models, storage and aggregations."""

import calendar
import re
from datetime import datetime, timezone
from typing import Optional, Union

# Fractional seconds followed by an optional UTC offset
_FRACTION = re.compile(r"\.(\d+)(?=([+-]\d{2}:?\d{2})?$)")


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO timestamp (as returned by the backend) into an aware datetime.

    Naive values are assumed to be UTC. Returns None for empty input.
    Fractional seconds of any length are accepted (PostgREST trims trailing
    zeros, older interpreters only parse 3 or 6 digits).

    Raises:
        ValueError: If the string is not ISO formatted.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip().replace("Z", "+00:00")
        text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO string for JSON output, None passes through."""
    if value is None:
        return None
    return value.isoformat()


def subtract_months(value: datetime, months: int) -> datetime:
    """
    Same wall-clock time ``months`` calendar months earlier.

    The day is clamped to the length of the target month, so
    May 31 minus 3 months is Feb 28 (or 29).
    """
    month_index = value.month - 1 - months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
