"""
Wire date-time format, e.g. ``2018-06-08T10:34:56+08:00``.
"""
import re
from datetime import datetime
from typing import Optional

from ..exceptions import DateTimeFormatError


DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{2}:\d{2}$", re.ASCII)


def parse_datetime(value: str) -> datetime:
    """Parse a wire timestamp into an aware datetime."""
    if not isinstance(value, str) or not _DATETIME_PATTERN.match(value):
        raise DateTimeFormatError(str(value))
    try:
        return datetime.strptime(value, DATETIME_FORMAT)
    except ValueError:
        raise DateTimeFormatError(value)


def parse_optional_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return parse_datetime(value)


def format_datetime(value: datetime) -> str:
    """Render an aware datetime in the wire format."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("datetime must be timezone-aware")
    return value.isoformat(timespec="seconds")
