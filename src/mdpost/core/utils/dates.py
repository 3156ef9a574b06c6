"""Front-matter date coercion"""

import re
from datetime import date, datetime
from typing import Any, Optional


# Extended ISO only; fromisoformat would also take basic forms like 20190301.
DATE_RE = re.compile(r'\d{4}-\d{2}-\d{2}(?:[T ]\d{2}:\d{2}|\Z)')

# Jekyll accepts these; PyYAML only resolves a subset of them to timestamps.
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
)


def coerce_date(value: Any) -> Optional[date]:
    """Return a date/datetime for a front-matter value, or None if unrecognised."""
    if isinstance(value, (date, datetime)):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not DATE_RE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def as_datetime(value: Optional[date]) -> Optional[datetime]:
    """Widen a date to a naive-or-aware datetime at midnight; datetimes pass through."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)
