"""Meter Reader — Date Normalizer.

Accepts the free-form date strings meter apps send and reduces them to the
billing date. Formats are tried in order and the first calendar-valid parse
wins, so ``01/02/2024`` is 1 February (day-first beats month-first).
"""

from datetime import date, datetime
from typing import Optional

# Order matters: see module docstring.
DATE_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",  # 2024-03-15T10:20:30.000-03:00
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%m-%d-%Y",
    "%Y-%m-%d",
    "%Y.%m.%d",
    "%d %b %Y",  # 15 Mar 2024
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%Y-%m-%dT%H:%M",
]


def normalize_date(text: str) -> Optional[date]:
    """Return the calendar date for ``text`` or None if no format matches.

    The date is taken as written; an ISO offset does not move it to UTC.
    """
    if not isinstance(text, str):
        return None
    candidate = text.strip()
    if not candidate:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    return None


def is_valid_date(text: str) -> bool:
    return normalize_date(text) is not None
