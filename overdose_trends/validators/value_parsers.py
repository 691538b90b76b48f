"""
overdose_trends/validators/value_parsers.py

Best-effort normalization of raw CSV cells into numbers and calendar dates.

Both parsers report bad input as ``None`` instead of raising; callers treat
``None`` as "drop this row".
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any

DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    # Reduced precision: the first day of the month or year.
    "%Y-%m",
    "%Y/%m",
    "%B %Y",
    "%b %Y",
    "%Y",
)

_US_DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def parse_number(value: Any) -> float | None:
    """
    Parse a cell into a finite number, tolerating thousands separators.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if _is_blank(value):
        return None

    cleaned = str(value).strip().replace(",", "")
    # float() also takes "1_000" and non-ASCII digits; plain decimal text only.
    if "_" in cleaned or not cleaned.isascii():
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_date(value: Any) -> date | None:
    """
    Parse a cell into a UTC calendar date.

    ISO-8601 and a few unambiguous machine formats are tried first, then a
    strict MM/DD/YYYY fallback. Aware timestamps are shifted to UTC before
    the time of day is dropped; naive ones are taken as UTC already.
    """

    if isinstance(value, datetime):
        return _to_utc_date(value)
    if isinstance(value, date):
        return value
    if _is_blank(value):
        return None

    raw = str(value).strip()

    parsed = _parse_generic(raw)
    if parsed is not None:
        return _to_utc_date(parsed)

    match = _US_DATE_PATTERN.match(raw)
    if match:
        month, day, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None

    return None


def date_key(value: date) -> str:
    """
    Grouping key for a calendar date: ``YYYY-MM-DD``.
    """

    return value.isoformat()


def _parse_generic(raw: str) -> datetime | None:
    normalized = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


def _to_utc_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()
