"""
Calendar helpers shared by billing, reports and exports.

Supabase returns DATE columns as ``YYYY-MM-DD`` strings and TIMESTAMPTZ columns
as ISO-8601 strings; everything here normalizes to ``datetime.date``.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

DateLike = Union[date, datetime, str, None]

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def parse_date(value: DateLike) -> Optional[date]:
    """Coerce a row value to a date. Returns None for empty values."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}")


def validate_date_format(date_string: str) -> Tuple[bool, Optional[str], Optional[date]]:
    """Strict YYYY-MM-DD check. Returns (is_valid, error, parsed_date)."""
    if not isinstance(date_string, str) or not _ISO_DATE_RE.match(date_string):
        return False, "Date must be in YYYY-MM-DD format", None
    try:
        return True, None, date.fromisoformat(date_string)
    except ValueError:
        return False, "Invalid date", None


def strict_request_date(value):
    """Before-validator for request date fields: strings must be plain YYYY-MM-DD."""
    if isinstance(value, str):
        is_valid, error, parsed = validate_date_format(value)
        if not is_valid:
            raise ValueError(error)
        return parsed
    return value


def shift_years(d: date, years: int) -> date:
    """Move d by whole years, clamping Feb 29 to Feb 28 where needed."""
    year = d.year + years
    day = min(d.day, calendar.monthrange(year, d.month)[1])
    return date(year, d.month, day)


def validate_start_date(start_date: date, today: Optional[date] = None) -> Tuple[bool, Optional[str]]:
    """Allow start dates up to one year in the past or future."""
    today = today or date.today()
    if start_date < shift_years(today, -1):
        return False, "Start date cannot be more than one year ago"
    if start_date > shift_years(today, 1):
        return False, "Start date cannot be more than one year in the future"
    return True, None


def format_date_for_display(value: DateLike, date_format: Optional[str] = "US") -> str:
    """US: 'Aug 4, 2025', EU: '4 Aug 2025', ISO: '2025-08-04'."""
    d = parse_date(value)
    if d is None:
        return ""
    month = _MONTH_ABBR[d.month - 1]
    if date_format == "ISO":
        return d.isoformat()
    if date_format == "EU":
        return f"{d.day} {month} {d.year}"
    return f"{month} {d.day}, {d.year}"


def month_bounds(d: date) -> Tuple[date, date]:
    last_day = calendar.monthrange(d.year, d.month)[1]
    return date(d.year, d.month, 1), date(d.year, d.month, last_day)


def parse_financial_year_end(value: Optional[str]) -> Tuple[int, int]:
    """Accepts 'MM-DD' (stored default) or 'YYYY-MM-DD'; only month and day matter."""
    parts = (value or "12-31").strip().split("-")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid financial year end: {value!r}")
    try:
        month, day = int(parts[-2]), int(parts[-1])
    except ValueError:
        raise ValueError(f"Invalid financial year end: {value!r}")
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid financial year end: {value!r}")
    # Leap-year max so 02-29 is accepted and clamped per year
    if not 1 <= day <= calendar.monthrange(2000, month)[1]:
        raise ValueError(f"Invalid financial year end: {value!r}")
    return month, day


def _fy_end_in(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def financial_year_window(financial_year_end: Optional[str], today: Optional[date] = None) -> Tuple[date, date]:
    """Return (start, end) of the financial year containing today."""
    today = today or date.today()
    month, day = parse_financial_year_end(financial_year_end)
    this_year_end = _fy_end_in(today.year, month, day)
    if today <= this_year_end:
        return _fy_end_in(today.year - 1, month, day) + timedelta(days=1), this_year_end
    return this_year_end + timedelta(days=1), _fy_end_in(today.year + 1, month, day)
