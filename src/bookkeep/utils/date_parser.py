"""Date parsing utilities."""

from datetime import date, timezone
from enum import Enum

from dateutil import parser as date_parser

from bookkeep.domain.errors import DateParseError


class DateFormat(str, Enum):
    """Layout hint for statement date columns."""

    ISO = "iso"
    DMY = "dmy"


def parse_date(date_str: str, format_hint: DateFormat | str = DateFormat.ISO) -> date:
    """Parse a statement date string into a calendar date.

    Supported layouts:
    - ISO: timestamps such as "2024-03-01T00:00:00Z" or "2024-03-01 10:00:00".
      Aware values are converted to UTC, naive values are taken as UTC, and
      the calendar date is returned.
    - DMY: hyphenated day-month-year such as "01-03-2024".

    Args:
        date_str: Date string
        format_hint: DateFormat (or its string value)

    Returns:
        Date object

    Raises:
        DateParseError: If the date string cannot be parsed
    """
    if date_str is None or not str(date_str).strip():
        raise DateParseError("Empty date string")

    date_str = str(date_str).strip()
    try:
        format_hint = DateFormat(format_hint)
    except ValueError:
        raise DateParseError(f"Unknown date format hint '{format_hint}'")

    if format_hint is DateFormat.DMY:
        return _parse_day_month_year(date_str)

    try:
        dt = date_parser.isoparse(date_str)
    except (ValueError, OverflowError):
        try:
            dt = date_parser.parse(date_str)
        except (ValueError, OverflowError) as e:
            raise DateParseError(f"Could not parse date '{date_str}': {e}")

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date()


def _parse_day_month_year(date_str: str) -> date:
    parts = date_str.split("-")
    if len(parts) != 3:
        raise DateParseError(f"Could not parse date '{date_str}': expected DD-MM-YYYY")

    try:
        day, month, year = (int(part) for part in parts)
    except ValueError:
        raise DateParseError(f"Could not parse date '{date_str}': non-numeric component")

    try:
        return date(year, month, day)
    except ValueError as e:
        raise DateParseError(f"Invalid date '{date_str}': {e}")
