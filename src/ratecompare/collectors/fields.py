"""Parsers for free-form numbers, times and dates found in export cells.

Every parser returns None when the text cannot be interpreted, so that an
unparsable cell is never confused with a legitimate zero.
"""

import re
from datetime import MINYEAR, datetime, timedelta
from typing import NamedTuple

NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")

# H, H:MM, H:MM:SS with optional AM/PM
TIME_PATTERN = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?\s*(am|pm)?\s*$", re.IGNORECASE)

ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
US_SLASH_DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})$")
US_DASH_DATE_PATTERN = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

# "<date> <time>" where the time token is the last whitespace-separated part
DATE_THEN_TIME_PATTERN = re.compile(r"^(.+?)\s+(\d{1,2}(?::\d{2})?(?::\d{2})?\s*(?:am|pm)?)$", re.IGNORECASE)


class ClockTime(NamedTuple):
    """A time of day. hours may be 24, meaning midnight at the end of the day."""

    hours: int
    minutes: int = 0
    seconds: int = 0

    def as_timedelta(self) -> timedelta:
        return timedelta(hours=self.hours, minutes=self.minutes, seconds=self.seconds)


class DateParts(NamedTuple):
    """A calendar date validated only against nominal bounds (month 1-12, day 1-31)."""

    year: int
    month: int
    day: int

    def to_datetime(self) -> datetime:
        """Midnight on this date. Days past the end of the month roll forward."""
        return datetime(self.year, self.month, 1) + timedelta(days=self.day - 1)


def parse_number(value: str | None) -> float | None:
    """Extract the first signed decimal from text like "1,234.5 kWh" or "$12.34"."""
    raw = (value or "").strip()
    if not raw:
        return None

    match = NUMBER_PATTERN.search(raw.replace(",", ""))
    if not match:
        return None
    return float(match.group(0))


def parse_time(value: str | None) -> ClockTime | None:
    """Parse "H", "H:MM", "H:MM:SS", each optionally followed by AM/PM."""
    match = TIME_PATTERN.match(value or "")
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)
    meridiem = (match.group(4) or "").lower()

    if minutes > 59 or seconds > 59:
        return None
    if hours > 24:
        return None

    if meridiem:
        if hours < 1 or hours > 12:
            return None
        if meridiem == "pm" and hours != 12:
            hours += 12
        if meridiem == "am" and hours == 12:
            hours = 0

    return ClockTime(hours, minutes, seconds)


def _date_parts(year: int, month: int, day: int) -> DateParts | None:
    if year < MINYEAR:
        return None
    if month < 1 or month > 12:
        return None
    if day < 1 or day > 31:
        return None
    return DateParts(year, month, day)


def parse_date(value: str | None) -> DateParts | None:
    """Parse YYYY-MM-DD, M/D/YYYY, M/D/YY (20YY) or M-D-YYYY."""
    raw = (value or "").strip()
    if not raw:
        return None

    if match := ISO_DATE_PATTERN.match(raw):
        year, month, day = (int(g) for g in match.groups())
        return _date_parts(year, month, day)

    if match := US_SLASH_DATE_PATTERN.match(raw):
        month, day, year = (int(g) for g in match.groups())
        if year < 100:
            year += 2000
        return _date_parts(year, month, day)

    if match := US_DASH_DATE_PATTERN.match(raw):
        month, day, year = (int(g) for g in match.groups())
        return _date_parts(year, month, day)

    return None


def parse_date_time(date_value: str | None, time_value: str | None = None) -> datetime | None:
    """Combine a date cell and an optional time cell into a datetime.

    Without a time cell the result is midnight. A time cell that is present
    but unparsable makes the whole timestamp invalid.
    """
    date_parts = parse_date(date_value)
    if date_parts is None:
        return None

    clock = ClockTime(0)
    if time_value is not None:
        clock = parse_time(time_value)
        if clock is None:
            return None

    try:
        return date_parts.to_datetime() + clock.as_timedelta()
    except OverflowError:
        # Rolled past year 9999
        return None


def _parse_iso_datetime(raw: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(raw)
        if parsed.tzinfo is not None:
            # Offset-qualified timestamps become local wall-clock time
            parsed = parsed.astimezone().replace(tzinfo=None)
    except (ValueError, OverflowError):
        return None
    return parsed


def parse_datetime_field(value: str | None) -> datetime | None:
    """Parse a single cell holding both date and time.

    ISO 8601 text is tried first; otherwise the cell is split at the last run
    of whitespace before a time token, e.g. "01/18/2025 12:15 AM".
    """
    raw = (value or "").strip()
    if not raw:
        return None

    parsed = _parse_iso_datetime(raw)
    if parsed is not None:
        return parsed

    match = DATE_THEN_TIME_PATTERN.match(raw)
    if match:
        return parse_date_time(match.group(1), match.group(2))

    return None
