"""
Venue-local calendar helpers.

Dates arrive as local calendar strings ("YYYY-MM-DD" or "YYYY/MM/DD"), possibly
written with Persian or Arabic-Indic digits. Conversion between the local and
civil calendars is owned by an external converter; parse_local_date is the
seam where it plugs in, and today both sides are the civil calendar.
"""
import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from gamenet.core import errors
from gamenet.core.config import settings

_DIGITS = str.maketrans("۰۱۲۳۴۵۶۷۸۹٠١٢٣٤٥٦٧٨٩", "01234567890123456789")
_DATE_RE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Local week starts on Saturday: 0=Saturday .. 6=Friday
DAY_NAMES = ["Saturday", "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


def normalize_digits(text: str) -> str:
    return (text or "").translate(_DIGITS).strip()


def parse_hhmm(text: str, end_of_day: bool = False) -> int:
    """
    "HH:MM" -> minutes since midnight.
    With end_of_day, "24:00" and "00:00" mean the end of the day (1440).
    """
    value = normalize_digits(text)
    if end_of_day and value in ("24:00", "00:00"):
        return 24 * 60
    m = _TIME_RE.match(value)
    if not m:
        raise errors.ValidationError(f"invalid time '{text}', expected HH:MM", code="invalid_time")
    return int(m.group(1)) * 60 + int(m.group(2))


def parse_local_date(text: str) -> date:
    value = normalize_digits(text)
    m = _DATE_RE.match(value)
    if not m:
        raise errors.ValidationError(f"invalid date '{text}', expected YYYY-MM-DD", code="invalid_date")
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        raise errors.ValidationError(f"invalid date '{text}'", code="invalid_date")


def local_day_of_week(d: date) -> int:
    # date.weekday(): Monday=0; shift so Saturday=0
    return (d.weekday() + 2) % 7


def local_now() -> datetime:
    """Naive wall-clock time in the venue timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def to_local(instant: datetime) -> datetime:
    """Aware instant -> naive venue wall clock. Naive input is assumed to already be local."""
    if instant.tzinfo is None:
        return instant
    return instant.astimezone(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def at_minutes(d: date, minutes: int) -> datetime:
    return datetime(d.year, d.month, d.day) + timedelta(minutes=minutes)
