"""Pure value coercions applied to raw carrier cells."""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from dateutil import parser as dateparser

# Excel serials between these bounds cover roughly 1954 - 2064
EXCEL_SERIAL_MIN = 20000
EXCEL_SERIAL_MAX = 60000
EXCEL_EPOCH = datetime(1899, 12, 30, tzinfo=timezone.utc)

# Two fill-in dates that differ in every component
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)

_NUMERIC_RE = re.compile(r"^\d+(\.\d+)?$")
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_excel_serial(value: Any) -> bool:
    """Return True if the value looks like an Excel date serial."""
    if isinstance(value, bool) or _is_blank(value):
        return False
    if isinstance(value, (int, float)):
        return EXCEL_SERIAL_MIN < value < EXCEL_SERIAL_MAX
    if isinstance(value, str) and _NUMERIC_RE.match(value.strip()):
        return EXCEL_SERIAL_MIN < float(value) < EXCEL_SERIAL_MAX
    return False


def excel_serial_to_datetime(serial: float) -> datetime:
    """Convert an Excel serial (fractional days since 1899-12-30) to UTC."""
    return EXCEL_EPOCH + timedelta(days=float(serial))


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a carrier date cell into a timezone-aware UTC datetime.

    Accepts datetimes, dates, Excel serials and free-form strings. Anything
    that cannot be read as a date yields None.
    """
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if is_excel_serial(value):
        return excel_serial_to_datetime(float(value))
    if isinstance(value, (int, float)):
        return None

    text = str(value).strip()
    if _NUMERIC_RE.match(text):
        # Bare numbers outside the serial range are not dates
        return None
    try:
        first = dateparser.parse(text, default=_DEFAULT_A)
        second = dateparser.parse(text, default=_DEFAULT_B)
    except (ValueError, OverflowError):
        return None

    # Defaults only show through where the cell had no month or day
    if (first.month, first.day) != (second.month, second.day):
        return None
    parsed = first
    if first.year != second.year:
        try:
            parsed = first.replace(year=datetime.now(timezone.utc).year)
        except ValueError:
            return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def parse_number(value: Any) -> Optional[float]:
    """Parse a plain numeric cell; returns None when not a number."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().replace(",", ""))
    except ValueError:
        return None


def parse_currency(value: Any) -> Optional[float]:
    """Parse a currency cell such as '$1,250.00' or 'USD 900'."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = _NON_NUMERIC_RE.sub("", str(value))
    try:
        return float(cleaned)
    except ValueError:
        return None


def clean_text(value: Any) -> Optional[str]:
    """Trim text cells; blank cells become None."""
    if _is_blank(value):
        return None
    return str(value).strip()
