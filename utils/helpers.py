"""Helper utility functions for dates and loosely-typed request values."""

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

# Fixed English names so formatted dates never depend on the process locale
DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def utc_now() -> datetime:
    """Current time as a naive UTC datetime (the form MongoDB hands back)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_blank(value: Any) -> bool:
    """True for values a form would send when a field was left empty."""
    return value is None or (isinstance(value, str) and value == "")


def parse_date(value: Any) -> datetime:
    """Parse a request date into a naive UTC datetime.

    Accepts ``yyyy-mm-dd`` (midnight UTC), ISO-8601 date-times with or
    without an offset, and the ``Mon Jan 01 1990`` form produced by
    :func:`format_date`.

    Raises:
        ValueError: If the value is not a recognisable calendar date.
    """
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if _DATE_ONLY.match(text):
        day = date.fromisoformat(text)
        return datetime(day.year, day.month, day.day)

    parts = text.split()
    if len(parts) == 4 and parts[0] in DAY_NAMES and parts[1] in MONTH_NAMES:
        if not (parts[2].isdigit() and parts[3].isdigit()):
            raise ValueError(f"Invalid date: {value!r}")
        return datetime(int(parts[3]), MONTH_NAMES.index(parts[1]) + 1, int(parts[2]))

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    except OverflowError as e:
        # Offsets that push the instant outside datetime.min..datetime.max
        raise ValueError(f"Date out of range: {value!r}") from e
    return parsed


def format_date(value: datetime) -> str:
    """Render a datetime as ``Mon Jan 01 1990``."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return "{} {} {:02d} {:04d}".format(
        DAY_NAMES[value.weekday()],
        MONTH_NAMES[value.month - 1],
        value.day,
        value.year,
    )


def parse_int(value: Any) -> Optional[int]:
    """Read the leading integer of a value, or None when there is none.

    ``"45"``, ``" 45"`` and ``"45min"`` all give 45; floats are truncated.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            try:
                return int(match.group(1))
            except ValueError:
                # Beyond the interpreter's int string conversion limit
                return None
    return None
