from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional

from ..core.exceptions import ValidationError


def _as_text(value: Any, what: str) -> str:
    # JSON bodies may carry numbers or booleans where a string is expected.
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{what} must be a string")
    return value.strip()


def parse_iso_date(value: Any) -> date:
    """Parse YYYY-MM-DD string into date."""
    v = _as_text(value, "Date")
    try:
        return datetime.strptime(v, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def parse_optional_date(value: Any) -> Optional[date]:
    v = _as_text(value, "Date")
    if not v:
        return None
    return parse_iso_date(v)


def parse_clock_time(value: Any) -> Optional[time]:
    """Parse HH:MM or HH:MM:SS; blank input means "not supplied"."""
    v = _as_text(value, "Time")
    if not v:
        return None
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time {value!r}, expected HH:MM or HH:MM:SS")


def validate_range(start: Optional[date], end: Optional[date]) -> None:
    if start is not None and end is not None and start > end:
        raise ValidationError("Start date must be on or before end date")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
