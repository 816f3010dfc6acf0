from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    optional_str(value, field_name)
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    optional_str(value, field_name)
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Text fields must be strings")
    return value.strip() or None


def optional_str(value: Any, field_name: str) -> Optional[str]:
    """Raw request value that must be a string when present."""
    if value is None or isinstance(value, str):
        return value
    raise ValidationError(f"{field_name} must be a string")


def optional_coordinate(value: Any, field_name: str, *, limit: float) -> Optional[float]:
    """Latitude/longitude arrive as form strings; blank means missing."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not -limit <= number <= limit:
        raise ValidationError(f"{field_name} must be between -{limit:g} and {limit:g}")
    return number


def optional_latitude(value: Any) -> Optional[float]:
    return optional_coordinate(value, "Latitude", limit=90)


def optional_longitude(value: Any) -> Optional[float]:
    return optional_coordinate(value, "Longitude", limit=180)
