"""
Input validation helpers shared by the request handlers.

All helpers raise `ValidationFailed` (HTTP 400) with a client-facing message.
"""

import math
import re
from typing import Any, Dict, Iterable, Optional, Tuple

from .db.models import ReportStatus, UserRole
from .errors import ValidationFailed

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

STATUS_VALUES = [s.value for s in ReportStatus]


def is_blank(value: Any) -> bool:
    """None, empty or whitespace-only strings count as absent"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def require_fields(values: Dict[str, Any], names: Iterable[str], message: str) -> None:
    missing = [name for name in names if is_blank(values.get(name))]
    if missing:
        raise ValidationFailed(message)


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.fullmatch(email.strip()))


def parse_role(value: Optional[str]) -> UserRole:
    if is_blank(value):
        return UserRole.USER
    try:
        return UserRole(value.strip().lower())
    except ValueError:
        raise ValidationFailed("Invalid role. Must be one of: user, government")


def parse_status(value: Optional[str]) -> ReportStatus:
    try:
        return ReportStatus((value or "").strip())
    except ValueError:
        raise ValidationFailed(f"Invalid status. Must be one of: {', '.join(STATUS_VALUES)}")


def parse_id(value: Any, field: str) -> Optional[int]:
    """
    Parse an optional integer id from form/JSON input.

    Returns None for absent values; rejects floats, negatives and text.
    """
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationFailed(f"{field} must be a valid integer id.")
    if isinstance(value, int):
        parsed = value
    else:
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()):
            raise ValidationFailed(f"{field} must be a valid integer id.")
        parsed = int(text)
    if parsed <= 0:
        raise ValidationFailed(f"{field} must be a valid integer id.")
    return parsed


def _parse_float(value: Any) -> Optional[float]:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def parse_coordinates(latitude: Any, longitude: Any) -> Tuple[Optional[float], Optional[float]]:
    """
    Latitude/longitude must both be valid numbers or both be absent.

    Returns:
        (latitude, longitude), both None when omitted
    """
    lat_missing = is_blank(latitude)
    lon_missing = is_blank(longitude)
    if lat_missing and lon_missing:
        return None, None

    message = "Latitude and longitude must both be valid numbers, or both be omitted."
    if lat_missing or lon_missing:
        raise ValidationFailed(message)

    lat = _parse_float(latitude)
    lon = _parse_float(longitude)
    if lat is None or lon is None:
        raise ValidationFailed(message)
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
        raise ValidationFailed("Latitude must be within [-90, 90] and longitude within [-180, 180].")
    return lat, lon


def clean_text(value: Optional[str]) -> str:
    return (value or "").strip()
