from __future__ import annotations

import math

from ..core.constants import ATTENDANCE_KEY_SEPARATOR
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_key_part(value: str, field_name: str) -> str:
    """Identifier that is safe to embed in an attendance key."""
    value = require_non_empty(value, field_name)
    if ATTENDANCE_KEY_SEPARATOR in value or "/" in value:
        raise ValidationError(f"{field_name} must not contain '{ATTENDANCE_KEY_SEPARATOR}' or '/'")
    return value


def require_coordinates(lat, lng) -> tuple[float, float]:
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError):
        raise ValidationError("Coordinates must be numbers")

    if math.isnan(lat_f) or math.isnan(lng_f):
        raise ValidationError("Coordinates must not be NaN")
    if not -90.0 <= lat_f <= 90.0:
        raise ValidationError(f"Latitude out of range: {lat_f}")
    if not -180.0 <= lng_f <= 180.0:
        raise ValidationError(f"Longitude out of range: {lng_f}")
    return lat_f, lng_f
