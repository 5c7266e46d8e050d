from __future__ import annotations

import math
from datetime import datetime, time

from ..common.datetime_utils import format_hhmm
from ..core.constants import EARTH_RADIUS_METERS
from .model import AllowedHours, CampusZone, GeoPoint, GeofenceResult


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * c


def is_within_hours(now_hhmm: str, hours: AllowedHours) -> bool:
    # HH:MM strings compare lexically in clock order.
    if hours.crosses_midnight:
        return now_hhmm >= hours.start or now_hhmm <= hours.end
    return hours.start <= now_hhmm <= hours.end


class GeofenceEvaluator:
    """Pure checks of a location fix against a campus zone."""

    def evaluate(self, current: GeoPoint, zone: CampusZone, now_local: datetime | time | str) -> GeofenceResult:
        now_hhmm = now_local if isinstance(now_local, str) else format_hhmm(now_local)
        distance = haversine_distance(current, zone.center)
        return GeofenceResult(
            within_radius=distance <= zone.radius_meters,
            within_hours=is_within_hours(now_hhmm, zone.allowed_hours),
            distance_meters=distance,
        )
