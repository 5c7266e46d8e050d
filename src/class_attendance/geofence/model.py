from __future__ import annotations

from dataclasses import dataclass

from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_coordinates
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    @classmethod
    def from_values(cls, lat, lng) -> "GeoPoint":
        lat_f, lng_f = require_coordinates(lat, lng)
        return cls(lat=lat_f, lng=lng_f)

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class AllowedHours:
    """Local-time window, HH:MM strings, inclusive on both ends."""

    start: str
    end: str

    def __post_init__(self):
        for value in (self.start, self.end):
            # zero-padded so the window compares lexically
            if len(value) != 5:
                raise ValidationError(f"Invalid time (HH:MM): {value!r}")
            parse_hhmm(value)

    @property
    def crosses_midnight(self) -> bool:
        return self.start > self.end


@dataclass(frozen=True)
class CampusZone:
    """Read-only geofence reference data owned by configuration."""

    id: str
    center: GeoPoint
    radius_meters: float
    allowed_hours: AllowedHours
    name: str = ""

    def __post_init__(self):
        if not self.radius_meters > 0:
            raise ValidationError(f"Zone {self.id!r} radius must be positive")

    @classmethod
    def from_dict(cls, data: dict) -> "CampusZone":
        hours = data.get("allowed_hours") or {}
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            center=GeoPoint.from_values(data["center"]["lat"], data["center"]["lng"]),
            radius_meters=float(data["radius"]),
            allowed_hours=AllowedHours(
                start=str(hours.get("start", "00:00")),
                end=str(hours.get("end", "23:59")),
            ),
        )


@dataclass(frozen=True)
class GeofenceResult:
    within_radius: bool
    within_hours: bool
    distance_meters: float

    @property
    def passed(self) -> bool:
        return self.within_radius and self.within_hours
