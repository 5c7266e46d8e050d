from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..core.constants import ALL_DAY_END, ALL_DAY_START, REGISTERED_LOCATION_RADIUS_METERS
from ..core.exceptions import ValidationError
from .model import AllowedHours, CampusZone, GeoPoint

MAIN_CAMPUS_ID = "main-campus"
REGISTERED_ZONE_ID = "user-campus"


def registered_location_zone(registered: GeoPoint) -> CampusZone:
    """Zone centered on a student's own registered coordinates."""
    return CampusZone(
        id=REGISTERED_ZONE_ID,
        name="Registered Campus Location",
        center=registered,
        radius_meters=REGISTERED_LOCATION_RADIUS_METERS,
        allowed_hours=AllowedHours(start=ALL_DAY_START, end=ALL_DAY_END),
    )


@dataclass(frozen=True)
class ZoneCatalog:
    zones: dict[str, CampusZone]
    default_zone_id: str = MAIN_CAMPUS_ID

    @classmethod
    def from_config(cls, zones: Iterable[dict], *, default_zone_id: str = MAIN_CAMPUS_ID) -> "ZoneCatalog":
        parsed = {z.id: z for z in (CampusZone.from_dict(d) for d in zones)}
        if default_zone_id not in parsed:
            raise ValidationError(f"Default campus zone {default_zone_id!r} is not configured")
        return cls(zones=parsed, default_zone_id=default_zone_id)

    def get(self, zone_id: str) -> Optional[CampusZone]:
        return self.zones.get(zone_id)

    def resolve(self, *, registered: Optional[GeoPoint] = None, zone_id: Optional[str] = None) -> CampusZone:
        """Pick the zone a fix is checked against.

        An explicitly requested zone wins, then the student's registered
        location, then the default campus.
        """
        if zone_id:
            zone = self.get(zone_id)
            if not zone:
                raise ValidationError(f"Unknown campus zone: {zone_id}")
            return zone
        if registered is not None:
            return registered_location_zone(registered)
        return self.zones[self.default_zone_id]
