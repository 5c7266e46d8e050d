from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_VERIFICATION_MAX_AGE_SECONDS
from ..core.enums import VerificationKind
from ..core.exceptions import ValidationError
from ..geofence.model import GeoPoint
from .model import VerificationOutcome


class VerificationSession:
    """State of one student's marking attempt for one class.

    Holds the latest location and face outcomes plus the artifacts captured
    with them. Either check may run first or be retried; a retry replaces
    only its own outcome.
    """

    def __init__(
        self,
        *,
        student_id: str,
        class_id: str,
        started_at: datetime,
        max_age_seconds: Optional[int] = DEFAULT_VERIFICATION_MAX_AGE_SECONDS,
    ):
        self.student_id = student_id
        self.class_id = class_id
        self.max_age_seconds = max_age_seconds
        self._location = VerificationOutcome.pending(VerificationKind.LOCATION, started_at)
        self._face = VerificationOutcome.pending(VerificationKind.FACE, started_at)
        self.location_fix: Optional[GeoPoint] = None
        self.captured_image_ref: Optional[str] = None

    @property
    def location_outcome(self) -> VerificationOutcome:
        return self._location

    @property
    def face_outcome(self) -> VerificationOutcome:
        return self._face

    def record_location(self, outcome: VerificationOutcome, fix: Optional[GeoPoint] = None) -> None:
        if outcome.kind != VerificationKind.LOCATION:
            raise ValidationError("Expected a location outcome")
        self._location = outcome
        self.location_fix = fix

    def record_face(self, outcome: VerificationOutcome, image_ref: Optional[str] = None) -> None:
        if outcome.kind != VerificationKind.FACE:
            raise ValidationError("Expected a face outcome")
        self._face = outcome
        self.captured_image_ref = image_ref if outcome.is_verified else None

    def is_stale(self, outcome: VerificationOutcome, now: datetime) -> bool:
        if self.max_age_seconds is None:
            return False
        return now - outcome.captured_at > timedelta(seconds=self.max_age_seconds)

    def can_mark(self, now: datetime) -> bool:
        """Both checks verified and neither older than the staleness bound."""
        for outcome in (self._location, self._face):
            if not outcome.is_verified or self.is_stale(outcome, now):
                return False
        return True

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "class_id": self.class_id,
            "max_age_seconds": self.max_age_seconds,
            "location": self._location.to_dict(),
            "face": self._face.to_dict(),
            "location_fix": self.location_fix.to_dict() if self.location_fix else None,
            "captured_image_ref": self.captured_image_ref,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VerificationSession":
        location = VerificationOutcome.from_dict(data["location"])
        session = cls(
            student_id=data["student_id"],
            class_id=data["class_id"],
            started_at=location.captured_at,
            max_age_seconds=data.get("max_age_seconds"),
        )
        fix = data.get("location_fix")
        session.record_location(location, GeoPoint.from_values(fix["lat"], fix["lng"]) if fix else None)
        session.record_face(VerificationOutcome.from_dict(data["face"]), data.get("captured_image_ref"))
        return session
