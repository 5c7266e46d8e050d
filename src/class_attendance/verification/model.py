from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import VerificationKind, VerificationStatus
from ..core.exceptions import ValidationError


def clamp_confidence(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of one location or face check within a marking attempt."""

    kind: VerificationKind
    status: VerificationStatus
    confidence: float
    captured_at: datetime
    detail: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValidationError(f"Confidence must be in [0, 1], got {self.confidence}")

    @classmethod
    def pending(cls, kind: VerificationKind, at: datetime) -> "VerificationOutcome":
        return cls(kind=kind, status=VerificationStatus.PENDING, confidence=0.0, captured_at=at)

    @classmethod
    def verified(cls, kind: VerificationKind, at: datetime, *, confidence: float, detail: Optional[str] = None):
        return cls(kind=kind, status=VerificationStatus.VERIFIED, confidence=clamp_confidence(confidence), captured_at=at, detail=detail)

    @classmethod
    def failed(cls, kind: VerificationKind, at: datetime, *, confidence: float = 0.0, detail: Optional[str] = None):
        return cls(kind=kind, status=VerificationStatus.FAILED, confidence=clamp_confidence(confidence), captured_at=at, detail=detail)

    @property
    def is_verified(self) -> bool:
        return self.status == VerificationStatus.VERIFIED

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "status": self.status.value,
            "confidence": self.confidence,
            "captured_at": self.captured_at.isoformat(),
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VerificationOutcome":
        return cls(
            kind=VerificationKind(data["kind"]),
            status=VerificationStatus(data["status"]),
            confidence=float(data["confidence"]),
            captured_at=datetime.fromisoformat(data["captured_at"]),
            detail=data.get("detail"),
        )
