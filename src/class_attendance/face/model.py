from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from ..core.exceptions import ValidationError

# Fixed-length identity vector produced by the embedding provider.
FaceEmbedding = np.ndarray


def as_embedding(values: Union[Sequence[float], np.ndarray]) -> FaceEmbedding:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1 or arr.size == 0:
        raise ValidationError("Face embedding must be a non-empty 1-D vector")
    if not np.all(np.isfinite(arr)):
        raise ValidationError("Face embedding contains non-finite values")
    return arr


@dataclass(frozen=True)
class DetectedFace:
    """One face as reported by the embedding provider."""

    confidence: float
    embedding: FaceEmbedding


@dataclass(frozen=True)
class FaceDetection:
    found: bool
    confidence: float
    embedding: Optional[FaceEmbedding] = None
    faces_count: int = 0


@dataclass(frozen=True)
class FaceComparison:
    distance: float
    similarity: float
    is_match: bool


@dataclass(frozen=True)
class IdentityCheck:
    verified: bool
    confidence: float
    similarity: float
