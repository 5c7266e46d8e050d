from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..core.constants import DEFAULT_FACE_MATCH_THRESHOLD
from ..core.exceptions import ProviderUnavailableError, ValidationError
from .model import FaceComparison, FaceDetection, FaceEmbedding, IdentityCheck, as_embedding
from .provider import EmbeddingProvider

logger = logging.getLogger(__name__)


def euclidean_distance(a: FaceEmbedding, b: FaceEmbedding) -> float:
    a = as_embedding(a)
    b = as_embedding(b)
    if a.shape != b.shape:
        raise ValidationError(f"Embedding dimensions differ: {a.size} != {b.size}")
    return float(np.linalg.norm(a - b))


class FaceMatchEvaluator:
    """Turns provider embeddings into match decisions.

    similarity = 1 - euclidean distance; a match needs similarity strictly
    above the threshold. This is a heuristic, not a calibrated probability.
    """

    def __init__(self, provider: EmbeddingProvider, *, threshold: float = DEFAULT_FACE_MATCH_THRESHOLD):
        self._provider = provider
        self._threshold = float(threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    def compare(self, a: FaceEmbedding, b: FaceEmbedding, threshold: Optional[float] = None) -> FaceComparison:
        t = self._threshold if threshold is None else float(threshold)
        distance = euclidean_distance(a, b)
        similarity = 1.0 - distance
        return FaceComparison(distance=distance, similarity=similarity, is_match=similarity > t)

    def detect(self, frame: np.ndarray) -> FaceDetection:
        if not self._provider.is_loaded:
            raise ProviderUnavailableError("Face recognition model is not loaded")

        faces = list(self._provider.detect_faces(frame))
        if len(faces) != 1:
            # Only single-subject verification is supported.
            logger.debug("Face detection found %d faces", len(faces))
            return FaceDetection(found=False, confidence=0.0, faces_count=len(faces))

        face = faces[0]
        return FaceDetection(
            found=True,
            confidence=float(face.confidence),
            embedding=as_embedding(face.embedding),
            faces_count=1,
        )

    def verify_identity(self, frame: np.ndarray, reference: FaceEmbedding, threshold: Optional[float] = None) -> IdentityCheck:
        detection = self.detect(frame)
        if not detection.found or detection.embedding is None:
            return IdentityCheck(verified=False, confidence=0.0, similarity=0.0)

        comparison = self.compare(detection.embedding, reference, threshold)
        logger.debug("Face similarity %.3f (threshold %.2f)", comparison.similarity, self._threshold if threshold is None else threshold)
        return IdentityCheck(
            verified=comparison.is_match,
            confidence=detection.confidence,
            similarity=comparison.similarity,
        )
