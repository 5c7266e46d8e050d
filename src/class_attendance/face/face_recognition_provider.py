from __future__ import annotations

import logging
import math
from typing import Sequence

import face_recognition
import numpy as np

from ..core.exceptions import ProviderUnavailableError
from .model import DetectedFace

logger = logging.getLogger(__name__)


def _score_to_confidence(score: float) -> float:
    # dlib HOG scores are SVM margins; squash into [0, 1].
    return 1.0 / (1.0 + math.exp(-float(score)))


class FaceRecognitionProvider:
    """Embedding provider backed by the `face_recognition` (dlib) models."""

    def __init__(self, *, upsample_times: int = 1, num_jitters: int = 1, model: str = "small"):
        self._upsample_times = int(upsample_times)
        self._num_jitters = int(num_jitters)
        self._model = model
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load(self) -> None:
        try:
            # Warm-up pass forces the dlib models to be read from disk.
            face_recognition.face_encodings(np.zeros((32, 32, 3), dtype=np.uint8))
        except (RuntimeError, OSError) as e:
            self._loaded = False
            logger.warning("Face recognition model failed to load: %s", e)
            raise ProviderUnavailableError("Face recognition model could not be loaded") from e
        self._loaded = True
        logger.info("Face recognition model loaded")

    def detect_faces(self, frame: np.ndarray) -> Sequence[DetectedFace]:
        if not self._loaded:
            raise ProviderUnavailableError("Face recognition model is not loaded")

        height, width = frame.shape[:2]
        rects, scores, _ = face_recognition.api.face_detector.run(frame, self._upsample_times, 0)
        locations = [
            (max(r.top(), 0), min(r.right(), width), min(r.bottom(), height), max(r.left(), 0))
            for r in rects
        ]
        if not locations:
            return []

        encodings = face_recognition.face_encodings(
            frame,
            known_face_locations=locations,
            num_jitters=self._num_jitters,
            model=self._model,
        )
        return [
            DetectedFace(confidence=_score_to_confidence(score), embedding=np.asarray(enc, dtype=np.float64))
            for score, enc in zip(scores, encodings)
        ]
