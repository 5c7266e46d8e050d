from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np

from .model import DetectedFace


class EmbeddingProvider(Protocol):
    """External face model: detection plus embedding extraction.

    `load()` must complete before the first `detect_faces()` call; a failed
    load raises ProviderUnavailableError and needs a new `load()`.
    """

    @property
    def is_loaded(self) -> bool:
        raise NotImplementedError

    def load(self) -> None:
        raise NotImplementedError

    def detect_faces(self, frame: np.ndarray) -> Sequence[DetectedFace]:
        raise NotImplementedError
