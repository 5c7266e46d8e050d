from __future__ import annotations

from typing import Optional, Protocol

from .model import ClassInfo


class ClassRepository(Protocol):
    def get_by_id(self, class_id: str) -> Optional[ClassInfo]:
        raise NotImplementedError
