from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from werkzeug.utils import safe_join

from ..core.exceptions import StoreUnavailableError, ValidationError

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    def upload(self, path: str, data: bytes) -> str:
        """Store bytes under `path` and return a retrieval URL."""
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    """Blob store on the local filesystem, served under `base_url`."""

    def __init__(self, root_dir: str | Path, *, base_url: str):
        self._root = Path(root_dir).resolve()
        self._base_url = base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        joined = safe_join(str(self._root), path)
        if joined is None:
            raise ValidationError(f"Invalid blob path: {path!r}")
        return Path(joined)

    def upload(self, path: str, data: bytes) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.warning("Blob upload failed for %s: %s", path, e)
            raise StoreUnavailableError("Could not store uploaded image") from e
        return f"{self._base_url}/{path}"

    def read(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()
