from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Iterator, Optional, Protocol

from ..core.exceptions import ProviderUnavailableError
from ..geofence.model import GeoPoint


class GeolocationSource(Protocol):
    def get_current_position(self) -> GeoPoint:
        """Return the current fix or raise ProviderUnavailableError."""
        raise NotImplementedError


class Camera(Protocol):
    def capture(self) -> bytes:
        raise NotImplementedError


class FrameSource(Protocol):
    def open(self) -> ContextManager[Camera]:
        """Acquire the camera; released when the context exits."""
        raise NotImplementedError


class ClientGeolocation:
    """Fix reported by the browser, or the error it reported instead."""

    def __init__(self, point: Optional[GeoPoint], *, error: Optional[str] = None):
        self._point = point
        self._error = error

    def get_current_position(self) -> GeoPoint:
        if self._error or self._point is None:
            raise ProviderUnavailableError(f"Location unavailable: {self._error or 'no fix'}")
        return self._point


class _StillCamera:
    def __init__(self, data: bytes):
        self._data = data

    def capture(self) -> bytes:
        return self._data


class UploadedFrameSource:
    """Frame captured client-side and uploaded with the request."""

    def __init__(self, data: bytes):
        self._data = data
        self.is_open = False

    @contextmanager
    def open(self) -> Iterator[Camera]:
        self.is_open = True
        try:
            yield _StillCamera(self._data)
        finally:
            self.is_open = False
