from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_LOCATION_TIMEOUT_SECONDS, DEFAULT_LOCATION_WORKERS
from ..core.enums import FaceImageKind, VerificationKind
from ..core.exceptions import ProviderUnavailableError, VerificationFailedError
from ..face.evaluator import FaceMatchEvaluator
from ..face.frames import decode_image
from ..face.model import FaceEmbedding
from ..geofence.evaluator import GeofenceEvaluator
from ..geofence.model import GeoPoint
from ..geofence.zones import ZoneCatalog
from ..storage.face_images import FaceImageStore
from .model import VerificationOutcome
from .session import VerificationSession
from .sources import FrameSource, GeolocationSource

logger = logging.getLogger(__name__)


class VerificationService:
    """Runs the location and face checks for a marking attempt.

    Evaluator failures (provider unavailable, threshold not met) end up as
    a `failed` outcome on the session; they are never raised to the caller.
    """

    def __init__(
        self,
        geofence: GeofenceEvaluator,
        faces: FaceMatchEvaluator,
        zones: ZoneCatalog,
        face_images: Optional[FaceImageStore] = None,
        *,
        location_timeout_seconds: float = DEFAULT_LOCATION_TIMEOUT_SECONDS,
        location_workers: int = DEFAULT_LOCATION_WORKERS,
        clock: Callable = now_local,
    ):
        self._geofence = geofence
        self._faces = faces
        self._zones = zones
        self._face_images = face_images
        self._location_timeout = float(location_timeout_seconds)
        self._clock = clock
        # A hung source can hold at most `location_workers` threads.
        self._location_pool = ThreadPoolExecutor(max_workers=location_workers, thread_name_prefix="geolocation")

    def _acquire_position(self, source: GeolocationSource) -> GeoPoint:
        future = self._location_pool.submit(source.get_current_position)
        try:
            return future.result(timeout=self._location_timeout)
        except FuturesTimeoutError:
            future.cancel()
            raise ProviderUnavailableError(f"Location request timed out after {self._location_timeout:g}s")

    def verify_location(
        self,
        session: VerificationSession,
        source: GeolocationSource,
        *,
        registered: Optional[GeoPoint] = None,
        zone_id: Optional[str] = None,
    ) -> VerificationOutcome:
        zone = self._zones.resolve(registered=registered, zone_id=zone_id)

        try:
            fix = self._acquire_position(source)
        except ProviderUnavailableError as e:
            logger.warning("Location check for %s failed: %s", session.student_id, e)
            outcome = VerificationOutcome.failed(VerificationKind.LOCATION, self._clock(), detail=str(e))
            session.record_location(outcome)
            return outcome

        now = self._clock()
        result = self._geofence.evaluate(fix, zone, now)
        logger.debug("Distance to %s: %.1fm (radius %.0fm)", zone.id, result.distance_meters, zone.radius_meters)

        if result.passed:
            outcome = VerificationOutcome.verified(VerificationKind.LOCATION, now, confidence=1.0, detail=f"Within {zone.name or zone.id}")
        elif not result.within_radius:
            outcome = VerificationOutcome.failed(
                VerificationKind.LOCATION,
                now,
                detail=f"Not within campus boundaries ({result.distance_meters:.0f}m from {zone.id})",
            )
        else:
            outcome = VerificationOutcome.failed(VerificationKind.LOCATION, now, detail="Outside allowed hours")

        session.record_location(outcome, fix)
        logger.info("Location %s for student=%s class=%s", outcome.status.value, session.student_id, session.class_id)
        return outcome

    def verify_face(
        self,
        session: VerificationSession,
        frames: FrameSource,
        reference: Optional[FaceEmbedding],
    ) -> VerificationOutcome:
        with frames.open() as camera:
            image = camera.capture()

        try:
            if reference is None:
                raise VerificationFailedError("No reference face registered for this student")
            check = self._faces.verify_identity(decode_image(image), reference)
            if not check.verified:
                raise VerificationFailedError(
                    "No single face detected" if check.confidence == 0.0 else "Face does not match the registered face"
                )
        except (ProviderUnavailableError, VerificationFailedError) as e:
            logger.warning("Face check for %s failed: %s", session.student_id, e)
            outcome = VerificationOutcome.failed(VerificationKind.FACE, self._clock(), detail=str(e))
            session.record_face(outcome)
            return outcome

        image_ref = None
        if self._face_images is not None:
            image_ref = self._face_images.upload_face_image(session.student_id, image, FaceImageKind.ATTENDANCE)

        outcome = VerificationOutcome.verified(VerificationKind.FACE, self._clock(), confidence=check.similarity)
        session.record_face(outcome, image_ref)
        logger.info("Face verified for student=%s class=%s", session.student_id, session.class_id)
        return outcome
