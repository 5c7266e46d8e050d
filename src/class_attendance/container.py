from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceMarker
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .common.datetime_utils import now_local
from .core.constants import (
    DEFAULT_FACE_MATCH_THRESHOLD,
    DEFAULT_LOCATION_TIMEOUT_SECONDS,
    DEFAULT_LOCATION_WORKERS,
    DEFAULT_VERIFICATION_MAX_AGE_SECONDS,
)
from .database.connection import DatabaseConnection, DBConfig
from .face.evaluator import FaceMatchEvaluator
from .face.provider import EmbeddingProvider
from .geofence.evaluator import GeofenceEvaluator
from .geofence.zones import ZoneCatalog
from .reports.service import AttendanceReportService
from .storage.blob_store import BlobStore, LocalBlobStore
from .storage.face_images import FaceImageStore
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import FaceEnrollmentService
from .verification.service import VerificationService


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    users_repo: UserRepository
    classes_repo: ClassRepository
    embedding_provider: EmbeddingProvider
    blob_store: Optional[BlobStore]

    verification_service: VerificationService
    attendance_marker: AttendanceMarker
    report_service: AttendanceReportService
    class_service: ClassService
    enrollment_service: FaceEnrollmentService

    verification_max_age_seconds: Optional[int]
    clock: Callable
    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    attendance_repo: AttendanceRepository,
    users_repo: UserRepository,
    classes_repo: ClassRepository,
    embedding_provider: EmbeddingProvider,
    settings: object,
    blob_store: Optional[BlobStore] = None,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable = now_local,
) -> Container:
    zones = ZoneCatalog.from_config(getattr(settings, "CAMPUS_ZONES"))
    face_matcher = FaceMatchEvaluator(
        embedding_provider,
        threshold=float(getattr(settings, "FACE_MATCH_THRESHOLD", DEFAULT_FACE_MATCH_THRESHOLD)),
    )
    face_images = FaceImageStore(blob_store, clock=clock) if blob_store is not None else None

    verification_service = VerificationService(
        GeofenceEvaluator(),
        face_matcher,
        zones,
        face_images,
        location_timeout_seconds=float(getattr(settings, "LOCATION_TIMEOUT_SECONDS", DEFAULT_LOCATION_TIMEOUT_SECONDS)),
        location_workers=int(getattr(settings, "LOCATION_WORKERS", DEFAULT_LOCATION_WORKERS)),
        clock=clock,
    )
    attendance_marker = AttendanceMarker(attendance_repo, strategy_factory=AttendanceStrategyFactory(), clock=clock)

    return Container(
        attendance_repo=attendance_repo,
        users_repo=users_repo,
        classes_repo=classes_repo,
        embedding_provider=embedding_provider,
        blob_store=blob_store,
        verification_service=verification_service,
        attendance_marker=attendance_marker,
        report_service=AttendanceReportService(attendance_repo),
        class_service=ClassService(classes_repo, users_repo, clock=clock),
        enrollment_service=FaceEnrollmentService(users_repo, face_matcher, face_images),
        verification_max_age_seconds=getattr(settings, "VERIFICATION_MAX_AGE_SECONDS", DEFAULT_VERIFICATION_MAX_AGE_SECONDS),
        clock=clock,
        conn=conn,
    )


def build_container(*, settings: object, embedding_provider: Optional[EmbeddingProvider] = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))

    if embedding_provider is None:
        # dlib models are heavy; only pulled in when no provider is injected.
        from .face.face_recognition_provider import FaceRecognitionProvider

        embedding_provider = FaceRecognitionProvider()

    return build_services(
        attendance_repo=MySQLAttendanceRepository(conn),
        users_repo=MySQLUserRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        embedding_provider=embedding_provider,
        settings=settings,
        blob_store=LocalBlobStore(getattr(settings, "UPLOAD_DIR"), base_url=getattr(settings, "UPLOAD_BASE_URL", "/uploads")),
        conn=conn,
    )
