class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ProviderUnavailableError(DomainError):
    """Raised when the embedding model or geolocation source is not ready.

    Distinct from a failed verification: the caller should retry later.
    """


class VerificationFailedError(DomainError):
    """Raised when a verification signal does not meet its threshold."""


class AlreadyMarkedError(DomainError):
    """Raised when an attendance record already exists for the key."""

    def __init__(self, attendance_id: str):
        super().__init__("Attendance already marked for today")
        self.attendance_id = attendance_id


class StoreUnavailableError(DomainError):
    """Raised on transient store failures; safe to retry with the same key."""
