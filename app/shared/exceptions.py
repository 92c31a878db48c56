"""Domain error taxonomy

Services raise these; the handlers registered in main.py turn them into JSON
responses carrying a machine-checkable ``code`` next to the human ``detail``.
"""

from typing import Any, Optional


class BookingEngineError(Exception):
    """Base class for errors surfaced synchronously to the caller"""

    code = "error"
    status_code = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"detail": self.message, "code": self.code}
        body.update(self.extra)
        return body


class ValidationError(BookingEngineError):
    """Malformed or missing input, rejected before any state change"""

    code = "validation_error"
    status_code = 422


class BookingConflictError(BookingEngineError):
    """The requested dates overlap an existing booking on the same media unit"""

    code = "booking_conflict"
    status_code = 409

    def __init__(self, conflicting_booking_id: int, conflicting_booking_ref: Optional[str] = None):
        label = conflicting_booking_ref or f"#{conflicting_booking_id}"
        super().__init__(
            f"Media is already booked for the selected dates (conflicts with booking {label})",
            conflicting_booking_id=conflicting_booking_id,
            conflicting_booking_ref=conflicting_booking_ref,
        )
        self.conflicting_booking_id = conflicting_booking_id
        self.conflicting_booking_ref = conflicting_booking_ref


class StaleWriteError(BookingEngineError):
    """Optimistic-lock version mismatch - reload and retry"""

    code = "stale_write"
    status_code = 409

    def __init__(self, entity: str, entity_id: int, current_version: Optional[int] = None):
        super().__init__(
            f"{entity} {entity_id} was modified by someone else. Reload and try again.",
            entity=entity,
            entity_id=entity_id,
            current_version=current_version,
        )
        self.current_version = current_version


class NotFoundError(BookingEngineError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} not found", entity=entity, entity_id=entity_id)


class PermissionDeniedError(BookingEngineError):
    code = "forbidden"
    status_code = 403


class CascadeFailure(BookingEngineError):
    """A post-commit follow-up step failed. Logged, never returned to callers."""

    code = "cascade_failure"
    status_code = 500

    def __init__(self, step: str, subject: str, cause: Exception):
        super().__init__(f"Follow-up step '{step}' failed for {subject}: {cause}")
        self.step = step
        self.subject = subject
        self.cause = cause
