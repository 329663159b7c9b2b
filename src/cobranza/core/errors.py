"""Error taxonomy shared by services and the HTTP layer.

Services raise these exceptions; `cobranza.main` renders every one of them
into the JSON envelope ``{"error": {"code": ..., "message": ...}}``.
"""

from __future__ import annotations

from fastapi import status


class ApiError(Exception):
    """Base class for failures that map onto a stable API error code."""

    code: str = "INTERNAL_ERROR"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, dict[str, str]]:
        """Return the JSON error envelope for this failure."""
        return {"error": {"code": self.code, "message": self.message}}


class ValidationError(ApiError):
    """Malformed or missing input. The caller must fix it before resending."""

    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request payload"


class UnauthorizedError(ApiError):
    """Missing, invalid or expired credentials."""

    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class NotFoundError(ApiError):
    """A referenced entity does not exist."""

    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApiError):
    """Idempotency race whose original record could not be located."""

    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Duplicate request"


class TransientError(ApiError):
    """Lock timeout or deadlock. Safe to retry with the same idempotency key."""

    code = "TRANSIENT_ERROR"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Temporarily unavailable, retry with the same Idempotency-Key"
    retry_after_seconds = 1


class InternalError(ApiError):
    """Anything unexpected. Logged server side."""
