"""
Custom exception hierarchy for proper error categorization and HTTP status mapping.

Every error that leaves the service is rendered as ``{"error": message}`` by the
global handlers in ``preflight.api.errors``. The hierarchy keeps the distinction between:
- User errors (400-level): client sent bad data or lacks permission
- Server errors (500-level): our infrastructure or configuration failed

Usage:
    from preflight.core.exceptions import ConflictError, NotFoundError

    raise NotFoundError("Feedback not found.", feedback_id=feedback_id)
    raise ConflictError("Intake event already linked.", feedback_id=existing)
"""

from typing import Any


class AppError(Exception):
    """
    Base application error with HTTP status mapping.

    All custom exceptions inherit from this to enable consistent error handling.
    """

    # Default status code (subclasses override)
    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, **context: Any):
        """
        Initialize error with message and optional context.

        Args:
            message: Human-readable error description
            **context: Additional key-value pairs for logging (e.g., feedback_id)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for structured logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "status_code": self.status_code,
            **self.context,
        }

    def to_response(self) -> dict[str, Any]:
        """JSON body returned to the client."""
        body: dict[str, Any] = {"error": self.message}
        # Conflicts expose the record they collided with
        if "feedback_id" in self.context and self.status_code == 409:
            body["feedback_id"] = self.context["feedback_id"]
        return body


# ===== 400-level: Client Errors =====


class ValidationError(AppError):
    """User provided invalid input (e.g., missing subject, bad status)."""

    status_code = 400
    error_type = "validation_error"


class AuthenticationError(AppError):
    """Authentication failed (e.g., missing or expired token)."""

    status_code = 401
    error_type = "authentication_error"


class AuthorizationError(AppError):
    """User lacks permission for requested resource."""

    status_code = 403
    error_type = "authorization_error"


class NotFoundError(AppError):
    """Requested resource does not exist."""

    status_code = 404
    error_type = "not_found_error"


class ConflictError(AppError):
    """Request conflicts with current state (e.g., intake event already linked)."""

    status_code = 409
    error_type = "conflict_error"


class PayloadTooLargeError(AppError):
    """Uploaded payload exceeds the configured size limit."""

    status_code = 413
    error_type = "payload_too_large"


class UnsupportedMediaTypeError(AppError):
    """Uploaded payload has a content type we do not accept."""

    status_code = 415
    error_type = "unsupported_media_type"


class RateLimitError(AppError):
    """User exceeded rate limit."""

    status_code = 429
    error_type = "rate_limit_error"


# ===== 500-level: Server Errors =====


class DatabaseError(AppError):
    """
    Database operation failed (connection, query, missing collections).

    Maps to 500 Internal Server Error (our infrastructure problem).
    """

    status_code = 500
    error_type = "database_error"


class ConfigurationError(AppError):
    """
    Application misconfigured (e.g., missing env vars, invalid settings).

    Raised at startup or when a request needs an unconfigured collaborator.
    """

    status_code = 500
    error_type = "configuration_error"


class StorageError(AppError):
    """Cloud storage (OSS) operation failed."""

    status_code = 500
    error_type = "storage_error"
