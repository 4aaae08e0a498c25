"""
Platform-wide exception hierarchy.

Services raise these; blueprints register handlers against them once (see
facilities.blueprints.register_error_handlers) and get consistent HTTP status
codes everywhere:

    ValidationError      → 400
    AuthenticationError  → 401
    ForbiddenError       → 403
    NotFoundError        → 404
    ConflictError        → 409
    PersistenceError     → 500

Usage:
    from facilities.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="PPMSchedule", resource_id=42)
    raise ValidationError("name is required", details={"name": "required"})
"""


class NotFoundError(Exception):
    """Raised when a referenced resource does not exist.

    Args:
        resource: Human-readable model/entity name (e.g. "PPMSchedule", "Employee").
        resource_id: The key that was looked up. Included in logs and the message.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input is missing, malformed, or names an invalid enumerated value.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
                 Keys are field names; values are error descriptions.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(Exception):
    """Raised when a request carries no valid session."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ForbiddenError(Exception):
    """Raised when the session's role is below what the operation needs."""

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)


class ConflictError(Exception):
    """Raised when a write would violate a unique or FK constraint.

    Args:
        resource: Model name.
        field: The constrained field, when known.
    """

    def __init__(self, resource: str, field: str | None = None) -> None:
        self.resource = resource
        self.field = field
        msg = f"{resource} violates a constraint"
        if field:
            msg += f" on {field}"
        super().__init__(msg)


class PersistenceError(Exception):
    """Raised when the relational store rejects or fails a write.

    The original driver exception is chained (``raise ... from exc``) so it
    reaches the logs; the HTTP response only carries a generic message.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Database error during {operation}")
