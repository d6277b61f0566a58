"""
Base exception classes for application-wide error handling.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (422)
    ├── NotFoundError - Resource not found or not owned by the caller (404)
    ├── PermissionDeniedError - Authorization failures (403)
    ├── ConflictError - State conflicts (409)
    │   └── ConcurrencyConflictError - Lost a race on a locked row or lock key
    └── ExternalServiceError - Collaborator failures (502)

Usage:
    from core.exceptions import ValidationError, NotFoundError

    raise ValidationError("Reason is required", error_code="REASON_REQUIRED")

    raise NotFoundError(
        f"Order {order_id} not found",
        error_code="ORDER_NOT_FOUND",
        details={"order_id": str(order_id)},
    )

Note:
    These exceptions are for domain/business logic errors. They are turned
    into HTTP responses by core.exception_handler, using ``http_status``.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        http_status: Status code used when the error reaches the API layer
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Return 42 not found",
                "error_code": "RETURN_NOT_FOUND",
                "details": {"return_id": "42"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation or a business rule fails.

    Use this for service-layer validation. For request body shape, rely on
    DRF serializer validation.
    """

    default_error_code: str = "VALIDATION_ERROR"
    http_status: int = 422


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Also used when the resource exists but belongs to someone else, so that
    callers cannot probe for other users' records.
    """

    default_error_code: str = "NOT_FOUND"
    http_status: int = 404


class PermissionDeniedError(BaseApplicationError):
    """Raised when the caller lacks the role or ownership for an operation."""

    default_error_code: str = "PERMISSION_DENIED"
    http_status: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Unique constraint violations
    - Invalid state transitions
    - Optimistic locking failures
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409


class ConcurrencyConflictError(ConflictError):
    """
    Raised when a row lock or distributed lock could not be obtained, or a
    version check failed because another writer got there first.

    Service entry points decorated with core.decorators.retry_on_conflict
    retry once before letting this reach the caller.
    """

    default_error_code: str = "CONCURRENCY_CONFLICT"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when a collaborator call fails (wallet, notification transport).

    Log the original error for debugging but don't expose internal details
    to clients.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    http_status: int = 502
