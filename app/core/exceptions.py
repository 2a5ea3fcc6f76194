"""
Base exception classes for application-wide error handling.

This module provides the error taxonomy shared by every domain app:
- Stable, machine-readable error codes for client handling
- An HTTP status per error kind (consumed by core.exception_handler)
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Malformed input, business rule violations
    ├── NotFoundError - Resource not found
    ├── PermissionDeniedError - Authorization failures
    └── ConflictError - Request conflicts with current resource state
        ├── InvalidTransitionError - Status change not allowed for role
        ├── AlreadyProcessedError - Re-entrant refund/withdrawal/release
        ├── InsufficientBalanceError - Wallet cannot cover the amount
        ├── DuplicateRequestError - An open request already exists
        └── LockAcquisitionError - Distributed lock held elsewhere

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("At least one item is required")

    # Raise with error code and details
    raise InvalidTransitionError(
        "Cannot change status from delivered to pending",
        details={"current_status": "delivered", "new_status": "pending"},
    )

Note:
    Services raise these inside transaction.atomic() so the transaction is
    rolled back before the error reaches the caller. Conflict errors are
    reported as 400 to API clients.
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
        details: Additional error context (field errors, ids, amounts)
        status_code: HTTP status used when the error reaches the API layer
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

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
                "success": False,
                "message": "Order not found",
                "error_code": "NOT_FOUND",
                "details": {"order": "ORD-1700000000000-1234"}
            }
        """
        result: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
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
    Raised when input validation fails.

    Use for:
    - Empty or malformed item lists
    - Non-positive amounts
    - Unknown status values

    Note:
        For DRF serializer validation, use DRF's built-in validation.
        Use this for service-layer validation logic.
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """Raised when a requested order, wallet or request does not exist."""

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the actor may not perform an operation.

    Note:
        For authentication failures (missing/invalid token), DRF's
        NotAuthenticated is raised instead and reported as 401.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Invalid state transitions
    - Re-processing something already processed
    - Duplicate open requests
    """

    default_error_code: str = "CONFLICT"


class InvalidTransitionError(ConflictError):
    """Raised when (current status -> new status) is not allowed for the role."""

    default_error_code: str = "INVALID_TRANSITION"


class AlreadyProcessedError(ConflictError):
    """Raised on re-entrant refund processing or withdrawal resolution."""

    default_error_code: str = "ALREADY_PROCESSED"


class InsufficientBalanceError(ConflictError):
    """Raised when a wallet balance cannot cover the requested amount."""

    default_error_code: str = "INSUFFICIENT_BALANCE"


class DuplicateRequestError(ConflictError):
    """Raised when an open request of the same kind already exists."""

    default_error_code: str = "DUPLICATE_REQUEST"


class LockAcquisitionError(ConflictError):
    """Raised when a distributed lock is already held by another worker."""

    default_error_code: str = "LOCK_HELD"
