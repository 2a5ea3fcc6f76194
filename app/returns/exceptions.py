"""Return-specific exceptions."""

from core.exceptions import NotFoundError, ValidationError


class ReturnRequestNotFoundError(NotFoundError):
    """Raised when a return id or code does not resolve."""

    default_error_code = "RETURN_NOT_FOUND"


class ReturnNotEligibleError(ValidationError):
    """
    Raised when a return is requested for an order that cannot be returned.

    The message is the eligibility reason (not delivered, window expired,
    existing return).
    """

    default_error_code = "RETURN_NOT_ELIGIBLE"
