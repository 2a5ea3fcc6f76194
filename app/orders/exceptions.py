"""Order-specific exceptions."""

from core.exceptions import NotFoundError


class OrderNotFoundError(NotFoundError):
    """Raised when an order id or code does not resolve."""

    default_error_code = "ORDER_NOT_FOUND"


class CouponNotFoundError(NotFoundError):
    """Raised when a coupon code is unknown or inactive."""

    default_error_code = "COUPON_NOT_FOUND"
