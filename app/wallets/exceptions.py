"""
Wallet-specific exceptions.

The shared error kinds (InsufficientBalanceError, DuplicateRequestError,
AlreadyProcessedError) live in core.exceptions; this module adds the
wallet lookups that can fail.
"""

from core.exceptions import NotFoundError


class WalletNotFoundError(NotFoundError):
    """Raised when a wallet lookup that must not create finds nothing."""

    default_error_code = "WALLET_NOT_FOUND"


class WithdrawalNotFoundError(NotFoundError):
    """Raised when a withdrawal request id does not exist."""

    default_error_code = "WITHDRAWAL_NOT_FOUND"
