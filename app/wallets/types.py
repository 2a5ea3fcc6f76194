"""
Data types for wallet operations.

Types:
    Money: Amount in minor units of the marketplace currency
    WalletStats: Platform-wide wallet totals for the admin dashboard
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from django.conf import settings


@dataclass(frozen=True)
class Money:
    """
    A monetary amount in minor units.

    The marketplace runs on a single currency (MARKETPLACE_CURRENCY);
    the currency code is carried for display only.

    Example:
        str(Money(cents=150050))  # "1500.50 INR"
    """

    cents: int
    currency: str = ""

    def __post_init__(self):
        if not self.currency:
            object.__setattr__(self, "currency", settings.MARKETPLACE_CURRENCY)

    def __str__(self) -> str:
        sign = "-" if self.cents < 0 else ""
        units, minor = divmod(abs(self.cents), 100)
        return f"{sign}{units}.{minor:02d} {self.currency.upper()}"


@dataclass
class WalletStats:
    """Aggregated vendor wallet figures."""

    wallet_count: int
    total_balance_cents: int
    total_pending_cents: int
    total_withdrawn_cents: int
    pending_withdrawal_count: int
    pending_withdrawal_cents: int

    def to_dict(self) -> dict:
        return asdict(self)
