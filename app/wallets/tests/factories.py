"""
Factory Boy factories for wallet test data.

Usage:
    from wallets.tests.factories import VendorWalletFactory

    wallet = VendorWalletFactory(balance_cents=50000)
    wallet = VendorWalletFactory(pending_balance_cents=20000)
"""

import uuid

import factory

from wallets.models import CustomerWallet, VendorWallet, WithdrawalRequest


class VendorWalletFactory(factory.django.DjangoModelFactory):
    """
    Factory for VendorWallet.

    Balances are set directly; real code moves money only through
    VendorWalletService.
    """

    class Meta:
        model = VendorWallet

    vendor_id = factory.LazyFunction(uuid.uuid4)
    balance_cents = 0
    pending_balance_cents = 0
    total_withdrawn_cents = 0


class WithdrawalRequestFactory(factory.django.DjangoModelFactory):
    """Factory for a PENDING WithdrawalRequest."""

    class Meta:
        model = WithdrawalRequest

    vendor_id = factory.LazyFunction(uuid.uuid4)
    amount_cents = 10000
    payment_method = "bank_transfer"


class CustomerWalletFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = CustomerWallet

    customer_id = factory.LazyFunction(uuid.uuid4)
    balance_cents = 0
