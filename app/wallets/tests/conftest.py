"""
Pytest fixtures for wallet tests.
"""

import pytest

from wallets.tests.factories import CustomerWalletFactory, VendorWalletFactory


@pytest.fixture
def vendor_wallet(db, vendor):
    """Empty wallet owned by the `vendor` actor."""
    return VendorWalletFactory(vendor_id=vendor.id)


@pytest.fixture
def funded_vendor_wallet(db, vendor):
    """Wallet with 500.00 available."""
    return VendorWalletFactory(vendor_id=vendor.id, balance_cents=50000)


@pytest.fixture
def customer_wallet(db, customer):
    return CustomerWalletFactory(customer_id=customer.id)
