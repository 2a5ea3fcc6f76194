"""
Pytest fixtures for return tests.

Usage:
    def test_refund(delivered_order, auto_approve_policy, customer):
        ReturnService.create_return_request(customer.id, delivered_order.code, ...)
"""

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

import pytest
from freezegun import freeze_time

from orders.models import OrderStatus
from orders.tests.factories import OrderWithVendorFactory
from returns.models import ReturnPolicy

DELIVERED_AT = datetime(2026, 3, 1, 10, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def delivered_order(db, customer, vendor):
    """
    Order of one 1000.00 item from `vendor` to `customer`, delivered at
    DELIVERED_AT.
    """
    return OrderWithVendorFactory(
        customer_id=customer.id,
        vendor_id=vendor.id,
        status=OrderStatus.DELIVERED,
        delivered_at=DELIVERED_AT,
    )


@pytest.fixture
def make_delivered_order(db, customer, vendor):
    def _make(**kwargs):
        kwargs.setdefault("customer_id", customer.id)
        kwargs.setdefault("vendor_id", vendor.id)
        kwargs.setdefault("delivered_at", DELIVERED_AT)
        return OrderWithVendorFactory(status=OrderStatus.DELIVERED, **kwargs)

    return _make


@pytest.fixture
def auto_approve_policy(db):
    policy, _ = ReturnPolicy.objects.update_or_create(
        pk=1,
        defaults={
            "auto_approve_enabled": True,
            "auto_approve_max_amount_cents": None,
            "return_window_days": 7,
        },
    )
    return policy


@pytest.fixture
def within_window():
    """Freeze time one day after DELIVERED_AT."""
    with freeze_time(DELIVERED_AT + timedelta(days=1)):
        yield
