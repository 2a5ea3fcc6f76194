"""
Pytest fixtures for order tests.

Usage:
    def test_deliver(place_order, vendor, admin_actor):
        order = place_order(vendor_ids=[vendor.id])
        OrderLifecycleService.change_status(order.code, "delivered", admin_actor)
"""

import uuid

import pytest

from orders.models import PaymentStatus
from orders.services import OrderLifecycleService


@pytest.fixture
def place_order(db, customer, vendor):
    """
    Place an order through the service.

    By default: the `customer` actor buys one item of 1000.00 from the
    `vendor` actor, already paid online.
    """

    def _place(
        customer_id=None,
        vendor_ids=None,
        unit_price_cents=100000,
        quantity=1,
        payment_status=PaymentStatus.COMPLETED,
        **kwargs,
    ):
        items = [
            {
                "product_id": uuid.uuid4(),
                "vendor_id": vendor_id,
                "name": f"Item {index}",
                "quantity": quantity,
                "unit_price_cents": unit_price_cents,
            }
            for index, vendor_id in enumerate(vendor_ids or [vendor.id])
        ]
        return OrderLifecycleService.create_order(
            customer_id=customer_id or customer.id,
            items=items,
            payment_status=payment_status,
            **kwargs,
        )

    return _place


@pytest.fixture
def hold_policy(settings):
    settings.MARKETPLACE_SETTLEMENT_POLICY = "hold"


@pytest.fixture
def direct_policy(settings):
    settings.MARKETPLACE_SETTLEMENT_POLICY = "direct"
