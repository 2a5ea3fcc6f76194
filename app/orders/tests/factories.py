"""
Factory Boy factories for order test data.

OrderFactory builds the row only. Use OrderWithVendorFactory (or the
``place_order`` fixture, which goes through OrderLifecycleService) when a
test needs line items and a vendor breakdown.

Usage:
    from orders.tests.factories import OrderWithVendorFactory

    order = OrderWithVendorFactory(status=OrderStatus.DELIVERED)
    order.vendor_breakdown.get().earnings_cents  # 90000
"""

import uuid
from decimal import Decimal

import factory

from orders.models import (
    Coupon,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    VendorBreakdown,
)


class CouponFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Coupon

    code = factory.Sequence(lambda n: f"SAVE{n}")
    is_active = True
    usage_count = 0


class OrderFactory(factory.django.DjangoModelFactory):
    """
    Factory for Order.

    The status field is FSM-protected, so it can only be chosen at
    creation time.
    """

    class Meta:
        model = Order

    customer_id = factory.LazyFunction(uuid.uuid4)
    subtotal_cents = 100000
    total_cents = factory.LazyAttribute(lambda o: o.subtotal_cents)
    status = OrderStatus.PENDING
    payment_status = PaymentStatus.COMPLETED


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product_id = factory.LazyFunction(uuid.uuid4)
    vendor_id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Product {n}")
    quantity = 1
    unit_price_cents = 100000
    line_total_cents = factory.LazyAttribute(lambda o: o.quantity * o.unit_price_cents)


class VendorBreakdownFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = VendorBreakdown

    order = factory.SubFactory(OrderFactory)
    vendor_id = factory.LazyFunction(uuid.uuid4)
    position = 0
    subtotal_cents = 100000
    commission_rate = Decimal("0.1000")
    commission_cents = 10000


class OrderWithVendorFactory(OrderFactory):
    """
    Single-vendor order: one line item of 1000.00 and a breakdown entry
    with 10% commission (vendor earns 900.00).

    Pass ``vendor_id`` to choose the vendor.
    """

    class Params:
        vendor_id = factory.LazyFunction(uuid.uuid4)

    item = factory.RelatedFactory(
        OrderItemFactory,
        factory_related_name="order",
        vendor_id=factory.SelfAttribute("..vendor_id"),
        unit_price_cents=factory.SelfAttribute("..subtotal_cents"),
    )
    breakdown = factory.RelatedFactory(
        VendorBreakdownFactory,
        factory_related_name="order",
        vendor_id=factory.SelfAttribute("..vendor_id"),
        subtotal_cents=factory.SelfAttribute("..subtotal_cents"),
        commission_cents=factory.LazyAttribute(lambda o: o.subtotal_cents // 10),
    )
