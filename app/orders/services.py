"""
Order lifecycle service.

OrderLifecycleService is the only code that creates orders or changes
their status. A status change is validated against the role transition
table (orders.transitions) before anything is written; the order row is
then locked and every side effect (history, cancellation refund,
delivery settlement) is committed in the same transaction. Notifications
are sent after commit.

Usage:
    from core.actors import Actor, ActorRole
    from orders.services import OrderLifecycleService

    vendor = Actor(id=vendor_id, role=ActorRole.VENDOR)
    order = OrderLifecycleService.change_status(
        "ORD-1718000000000-4821", "delivered", vendor
    )
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from core.actors import Actor, ActorRole
from core.exceptions import (
    InvalidTransitionError,
    PermissionDeniedError,
    ValidationError,
)
from core.helpers import lookup_by_id_or_code
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService
from wallets.models import ReferenceType
from wallets.services import CustomerWalletService

from orders.exceptions import CouponNotFoundError, OrderNotFoundError
from orders.models import (
    CancellationRefundStatus,
    CancellationRequest,
    CancellationResolution,
    Coupon,
    Order,
    OrderItem,
    OrderStatus,
    OrderStatusHistory,
    OrderTransaction,
    OrderTransactionStatus,
    OrderTransactionType,
    PaymentMethod,
    PaymentStatus,
    VendorBreakdown,
)
from orders.settlement import SettlementService
from orders.transitions import CANCELLABLE_STATUSES, can_transition

if TYPE_CHECKING:
    from django.db.models import QuerySet

logger = logging.getLogger(__name__)


STATUS_TITLES = {
    OrderStatus.PROCESSING: "Order Processing",
    OrderStatus.READY_TO_SHIP: "Order Ready to Ship",
    OrderStatus.DISPATCHED: "Order Dispatched",
    OrderStatus.SHIPPED_SELLER: "Order Shipped",
    OrderStatus.SHIPPED: "Order Shipped",
    OrderStatus.DELIVERED: "Order Delivered",
    OrderStatus.CANCELLED: "Order Cancelled",
    OrderStatus.ON_HOLD: "Order On Hold",
}

STATUS_MESSAGES = {
    OrderStatus.PROCESSING: "Your order is being processed",
    OrderStatus.READY_TO_SHIP: "Your order is ready to ship",
    OrderStatus.DISPATCHED: "Your order has been dispatched",
    OrderStatus.SHIPPED_SELLER: "Your order has been shipped",
    OrderStatus.SHIPPED: "Your order has been shipped",
    OrderStatus.DELIVERED: "Your order has been delivered",
    OrderStatus.CANCELLED: "Your order has been cancelled",
    OrderStatus.ON_HOLD: "Your order is on hold",
}


def _to_cents(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{field_name} must be an integer number of minor units",
            details={field_name: repr(value)},
        )
    if value < 0:
        raise ValidationError(
            f"{field_name} cannot be negative",
            details={field_name: value},
        )
    return value


def _commission_rate(rate) -> Decimal:
    if rate is None:
        rate = getattr(settings, "MARKETPLACE_COMMISSION_RATE", Decimal("0.10"))
    try:
        rate = Decimal(str(rate))
    except InvalidOperation as e:
        raise ValidationError("Invalid commission rate", details={"rate": str(rate)}) from e
    if rate < 0 or rate > 1:
        raise ValidationError(
            "Commission rate must be between 0 and 1",
            details={"rate": str(rate)},
        )
    return rate


def _split(amount: int, weights: list[int]) -> list[int]:
    """
    Split amount in proportion to weights. The last share takes the
    rounding remainder so the shares always sum to amount.
    """
    total_weight = sum(weights)
    if not amount or not total_weight:
        return [0] * len(weights)
    shares = [amount * w // total_weight for w in weights[:-1]]
    shares.append(amount - sum(shares))
    return shares


class OrderLifecycleService(BaseService):
    """
    Order creation and role-gated status changes.

    Methods:
        create_order: Checkout (line items, vendor breakdown, payment record)
        change_status: Role-checked transition with its side effects
        request_cancellation: Customer asks to cancel (no money moves)
        get_order: Resolve an order by id or code
    """

    # =========================================================================
    # Lookup
    # =========================================================================

    @staticmethod
    def get_order(order_ref) -> Order:
        order = lookup_by_id_or_code(Order.objects.all(), order_ref)
        if order is None:
            raise OrderNotFoundError(
                "Order not found",
                details={"order": str(order_ref)},
            )
        return order

    @classmethod
    def _lock_order(cls, order_ref) -> Order:
        order = lookup_by_id_or_code(Order.objects.select_for_update(), order_ref)
        if order is None:
            raise OrderNotFoundError(
                "Order not found",
                details={"order": str(order_ref)},
            )
        return order

    @classmethod
    def get_order_for(cls, order_ref, actor: Actor) -> Order:
        """get_order() restricted to orders the actor takes part in."""
        order = cls.get_order(order_ref)
        cls._check_scope(order, actor)
        return order

    @classmethod
    def list_for(cls, actor: Actor) -> QuerySet[Order]:
        if actor.role == ActorRole.USER:
            return cls.list_for_customer(actor.id)
        if actor.role == ActorRole.VENDOR:
            return cls.list_for_vendor(actor.id)
        return Order.objects.order_by("-created_at")

    @staticmethod
    def list_for_customer(customer_id: uuid.UUID) -> QuerySet[Order]:
        return Order.objects.filter(customer_id=customer_id).order_by("-created_at")

    @staticmethod
    def list_for_vendor(vendor_id: uuid.UUID) -> QuerySet[Order]:
        return (
            Order.objects.filter(vendor_breakdown__vendor_id=vendor_id)
            .distinct()
            .order_by("-created_at")
        )

    @staticmethod
    def vendor_ids(order: Order) -> list[uuid.UUID]:
        return list(order.vendor_breakdown.values_list("vendor_id", flat=True))

    # =========================================================================
    # Checkout
    # =========================================================================

    @classmethod
    def create_order(
        cls,
        customer_id: uuid.UUID,
        items: Iterable[Mapping],
        payment_status: str = PaymentStatus.PENDING,
        payment_method: str = PaymentMethod.ONLINE,
        coupon_code: str | None = None,
        shipping_cents: int = 0,
        tax_cents: int = 0,
        discount_cents: int = 0,
        commission_rate=None,
    ) -> Order:
        """
        Place an order.

        Each item is a mapping with product_id, vendor_id, quantity,
        unit_price_cents and optionally name. Paying with the wallet debits
        the customer wallet and marks the order paid.

        Raises:
            ValidationError: Empty item list, bad quantities/prices/amounts
            CouponNotFoundError: Unknown or inactive coupon code
            InsufficientBalanceError: Wallet payment the wallet cannot cover
        """
        items = list(items or [])
        if not items:
            raise ValidationError("At least one item is required")

        if payment_status not in PaymentStatus.values:
            raise ValidationError(
                "Invalid payment status",
                details={"payment_status": payment_status},
            )
        if payment_method not in PaymentMethod.values:
            raise ValidationError(
                "Invalid payment method",
                details={"payment_method": payment_method},
            )

        shipping_cents = _to_cents(shipping_cents, "shipping_cents")
        tax_cents = _to_cents(tax_cents, "tax_cents")
        discount_cents = _to_cents(discount_cents, "discount_cents")
        rate = _commission_rate(commission_rate)

        lines = []
        vendor_subtotals: dict[uuid.UUID, int] = {}
        for index, item in enumerate(items):
            try:
                product_id = uuid.UUID(str(item["product_id"]))
                vendor_id = uuid.UUID(str(item["vendor_id"]))
                quantity = item["quantity"]
                unit_price = item["unit_price_cents"]
            except (KeyError, ValueError, TypeError) as e:
                raise ValidationError(
                    "Each item needs product_id, vendor_id, quantity and unit_price_cents",
                    details={"item": index},
                ) from e

            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise ValidationError(
                    "Quantity must be a positive integer",
                    details={"item": index, "quantity": repr(quantity)},
                )
            if isinstance(unit_price, bool) or not isinstance(unit_price, int) or unit_price <= 0:
                raise ValidationError(
                    "Unit price must be a positive integer",
                    details={"item": index, "unit_price_cents": repr(unit_price)},
                )

            line_total = quantity * unit_price
            lines.append(
                {
                    "product_id": product_id,
                    "vendor_id": vendor_id,
                    "name": str(item.get("name") or ""),
                    "quantity": quantity,
                    "unit_price_cents": unit_price,
                    "line_total_cents": line_total,
                }
            )
            vendor_subtotals[vendor_id] = vendor_subtotals.get(vendor_id, 0) + line_total

        subtotal = sum(vendor_subtotals.values())
        total = subtotal + shipping_cents + tax_cents - discount_cents
        if total < 0:
            raise ValidationError(
                "Discount exceeds order amount",
                details={"subtotal_cents": subtotal, "discount_cents": discount_cents},
            )

        with cls.atomic():
            coupon = None
            if coupon_code:
                coupon = (
                    Coupon.objects.select_for_update()
                    .filter(code=coupon_code, is_active=True)
                    .first()
                )
                if coupon is None:
                    raise CouponNotFoundError(
                        "Coupon not found",
                        details={"coupon_code": coupon_code},
                    )
                coupon.usage_count = F("usage_count") + 1
                coupon.save(update_fields=["usage_count", "updated_at"])

            order = Order.objects.create(
                customer_id=customer_id,
                coupon=coupon,
                subtotal_cents=subtotal,
                shipping_cents=shipping_cents,
                tax_cents=tax_cents,
                discount_cents=discount_cents,
                total_cents=total,
                payment_status=payment_status,
                payment_method=payment_method,
            )

            OrderItem.objects.bulk_create(
                [OrderItem(order=order, **line) for line in lines]
            )

            vendors = list(vendor_subtotals)
            weights = [vendor_subtotals[v] for v in vendors]
            shipping_split = _split(shipping_cents, weights)
            tax_split = _split(tax_cents, weights)
            discount_split = _split(discount_cents, weights)
            VendorBreakdown.objects.bulk_create(
                [
                    VendorBreakdown(
                        order=order,
                        vendor_id=vendor_id,
                        position=position,
                        subtotal_cents=vendor_subtotals[vendor_id],
                        shipping_cents=shipping_split[position],
                        tax_cents=tax_split[position],
                        discount_cents=discount_split[position],
                        commission_rate=rate,
                        commission_cents=int(
                            (Decimal(vendor_subtotals[vendor_id]) * rate).quantize(
                                Decimal("1"), rounding=ROUND_HALF_UP
                            )
                        ),
                    )
                    for position, vendor_id in enumerate(vendors)
                ]
            )

            if payment_method == PaymentMethod.WALLET and total > 0:
                CustomerWalletService.debit(
                    customer_id,
                    total,
                    f"Payment for order {order.code}",
                    reference_id=order.code,
                    reference_type=ReferenceType.ORDER,
                )
                order.payment_status = PaymentStatus.COMPLETED
                order.save(update_fields=["payment_status", "updated_at"])

            if order.payment_status == PaymentStatus.COMPLETED and total > 0:
                OrderTransaction.objects.create(
                    order=order,
                    customer_id=customer_id,
                    type=OrderTransactionType.PAYMENT,
                    amount_cents=total,
                    status=OrderTransactionStatus.COMPLETED,
                    method=payment_method,
                )

            OrderStatusHistory.objects.create(
                order=order,
                status=OrderStatus.PENDING,
                actor_id=customer_id,
                actor_role=ActorRole.USER,
                note="Order placed",
            )

        logger.info(
            f"Order {order.code} created",
            extra={
                "order_id": str(order.id),
                "order_code": order.code,
                "customer_id": str(customer_id),
                "total_cents": total,
                "vendor_count": len(vendors),
            },
        )

        NotificationService.notify(
            recipient_id=customer_id,
            recipient_role=ActorRole.USER,
            notification_type=NotificationType.ORDER_PLACED,
            title="Order Placed Successfully",
            message=f"Your order #{order.code} has been placed successfully.",
            data={"order_id": str(order.id), "order_code": order.code},
        )
        for vendor_id in vendors:
            NotificationService.notify(
                recipient_id=vendor_id,
                recipient_role=ActorRole.VENDOR,
                notification_type=NotificationType.ORDER_PLACED,
                title="New Order Received",
                message=f"You have received a new order #{order.code}",
                data={"order_id": str(order.id), "order_code": order.code},
            )
        return order

    # =========================================================================
    # Status changes
    # =========================================================================

    @classmethod
    def _check_scope(cls, order: Order, actor: Actor) -> None:
        """Customers act on their own orders, vendors on orders they sell in."""
        if actor.role == ActorRole.USER and order.customer_id != actor.id:
            raise PermissionDeniedError(
                "You can only manage your own orders",
                details={"order": order.code},
            )
        if actor.role == ActorRole.VENDOR and actor.id not in cls.vendor_ids(order):
            raise PermissionDeniedError(
                "This order has no items from your store",
                details={"order": order.code},
            )

    @staticmethod
    def _append_history(order: Order, status: str, actor: Actor, note: str) -> None:
        OrderStatusHistory.objects.create(
            order=order,
            status=status,
            actor_id=actor.id,
            actor_role=actor.role,
            note=note,
        )

    @classmethod
    def change_status(
        cls,
        order_ref,
        new_status: str,
        actor: Actor,
        note: str = "",
    ) -> Order:
        """
        Move an order to new_status on behalf of actor.

        Side effects by target status:
            cancellation_requested: remembers the status to revert to
            cancelled: first time only, stamps the cancellation record,
                releases the coupon and refunds a paid order to the
                customer wallet
            cancellation_rejected: reverts to the status held before the
                request and records a second history entry
            delivered: first time only, starts the return window and
                settles vendor earnings

        Raises:
            ValidationError: Unknown status
            OrderNotFoundError: order_ref does not resolve
            PermissionDeniedError: Actor outside the order
            InvalidTransitionError: Transition not allowed for the role
        """
        if new_status not in OrderStatus.values:
            raise ValidationError(
                "Invalid status",
                details={"status": new_status},
            )

        with cls.atomic():
            order = cls._lock_order(order_ref)
            cls._check_scope(order, actor)

            current = order.status
            if not can_transition(current, new_status, actor.role):
                raise InvalidTransitionError(
                    f"Cannot change status from {current} to {new_status}",
                    details={
                        "current_status": current,
                        "new_status": new_status,
                        "role": actor.role,
                    },
                )

            order.move_to(new_status)
            cls._append_history(
                order,
                new_status,
                actor,
                note or f"Status changed to {new_status} by {actor.role}",
            )

            if new_status == OrderStatus.CANCELLATION_REQUESTED:
                cls._store_cancellation_request(order, current, actor, note)
            elif new_status == OrderStatus.CANCELLED:
                if not order.is_cancellation_recorded:
                    cls._record_cancellation(order, actor, note)
            elif new_status == OrderStatus.CANCELLATION_REJECTED:
                cls._reject_cancellation(order, actor)
            elif new_status == OrderStatus.DELIVERED:
                if order.delivered_at is None:
                    cls._record_delivery(order)

            if (
                current == OrderStatus.CANCELLATION_REQUESTED
                and new_status == OrderStatus.PROCESSING
            ):
                # Vendor resumed fulfilment: the request is declined
                CancellationRequest.objects.filter(
                    order=order, resolution=CancellationResolution.PENDING
                ).update(
                    resolution=CancellationResolution.REJECTED,
                    resolved_at=timezone.now(),
                )

            order.save()

        logger.info(
            f"Order {order.code} status {current} -> {order.status}",
            extra={
                "order_id": str(order.id),
                "order_code": order.code,
                "from_status": current,
                "to_status": order.status,
                "actor_id": str(actor.id),
                "actor_role": actor.role,
            },
        )
        cls._notify_status_change(order, new_status)
        return order

    @staticmethod
    def _store_cancellation_request(
        order: Order, original_status: str, actor: Actor, reason: str
    ) -> CancellationRequest:
        request, _ = CancellationRequest.objects.update_or_create(
            order=order,
            defaults={
                "original_status": original_status,
                "reason": reason,
                "requested_by": actor.id,
                "resolution": CancellationResolution.PENDING,
                "resolved_at": None,
            },
        )
        return request

    @classmethod
    def _record_cancellation(cls, order: Order, actor: Actor, note: str) -> None:
        now = timezone.now()
        order.cancelled_at = now
        order.cancelled_by = actor.id
        order.cancelled_by_role = actor.role
        order.cancellation_reason = note or "Order cancelled"

        CancellationRequest.objects.filter(
            order=order, resolution=CancellationResolution.PENDING
        ).update(resolution=CancellationResolution.APPROVED, resolved_at=now)

        if order.coupon_id:
            Coupon.objects.filter(pk=order.coupon_id, usage_count__gt=0).update(
                usage_count=F("usage_count") - 1
            )

        # Returns already refunded count against the order total
        refundable = order.total_cents - order.refund_amount_cents

        if order.payment_status == PaymentStatus.COMPLETED and refundable > 0:
            CustomerWalletService.credit(
                order.customer_id,
                refundable,
                f"Refund for cancelled order {order.code}",
                reference_id=order.code,
                reference_type=ReferenceType.REFUND,
            )
            OrderTransaction.objects.create(
                order=order,
                customer_id=order.customer_id,
                type=OrderTransactionType.REFUND,
                amount_cents=refundable,
                status=OrderTransactionStatus.COMPLETED,
                method=PaymentMethod.WALLET,
            )
            order.refund_status = CancellationRefundStatus.COMPLETED
            order.refund_amount_cents = order.total_cents
            order.payment_status = PaymentStatus.REFUNDED
            logger.info(
                f"Refunded cancelled order {order.code} to customer wallet",
                extra={
                    "order_id": str(order.id),
                    "customer_id": str(order.customer_id),
                    "amount_cents": refundable,
                },
            )
        elif order.refund_amount_cents > 0:
            order.refund_status = CancellationRefundStatus.COMPLETED
            order.payment_status = PaymentStatus.REFUNDED
            logger.info(
                f"Cancelled order {order.code} was already refunded by returns",
                extra={
                    "order_id": str(order.id),
                    "amount_cents": order.refund_amount_cents,
                },
            )
        else:
            order.refund_status = CancellationRefundStatus.NOT_APPLICABLE

    @classmethod
    def _reject_cancellation(cls, order: Order, actor: Actor) -> None:
        request = CancellationRequest.objects.filter(order=order).first()
        if request is None or request.resolution != CancellationResolution.PENDING:
            # Nothing to revert to: stay in cancellation_rejected
            logger.warning(
                f"Cancellation rejected on order {order.code} with no pending request",
                extra={"order_id": str(order.id)},
            )
            return

        request.resolution = CancellationResolution.REJECTED
        request.resolved_at = timezone.now()
        request.save(update_fields=["resolution", "resolved_at", "updated_at"])

        order.move_to(request.original_status)
        cls._append_history(
            order,
            request.original_status,
            actor,
            f"Cancellation rejected, order reverted to {request.original_status}",
        )

    @staticmethod
    def _record_delivery(order: Order) -> None:
        now = timezone.now()
        order.delivered_at = now
        order.return_window_expires_at = now + timedelta(
            days=getattr(settings, "MARKETPLACE_RETURN_WINDOW_DAYS", 7)
        )
        SettlementService.settle_on_delivery(order)

    @classmethod
    def _notify_status_change(cls, order: Order, new_status: str) -> None:
        data = {"order_id": str(order.id), "order_code": order.code, "status": new_status}
        message = STATUS_MESSAGES.get(new_status, f"Order status changed to {new_status}")
        NotificationService.notify(
            recipient_id=order.customer_id,
            recipient_role=ActorRole.USER,
            notification_type=(
                NotificationType.ORDER_CANCELLED
                if new_status == OrderStatus.CANCELLED
                else NotificationType.ORDER_STATUS
            ),
            title=STATUS_TITLES.get(new_status, "Order Status Updated"),
            message=f"{message} - Order #{order.code}",
            data=data,
        )
        for vendor_id in cls.vendor_ids(order):
            NotificationService.notify(
                recipient_id=vendor_id,
                recipient_role=ActorRole.VENDOR,
                notification_type=NotificationType.ORDER_STATUS,
                title="Order Status Updated",
                message=f"Order #{order.code} status changed to {new_status}",
                data=data,
            )

    # =========================================================================
    # Cancellation requests
    # =========================================================================

    @classmethod
    def request_cancellation(
        cls,
        order_ref,
        customer: Actor,
        reason: str = "",
    ) -> Order:
        """
        Ask for an order to be cancelled.

        Only the customer who placed the order may ask, and only while it
        is pending or processing. The vendor (or an admin) later approves
        into cancelled or rejects; no money moves here.

        Raises:
            OrderNotFoundError: order_ref does not resolve
            PermissionDeniedError: Not the owning customer
            InvalidTransitionError: Order is past processing
        """
        customer.require_role(ActorRole.USER)

        with cls.atomic():
            order = cls._lock_order(order_ref)
            if order.customer_id != customer.id:
                raise PermissionDeniedError(
                    "You can only cancel your own orders",
                    details={"order": order.code},
                )

            current = order.status
            if current not in CANCELLABLE_STATUSES:
                raise InvalidTransitionError(
                    f"Order cannot be cancelled in {current} status",
                    details={
                        "current_status": current,
                        "new_status": OrderStatus.CANCELLATION_REQUESTED,
                    },
                )

            cls._store_cancellation_request(order, current, customer, reason)
            order.move_to(OrderStatus.CANCELLATION_REQUESTED)
            cls._append_history(
                order,
                OrderStatus.CANCELLATION_REQUESTED,
                customer,
                reason or "Cancellation requested by customer",
            )
            order.save()

        logger.info(
            f"Cancellation requested for order {order.code}",
            extra={
                "order_id": str(order.id),
                "order_code": order.code,
                "original_status": current,
                "customer_id": str(customer.id),
            },
        )
        for vendor_id in cls.vendor_ids(order):
            NotificationService.notify(
                recipient_id=vendor_id,
                recipient_role=ActorRole.VENDOR,
                notification_type=NotificationType.CANCELLATION_REQUESTED,
                title="Cancellation Requested",
                message=f"The customer requested cancellation of order #{order.code}",
                data={"order_id": str(order.id), "order_code": order.code, "reason": reason},
            )
        return order
