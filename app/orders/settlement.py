"""
Vendor settlement.

Vendor earnings for an order (subtotal - commission, per vendor) are paid
into vendor wallets once, when the order is delivered:

    direct policy (default): credited to the available balance at delivery
        and the order is flagged funds_released.
    hold policy: credited to the pending balance at delivery; the periodic
        sweep moves them to available once the return window has expired.

release_pending_funds() is the sweep. It also settles any delivered order
that was never settled (funds_released=False), whichever policy put it in
that state, so it is safe to run at any time and any number of times.

Usage:
    from orders.settlement import SettlementService

    result = SettlementService.release_pending_funds()
    result.processed_count
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.actors import ActorRole
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService
from wallets.models import ReferenceType, VendorWallet
from wallets.services import VendorWalletService

from orders.models import Order, OrderStatus

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class SettlementPolicy(models.TextChoices):
    DIRECT = "direct", "Credit at delivery"
    HOLD = "hold", "Hold until return window expires"


def get_settlement_policy() -> str:
    policy = getattr(settings, "MARKETPLACE_SETTLEMENT_POLICY", SettlementPolicy.DIRECT)
    if policy not in SettlementPolicy.values:
        logger.warning(
            f"Unknown settlement policy {policy!r}, using direct",
            extra={"policy": policy},
        )
        return SettlementPolicy.DIRECT
    return policy


@dataclass
class SweepResult:
    """Outcome of one settlement sweep."""

    total_orders: int = 0
    processed_count: int = 0
    total_released_cents: int = 0
    errors: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SettlementService(BaseService):
    """Credits vendor wallets for delivered orders."""

    @staticmethod
    def _earnings_description(order: Order) -> str:
        return f"Earnings for order {order.code}"

    @classmethod
    def settle_on_delivery(cls, order: Order) -> int:
        """
        Credit every vendor on a freshly delivered order.

        Must run inside the caller's transaction with the order row locked;
        a failing wallet credit aborts the delivery as a whole. The caller
        saves the order.

        Returns:
            Total earnings credited (pending or available), in minor units
        """
        policy = get_settlement_policy()
        description = cls._earnings_description(order)
        total = 0

        for entry in order.vendor_breakdown.all():
            earnings = entry.earnings_cents
            if earnings <= 0:
                continue
            if policy == SettlementPolicy.HOLD:
                VendorWalletService.credit_pending(
                    entry.vendor_id, earnings, description, reference_id=order.code
                )
            else:
                VendorWalletService.credit(
                    entry.vendor_id, earnings, description, reference_id=order.code
                )
            total += earnings

        if policy == SettlementPolicy.DIRECT:
            order.funds_released = True

        logger.info(
            f"Settled delivery of order {order.code} ({policy})",
            extra={
                "order_id": str(order.id),
                "order_code": order.code,
                "policy": policy,
                "amount_cents": total,
                "funds_released": order.funds_released,
            },
        )
        return total

    @staticmethod
    def due_orders(now: datetime):
        """Delivered, unsettled orders whose return window is over or unset."""
        return (
            Order.objects.filter(status=OrderStatus.DELIVERED, funds_released=False)
            .filter(
                Q(return_window_expires_at__lte=now)
                | Q(return_window_expires_at__isnull=True)
            )
            .order_by("delivered_at", "created_at")
        )

    @classmethod
    def release_pending_funds(
        cls, now: datetime | None = None, batch_size: int | None = None
    ) -> SweepResult:
        """
        Settle every due order, each in its own transaction.

        Due orders are fetched batch_size at a time until none are left.
        One failing order does not stop the sweep; it is logged, reported
        in SweepResult.errors, left out of the following batches and
        retried on the next run.
        """
        now = now or timezone.now()
        batch_size = batch_size or getattr(settings, "SETTLEMENT_SWEEP_BATCH_SIZE", 100)

        result = SweepResult()
        attempted = set()
        logger.info(
            "Starting settlement sweep",
            extra={"batch_size": batch_size},
        )

        while True:
            order_ids = list(
                cls.due_orders(now)
                .exclude(id__in=attempted)
                .values_list("id", flat=True)[:batch_size]
            )
            if not order_ids:
                break
            attempted.update(order_ids)
            result.total_orders += len(order_ids)

            for order_id in order_ids:
                try:
                    released = cls._release_order(order_id)
                except Exception as e:
                    logger.error(
                        f"Failed to release funds for order {order_id}: {e}",
                        exc_info=True,
                        extra={"order_id": str(order_id)},
                    )
                    code = (
                        Order.objects.filter(pk=order_id)
                        .values_list("code", flat=True)
                        .first()
                    )
                    result.errors.append(
                        {"order_id": str(order_id), "order_code": code or "", "error": str(e)}
                    )
                    continue

                if released is not None:
                    result.processed_count += 1
                    result.total_released_cents += released

        logger.info(
            f"Settlement sweep complete: {result.processed_count}/{result.total_orders} orders",
            extra={
                "total_orders": result.total_orders,
                "processed_count": result.processed_count,
                "total_released_cents": result.total_released_cents,
                "error_count": len(result.errors),
            },
        )
        return result

    @classmethod
    def _release_order(cls, order_id) -> int | None:
        """
        Release one order's earnings.

        Returns the amount released, or None when another worker settled
        the order first.
        """
        with cls.atomic():
            order = Order.objects.select_for_update().get(pk=order_id)
            if order.funds_released or order.status != OrderStatus.DELIVERED:
                return None

            description = cls._earnings_description(order)
            released = 0
            notified_vendors = []

            for entry in order.vendor_breakdown.all():
                earnings = entry.earnings_cents
                if earnings <= 0:
                    continue

                pending = (
                    VendorWallet.objects.filter(vendor_id=entry.vendor_id)
                    .values_list("pending_balance_cents", flat=True)
                    .first()
                    or 0
                )
                if pending >= earnings:
                    VendorWalletService.release_pending(
                        entry.vendor_id,
                        earnings,
                        description,
                        reference_id=order.code,
                        reference_type=ReferenceType.ORDER,
                    )
                else:
                    VendorWalletService.credit(
                        entry.vendor_id,
                        earnings,
                        description,
                        reference_id=order.code,
                        reference_type=ReferenceType.ORDER,
                    )
                released += earnings
                notified_vendors.append((entry.vendor_id, earnings))

            order.funds_released = True
            order.save(update_fields=["funds_released", "updated_at"])

        for vendor_id, amount in notified_vendors:
            NotificationService.notify(
                recipient_id=vendor_id,
                recipient_role=ActorRole.VENDOR,
                notification_type=NotificationType.FUNDS_RELEASED,
                title="Funds Released",
                message=f"Earnings for order #{order.code} are now available for withdrawal",
                data={"order_id": str(order.id), "amount_cents": amount},
            )

        logger.info(
            f"Released funds for order {order.code}",
            extra={
                "order_id": str(order.id),
                "order_code": order.code,
                "amount_cents": released,
            },
        )
        return released
