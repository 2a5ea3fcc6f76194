"""
Return and refund service.

ReturnService owns the return workflow:

    check_eligibility -> create_return_request -> (auto-approve) -> process_refund
                                               +-> update_status (staff review)

A refund credits the customer's personal wallet, debits the responsible
vendor (pending balance first, then available) and records a
RefundTransaction, all in one database transaction.

Usage:
    from returns.services import ReturnService

    request = ReturnService.create_return_request(
        customer_id,
        order.code,
        items=[{"order_item_id": item.id, "quantity": 1}],
        reason="defective",
    )
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from core.actors import Actor, ActorRole
from core.exceptions import AlreadyProcessedError, PermissionDeniedError, ValidationError
from core.helpers import lookup_by_id_or_code
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService
from orders.exceptions import OrderNotFoundError
from orders.models import CancellationRefundStatus, Order, OrderStatus
from wallets.models import ReferenceType
from wallets.services import CustomerWalletService, VendorWalletService

from returns.exceptions import ReturnNotEligibleError, ReturnRequestNotFoundError
from returns.models import (
    CLOSED_RETURN_STATUSES,
    PolicyRefundMethod,
    RefundMethod,
    RefundStatus,
    RefundTransaction,
    RefundTransactionStatus,
    ReturnItem,
    ReturnPolicy,
    ReturnReason,
    ReturnRequest,
    ReturnStatus,
    ReturnStatusHistory,
)
from returns.types import Eligibility

if TYPE_CHECKING:
    from datetime import datetime

    from django.db.models import QuerySet

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# Statuses staff may set through update_status()
REVIEW_STATUSES = (
    ReturnStatus.APPROVED,
    ReturnStatus.REJECTED,
    ReturnStatus.PROCESSING,
    ReturnStatus.COMPLETED,
    ReturnStatus.CANCELLED,
)


class ReturnService(BaseService):
    """
    Return requests and refunds.

    Methods:
        get_policy: Return settings (created on first use)
        check_eligibility: Can the customer return this order
        create_return_request: File a return, auto-approving per policy
        process_refund: Pay out an approved return
        update_status: Staff review (approve, reject, ...)
    """

    # =========================================================================
    # Policy and eligibility
    # =========================================================================

    @staticmethod
    def get_policy() -> ReturnPolicy:
        policy, created = ReturnPolicy.objects.get_or_create(
            pk=1,
            defaults={
                "return_window_days": getattr(
                    settings, "MARKETPLACE_RETURN_WINDOW_DAYS", 7
                ),
            },
        )
        if created:
            logger.info("Created default return policy")
        return policy

    @staticmethod
    def _delivered_at(order: Order) -> datetime:
        """When the order was delivered, from the first delivered history entry."""
        entry = (
            order.status_history.filter(status=OrderStatus.DELIVERED)
            .order_by("created_at", "id")
            .first()
        )
        if entry is not None:
            return entry.created_at
        return order.delivered_at or order.updated_at

    @classmethod
    def _evaluate(
        cls,
        order: Order,
        customer_id: uuid.UUID | None,
        policy: ReturnPolicy,
    ) -> Eligibility:
        if customer_id is not None and order.customer_id != customer_id:
            return Eligibility(False, "Order does not belong to this customer")

        if order.status != OrderStatus.DELIVERED:
            return Eligibility(False, "Order is not delivered yet")

        elapsed = (timezone.now() - cls._delivered_at(order)).total_seconds()
        days_elapsed = max(0, math.ceil(elapsed / SECONDS_PER_DAY))
        if days_elapsed > policy.return_window_days:
            return Eligibility(False, "Return period expired", days_remaining=0)

        existing = ReturnRequest.objects.filter(order=order).exclude(
            status__in=CLOSED_RETURN_STATUSES
        )
        if customer_id is not None:
            existing = existing.filter(customer_id=customer_id)
        if existing.exists():
            return Eligibility(False, "Return request already exists for this order")

        return Eligibility(
            True, days_remaining=policy.return_window_days - days_elapsed
        )

    @classmethod
    def check_eligibility(
        cls, order_ref, customer_id: uuid.UUID | None = None
    ) -> Eligibility:
        """
        Raises:
            OrderNotFoundError: order_ref does not resolve
        """
        order = lookup_by_id_or_code(Order.objects.all(), order_ref)
        if order is None:
            raise OrderNotFoundError("Order not found", details={"order": str(order_ref)})
        return cls._evaluate(order, customer_id, cls.get_policy())

    # =========================================================================
    # Return requests
    # =========================================================================

    @staticmethod
    def _append_history(
        return_request: ReturnRequest,
        status: str,
        actor: Actor,
        note: str = "",
    ) -> None:
        ReturnStatusHistory.objects.create(
            return_request=return_request,
            status=status,
            actor_id=actor.id,
            actor_role=actor.role,
            note=note,
        )

    @staticmethod
    def _match_items(order: Order, items: Iterable[Mapping], default_reason: str) -> list[dict]:
        """
        Resolve requested items against the order lines.

        Items are matched by order_item_id or product_id; anything that
        matches no line is skipped. Quantities are capped to the ordered
        quantity.
        """
        order_items = list(order.items.all())
        matched = []
        for index, item in enumerate(items):
            item_ref = str(item.get("order_item_id") or "")
            product_ref = str(item.get("product_id") or "")
            line = next(
                (
                    oi
                    for oi in order_items
                    if (item_ref and str(oi.id) == item_ref)
                    or (product_ref and str(oi.product_id) == product_ref)
                ),
                None,
            )
            if line is None:
                logger.info(
                    "Skipping return item not on order",
                    extra={"order_id": str(order.id), "item": index},
                )
                continue

            quantity = item.get("quantity", line.quantity)
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise ValidationError(
                    "Return quantity must be a positive integer",
                    details={"item": index, "quantity": repr(quantity)},
                )

            item_reason = item.get("reason") or default_reason
            if item_reason not in ReturnReason.values:
                item_reason = ReturnReason.OTHER

            matched.append(
                {
                    "order_item": line,
                    "product_id": line.product_id,
                    "name": line.name,
                    "quantity": min(quantity, line.quantity),
                    "unit_price_cents": line.unit_price_cents,
                    "reason": item_reason,
                }
            )
        return matched

    @classmethod
    def create_return_request(
        cls,
        customer_id: uuid.UUID,
        order_ref,
        items: Iterable[Mapping],
        reason: str,
        description: str = "",
        refund_method: str | None = None,
    ) -> ReturnRequest:
        """
        File a return for a delivered order.

        When the policy auto-approves the request it is refunded right
        away. A failed automatic refund leaves the request approved with
        refund_status=failed so staff can retry it.

        Raises:
            OrderNotFoundError: order_ref does not resolve
            ReturnNotEligibleError: Order cannot be returned
            ValidationError: Bad reason or no item matches the order
        """
        if reason not in ReturnReason.values:
            raise ValidationError("Invalid return reason", details={"reason": reason})

        customer = Actor(id=customer_id, role=ActorRole.USER)
        policy = cls.get_policy()

        with cls.atomic():
            order = lookup_by_id_or_code(Order.objects.select_for_update(), order_ref)
            if order is None:
                raise OrderNotFoundError(
                    "Order not found", details={"order": str(order_ref)}
                )

            eligibility = cls._evaluate(order, customer_id, policy)
            if not eligibility:
                raise ReturnNotEligibleError(
                    eligibility.reason,
                    details={"order": order.code},
                )

            lines = cls._match_items(order, items or [], reason)
            if not lines:
                raise ValidationError("No valid items to return")

            refund_amount = sum(line["unit_price_cents"] * line["quantity"] for line in lines)
            primary = order.vendor_breakdown.order_by("position").first()
            vendor_id = primary.vendor_id if primary else None

            auto_approve = policy.auto_approve_enabled and (
                policy.auto_approve_max_amount_cents is None
                or refund_amount <= policy.auto_approve_max_amount_cents
            )

            if policy.refund_method == PolicyRefundMethod.CUSTOMER_CHOICE:
                method = refund_method if refund_method in RefundMethod.values else RefundMethod.WALLET
            else:
                method = RefundMethod.WALLET

            return_request = ReturnRequest.objects.create(
                order=order,
                customer_id=customer_id,
                vendor_id=vendor_id,
                reason=reason,
                description=description or "",
                refund_amount_cents=refund_amount,
                status=ReturnStatus.APPROVED if auto_approve else ReturnStatus.PENDING,
                refund_status=RefundStatus.PROCESSING if auto_approve else RefundStatus.PENDING,
                refund_method=method,
            )
            ReturnItem.objects.bulk_create(
                [ReturnItem(return_request=return_request, **line) for line in lines]
            )
            cls._append_history(
                return_request,
                return_request.status,
                customer,
                "Return request created",
            )

        logger.info(
            f"Return {return_request.code} created for order {order.code}",
            extra={
                "return_id": str(return_request.id),
                "order_id": str(order.id),
                "customer_id": str(customer_id),
                "refund_amount_cents": refund_amount,
                "auto_approved": auto_approve,
            },
        )

        data = {"return_id": str(return_request.id), "return_code": return_request.code}
        NotificationService.notify(
            recipient_id=customer_id,
            recipient_role=ActorRole.USER,
            notification_type=NotificationType.RETURN_REQUESTED,
            title="Return Request Submitted",
            message=f"Your return request {return_request.code} has been submitted.",
            data=data,
        )
        if vendor_id:
            NotificationService.notify(
                recipient_id=vendor_id,
                recipient_role=ActorRole.VENDOR,
                notification_type=NotificationType.RETURN_REQUESTED,
                title="New Return (Auto-Approved)" if auto_approve else "New Return Request",
                message=(
                    f"Return {return_request.code} for Order {order.code} "
                    f"{'has been auto-approved' if auto_approve else 'is awaiting review'}."
                ),
                data=data,
            )

        if not auto_approve:
            return return_request

        try:
            return cls.process_refund(return_request.id, Actor.system())
        except Exception:
            logger.error(
                f"Automatic refund failed for return {return_request.code}",
                exc_info=True,
                extra={"return_id": str(return_request.id)},
            )
            ReturnRequest.objects.filter(pk=return_request.pk).update(
                refund_status=RefundStatus.FAILED, updated_at=timezone.now()
            )
            return ReturnRequest.objects.get(pk=return_request.pk)

    @classmethod
    def _lock_return(cls, return_ref) -> ReturnRequest:
        return_request = lookup_by_id_or_code(
            ReturnRequest.objects.select_for_update(), return_ref
        )
        if return_request is None:
            raise ReturnRequestNotFoundError(
                "Return request not found",
                details={"return": str(return_ref)},
            )
        return return_request

    @staticmethod
    def _check_vendor_scope(return_request: ReturnRequest, actor: Actor) -> None:
        if actor.role == ActorRole.VENDOR and return_request.vendor_id != actor.id:
            raise PermissionDeniedError(
                "This return belongs to another vendor",
                details={"return": return_request.code},
            )

    # =========================================================================
    # Refunds
    # =========================================================================

    @classmethod
    def process_refund(cls, return_ref, actor: Actor) -> ReturnRequest:
        """
        Refund a return: credit the customer, debit the vendor.

        Raises:
            ReturnRequestNotFoundError: return_ref does not resolve
            AlreadyProcessedError: Refund already processed
            PermissionDeniedError: Vendor acting on another vendor's return
        """
        actor.require_role(ActorRole.VENDOR, ActorRole.ADMIN, ActorRole.SYSTEM)

        with cls.atomic():
            return_request = cls._lock_return(return_ref)
            cls._check_vendor_scope(return_request, actor)
            # Order row before any wallet row, as in settlement and cancellation
            order = Order.objects.select_for_update().get(pk=return_request.order_id)

            if return_request.refund_status == RefundStatus.PROCESSED:
                raise AlreadyProcessedError(
                    "Refund already processed",
                    details={"return": return_request.code},
                )

            amount = return_request.refund_amount_cents

            _, customer_entry = CustomerWalletService.credit(
                return_request.customer_id,
                amount,
                f"Refund for return {return_request.code}",
                reference_id=order.code,
                reference_type=ReferenceType.REFUND,
            )

            vendor_entry = None
            if return_request.vendor_id:
                _, vendor_entry = VendorWalletService.debit_pending_or_balance(
                    return_request.vendor_id,
                    amount,
                    f"Refund deduction for return {return_request.code}",
                    reference_id=order.code,
                    reference_type=ReferenceType.REFUND,
                )

            now = timezone.now()
            refund = RefundTransaction.objects.create(
                return_request=return_request,
                order=order,
                customer_id=return_request.customer_id,
                vendor_id=return_request.vendor_id,
                amount_cents=amount,
                method=RefundMethod.WALLET,
                status=RefundTransactionStatus.COMPLETED,
                customer_wallet_entry=customer_entry,
                vendor_wallet_entry=vendor_entry,
                processed_by=actor.id,
                processed_by_role=actor.role,
                processed_at=now,
            )

            return_request.refund_status = RefundStatus.PROCESSED
            return_request.status = ReturnStatus.COMPLETED
            return_request.refunded_at = now
            return_request.save(
                update_fields=["refund_status", "status", "refunded_at", "updated_at"]
            )
            cls._append_history(
                return_request,
                ReturnStatus.COMPLETED,
                actor,
                "Refund processed successfully",
            )

            order.refund_status = CancellationRefundStatus.COMPLETED
            order.refund_amount_cents += amount
            order.save(update_fields=["refund_status", "refund_amount_cents", "updated_at"])

        logger.info(
            f"Refund {refund.code} processed for return {return_request.code}",
            extra={
                "refund_id": str(refund.id),
                "return_id": str(return_request.id),
                "customer_id": str(return_request.customer_id),
                "vendor_id": str(return_request.vendor_id),
                "amount_cents": amount,
                "actor_role": actor.role,
            },
        )
        NotificationService.notify(
            recipient_id=return_request.customer_id,
            recipient_role=ActorRole.USER,
            notification_type=NotificationType.REFUND_PROCESSED,
            title="Refund Processed",
            message=f"Refund of {amount} has been credited to your wallet.",
            data={
                "return_id": str(return_request.id),
                "refund_code": refund.code,
                "amount_cents": amount,
            },
        )
        return return_request

    # =========================================================================
    # Staff review
    # =========================================================================

    @classmethod
    def update_status(
        cls,
        return_ref,
        new_status: str,
        actor: Actor,
        note: str = "",
        rejection_reason: str = "",
    ) -> ReturnRequest:
        """
        Set a return's status on behalf of a vendor or admin.

        Rejection stores the reason and marks the refund failed. The note
        is kept as admin or vendor notes according to the actor's role.

        Raises:
            ValidationError: new_status is not a review status
            ReturnRequestNotFoundError: return_ref does not resolve
            PermissionDeniedError: Vendor acting on another vendor's return
        """
        if new_status not in REVIEW_STATUSES:
            raise ValidationError(
                "Invalid return status",
                details={"status": new_status, "allowed": list(REVIEW_STATUSES)},
            )
        actor.require_role(ActorRole.VENDOR, ActorRole.ADMIN)

        with cls.atomic():
            return_request = cls._lock_return(return_ref)
            cls._check_vendor_scope(return_request, actor)

            previous = return_request.status
            return_request.status = new_status
            if new_status == ReturnStatus.REJECTED:
                return_request.rejection_reason = rejection_reason or ""
                return_request.refund_status = RefundStatus.FAILED
            if actor.role == ActorRole.ADMIN:
                return_request.admin_notes = note
            elif actor.role == ActorRole.VENDOR:
                return_request.vendor_notes = note
            return_request.save()

            cls._append_history(return_request, new_status, actor, note)

        logger.info(
            f"Return {return_request.code} status {previous} -> {new_status}",
            extra={
                "return_id": str(return_request.id),
                "from_status": previous,
                "to_status": new_status,
                "actor_role": actor.role,
            },
        )
        NotificationService.notify(
            recipient_id=return_request.customer_id,
            recipient_role=ActorRole.USER,
            notification_type=NotificationType.RETURN_STATUS,
            title=f"Return Request {new_status.capitalize()}",
            message=f"Your return request {return_request.code} has been {new_status}.",
            data={"return_id": str(return_request.id), "status": new_status},
        )
        return return_request

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    def get_return_request(return_ref) -> ReturnRequest:
        return_request = lookup_by_id_or_code(ReturnRequest.objects.all(), return_ref)
        if return_request is None:
            raise ReturnRequestNotFoundError(
                "Return request not found",
                details={"return": str(return_ref)},
            )
        return return_request

    @classmethod
    def get_return_request_for(cls, return_ref, actor: Actor) -> ReturnRequest:
        return_request = cls.get_return_request(return_ref)
        if actor.role == ActorRole.USER and return_request.customer_id != actor.id:
            raise PermissionDeniedError(
                "You can only view your own returns",
                details={"return": return_request.code},
            )
        cls._check_vendor_scope(return_request, actor)
        return return_request

    @staticmethod
    def list_for_customer(customer_id: uuid.UUID) -> QuerySet[ReturnRequest]:
        return ReturnRequest.objects.filter(customer_id=customer_id).order_by("-created_at")

    @staticmethod
    def list_for_vendor(
        vendor_id: uuid.UUID, status: str | None = None
    ) -> QuerySet[ReturnRequest]:
        queryset = ReturnRequest.objects.filter(vendor_id=vendor_id)
        if status:
            queryset = queryset.filter(status=status)
        return queryset.order_by("-created_at")

    @staticmethod
    def list_all(status: str | None = None) -> QuerySet[ReturnRequest]:
        queryset = ReturnRequest.objects.all()
        if status:
            queryset = queryset.filter(status=status)
        return queryset.order_by("-created_at")

    @classmethod
    def list_for(cls, actor: Actor, status: str | None = None) -> QuerySet[ReturnRequest]:
        if actor.role == ActorRole.USER:
            queryset = cls.list_for_customer(actor.id)
            return queryset.filter(status=status) if status else queryset
        if actor.role == ActorRole.VENDOR:
            return cls.list_for_vendor(actor.id, status)
        return cls.list_all(status)
