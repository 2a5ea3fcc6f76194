"""
Return and refund models.

Models:
    ReturnPolicy: Singleton return window and auto-approval settings
    ReturnRequest: Customer request to return items of a delivered order
    ReturnItem: One returned line
    ReturnStatusHistory: Append-only status log of a return
    RefundTransaction: Completed refund linking both wallet ledger entries
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q

from core.model_mixins import AppendOnlyMixin, CodeMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel


class ReturnStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


# A return in one of these states no longer blocks a new return
CLOSED_RETURN_STATUSES = (ReturnStatus.CANCELLED, ReturnStatus.REJECTED)


class RefundStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"


class RefundMethod(models.TextChoices):
    WALLET = "wallet", "Wallet"
    ORIGINAL_PAYMENT = "original_payment", "Original Payment"


class PolicyRefundMethod(models.TextChoices):
    WALLET = "wallet", "Wallet"
    CUSTOMER_CHOICE = "customer_choice", "Customer Choice"


class ReturnReason(models.TextChoices):
    DEFECTIVE = "defective", "Defective"
    WRONG_ITEM = "wrong_item", "Wrong Item"
    WRONG_SIZE = "wrong_size", "Wrong Size"
    NOT_AS_DESCRIBED = "not_as_described", "Not as Described"
    QUALITY_ISSUE = "quality_issue", "Quality Issue"
    CHANGE_OF_MIND = "change_of_mind", "Change of Mind"
    OTHER = "other", "Other"


class RefundTransactionStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class ReturnPolicy(BaseModel):
    """
    Platform return settings. A single row (pk=1), created on first use
    by ReturnService.get_policy().

    auto_approve_max_amount_cents: None means no upper limit.
    """

    return_window_days = models.PositiveIntegerField(
        default=7,
        help_text="Days after delivery during which returns are accepted",
    )
    auto_approve_enabled = models.BooleanField(
        default=False,
        help_text="Approve and refund eligible returns without staff review",
    )
    auto_approve_max_amount_cents = models.BigIntegerField(
        null=True,
        blank=True,
        help_text="Largest refund approved automatically (empty = no limit)",
    )
    refund_method = models.CharField(
        max_length=20,
        choices=PolicyRefundMethod.choices,
        default=PolicyRefundMethod.WALLET,
        help_text="How refunds are paid, or let the customer choose",
    )

    class Meta:
        verbose_name_plural = "return policy"

    def __str__(self) -> str:
        return f"Return policy ({self.return_window_days} days)"


class ReturnRequest(UUIDPrimaryKeyMixin, CodeMixin, BaseModel):
    """
    A customer's request to return items of a delivered order.

    vendor_id is the primary vendor of the order (first vendor breakdown
    entry); that vendor's wallet is debited when the refund is processed.
    """

    CODE_PREFIX = "RET"

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="return_requests",
        help_text="Order being returned",
    )
    customer_id = models.UUIDField(
        db_index=True,
        help_text="Customer requesting the return",
    )
    vendor_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Vendor responsible for the refund",
    )
    reason = models.CharField(
        max_length=32,
        choices=ReturnReason.choices,
        help_text="Main reason for the return",
    )
    description = models.TextField(
        blank=True,
        default="",
        help_text="Customer's description of the problem",
    )
    refund_amount_cents = models.BigIntegerField(
        help_text="Sum of unit price x quantity over returned items",
    )
    status = models.CharField(
        max_length=16,
        choices=ReturnStatus.choices,
        default=ReturnStatus.PENDING,
        db_index=True,
        help_text="Review state of the return",
    )
    refund_status = models.CharField(
        max_length=16,
        choices=RefundStatus.choices,
        default=RefundStatus.PENDING,
        help_text="State of the refund payment",
    )
    refund_method = models.CharField(
        max_length=20,
        choices=RefundMethod.choices,
        default=RefundMethod.WALLET,
        help_text="Where the refund is paid",
    )
    rejection_reason = models.TextField(
        blank=True,
        default="",
        help_text="Reason shown to the customer on rejection",
    )
    admin_notes = models.TextField(
        blank=True,
        default="",
        help_text="Notes from platform staff",
    )
    vendor_notes = models.TextField(
        blank=True,
        default="",
        help_text="Notes from the vendor",
    )
    refunded_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the refund was processed",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["order", "customer_id"],
                name="return_order_customer_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(refund_amount_cents__gt=0),
                name="return_refund_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} [{self.status}/{self.refund_status}]"


class ReturnItem(UUIDPrimaryKeyMixin, BaseModel):
    return_request = models.ForeignKey(
        ReturnRequest,
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Return this item belongs to",
    )
    order_item = models.ForeignKey(
        "orders.OrderItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="return_items",
        help_text="Order line being returned",
    )
    product_id = models.UUIDField(
        help_text="Returned product",
    )
    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Product name at checkout",
    )
    quantity = models.PositiveIntegerField(
        help_text="Units returned (at most the units ordered)",
    )
    unit_price_cents = models.BigIntegerField(
        help_text="Unit price paid",
    )
    reason = models.CharField(
        max_length=32,
        choices=ReturnReason.choices,
        help_text="Reason for returning this item",
    )

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.name or self.product_id} x{self.quantity}"

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


class ReturnStatusHistory(AppendOnlyMixin, BaseModel):
    return_request = models.ForeignKey(
        ReturnRequest,
        on_delete=models.CASCADE,
        related_name="status_history",
        help_text="Return whose status changed",
    )
    status = models.CharField(
        max_length=16,
        choices=ReturnStatus.choices,
        help_text="Status entered",
    )
    actor_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Actor who made the change",
    )
    actor_role = models.CharField(
        max_length=16,
        help_text="Role of the actor",
    )
    note = models.TextField(
        blank=True,
        default="",
        help_text="Free-text note",
    )

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = "return status history"

    def __str__(self) -> str:
        return f"{self.return_request_id} -> {self.status} by {self.actor_role}"


class RefundTransaction(UUIDPrimaryKeyMixin, CodeMixin, BaseModel):
    """
    Record of a processed refund.

    Links the customer wallet credit and the vendor wallet debit written
    in the same transaction. A completed refund cannot be modified.
    """

    CODE_PREFIX = "RFD"

    return_request = models.ForeignKey(
        ReturnRequest,
        on_delete=models.PROTECT,
        related_name="refund_transactions",
        help_text="Return being refunded",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="refund_transactions",
        help_text="Order being refunded",
    )
    customer_id = models.UUIDField(
        db_index=True,
        help_text="Customer receiving the refund",
    )
    vendor_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Vendor debited for the refund",
    )
    amount_cents = models.BigIntegerField(
        help_text="Refunded amount in minor units",
    )
    method = models.CharField(
        max_length=20,
        choices=RefundMethod.choices,
        default=RefundMethod.WALLET,
        help_text="Where the refund was paid",
    )
    status = models.CharField(
        max_length=16,
        choices=RefundTransactionStatus.choices,
        default=RefundTransactionStatus.PENDING,
        help_text="Processing state",
    )
    customer_wallet_entry = models.ForeignKey(
        "wallets.CustomerWalletTransaction",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
        help_text="Customer wallet credit",
    )
    vendor_wallet_entry = models.ForeignKey(
        "wallets.VendorWalletTransaction",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
        help_text="Vendor wallet debit",
    )
    processed_by = models.UUIDField(
        null=True,
        blank=True,
        help_text="Actor who processed the refund (empty for automatic refunds)",
    )
    processed_by_role = models.CharField(
        max_length=16,
        help_text="Role of the processing actor",
    )
    processed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the refund completed",
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="refund_txn_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} {self.amount_cents} [{self.status}]"

    def save(self, *args, **kwargs):
        if not self._state.adding and (
            RefundTransaction.objects.filter(
                pk=self.pk, status=RefundTransactionStatus.COMPLETED
            ).exists()
        ):
            raise ValueError("Completed refund transactions cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.status == RefundTransactionStatus.COMPLETED:
            raise ValueError("Completed refund transactions cannot be deleted")
        return super().delete(*args, **kwargs)
