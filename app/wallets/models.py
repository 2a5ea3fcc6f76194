"""
Wallet models: vendor settlement wallets and customer personal wallets.

Balances are denormalized onto the wallet row and every change is
described by exactly one immutable transaction row written in the same
database transaction (see wallets.services). All amounts are integer
minor units of the single marketplace currency.

Models:
    VendorWallet: Available, pending and withdrawn totals per vendor
    VendorWalletTransaction: Append-only vendor ledger entry
    WithdrawalRequest: Vendor request to withdraw the full balance
    CustomerWallet: Personal wallet credited by cancellations and refunds
    CustomerWalletTransaction: Append-only customer ledger entry
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django_fsm import FSMField, transition

from core.model_mixins import AppendOnlyMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel


class TransactionType(models.TextChoices):
    """
    Kind of wallet mutation.

    Sign convention for balance_after - balance_before:
        CREDIT, REFUND: +amount
        DEBIT, WITHDRAWAL: -amount
        ADJUSTMENT: either, recorded explicitly
    """

    CREDIT = "credit", "Credit"
    DEBIT = "debit", "Debit"
    WITHDRAWAL = "withdrawal", "Withdrawal"
    REFUND = "refund", "Refund"
    ADJUSTMENT = "adjustment", "Adjustment"


class ReferenceType(models.TextChoices):
    ORDER = "order", "Order"
    WITHDRAWAL = "withdrawal", "Withdrawal"
    REFUND = "refund", "Refund"
    MANUAL = "manual", "Manual"


class BalanceBucket(models.TextChoices):
    """Which balance a ledger entry's before/after figures refer to."""

    AVAILABLE = "available", "Available"
    PENDING = "pending", "Pending"


class WithdrawalStatus(models.TextChoices):
    """
    States for WithdrawalRequest.

    State Flow:
        PENDING → APPROVED
        PENDING → REJECTED
    """

    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


# =============================================================================
# Vendor wallet
# =============================================================================


class VendorWallet(UUIDPrimaryKeyMixin, BaseModel):
    """
    Settlement wallet of a single vendor.

    Created lazily on first reference and never deleted. Only
    VendorWalletService may change the balance fields.

    Fields:
        vendor_id: Vendor owning the wallet (unique)
        balance_cents: Withdrawable balance; may go negative after refund debits
        pending_balance_cents: Earnings held during the return window
        total_withdrawn_cents: Sum of approved withdrawals
        last_withdrawal_at: When the last withdrawal was approved
    """

    vendor_id = models.UUIDField(
        unique=True,
        help_text="Vendor owning this wallet",
    )
    balance_cents = models.BigIntegerField(
        default=0,
        help_text="Withdrawable balance in minor units (may be negative)",
    )
    pending_balance_cents = models.BigIntegerField(
        default=0,
        help_text="Earnings held until the return window expires",
    )
    total_withdrawn_cents = models.BigIntegerField(
        default=0,
        help_text="Total amount withdrawn through approved requests",
    )
    last_withdrawal_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the last withdrawal was approved",
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(pending_balance_cents__gte=0),
                name="vendor_wallet_pending_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(total_withdrawn_cents__gte=0),
                name="vendor_wallet_withdrawn_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return (
            f"VendorWallet({self.vendor_id}): "
            f"balance={self.balance_cents} pending={self.pending_balance_cents}"
        )


class VendorWalletTransaction(UUIDPrimaryKeyMixin, AppendOnlyMixin, BaseModel):
    """
    Immutable ledger entry for one vendor wallet mutation.

    balance_before_cents/balance_after_cents refer to the bucket named by
    balance_bucket (available or pending), so a pending credit records
    the pending balance and a withdrawal records the available balance.
    """

    wallet = models.ForeignKey(
        VendorWallet,
        on_delete=models.PROTECT,
        related_name="transactions",
        help_text="Wallet this entry belongs to",
    )
    vendor_id = models.UUIDField(
        db_index=True,
        help_text="Vendor owning the wallet (denormalized for queries)",
    )
    type = models.CharField(
        max_length=20,
        choices=TransactionType.choices,
        help_text="Kind of mutation",
    )
    amount_cents = models.BigIntegerField(
        help_text="Amount moved in minor units (always positive)",
    )
    balance_before_cents = models.BigIntegerField(
        help_text="Bucket balance before this entry",
    )
    balance_after_cents = models.BigIntegerField(
        help_text="Bucket balance after this entry",
    )
    balance_bucket = models.CharField(
        max_length=16,
        choices=BalanceBucket.choices,
        default=BalanceBucket.AVAILABLE,
        help_text="Which balance the before/after figures refer to",
    )
    description = models.CharField(
        max_length=500,
        help_text="Human-readable description",
    )
    reference_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
        help_text="Id or code of the order/withdrawal/refund behind this entry",
    )
    reference_type = models.CharField(
        max_length=20,
        choices=ReferenceType.choices,
        help_text="Kind of entity referenced",
    )
    performed_by = models.UUIDField(
        null=True,
        blank=True,
        help_text="Actor that triggered the mutation (if any)",
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Extra context (pending release flags, debit source)",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["vendor_id", "-created_at"],
                name="vendor_txn_vendor_created_idx",
            ),
            models.Index(
                fields=["reference_type", "reference_id"],
                name="vendor_txn_reference_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="vendor_wallet_txn_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_type_display()}: {self.amount_cents} ({self.vendor_id})"


class WithdrawalRequest(UUIDPrimaryKeyMixin, BaseModel):
    """
    Vendor request to withdraw the whole available balance.

    At most one PENDING request may exist per vendor (partial unique
    constraint). Approval and rejection are guarded by django-fsm and are
    driven from VendorWalletService.
    """

    vendor_id = models.UUIDField(
        db_index=True,
        help_text="Vendor requesting the withdrawal",
    )
    amount_cents = models.BigIntegerField(
        help_text="Requested amount (the balance at request time)",
    )
    status = FSMField(
        default=WithdrawalStatus.PENDING,
        choices=WithdrawalStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the request (managed by FSM)",
    )
    payment_method = models.CharField(
        max_length=32,
        default="bank_transfer",
        help_text="Payout channel requested by the vendor",
    )
    requested_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the vendor filed the request",
    )
    processed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When an admin approved or rejected the request",
    )
    processed_by = models.UUIDField(
        null=True,
        blank=True,
        help_text="Admin who processed the request",
    )
    admin_notes = models.TextField(
        blank=True,
        default="",
        help_text="Internal notes from the processing admin",
    )
    rejection_reason = models.TextField(
        blank=True,
        default="",
        help_text="Reason shown to the vendor on rejection",
    )
    external_transaction_id = models.CharField(
        max_length=128,
        blank=True,
        default="",
        help_text="Bank/payment provider reference for the payout",
    )

    class Meta:
        ordering = ["-requested_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["vendor_id"],
                condition=Q(status=WithdrawalStatus.PENDING),
                name="one_pending_withdrawal_per_vendor",
            ),
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="withdrawal_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Withdrawal {self.id} ({self.vendor_id}): {self.amount_cents} [{self.status}]"

    @transition(
        field=status,
        source=WithdrawalStatus.PENDING,
        target=WithdrawalStatus.APPROVED,
    )
    def approve(self, admin_id, notes: str = "", external_transaction_id: str = ""):
        """Transition: PENDING -> APPROVED"""
        self.processed_at = timezone.now()
        self.processed_by = admin_id
        self.admin_notes = notes or ""
        self.external_transaction_id = external_transaction_id or ""

    @transition(
        field=status,
        source=WithdrawalStatus.PENDING,
        target=WithdrawalStatus.REJECTED,
    )
    def reject(self, admin_id, reason: str = ""):
        """Transition: PENDING -> REJECTED"""
        self.processed_at = timezone.now()
        self.processed_by = admin_id
        self.rejection_reason = reason or ""


# =============================================================================
# Customer wallet
# =============================================================================


class CustomerWallet(UUIDPrimaryKeyMixin, BaseModel):
    """Personal wallet of a customer, credited by cancellations and refunds."""

    customer_id = models.UUIDField(
        unique=True,
        help_text="Customer owning this wallet",
    )
    balance_cents = models.BigIntegerField(
        default=0,
        help_text="Spendable balance in minor units",
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(balance_cents__gte=0),
                name="customer_wallet_balance_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"CustomerWallet({self.customer_id}): {self.balance_cents}"


class CustomerWalletTransaction(UUIDPrimaryKeyMixin, AppendOnlyMixin, BaseModel):
    """Immutable ledger entry for one customer wallet mutation."""

    wallet = models.ForeignKey(
        CustomerWallet,
        on_delete=models.PROTECT,
        related_name="transactions",
        help_text="Wallet this entry belongs to",
    )
    customer_id = models.UUIDField(
        db_index=True,
        help_text="Customer owning the wallet (denormalized for queries)",
    )
    type = models.CharField(
        max_length=20,
        choices=TransactionType.choices,
        help_text="credit or debit",
    )
    amount_cents = models.BigIntegerField(
        help_text="Amount moved in minor units (always positive)",
    )
    balance_before_cents = models.BigIntegerField(
        help_text="Balance before this entry",
    )
    balance_after_cents = models.BigIntegerField(
        help_text="Balance after this entry",
    )
    description = models.CharField(
        max_length=500,
        help_text="Human-readable description",
    )
    reference_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
        help_text="Id or code of the order/return behind this entry",
    )
    reference_type = models.CharField(
        max_length=20,
        choices=ReferenceType.choices,
        help_text="Kind of entity referenced",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["customer_id", "-created_at"],
                name="cust_txn_customer_created_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="customer_wallet_txn_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_type_display()}: {self.amount_cents} ({self.customer_id})"
