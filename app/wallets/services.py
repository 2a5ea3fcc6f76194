"""
Wallet service layer.

VendorWalletService is the only code allowed to change a VendorWallet.
Each operation runs in one database transaction that:

    1. locks the wallet row (SELECT ... FOR UPDATE), creating it if needed
    2. computes and saves the new balances
    3. writes exactly one VendorWalletTransaction describing the change

Concurrent operations on the same vendor therefore serialize on the
wallet row. When called inside an outer transaction (order delivery,
refund processing) the wallet change commits or rolls back with it.

CustomerWalletService applies the same discipline to personal wallets.

Usage:
    from wallets.services import VendorWalletService

    wallet = VendorWalletService.credit(
        vendor_id,
        90000,
        f"Earnings for order {order.code}",
        reference_id=order.code,
    )
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from django.db import IntegrityError, models, transaction
from django.db.models import Count, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.actors import ActorRole
from core.exceptions import (
    AlreadyProcessedError,
    DuplicateRequestError,
    InsufficientBalanceError,
    ValidationError,
)
from core.services import BaseService
from notifications.models import NotificationType
from notifications.services import NotificationService

from wallets.exceptions import WithdrawalNotFoundError
from wallets.models import (
    BalanceBucket,
    CustomerWallet,
    CustomerWalletTransaction,
    ReferenceType,
    TransactionType,
    VendorWallet,
    VendorWalletTransaction,
    WithdrawalRequest,
    WithdrawalStatus,
)
from wallets.types import WalletStats

if TYPE_CHECKING:
    from django.db.models import QuerySet

logger = logging.getLogger(__name__)


def _validate_amount(amount_cents) -> int:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise ValidationError(
            "Amount must be an integer number of minor units",
            details={"amount_cents": repr(amount_cents)},
        )
    if amount_cents <= 0:
        raise ValidationError(
            "Amount must be positive",
            details={"amount_cents": amount_cents},
        )
    return amount_cents


class VendorWalletService(BaseService):
    """
    Sole mutator of vendor wallets.

    Methods return the updated VendorWallet (or WithdrawalRequest for the
    withdrawal operations). Amounts are integer minor units.
    """

    # =========================================================================
    # Lookup
    # =========================================================================

    @classmethod
    def get_or_create_wallet(cls, vendor_id: uuid.UUID) -> VendorWallet:
        wallet, created = VendorWallet.objects.get_or_create(vendor_id=vendor_id)
        if created:
            logger.info(
                f"Created wallet for vendor {vendor_id}",
                extra={"vendor_id": str(vendor_id), "wallet_id": str(wallet.id)},
            )
        return wallet

    @classmethod
    def _lock_wallet(cls, vendor_id: uuid.UUID) -> VendorWallet:
        """Get-or-create then lock the wallet row. Must run inside atomic()."""
        cls.get_or_create_wallet(vendor_id)
        return VendorWallet.objects.select_for_update().get(vendor_id=vendor_id)

    @staticmethod
    def _record(
        wallet: VendorWallet,
        txn_type: str,
        amount_cents: int,
        balance_before: int,
        balance_after: int,
        description: str,
        reference_id,
        reference_type: str,
        bucket: str = BalanceBucket.AVAILABLE,
        performed_by: uuid.UUID | None = None,
        metadata: dict | None = None,
    ) -> VendorWalletTransaction:
        return VendorWalletTransaction.objects.create(
            wallet=wallet,
            vendor_id=wallet.vendor_id,
            type=txn_type,
            amount_cents=amount_cents,
            balance_before_cents=balance_before,
            balance_after_cents=balance_after,
            balance_bucket=bucket,
            description=description[:500],
            reference_id=str(reference_id or ""),
            reference_type=reference_type,
            performed_by=performed_by,
            metadata=metadata or {},
        )

    # =========================================================================
    # Balance mutations
    # =========================================================================

    @classmethod
    def credit(
        cls,
        vendor_id: uuid.UUID,
        amount_cents: int,
        description: str,
        reference_id=None,
        reference_type: str = ReferenceType.ORDER,
        performed_by: uuid.UUID | None = None,
    ) -> VendorWallet:
        """Add to the available balance."""
        _validate_amount(amount_cents)

        with cls.atomic():
            wallet = cls._lock_wallet(vendor_id)
            before = wallet.balance_cents
            wallet.balance_cents = before + amount_cents
            wallet.save(update_fields=["balance_cents", "updated_at"])

            cls._record(
                wallet,
                TransactionType.CREDIT,
                amount_cents,
                before,
                wallet.balance_cents,
                description,
                reference_id,
                reference_type,
                performed_by=performed_by,
            )

        logger.info(
            f"Credited vendor wallet {vendor_id}: {amount_cents}",
            extra={
                "vendor_id": str(vendor_id),
                "amount_cents": amount_cents,
                "balance_cents": wallet.balance_cents,
                "reference_id": str(reference_id or ""),
            },
        )
        return wallet

    @classmethod
    def credit_pending(
        cls,
        vendor_id: uuid.UUID,
        amount_cents: int,
        description: str,
        reference_id=None,
        reference_type: str = ReferenceType.ORDER,
    ) -> VendorWallet:
        """Add to the pending (held) balance. Used under the hold policy."""
        _validate_amount(amount_cents)

        with cls.atomic():
            wallet = cls._lock_wallet(vendor_id)
            before = wallet.pending_balance_cents
            wallet.pending_balance_cents = before + amount_cents
            wallet.save(update_fields=["pending_balance_cents", "updated_at"])

            cls._record(
                wallet,
                TransactionType.CREDIT,
                amount_cents,
                before,
                wallet.pending_balance_cents,
                f"(Pending) {description}",
                reference_id,
                reference_type,
                bucket=BalanceBucket.PENDING,
                metadata={"is_pending": True},
            )

        logger.info(
            f"Credited pending balance of vendor {vendor_id}: {amount_cents}",
            extra={
                "vendor_id": str(vendor_id),
                "amount_cents": amount_cents,
                "pending_balance_cents": wallet.pending_balance_cents,
            },
        )
        return wallet

    @classmethod
    def release_pending(
        cls,
        vendor_id: uuid.UUID,
        amount_cents: int,
        description: str,
        reference_id=None,
        reference_type: str = ReferenceType.ORDER,
    ) -> VendorWallet:
        """
        Move funds from pending to available.

        Lenient: if the pending balance is smaller than the amount, the full
        amount is still credited to the available balance and pending is
        floored at zero. Pending totals can drift from recomputed earnings,
        so a shortfall is logged rather than refused.
        """
        _validate_amount(amount_cents)

        with cls.atomic():
            wallet = cls._lock_wallet(vendor_id)
            pending_before = wallet.pending_balance_cents

            if pending_before < amount_cents:
                logger.warning(
                    f"Releasing {amount_cents} for vendor {vendor_id} "
                    f"with only {pending_before} pending",
                    extra={
                        "vendor_id": str(vendor_id),
                        "amount_cents": amount_cents,
                        "pending_balance_cents": pending_before,
                        "reference_id": str(reference_id or ""),
                    },
                )

            before = wallet.balance_cents
            wallet.pending_balance_cents = max(0, pending_before - amount_cents)
            wallet.balance_cents = before + amount_cents
            wallet.save(
                update_fields=["balance_cents", "pending_balance_cents", "updated_at"]
            )

            cls._record(
                wallet,
                TransactionType.CREDIT,
                amount_cents,
                before,
                wallet.balance_cents,
                f"Funds Released: {description}",
                reference_id,
                reference_type,
                metadata={
                    "released_from_pending": True,
                    "pending_before_cents": pending_before,
                    "pending_after_cents": wallet.pending_balance_cents,
                },
            )

        logger.info(
            f"Released {amount_cents} from pending for vendor {vendor_id}",
            extra={
                "vendor_id": str(vendor_id),
                "amount_cents": amount_cents,
                "balance_cents": wallet.balance_cents,
                "pending_balance_cents": wallet.pending_balance_cents,
            },
        )
        return wallet

    @classmethod
    def debit(
        cls,
        vendor_id: uuid.UUID,
        amount_cents: int,
        description: str,
        reference_id=None,
        reference_type: str = ReferenceType.REFUND,
        performed_by: uuid.UUID | None = None,
    ) -> VendorWallet:
        """Subtract from the available balance. The balance may go negative."""
        _validate_amount(amount_cents)

        with cls.atomic():
            wallet = cls._lock_wallet(vendor_id)
            before = wallet.balance_cents
            wallet.balance_cents = before - amount_cents
            wallet.save(update_fields=["balance_cents", "updated_at"])

            cls._record(
                wallet,
                TransactionType.DEBIT,
                amount_cents,
                before,
                wallet.balance_cents,
                description,
                reference_id,
                reference_type,
                performed_by=performed_by,
            )

        if wallet.balance_cents < 0:
            logger.warning(
                f"Vendor wallet {vendor_id} is negative after debit",
                extra={"vendor_id": str(vendor_id), "balance_cents": wallet.balance_cents},
            )
        return wallet

    @classmethod
    def debit_pending_or_balance(
        cls,
        vendor_id: uuid.UUID,
        amount_cents: int,
        description: str,
        reference_id=None,
        reference_type: str = ReferenceType.REFUND,
    ) -> tuple[VendorWallet, VendorWalletTransaction]:
        """
        Debit the pending balance if it covers the amount, else the
        available balance (which may go negative).

        Returns:
            (wallet, ledger entry) so refunds can link the entry
        """
        _validate_amount(amount_cents)

        with cls.atomic():
            wallet = cls._lock_wallet(vendor_id)

            if wallet.pending_balance_cents >= amount_cents:
                bucket = BalanceBucket.PENDING
                before = wallet.pending_balance_cents
                wallet.pending_balance_cents = before - amount_cents
                after = wallet.pending_balance_cents
                source_label = "Pending"
            else:
                bucket = BalanceBucket.AVAILABLE
                before = wallet.balance_cents
                wallet.balance_cents = before - amount_cents
                after = wallet.balance_cents
                source_label = "Available"

            wallet.save(
                update_fields=["balance_cents", "pending_balance_cents", "updated_at"]
            )
            entry = cls._record(
                wallet,
                TransactionType.DEBIT,
                amount_cents,
                before,
                after,
                f"{description} (from {source_label})",
                reference_id,
                reference_type,
                bucket=bucket,
                metadata={"source": bucket},
            )

        logger.info(
            f"Debited {amount_cents} from {bucket} balance of vendor {vendor_id}",
            extra={
                "vendor_id": str(vendor_id),
                "amount_cents": amount_cents,
                "bucket": bucket,
                "balance_after_cents": after,
            },
        )
        return wallet, entry

    # =========================================================================
    # Withdrawals
    # =========================================================================

    @classmethod
    def request_withdrawal(
        cls,
        vendor_id: uuid.UUID,
        payment_method: str = "bank_transfer",
    ) -> WithdrawalRequest:
        """
        File a withdrawal for the entire available balance.

        Raises:
            InsufficientBalanceError: balance <= 0
            DuplicateRequestError: a pending request already exists
        """
        with cls.atomic():
            wallet = cls._lock_wallet(vendor_id)

            if wallet.balance_cents <= 0:
                raise InsufficientBalanceError(
                    "Insufficient balance for withdrawal",
                    details={"balance_cents": wallet.balance_cents},
                )

            if WithdrawalRequest.objects.filter(
                vendor_id=vendor_id, status=WithdrawalStatus.PENDING
            ).exists():
                raise DuplicateRequestError(
                    "You already have a pending withdrawal request",
                    details={"vendor_id": str(vendor_id)},
                )

            try:
                with transaction.atomic():
                    request = WithdrawalRequest.objects.create(
                        vendor_id=vendor_id,
                        amount_cents=wallet.balance_cents,
                        payment_method=payment_method or "bank_transfer",
                    )
            except IntegrityError as e:
                raise DuplicateRequestError(
                    "You already have a pending withdrawal request",
                    details={"vendor_id": str(vendor_id)},
                ) from e

        logger.info(
            f"Withdrawal requested by vendor {vendor_id}",
            extra={
                "vendor_id": str(vendor_id),
                "withdrawal_id": str(request.id),
                "amount_cents": request.amount_cents,
            },
        )
        return request

    @classmethod
    def _lock_withdrawal(cls, request_id: uuid.UUID) -> WithdrawalRequest:
        request = (
            WithdrawalRequest.objects.select_for_update().filter(pk=request_id).first()
        )
        if request is None:
            raise WithdrawalNotFoundError(
                "Withdrawal request not found",
                details={"withdrawal_id": str(request_id)},
            )
        if request.status != WithdrawalStatus.PENDING:
            raise AlreadyProcessedError(
                "Request already processed",
                details={"withdrawal_id": str(request_id), "status": request.status},
            )
        return request

    @classmethod
    def approve_withdrawal(
        cls,
        request_id: uuid.UUID,
        admin_id: uuid.UUID,
        notes: str = "",
        external_transaction_id: str = "",
    ) -> WithdrawalRequest:
        """
        Pay out a pending request.

        The wallet balance may have shrunk since the request was filed
        (refund debits), so it is re-checked under the lock.

        Raises:
            WithdrawalNotFoundError: Unknown request id
            AlreadyProcessedError: Request is not pending
            InsufficientBalanceError: balance < requested amount
        """
        with cls.atomic():
            request = cls._lock_withdrawal(request_id)
            wallet = cls._lock_wallet(request.vendor_id)

            if wallet.balance_cents < request.amount_cents:
                raise InsufficientBalanceError(
                    "Insufficient wallet balance",
                    details={
                        "balance_cents": wallet.balance_cents,
                        "requested_cents": request.amount_cents,
                    },
                )

            before = wallet.balance_cents
            wallet.balance_cents = before - request.amount_cents
            wallet.total_withdrawn_cents += request.amount_cents
            wallet.last_withdrawal_at = timezone.now()
            wallet.save(
                update_fields=[
                    "balance_cents",
                    "total_withdrawn_cents",
                    "last_withdrawal_at",
                    "updated_at",
                ]
            )

            cls._record(
                wallet,
                TransactionType.WITHDRAWAL,
                request.amount_cents,
                before,
                wallet.balance_cents,
                f"Withdrawal approved: {external_transaction_id or 'N/A'}",
                request.id,
                ReferenceType.WITHDRAWAL,
                performed_by=admin_id,
            )

            request.approve(admin_id, notes, external_transaction_id)
            request.save()

        logger.info(
            f"Withdrawal {request.id} approved",
            extra={
                "withdrawal_id": str(request.id),
                "vendor_id": str(request.vendor_id),
                "amount_cents": request.amount_cents,
                "admin_id": str(admin_id),
            },
        )
        cls._notify_vendor(request)
        return request

    @classmethod
    def reject_withdrawal(
        cls,
        request_id: uuid.UUID,
        admin_id: uuid.UUID,
        reason: str = "",
    ) -> WithdrawalRequest:
        """Reject a pending request. No wallet mutation."""
        with cls.atomic():
            request = cls._lock_withdrawal(request_id)
            request.reject(admin_id, reason)
            request.save()

        logger.info(
            f"Withdrawal {request.id} rejected",
            extra={
                "withdrawal_id": str(request.id),
                "vendor_id": str(request.vendor_id),
                "admin_id": str(admin_id),
            },
        )
        cls._notify_vendor(request)
        return request

    @staticmethod
    def _notify_vendor(request: WithdrawalRequest) -> None:
        NotificationService.notify(
            recipient_id=request.vendor_id,
            recipient_role=ActorRole.VENDOR,
            notification_type=NotificationType.WITHDRAWAL_STATUS,
            title=f"Withdrawal {request.get_status_display().lower()}",
            message=(
                f"Your withdrawal request of {request.amount_cents} "
                f"was {request.status}."
            ),
            data={"withdrawal_id": str(request.id), "status": request.status},
        )

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    def get_transactions(
        vendor_id: uuid.UUID, transaction_type: str | None = None
    ) -> QuerySet[VendorWalletTransaction]:
        queryset = VendorWalletTransaction.objects.filter(vendor_id=vendor_id)
        if transaction_type:
            queryset = queryset.filter(type=transaction_type)
        return queryset.order_by("-created_at")

    @staticmethod
    def get_withdrawals(
        vendor_id: uuid.UUID, status: str | None = None
    ) -> QuerySet[WithdrawalRequest]:
        queryset = WithdrawalRequest.objects.filter(vendor_id=vendor_id)
        if status:
            queryset = queryset.filter(status=status)
        return queryset.order_by("-requested_at")

    @staticmethod
    def get_pending_withdrawals() -> QuerySet[WithdrawalRequest]:
        return WithdrawalRequest.objects.filter(
            status=WithdrawalStatus.PENDING
        ).order_by("requested_at")

    @staticmethod
    def get_stats() -> WalletStats:
        totals = VendorWallet.objects.aggregate(
            wallet_count=Count("id"),
            total_balance=Coalesce(
                Sum("balance_cents"), 0, output_field=models.BigIntegerField()
            ),
            total_pending=Coalesce(
                Sum("pending_balance_cents"), 0, output_field=models.BigIntegerField()
            ),
            total_withdrawn=Coalesce(
                Sum("total_withdrawn_cents"), 0, output_field=models.BigIntegerField()
            ),
        )
        pending = WithdrawalRequest.objects.filter(
            status=WithdrawalStatus.PENDING
        ).aggregate(
            count=Count("id"),
            amount=Coalesce(
                Sum("amount_cents"), 0, output_field=models.BigIntegerField()
            ),
        )
        return WalletStats(
            wallet_count=totals["wallet_count"],
            total_balance_cents=totals["total_balance"],
            total_pending_cents=totals["total_pending"],
            total_withdrawn_cents=totals["total_withdrawn"],
            pending_withdrawal_count=pending["count"],
            pending_withdrawal_cents=pending["amount"],
        )


class CustomerWalletService(BaseService):
    """
    Personal wallet of a customer.

    Credited by order cancellations and return refunds; debited when the
    customer spends wallet funds at checkout.
    """

    @classmethod
    def get_or_create_wallet(cls, customer_id: uuid.UUID) -> CustomerWallet:
        wallet, _ = CustomerWallet.objects.get_or_create(customer_id=customer_id)
        return wallet

    @classmethod
    def _lock_wallet(cls, customer_id: uuid.UUID) -> CustomerWallet:
        cls.get_or_create_wallet(customer_id)
        return CustomerWallet.objects.select_for_update().get(customer_id=customer_id)

    @classmethod
    def credit(
        cls,
        customer_id: uuid.UUID,
        amount_cents: int,
        description: str,
        reference_id=None,
        reference_type: str = ReferenceType.REFUND,
    ) -> tuple[CustomerWallet, CustomerWalletTransaction]:
        _validate_amount(amount_cents)

        with cls.atomic():
            wallet = cls._lock_wallet(customer_id)
            before = wallet.balance_cents
            wallet.balance_cents = before + amount_cents
            wallet.save(update_fields=["balance_cents", "updated_at"])

            entry = CustomerWalletTransaction.objects.create(
                wallet=wallet,
                customer_id=customer_id,
                type=TransactionType.CREDIT,
                amount_cents=amount_cents,
                balance_before_cents=before,
                balance_after_cents=wallet.balance_cents,
                description=description[:500],
                reference_id=str(reference_id or ""),
                reference_type=reference_type,
            )

        logger.info(
            f"Credited customer wallet {customer_id}: {amount_cents}",
            extra={
                "customer_id": str(customer_id),
                "amount_cents": amount_cents,
                "balance_cents": wallet.balance_cents,
            },
        )
        return wallet, entry

    @classmethod
    def debit(
        cls,
        customer_id: uuid.UUID,
        amount_cents: int,
        description: str,
        reference_id=None,
        reference_type: str = ReferenceType.ORDER,
    ) -> tuple[CustomerWallet, CustomerWalletTransaction]:
        """
        Raises:
            InsufficientBalanceError: balance < amount
        """
        _validate_amount(amount_cents)

        with cls.atomic():
            wallet = cls._lock_wallet(customer_id)
            before = wallet.balance_cents
            if before < amount_cents:
                raise InsufficientBalanceError(
                    "Insufficient wallet balance",
                    details={"balance_cents": before, "requested_cents": amount_cents},
                )
            wallet.balance_cents = before - amount_cents
            wallet.save(update_fields=["balance_cents", "updated_at"])

            entry = CustomerWalletTransaction.objects.create(
                wallet=wallet,
                customer_id=customer_id,
                type=TransactionType.DEBIT,
                amount_cents=amount_cents,
                balance_before_cents=before,
                balance_after_cents=wallet.balance_cents,
                description=description[:500],
                reference_id=str(reference_id or ""),
                reference_type=reference_type,
            )

        logger.info(
            f"Debited customer wallet {customer_id}: {amount_cents}",
            extra={
                "customer_id": str(customer_id),
                "amount_cents": amount_cents,
                "balance_cents": wallet.balance_cents,
            },
        )
        return wallet, entry

    @staticmethod
    def get_transactions(customer_id: uuid.UUID) -> QuerySet[CustomerWalletTransaction]:
        return CustomerWalletTransaction.objects.filter(
            customer_id=customer_id
        ).order_by("-created_at")
