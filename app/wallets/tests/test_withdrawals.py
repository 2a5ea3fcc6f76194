"""
Tests for the vendor withdrawal workflow.

request -> (approve | reject), one pending request per vendor, and the
balance re-check at approval time.
"""

import uuid

import pytest

from core.exceptions import (
    AlreadyProcessedError,
    DuplicateRequestError,
    InsufficientBalanceError,
)
from wallets.exceptions import WithdrawalNotFoundError
from wallets.models import (
    ReferenceType,
    TransactionType,
    VendorWallet,
    VendorWalletTransaction,
    WithdrawalRequest,
    WithdrawalStatus,
)
from wallets.services import VendorWalletService
from wallets.tests.factories import VendorWalletFactory


@pytest.fixture
def wallet_1500(db, vendor):
    return VendorWalletFactory(vendor_id=vendor.id, balance_cents=150000)


@pytest.mark.django_db
class TestRequestWithdrawal:
    def test_requests_full_balance(self, wallet_1500, vendor):
        request = VendorWalletService.request_withdrawal(vendor.id)

        assert request.amount_cents == 150000
        assert request.status == WithdrawalStatus.PENDING
        assert request.payment_method == "bank_transfer"
        # Requesting does not move money
        assert VendorWallet.objects.get(vendor_id=vendor.id).balance_cents == 150000

    def test_second_request_while_pending_is_duplicate(self, wallet_1500, vendor):
        VendorWalletService.request_withdrawal(vendor.id)

        with pytest.raises(DuplicateRequestError):
            VendorWalletService.request_withdrawal(vendor.id)

        assert WithdrawalRequest.objects.filter(vendor_id=vendor.id).count() == 1

    @pytest.mark.parametrize("balance", [0, -500])
    def test_non_positive_balance_is_rejected(self, vendor, balance):
        VendorWalletFactory(vendor_id=vendor.id, balance_cents=balance)

        with pytest.raises(InsufficientBalanceError):
            VendorWalletService.request_withdrawal(vendor.id)

        assert not WithdrawalRequest.objects.exists()

    def test_new_request_allowed_after_resolution(self, wallet_1500, vendor, admin_actor):
        first = VendorWalletService.request_withdrawal(vendor.id)
        VendorWalletService.reject_withdrawal(first.id, admin_actor.id, "KYC pending")

        second = VendorWalletService.request_withdrawal(vendor.id, "upi")

        assert second.id != first.id
        assert second.payment_method == "upi"


@pytest.mark.django_db
class TestApproveWithdrawal:
    def test_approve_pays_out(self, wallet_1500, vendor, admin_actor):
        request = VendorWalletService.request_withdrawal(vendor.id)

        approved = VendorWalletService.approve_withdrawal(
            request.id, admin_actor.id, notes="ok", external_transaction_id="UTR123"
        )

        assert approved.status == WithdrawalStatus.APPROVED
        assert approved.processed_by == admin_actor.id
        assert approved.processed_at is not None
        assert approved.external_transaction_id == "UTR123"

        wallet = VendorWallet.objects.get(vendor_id=vendor.id)
        assert wallet.balance_cents == 0
        assert wallet.total_withdrawn_cents == 150000
        assert wallet.last_withdrawal_at is not None

        entry = VendorWalletTransaction.objects.get(type=TransactionType.WITHDRAWAL)
        assert entry.amount_cents == 150000
        assert entry.reference_type == ReferenceType.WITHDRAWAL
        assert entry.reference_id == str(request.id)
        assert entry.performed_by == admin_actor.id

    def test_approve_fails_when_balance_shrank(self, wallet_1500, vendor, admin_actor):
        request = VendorWalletService.request_withdrawal(vendor.id)
        VendorWalletService.debit(vendor.id, 20000, "Refund deduction", "RET-1")

        with pytest.raises(InsufficientBalanceError):
            VendorWalletService.approve_withdrawal(request.id, admin_actor.id)

        assert WithdrawalRequest.objects.get(pk=request.id).status == WithdrawalStatus.PENDING
        assert VendorWallet.objects.get(vendor_id=vendor.id).balance_cents == 130000

    def test_approve_twice_raises_already_processed(self, wallet_1500, vendor, admin_actor):
        request = VendorWalletService.request_withdrawal(vendor.id)
        VendorWalletService.approve_withdrawal(request.id, admin_actor.id)

        with pytest.raises(AlreadyProcessedError):
            VendorWalletService.approve_withdrawal(request.id, admin_actor.id)

        assert VendorWallet.objects.get(vendor_id=vendor.id).total_withdrawn_cents == 150000

    def test_unknown_request(self, db, admin_actor):
        with pytest.raises(WithdrawalNotFoundError):
            VendorWalletService.approve_withdrawal(uuid.uuid4(), admin_actor.id)


@pytest.mark.django_db
class TestRejectWithdrawal:
    def test_reject_keeps_balance(self, wallet_1500, vendor, admin_actor):
        request = VendorWalletService.request_withdrawal(vendor.id)

        rejected = VendorWalletService.reject_withdrawal(
            request.id, admin_actor.id, "Bank details invalid"
        )

        assert rejected.status == WithdrawalStatus.REJECTED
        assert rejected.rejection_reason == "Bank details invalid"
        assert VendorWallet.objects.get(vendor_id=vendor.id).balance_cents == 150000
        assert not VendorWalletTransaction.objects.exists()

    def test_reject_after_approve_raises(self, wallet_1500, vendor, admin_actor):
        request = VendorWalletService.request_withdrawal(vendor.id)
        VendorWalletService.approve_withdrawal(request.id, admin_actor.id)

        with pytest.raises(AlreadyProcessedError):
            VendorWalletService.reject_withdrawal(request.id, admin_actor.id)

    def test_resolution_notifies_vendor(
        self, wallet_1500, vendor, admin_actor, django_capture_on_commit_callbacks
    ):
        from notifications.models import Notification, NotificationType

        request = VendorWalletService.request_withdrawal(vendor.id)
        with django_capture_on_commit_callbacks(execute=True):
            VendorWalletService.reject_withdrawal(request.id, admin_actor.id, "no")

        notification = Notification.objects.get(recipient_id=vendor.id)
        assert notification.notification_type == NotificationType.WITHDRAWAL_STATUS
        assert notification.data["status"] == WithdrawalStatus.REJECTED
