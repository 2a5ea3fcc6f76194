"""
Tests for ReturnService: eligibility, filing returns, refunds and staff
review.
"""

import uuid
import warnings
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext
from freezegun import freeze_time

from core.actors import Actor
from core.exceptions import AlreadyProcessedError, PermissionDeniedError, ValidationError
from notifications.models import Notification, NotificationType
from orders.exceptions import OrderNotFoundError
from orders.models import CancellationRefundStatus, Order, OrderStatus
from orders.tests.factories import OrderWithVendorFactory
from returns.exceptions import ReturnNotEligibleError, ReturnRequestNotFoundError
from returns.models import (
    PolicyRefundMethod,
    RefundMethod,
    RefundStatus,
    RefundTransaction,
    ReturnPolicy,
    ReturnReason,
    ReturnStatus,
)
from returns.services import ReturnService
from returns.tests.conftest import DELIVERED_AT
from wallets.models import BalanceBucket, CustomerWallet, VendorWallet
from wallets.tests.factories import VendorWalletFactory


def _file_return(order, customer, **kwargs):
    kwargs.setdefault("reason", ReturnReason.DEFECTIVE)
    items = kwargs.pop(
        "items", [{"order_item_id": order.items.get().id, "quantity": 1}]
    )
    return ReturnService.create_return_request(customer.id, order.code, items, **kwargs)


# =============================================================================
# Policy
# =============================================================================


@pytest.mark.django_db
class TestPolicy:
    def test_created_with_defaults(self):
        policy = ReturnService.get_policy()

        assert policy.pk == 1
        assert policy.return_window_days == 7
        assert policy.auto_approve_enabled is False
        assert policy.auto_approve_max_amount_cents is None
        assert policy.refund_method == PolicyRefundMethod.WALLET

    def test_reuses_existing_row(self):
        first = ReturnService.get_policy()
        second = ReturnService.get_policy()

        assert first.pk == second.pk
        assert ReturnPolicy.objects.count() == 1


# =============================================================================
# Eligibility
# =============================================================================


@pytest.mark.django_db
class TestCheckEligibility:
    def test_eligible_inside_window(self, delivered_order, customer):
        with freeze_time(DELIVERED_AT + timedelta(days=2)):
            result = ReturnService.check_eligibility(delivered_order.code, customer.id)

        assert result.eligible is True
        assert result.reason == ""
        assert result.days_remaining == 5

    def test_partial_day_counts_as_whole_day(self, delivered_order, customer):
        with freeze_time(DELIVERED_AT + timedelta(days=2, hours=1)):
            result = ReturnService.check_eligibility(delivered_order.id, customer.id)

        assert result.days_remaining == 4

    def test_last_day_of_window(self, delivered_order, customer):
        with freeze_time(DELIVERED_AT + timedelta(days=7)):
            result = ReturnService.check_eligibility(delivered_order.code, customer.id)

        assert result.eligible is True
        assert result.days_remaining == 0

    def test_expired_window(self, delivered_order, customer):
        with freeze_time(DELIVERED_AT + timedelta(days=8)):
            result = ReturnService.check_eligibility(delivered_order.code, customer.id)

        assert result.eligible is False
        assert result.reason == "Return period expired"
        assert result.days_remaining == 0

    def test_window_follows_policy(self, delivered_order, customer):
        ReturnPolicy.objects.create(pk=1, return_window_days=14)

        with freeze_time(DELIVERED_AT + timedelta(days=10)):
            result = ReturnService.check_eligibility(delivered_order.code, customer.id)

        assert result.eligible is True
        assert result.days_remaining == 4

    @pytest.mark.usefixtures("within_window")
    def test_not_delivered(self, customer, vendor):
        order = OrderWithVendorFactory(
            customer_id=customer.id,
            vendor_id=vendor.id,
            status=OrderStatus.PROCESSING,
        )

        result = ReturnService.check_eligibility(order.code, customer.id)

        assert result.eligible is False
        assert result.reason == "Order is not delivered yet"

    @pytest.mark.usefixtures("within_window")
    def test_other_customers_order(self, delivered_order, other_customer):
        result = ReturnService.check_eligibility(delivered_order.code, other_customer.id)

        assert result.eligible is False
        assert result.reason == "Order does not belong to this customer"

    @pytest.mark.usefixtures("within_window")
    def test_ownership_skipped_without_customer(self, delivered_order):
        assert ReturnService.check_eligibility(delivered_order.code).eligible is True

    @pytest.mark.usefixtures("within_window")
    def test_open_return_blocks_another(self, delivered_order, customer):
        _file_return(delivered_order, customer)

        result = ReturnService.check_eligibility(delivered_order.code, customer.id)

        assert result.eligible is False
        assert result.reason == "Return request already exists for this order"

    @pytest.mark.usefixtures("within_window")
    def test_rejected_return_does_not_block(self, delivered_order, customer, vendor):
        return_request = _file_return(delivered_order, customer)
        ReturnService.update_status(return_request.code, ReturnStatus.REJECTED, vendor)

        assert ReturnService.check_eligibility(delivered_order.code, customer.id).eligible

    def test_unknown_order(self, db, customer):
        with pytest.raises(OrderNotFoundError):
            ReturnService.check_eligibility("ORD-0000000000000-0000", customer.id)

    def test_to_dict(self, delivered_order, customer):
        with freeze_time(DELIVERED_AT + timedelta(days=1)):
            result = ReturnService.check_eligibility(delivered_order.code, customer.id)

        assert result.to_dict() == {"eligible": True, "reason": "", "days_remaining": 6}


# =============================================================================
# Filing returns
# =============================================================================


@pytest.mark.django_db
@pytest.mark.usefixtures("within_window")
class TestCreateReturnRequest:
    def test_creates_pending_return(self, delivered_order, customer, vendor):
        return_request = _file_return(
            delivered_order, customer, description="Screen cracked"
        )

        assert return_request.code.startswith("RET-")
        assert return_request.status == ReturnStatus.PENDING
        assert return_request.refund_status == RefundStatus.PENDING
        assert return_request.refund_method == RefundMethod.WALLET
        assert return_request.customer_id == customer.id
        assert return_request.vendor_id == vendor.id
        assert return_request.refund_amount_cents == 100000
        assert return_request.description == "Screen cracked"

        item = return_request.items.get()
        assert item.quantity == 1
        assert item.unit_price_cents == 100000
        assert item.reason == ReturnReason.DEFECTIVE

        history = list(return_request.status_history.all())
        assert [entry.status for entry in history] == [ReturnStatus.PENDING]
        assert history[0].actor_id == customer.id
        assert history[0].actor_role == "user"

    def test_pending_return_moves_no_money(self, delivered_order, customer):
        _file_return(delivered_order, customer)

        assert not CustomerWallet.objects.filter(customer_id=customer.id).exists()
        assert not RefundTransaction.objects.exists()

    def test_match_by_product_id(self, delivered_order, customer):
        line = delivered_order.items.get()

        return_request = _file_return(
            delivered_order,
            customer,
            items=[{"product_id": line.product_id, "quantity": 1}],
        )

        assert return_request.items.get().order_item_id == line.id

    def test_quantity_capped_to_ordered(self, make_delivered_order, customer):
        order = make_delivered_order(subtotal_cents=20000, item__quantity=2)
        line = order.items.get()

        return_request = _file_return(
            order,
            customer,
            items=[{"order_item_id": line.id, "quantity": 5}],
        )

        assert return_request.items.get().quantity == 2
        assert return_request.refund_amount_cents == 40000

    def test_quantity_defaults_to_ordered(self, make_delivered_order, customer):
        order = make_delivered_order(subtotal_cents=20000, item__quantity=3)

        return_request = _file_return(
            order, customer, items=[{"order_item_id": order.items.get().id}]
        )

        assert return_request.items.get().quantity == 3

    def test_unmatched_items_skipped(self, delivered_order, customer):
        line = delivered_order.items.get()

        return_request = _file_return(
            delivered_order,
            customer,
            items=[
                {"product_id": uuid.uuid4(), "quantity": 1},
                {"order_item_id": line.id, "quantity": 1},
            ],
        )

        assert return_request.items.count() == 1

    def test_no_matching_items(self, delivered_order, customer):
        with pytest.raises(ValidationError, match="No valid items"):
            _file_return(
                delivered_order,
                customer,
                items=[{"product_id": uuid.uuid4(), "quantity": 1}],
            )

    def test_empty_items(self, delivered_order, customer):
        with pytest.raises(ValidationError):
            _file_return(delivered_order, customer, items=[])

    def test_non_positive_quantity(self, delivered_order, customer):
        line = delivered_order.items.get()

        with pytest.raises(ValidationError, match="positive integer"):
            _file_return(
                delivered_order,
                customer,
                items=[{"order_item_id": line.id, "quantity": 0}],
            )

    def test_invalid_reason(self, delivered_order, customer):
        with pytest.raises(ValidationError, match="Invalid return reason"):
            _file_return(delivered_order, customer, reason="bored")

    def test_unknown_item_reason_becomes_other(self, delivered_order, customer):
        line = delivered_order.items.get()

        return_request = _file_return(
            delivered_order,
            customer,
            items=[{"order_item_id": line.id, "quantity": 1, "reason": "bored"}],
        )

        assert return_request.items.get().reason == ReturnReason.OTHER

    def test_not_eligible(self, delivered_order, other_customer):
        with pytest.raises(ReturnNotEligibleError) as exc_info:
            _file_return(delivered_order, other_customer)

        assert exc_info.value.error_code == "RETURN_NOT_ELIGIBLE"
        assert exc_info.value.details["order"] == delivered_order.code

    def test_second_return_rejected(self, delivered_order, customer):
        _file_return(delivered_order, customer)

        with pytest.raises(ReturnNotEligibleError, match="already exists"):
            _file_return(delivered_order, customer)

    def test_unknown_order(self, db, customer):
        with pytest.raises(OrderNotFoundError):
            ReturnService.create_return_request(
                customer.id,
                uuid.uuid4(),
                [{"product_id": uuid.uuid4(), "quantity": 1}],
                reason=ReturnReason.DEFECTIVE,
            )

    def test_customer_choice_refund_method(self, delivered_order, customer):
        ReturnPolicy.objects.create(pk=1, refund_method=PolicyRefundMethod.CUSTOMER_CHOICE)

        return_request = _file_return(
            delivered_order, customer, refund_method=RefundMethod.ORIGINAL_PAYMENT
        )

        assert return_request.refund_method == RefundMethod.ORIGINAL_PAYMENT

    def test_wallet_policy_ignores_requested_method(self, delivered_order, customer):
        return_request = _file_return(
            delivered_order, customer, refund_method=RefundMethod.ORIGINAL_PAYMENT
        )

        assert return_request.refund_method == RefundMethod.WALLET

    def test_notifies_customer_and_vendor(
        self, delivered_order, customer, vendor, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            _file_return(delivered_order, customer)

        assert Notification.objects.filter(
            recipient_id=customer.id,
            notification_type=NotificationType.RETURN_REQUESTED,
        ).exists()
        vendor_notification = Notification.objects.get(recipient_id=vendor.id)
        assert vendor_notification.title == "New Return Request"


# =============================================================================
# Automatic approval and refunds
# =============================================================================


@pytest.mark.django_db
@pytest.mark.usefixtures("within_window", "auto_approve_policy")
class TestAutoApprovedRefund:
    def test_refunds_from_vendor_pending(self, make_delivered_order, customer, vendor):
        order = make_delivered_order(subtotal_cents=20000)
        VendorWalletFactory(vendor_id=vendor.id, pending_balance_cents=50000)

        return_request = _file_return(order, customer)

        assert return_request.status == ReturnStatus.COMPLETED
        assert return_request.refund_status == RefundStatus.PROCESSED
        assert return_request.refunded_at is not None

        assert CustomerWallet.objects.get(customer_id=customer.id).balance_cents == 20000
        wallet = VendorWallet.objects.get(vendor_id=vendor.id)
        assert wallet.pending_balance_cents == 30000
        assert wallet.balance_cents == 0

        refund = return_request.refund_transactions.get()
        assert refund.code.startswith("RFD-")
        assert refund.amount_cents == 20000
        assert refund.order_id == order.id
        assert refund.processed_by is None
        assert refund.processed_by_role == "system"
        assert refund.customer_wallet_entry.amount_cents == 20000
        assert refund.vendor_wallet_entry.balance_bucket == BalanceBucket.PENDING

        order = Order.objects.get(pk=order.pk)
        assert order.refund_status == CancellationRefundStatus.COMPLETED
        assert order.refund_amount_cents == 20000

    def test_refunds_from_available_when_pending_short(
        self, make_delivered_order, customer, vendor
    ):
        order = make_delivered_order(subtotal_cents=20000)
        VendorWalletFactory(
            vendor_id=vendor.id, pending_balance_cents=10000, balance_cents=5000
        )

        return_request = _file_return(order, customer)

        wallet = VendorWallet.objects.get(vendor_id=vendor.id)
        assert wallet.pending_balance_cents == 10000
        assert wallet.balance_cents == -15000
        refund = return_request.refund_transactions.get()
        assert refund.vendor_wallet_entry.balance_bucket == BalanceBucket.AVAILABLE

    def test_history_records_approval_then_completion(self, delivered_order, customer):
        return_request = _file_return(delivered_order, customer)

        statuses = list(return_request.status_history.values_list("status", flat=True))
        assert statuses == [ReturnStatus.APPROVED, ReturnStatus.COMPLETED]

    def test_over_limit_waits_for_review(self, delivered_order, customer, auto_approve_policy):
        auto_approve_policy.auto_approve_max_amount_cents = 50000
        auto_approve_policy.save()

        return_request = _file_return(delivered_order, customer)

        assert return_request.status == ReturnStatus.PENDING
        assert return_request.refund_status == RefundStatus.PENDING
        assert not RefundTransaction.objects.exists()

    def test_failed_refund_left_for_staff(self, delivered_order, customer, admin_actor):
        with patch.object(
            ReturnService, "process_refund", side_effect=RuntimeError("ledger down")
        ):
            return_request = _file_return(delivered_order, customer)

        assert return_request.status == ReturnStatus.APPROVED
        assert return_request.refund_status == RefundStatus.FAILED
        assert not CustomerWallet.objects.filter(customer_id=customer.id).exists()

        retried = ReturnService.process_refund(return_request.code, admin_actor)

        assert retried.refund_status == RefundStatus.PROCESSED
        assert CustomerWallet.objects.get(customer_id=customer.id).balance_cents == 100000

    def test_notifies_refund(
        self, delivered_order, customer, vendor, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            _file_return(delivered_order, customer)

        assert Notification.objects.filter(
            recipient_id=customer.id,
            notification_type=NotificationType.REFUND_PROCESSED,
        ).exists()
        assert (
            Notification.objects.get(recipient_id=vendor.id).title
            == "New Return (Auto-Approved)"
        )


# =============================================================================
# Manual refunds
# =============================================================================


@pytest.mark.django_db
@pytest.mark.usefixtures("within_window")
class TestProcessRefund:
    def test_vendor_processes_own_return(self, delivered_order, customer, vendor):
        return_request = _file_return(delivered_order, customer)

        result = ReturnService.process_refund(return_request.id, vendor)

        assert result.status == ReturnStatus.COMPLETED
        refund = result.refund_transactions.get()
        assert refund.processed_by == vendor.id
        assert refund.processed_by_role == "vendor"

    def test_twice_raises(self, delivered_order, customer, admin_actor):
        return_request = _file_return(delivered_order, customer)
        ReturnService.process_refund(return_request.code, admin_actor)

        with pytest.raises(AlreadyProcessedError):
            ReturnService.process_refund(return_request.code, admin_actor)

        assert RefundTransaction.objects.count() == 1
        assert CustomerWallet.objects.get(customer_id=customer.id).balance_cents == 100000

    def test_other_vendor_denied(self, delivered_order, customer, other_vendor):
        return_request = _file_return(delivered_order, customer)

        with pytest.raises(PermissionDeniedError):
            ReturnService.process_refund(return_request.code, other_vendor)

        assert not RefundTransaction.objects.exists()

    def test_customer_denied(self, delivered_order, customer):
        return_request = _file_return(delivered_order, customer)

        with pytest.raises(PermissionDeniedError):
            ReturnService.process_refund(return_request.code, customer)

    def test_unknown_return(self, db, admin_actor):
        with pytest.raises(ReturnRequestNotFoundError):
            ReturnService.process_refund("RET-0000000000000-0000", admin_actor)

    def test_completed_refund_is_immutable(self, delivered_order, customer, admin_actor):
        return_request = _file_return(delivered_order, customer)
        ReturnService.process_refund(return_request.code, admin_actor)
        refund = RefundTransaction.objects.get()

        refund.amount_cents = 1
        with pytest.raises(ValueError):
            refund.save()
        with pytest.raises(ValueError):
            refund.delete()

    def test_order_row_read_before_wallets(self, delivered_order, customer, admin_actor):
        return_request = _file_return(delivered_order, customer)
        order_table = Order._meta.db_table
        wallet_table = CustomerWallet._meta.db_table

        with CaptureQueriesContext(connection) as queries:
            ReturnService.process_refund(return_request.code, admin_actor)

        sql = [query["sql"] for query in queries.captured_queries]
        first_order = next(i for i, q in enumerate(sql) if f'"{order_table}"' in q)
        first_wallet = next(i for i, q in enumerate(sql) if f'"{wallet_table}"' in q)
        assert first_order < first_wallet
        assert Order.objects.get(pk=delivered_order.pk).refund_amount_cents == 100000


# =============================================================================
# Staff review
# =============================================================================


@pytest.mark.django_db
@pytest.mark.usefixtures("within_window")
class TestUpdateStatus:
    def test_vendor_rejects(self, delivered_order, customer, vendor):
        return_request = _file_return(delivered_order, customer)

        result = ReturnService.update_status(
            return_request.code,
            ReturnStatus.REJECTED,
            vendor,
            note="Used item",
            rejection_reason="Item shows wear",
        )

        assert result.status == ReturnStatus.REJECTED
        assert result.refund_status == RefundStatus.FAILED
        assert result.rejection_reason == "Item shows wear"
        assert result.vendor_notes == "Used item"
        assert result.admin_notes == ""
        latest = result.status_history.last()
        assert latest.status == ReturnStatus.REJECTED
        assert latest.actor_id == vendor.id

    def test_admin_approves_with_notes(self, delivered_order, customer, admin_actor):
        return_request = _file_return(delivered_order, customer)

        result = ReturnService.update_status(
            return_request.id, ReturnStatus.APPROVED, admin_actor, note="Looks fine"
        )

        assert result.status == ReturnStatus.APPROVED
        assert result.refund_status == RefundStatus.PENDING
        assert result.admin_notes == "Looks fine"

    def test_invalid_status(self, delivered_order, customer, admin_actor):
        return_request = _file_return(delivered_order, customer)

        with pytest.raises(ValidationError, match="Invalid return status"):
            ReturnService.update_status(return_request.code, "shipped", admin_actor)

    def test_customer_denied(self, delivered_order, customer):
        return_request = _file_return(delivered_order, customer)

        with pytest.raises(PermissionDeniedError):
            ReturnService.update_status(return_request.code, ReturnStatus.CANCELLED, customer)

    def test_other_vendor_denied(self, delivered_order, customer, other_vendor):
        return_request = _file_return(delivered_order, customer)

        with pytest.raises(PermissionDeniedError):
            ReturnService.update_status(
                return_request.code, ReturnStatus.APPROVED, other_vendor
            )

    def test_notifies_customer(
        self, delivered_order, customer, vendor, django_capture_on_commit_callbacks
    ):
        return_request = _file_return(delivered_order, customer)

        with django_capture_on_commit_callbacks(execute=True):
            ReturnService.update_status(return_request.code, ReturnStatus.APPROVED, vendor)

        notification = Notification.objects.get(
            notification_type=NotificationType.RETURN_STATUS
        )
        assert notification.recipient_id == customer.id
        assert notification.title == "Return Request Approved"


# =============================================================================
# Queries
# =============================================================================


@pytest.mark.django_db
@pytest.mark.usefixtures("within_window")
class TestQueries:
    def test_list_scoped_by_role(
        self, make_delivered_order, customer, other_customer, vendor, other_vendor, admin_actor
    ):
        mine = _file_return(make_delivered_order(), customer)
        theirs = _file_return(
            make_delivered_order(customer_id=other_customer.id, vendor_id=other_vendor.id),
            other_customer,
        )

        assert list(ReturnService.list_for(customer)) == [mine]
        assert list(ReturnService.list_for(other_vendor)) == [theirs]
        assert set(ReturnService.list_for(admin_actor)) == {mine, theirs}

    def test_list_filtered_by_status(self, make_delivered_order, customer, admin_actor):
        pending = _file_return(make_delivered_order(), customer)
        rejected = _file_return(make_delivered_order(), customer)
        ReturnService.update_status(rejected.code, ReturnStatus.REJECTED, admin_actor)

        assert list(ReturnService.list_for(admin_actor, ReturnStatus.PENDING)) == [pending]
        assert list(ReturnService.list_for(customer, ReturnStatus.REJECTED)) == [rejected]

    def test_other_customer_cannot_view(self, delivered_order, customer, other_customer):
        return_request = _file_return(delivered_order, customer)

        with pytest.raises(PermissionDeniedError):
            ReturnService.get_return_request_for(return_request.code, other_customer)

    def test_owner_and_vendor_can_view(self, delivered_order, customer, vendor):
        return_request = _file_return(delivered_order, customer)

        assert ReturnService.get_return_request_for(return_request.code, customer) == return_request
        assert ReturnService.get_return_request_for(return_request.id, vendor) == return_request

    def test_system_actor_reads_anything(self, delivered_order, customer):
        return_request = _file_return(delivered_order, customer)

        assert (
            ReturnService.get_return_request_for(return_request.code, Actor.system())
            == return_request
        )


def test_service_module_compiles_cleanly():
    import returns.services

    path = Path(returns.services.__file__)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        compile(path.read_text(), str(path), "exec")
