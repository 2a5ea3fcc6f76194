"""
API tests for wallet endpoints.
"""

import pytest
from rest_framework import status

from wallets.models import WithdrawalRequest, WithdrawalStatus
from wallets.tests.factories import CustomerWalletFactory, VendorWalletFactory

VENDOR_WALLET_URL = "/api/v1/wallets/vendor/"
VENDOR_WITHDRAWALS_URL = "/api/v1/wallets/vendor/withdrawals/"
ADMIN_WITHDRAWALS_URL = "/api/v1/wallets/admin/withdrawals/"
CUSTOMER_WALLET_URL = "/api/v1/wallets/customer/"


@pytest.mark.django_db
class TestVendorWalletEndpoints:
    def test_requires_authentication(self, api_client):
        response = api_client.get(VENDOR_WALLET_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_customer_cannot_read_vendor_wallet(self, client_for, customer):
        response = client_for(customer).get(VENDOR_WALLET_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_vendor_reads_own_wallet(self, client_for, vendor):
        VendorWalletFactory(vendor_id=vendor.id, balance_cents=1234)

        response = client_for(vendor).get(VENDOR_WALLET_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["success"] is True
        assert response.data["data"]["balance_cents"] == 1234

    def test_request_withdrawal(self, client_for, vendor):
        VendorWalletFactory(vendor_id=vendor.id, balance_cents=150000)
        client = client_for(vendor)

        response = client.post(VENDOR_WITHDRAWALS_URL, {}, format="json")
        duplicate = client.post(VENDOR_WITHDRAWALS_URL, {}, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["data"]["amount_cents"] == 150000
        assert duplicate.status_code == status.HTTP_400_BAD_REQUEST
        assert duplicate.data["error_code"] == "DUPLICATE_REQUEST"

    def test_withdrawal_with_empty_wallet(self, client_for, vendor):
        response = client_for(vendor).post(VENDOR_WITHDRAWALS_URL, {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INSUFFICIENT_BALANCE"


@pytest.mark.django_db
class TestAdminWithdrawalEndpoints:
    def test_vendor_cannot_list_pending(self, client_for, vendor):
        response = client_for(vendor).get(ADMIN_WITHDRAWALS_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_approves(self, client_for, vendor, admin_actor):
        VendorWalletFactory(vendor_id=vendor.id, balance_cents=150000)
        client_for(vendor).post(VENDOR_WITHDRAWALS_URL, {}, format="json")
        withdrawal = WithdrawalRequest.objects.get(vendor_id=vendor.id)
        admin = client_for(admin_actor)

        listed = admin.get(ADMIN_WITHDRAWALS_URL)
        response = admin.post(
            f"{ADMIN_WITHDRAWALS_URL}{withdrawal.id}/approve/",
            {"transaction_id": "UTR1"},
            format="json",
        )

        assert [w["id"] for w in listed.data["data"]] == [str(withdrawal.id)]
        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["status"] == WithdrawalStatus.APPROVED

    def test_reject_requires_reason(self, client_for, vendor, admin_actor):
        VendorWalletFactory(vendor_id=vendor.id, balance_cents=1000)
        client_for(vendor).post(VENDOR_WITHDRAWALS_URL, {}, format="json")
        withdrawal = WithdrawalRequest.objects.get(vendor_id=vendor.id)

        response = client_for(admin_actor).post(
            f"{ADMIN_WITHDRAWALS_URL}{withdrawal.id}/reject/", {}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_stats(self, client_for, admin_actor):
        VendorWalletFactory(balance_cents=700)

        response = client_for(admin_actor).get("/api/v1/wallets/admin/stats/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["total_balance_cents"] == 700


@pytest.mark.django_db
class TestCustomerWalletEndpoint:
    def test_customer_reads_own_wallet(self, client_for, customer):
        CustomerWalletFactory(customer_id=customer.id, balance_cents=500)

        response = client_for(customer).get(CUSTOMER_WALLET_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["balance_cents"] == 500
        assert response.data["data"]["recent_transactions"] == []

    def test_vendor_forbidden(self, client_for, vendor):
        response = client_for(vendor).get(CUSTOMER_WALLET_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN
