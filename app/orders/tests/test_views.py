"""
API tests for order endpoints.
"""

import uuid

import pytest
from rest_framework import status

from orders.models import Order, OrderStatus
from orders.tests.factories import OrderWithVendorFactory

ORDERS_URL = "/api/v1/orders/"


def _order_payload(vendor_id, **overrides):
    payload = {
        "items": [
            {
                "product_id": str(uuid.uuid4()),
                "vendor_id": str(vendor_id),
                "name": "Handloom saree",
                "quantity": 1,
                "unit_price_cents": 100000,
            }
        ],
        "payment_status": "completed",
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestOrderListCreate:
    def test_requires_authentication(self, api_client):
        response = api_client.get(ORDERS_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["success"] is False

    def test_customer_places_order(self, client_for, customer, vendor):
        response = client_for(customer).post(
            ORDERS_URL, _order_payload(vendor.id), format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.data["data"]
        assert data["status"] == OrderStatus.PENDING
        assert data["total_cents"] == 100000
        assert data["vendor_breakdown"][0]["earnings_cents"] == 90000
        assert Order.objects.get(code=data["code"]).customer_id == customer.id

    def test_vendor_cannot_place_order(self, client_for, vendor):
        response = client_for(vendor).post(
            ORDERS_URL, _order_payload(vendor.id), format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_empty_items_rejected(self, client_for, customer):
        response = client_for(customer).post(ORDERS_URL, {"items": []}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_is_scoped_and_filterable(self, client_for, customer, vendor):
        mine = OrderWithVendorFactory(customer_id=customer.id, vendor_id=vendor.id)
        OrderWithVendorFactory(
            customer_id=customer.id, vendor_id=vendor.id, status=OrderStatus.DELIVERED
        )
        OrderWithVendorFactory()

        client = client_for(customer)
        everything = client.get(ORDERS_URL)
        pending = client.get(ORDERS_URL, {"status": "pending"})

        assert everything.data["count"] == 2
        assert [o["code"] for o in pending.data["results"]] == [mine.code]


@pytest.mark.django_db
class TestOrderDetailAndStatus:
    def test_detail_by_code(self, client_for, customer):
        order = OrderWithVendorFactory(customer_id=customer.id)

        response = client_for(customer).get(f"{ORDERS_URL}{order.code}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["id"] == str(order.id)

    def test_detail_of_foreign_order_forbidden(self, client_for, other_customer):
        order = OrderWithVendorFactory()

        response = client_for(other_customer).get(f"{ORDERS_URL}{order.code}/")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_missing_order(self, client_for, admin_actor):
        response = client_for(admin_actor).get(f"{ORDERS_URL}ORD-0-0000/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "ORDER_NOT_FOUND"

    def test_vendor_moves_order(self, client_for, vendor):
        order = OrderWithVendorFactory(vendor_id=vendor.id)

        response = client_for(vendor).post(
            f"{ORDERS_URL}{order.code}/status/",
            {"status": "processing", "note": "Packing"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["status"] == OrderStatus.PROCESSING

    def test_invalid_transition_is_400(self, client_for, vendor):
        order = OrderWithVendorFactory(vendor_id=vendor.id)

        response = client_for(vendor).post(
            f"{ORDERS_URL}{order.code}/status/", {"status": "delivered"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_TRANSITION"
        assert Order.objects.get(pk=order.pk).status == OrderStatus.PENDING

    def test_cancel_request(self, client_for, customer):
        order = OrderWithVendorFactory(customer_id=customer.id)

        response = client_for(customer).post(
            f"{ORDERS_URL}{order.code}/cancel-request/",
            {"reason": "Changed my mind"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["status"] == OrderStatus.CANCELLATION_REQUESTED
        assert response.data["data"]["cancellation_request"]["reason"] == "Changed my mind"


@pytest.mark.django_db
class TestAdminReleaseFunds:
    def test_admin_runs_sweep(self, client_for, admin_actor, vendor):
        OrderWithVendorFactory(vendor_id=vendor.id, status=OrderStatus.DELIVERED)

        response = client_for(admin_actor).post(f"{ORDERS_URL}admin/release-funds/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["processed_count"] == 1

    def test_vendor_forbidden(self, client_for, vendor):
        response = client_for(vendor).post(f"{ORDERS_URL}admin/release-funds/")

        assert response.status_code == status.HTTP_403_FORBIDDEN
