"""
Test configuration and fixtures for notification tests.

Usage:
    def test_example(client_for, customer, unread_notification):
        response = client_for(customer).get("/api/v1/notifications/")
        assert response.status_code == 200
"""

import pytest

from notifications.tests.factories import NotificationFactory


@pytest.fixture
def unread_notification(db, customer):
    return NotificationFactory(recipient_id=customer.id)


@pytest.fixture
def read_notification(db, customer):
    return NotificationFactory(recipient_id=customer.id, is_read=True)


@pytest.fixture
def other_customer_notifications(db, other_customer):
    """Three unread notifications for another customer."""
    return NotificationFactory.create_batch(3, recipient_id=other_customer.id)
