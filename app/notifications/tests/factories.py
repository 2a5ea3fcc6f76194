"""
Factory Boy factories for notification test data.

Usage:
    from notifications.tests.factories import NotificationFactory

    notification = NotificationFactory(recipient_id=customer.id)
    read = NotificationFactory(recipient_id=customer.id, is_read=True)
"""

import uuid

import factory

from notifications.models import Notification, NotificationType


class NotificationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Notification

    recipient_id = factory.LazyFunction(uuid.uuid4)
    recipient_role = "user"
    notification_type = NotificationType.ORDER_STATUS
    title = factory.Sequence(lambda n: f"Order update {n}")
    message = "Your order has been shipped."
    data = factory.LazyFunction(dict)
    is_read = False
