"""
Notification models.

Notifications are in-app messages raised by the order, wallet and return
workflows (status changes, refunds, withdrawals). They are plain rows
keyed by recipient id and role; delivery to other channels is outside
this service.

Usage:
    from notifications.models import Notification, NotificationType

    Notification.objects.create(
        recipient_id=order.customer_id,
        recipient_role=ActorRole.USER,
        notification_type=NotificationType.ORDER_STATUS,
        title="Order delivered",
        message=f"Your order {order.code} has been delivered.",
        data={"order_id": str(order.id)},
    )
"""

from __future__ import annotations

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class NotificationType(models.TextChoices):
    ORDER_PLACED = "order_placed", "Order Placed"
    ORDER_STATUS = "order_status", "Order Status"
    ORDER_CANCELLED = "order_cancelled", "Order Cancelled"
    CANCELLATION_REQUESTED = "cancellation_requested", "Cancellation Requested"
    RETURN_REQUESTED = "return_requested", "Return Requested"
    RETURN_STATUS = "return_status", "Return Status"
    REFUND_PROCESSED = "refund_processed", "Refund Processed"
    WITHDRAWAL_STATUS = "withdrawal_status", "Withdrawal Status"
    FUNDS_RELEASED = "funds_released", "Funds Released"


class Notification(UUIDPrimaryKeyMixin, BaseModel):
    """
    Individual notification record for a recipient.

    Fields:
        recipient_id: Customer, vendor or admin receiving the notification
        recipient_role: Role the recipient acts in (user/vendor/admin)
        notification_type: Category used by clients for icons and routing
        title / message: Rendered text
        data: JSON context (order/return/withdrawal ids for deep links)
        is_read: Whether the recipient has read it
    """

    recipient_id = models.UUIDField(
        db_index=True,
        help_text="Id of the customer, vendor or admin receiving this notification",
    )
    recipient_role = models.CharField(
        max_length=16,
        help_text="Role of the recipient (user, vendor, admin)",
    )
    notification_type = models.CharField(
        max_length=32,
        choices=NotificationType.choices,
        help_text="Kind of event this notification describes",
    )
    title = models.CharField(
        max_length=255,
        help_text="Notification title",
    )
    message = models.TextField(
        blank=True,
        default="",
        help_text="Notification body",
    )
    data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Context data (related ids for deep links)",
    )
    is_read = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether recipient has read this notification",
    )

    class Meta:
        db_table = "notifications_notification"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["recipient_id", "is_read", "-created_at"],
                name="notif_recipient_unread_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.notification_type} -> {self.recipient_id}: {self.title}"
