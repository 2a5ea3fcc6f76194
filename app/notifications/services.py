"""
Notification service layer.

Services:
    NotificationService: Notification creation and read status management

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Domain workflows call notify(), which runs after the surrounding
      transaction commits and never raises into the caller

Usage:
    from notifications.services import NotificationService

    NotificationService.notify(
        recipient_id=order.customer_id,
        recipient_role=ActorRole.USER,
        notification_type=NotificationType.ORDER_STATUS,
        title="Order shipped",
        message=f"Your order {order.code} is on its way.",
        data={"order_id": str(order.id)},
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import DatabaseError, transaction

from core.services import BaseService, ServiceResult

from notifications.models import Notification, NotificationType

if TYPE_CHECKING:
    import uuid

logger = logging.getLogger(__name__)


class NotificationService(BaseService):
    """
    Service for notification operations.

    Methods:
        create_notification: Create a notification row
        notify: Fire-and-forget creation after commit
        mark_as_read: Mark a single notification as read
        mark_all_as_read: Mark all recipient's unread notifications as read
    """

    @classmethod
    def create_notification(
        cls,
        recipient_id: uuid.UUID,
        recipient_role: str,
        notification_type: str,
        title: str,
        message: str = "",
        data: dict | None = None,
    ) -> ServiceResult[Notification]:
        """
        Create a new notification for a recipient.

        Returns:
            ServiceResult with created Notification if successful

        Error codes:
            INVALID_TYPE: notification_type is not a NotificationType value
            MISSING_RECIPIENT: recipient_id is empty
        """
        if notification_type not in NotificationType.values:
            return ServiceResult.failure(
                f"Unknown notification type: {notification_type}",
                error_code="INVALID_TYPE",
            )
        if recipient_id is None:
            return ServiceResult.failure(
                "Notification recipient is required",
                error_code="MISSING_RECIPIENT",
            )

        try:
            notification = Notification.objects.create(
                recipient_id=recipient_id,
                recipient_role=recipient_role,
                notification_type=notification_type,
                title=title[:255],
                message=message,
                data=data or {},
            )
        except DatabaseError as e:
            return cls.handle_exception(e, "creating notification")

        cls.get_logger().info(
            f"Created notification {notification.id}",
            extra={
                "notification_id": str(notification.id),
                "recipient_id": str(recipient_id),
                "notification_type": notification_type,
            },
        )
        return ServiceResult.ok(notification)

    @classmethod
    def notify(cls, **kwargs) -> None:
        """
        Create a notification once the current transaction commits.

        Accepts the same keyword arguments as create_notification(). A
        failed notification is logged and dropped; it never affects the
        operation that triggered it.
        """
        transaction.on_commit(lambda: cls._notify_safely(**kwargs))

    @classmethod
    def _notify_safely(cls, **kwargs) -> None:
        try:
            result = cls.create_notification(**kwargs)
        except Exception:
            # Side effect only: log and move on
            logger.warning(
                "Notification dispatch failed",
                exc_info=True,
                extra={"recipient_id": str(kwargs.get("recipient_id"))},
            )
            return

        if not result:
            logger.warning(
                f"Notification not created: {result.error}",
                extra={
                    "recipient_id": str(kwargs.get("recipient_id")),
                    "error_code": result.error_code,
                },
            )

    @classmethod
    def mark_as_read(
        cls,
        notification: Notification,
        recipient_id: uuid.UUID,
    ) -> ServiceResult[Notification]:
        """
        Mark a single notification as read.

        Idempotent: marking an already-read notification succeeds.

        Error codes:
            NOT_OWNER: The recipient doesn't own the notification
        """
        if str(notification.recipient_id) != str(recipient_id):
            cls.get_logger().warning(
                f"Recipient {recipient_id} attempted to mark notification "
                f"{notification.id} owned by {notification.recipient_id}"
            )
            return ServiceResult.failure(
                "Cannot mark notification you don't own",
                error_code="NOT_OWNER",
            )

        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])

        return ServiceResult.ok(notification)

    @classmethod
    def mark_all_as_read(cls, recipient_id: uuid.UUID) -> ServiceResult[int]:
        """Mark all unread notifications of a recipient as read."""
        count = Notification.objects.filter(
            recipient_id=recipient_id,
            is_read=False,
        ).update(is_read=True)

        cls.get_logger().info(f"Marked {count} notifications as read for {recipient_id}")
        return ServiceResult.ok(count)
