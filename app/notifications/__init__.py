"""
Notifications app for in-app notifications.

This app provides:
- Notification model for storing per-recipient notifications
- NotificationService for creating notifications after commit
- REST API for listing and marking notifications as read

Usage:
    from notifications.services import NotificationService

    NotificationService.notify(
        recipient_id=order.customer_id,
        recipient_role=ActorRole.USER,
        notification_type=NotificationType.ORDER_STATUS,
        title="Order shipped",
        message=f"Your order {order.code} is on its way.",
    )
"""
