"""Django admin configuration for notifications."""

from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = [
        "title",
        "notification_type",
        "recipient_id",
        "recipient_role",
        "is_read",
        "created_at",
    ]
    list_filter = ["notification_type", "recipient_role", "is_read"]
    search_fields = ["title", "recipient_id"]
    readonly_fields = ["created_at", "updated_at"]
