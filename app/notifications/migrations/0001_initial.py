import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("recipient_id", models.UUIDField(db_index=True, help_text="Id of the customer, vendor or admin receiving this notification")),
                ("recipient_role", models.CharField(help_text="Role of the recipient (user, vendor, admin)", max_length=16)),
                (
                    "notification_type",
                    models.CharField(
                        choices=[
                            ("order_placed", "Order Placed"),
                            ("order_status", "Order Status"),
                            ("order_cancelled", "Order Cancelled"),
                            ("cancellation_requested", "Cancellation Requested"),
                            ("return_requested", "Return Requested"),
                            ("return_status", "Return Status"),
                            ("refund_processed", "Refund Processed"),
                            ("withdrawal_status", "Withdrawal Status"),
                            ("funds_released", "Funds Released"),
                        ],
                        help_text="Kind of event this notification describes",
                        max_length=32,
                    ),
                ),
                ("title", models.CharField(help_text="Notification title", max_length=255)),
                ("message", models.TextField(blank=True, default="", help_text="Notification body")),
                ("data", models.JSONField(blank=True, default=dict, help_text="Context data (related ids for deep links)")),
                ("is_read", models.BooleanField(db_index=True, default=False, help_text="Whether recipient has read this notification")),
            ],
            options={
                "db_table": "notifications_notification",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["recipient_id", "is_read", "-created_at"], name="notif_recipient_unread_idx"),
                ],
            },
        ),
    ]
