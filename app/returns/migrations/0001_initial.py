import uuid

import django.db.models.deletion
from django.db import migrations, models

RETURN_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
    ("processing", "Processing"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]

RETURN_REASON_CHOICES = [
    ("defective", "Defective"),
    ("wrong_item", "Wrong Item"),
    ("wrong_size", "Wrong Size"),
    ("not_as_described", "Not as Described"),
    ("quality_issue", "Quality Issue"),
    ("change_of_mind", "Change of Mind"),
    ("other", "Other"),
]

REFUND_METHOD_CHOICES = [
    ("wallet", "Wallet"),
    ("original_payment", "Original Payment"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        ("wallets", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ReturnPolicy",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("return_window_days", models.PositiveIntegerField(default=7, help_text="Days after delivery during which returns are accepted")),
                ("auto_approve_enabled", models.BooleanField(default=False, help_text="Approve and refund eligible returns without staff review")),
                ("auto_approve_max_amount_cents", models.BigIntegerField(blank=True, help_text="Largest refund approved automatically (empty = no limit)", null=True)),
                ("refund_method", models.CharField(choices=[("wallet", "Wallet"), ("customer_choice", "Customer Choice")], default="wallet", help_text="How refunds are paid, or let the customer choose", max_length=20)),
            ],
            options={
                "verbose_name_plural": "return policy",
            },
        ),
        migrations.CreateModel(
            name="ReturnRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("code", models.CharField(editable=False, help_text="Human-readable unique reference code", max_length=32, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("customer_id", models.UUIDField(db_index=True, help_text="Customer requesting the return")),
                ("vendor_id", models.UUIDField(blank=True, db_index=True, help_text="Vendor responsible for the refund", null=True)),
                ("reason", models.CharField(choices=RETURN_REASON_CHOICES, help_text="Main reason for the return", max_length=32)),
                ("description", models.TextField(blank=True, default="", help_text="Customer's description of the problem")),
                ("refund_amount_cents", models.BigIntegerField(help_text="Sum of unit price x quantity over returned items")),
                ("status", models.CharField(choices=RETURN_STATUS_CHOICES, db_index=True, default="pending", help_text="Review state of the return", max_length=16)),
                ("refund_status", models.CharField(choices=[("pending", "Pending"), ("processing", "Processing"), ("processed", "Processed"), ("failed", "Failed")], default="pending", help_text="State of the refund payment", max_length=16)),
                ("refund_method", models.CharField(choices=REFUND_METHOD_CHOICES, default="wallet", help_text="Where the refund is paid", max_length=20)),
                ("rejection_reason", models.TextField(blank=True, default="", help_text="Reason shown to the customer on rejection")),
                ("admin_notes", models.TextField(blank=True, default="", help_text="Notes from platform staff")),
                ("vendor_notes", models.TextField(blank=True, default="", help_text="Notes from the vendor")),
                ("refunded_at", models.DateTimeField(blank=True, help_text="When the refund was processed", null=True)),
                ("order", models.ForeignKey(help_text="Order being returned", on_delete=django.db.models.deletion.PROTECT, related_name="return_requests", to="orders.order")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["order", "customer_id"], name="return_order_customer_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("refund_amount_cents__gt", 0)), name="return_refund_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReturnItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("product_id", models.UUIDField(help_text="Returned product")),
                ("name", models.CharField(blank=True, default="", help_text="Product name at checkout", max_length=255)),
                ("quantity", models.PositiveIntegerField(help_text="Units returned (at most the units ordered)")),
                ("unit_price_cents", models.BigIntegerField(help_text="Unit price paid")),
                ("reason", models.CharField(choices=RETURN_REASON_CHOICES, help_text="Reason for returning this item", max_length=32)),
                ("order_item", models.ForeignKey(blank=True, help_text="Order line being returned", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="return_items", to="orders.orderitem")),
                ("return_request", models.ForeignKey(help_text="Return this item belongs to", on_delete=django.db.models.deletion.CASCADE, related_name="items", to="returns.returnrequest")),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="ReturnStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("status", models.CharField(choices=RETURN_STATUS_CHOICES, help_text="Status entered", max_length=16)),
                ("actor_id", models.UUIDField(blank=True, help_text="Actor who made the change", null=True)),
                ("actor_role", models.CharField(help_text="Role of the actor", max_length=16)),
                ("note", models.TextField(blank=True, default="", help_text="Free-text note")),
                ("return_request", models.ForeignKey(help_text="Return whose status changed", on_delete=django.db.models.deletion.CASCADE, related_name="status_history", to="returns.returnrequest")),
            ],
            options={
                "verbose_name_plural": "return status history",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="RefundTransaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("code", models.CharField(editable=False, help_text="Human-readable unique reference code", max_length=32, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("customer_id", models.UUIDField(db_index=True, help_text="Customer receiving the refund")),
                ("vendor_id", models.UUIDField(blank=True, help_text="Vendor debited for the refund", null=True)),
                ("amount_cents", models.BigIntegerField(help_text="Refunded amount in minor units")),
                ("method", models.CharField(choices=REFUND_METHOD_CHOICES, default="wallet", help_text="Where the refund was paid", max_length=20)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed")], default="pending", help_text="Processing state", max_length=16)),
                ("processed_by", models.UUIDField(blank=True, help_text="Actor who processed the refund (empty for automatic refunds)", null=True)),
                ("processed_by_role", models.CharField(help_text="Role of the processing actor", max_length=16)),
                ("processed_at", models.DateTimeField(blank=True, help_text="When the refund completed", null=True)),
                ("customer_wallet_entry", models.ForeignKey(blank=True, help_text="Customer wallet credit", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="wallets.customerwallettransaction")),
                ("order", models.ForeignKey(help_text="Order being refunded", on_delete=django.db.models.deletion.PROTECT, related_name="refund_transactions", to="orders.order")),
                ("return_request", models.ForeignKey(help_text="Return being refunded", on_delete=django.db.models.deletion.PROTECT, related_name="refund_transactions", to="returns.returnrequest")),
                ("vendor_wallet_entry", models.ForeignKey(blank=True, help_text="Vendor wallet debit", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="+", to="wallets.vendorwallettransaction")),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_cents__gt", 0)), name="refund_txn_amount_positive"),
                ],
            },
        ),
    ]
