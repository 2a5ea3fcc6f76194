import uuid

import django.db.models.deletion
import django_fsm
from django.db import migrations, models

ORDER_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("processing", "Processing"),
    ("ready_to_ship", "Ready to Ship"),
    ("dispatched", "Dispatched"),
    ("shipped_seller", "Shipped by Seller"),
    ("shipped", "Shipped"),
    ("out_for_delivery", "Out for Delivery"),
    ("delivered", "Delivered"),
    ("cancellation_requested", "Cancellation Requested"),
    ("cancellation_rejected", "Cancellation Rejected"),
    ("cancelled", "Cancelled"),
    ("refunded", "Refunded"),
    ("on_hold", "On Hold"),
]

PAYMENT_METHOD_CHOICES = [
    ("online", "Online"),
    ("wallet", "Wallet"),
    ("cod", "Cash on Delivery"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Coupon",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("code", models.CharField(help_text="Code entered by the customer", max_length=50, unique=True)),
                ("is_active", models.BooleanField(default=True, help_text="Whether the code can still be applied")),
                ("usage_count", models.PositiveIntegerField(default=0, help_text="Number of live orders using this code")),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("code", models.CharField(editable=False, help_text="Human-readable unique reference code", max_length=32, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("customer_id", models.UUIDField(db_index=True, help_text="Customer who placed the order")),
                ("subtotal_cents", models.BigIntegerField(default=0, help_text="Sum of line totals")),
                ("shipping_cents", models.BigIntegerField(default=0, help_text="Delivery charge")),
                ("tax_cents", models.BigIntegerField(default=0, help_text="Tax amount")),
                ("discount_cents", models.BigIntegerField(default=0, help_text="Coupon or promotional discount")),
                ("total_cents", models.BigIntegerField(default=0, help_text="Amount charged to the customer")),
                ("status", django_fsm.FSMField(choices=ORDER_STATUS_CHOICES, db_index=True, default="pending", help_text="Current lifecycle status (managed by FSM)", max_length=50, protected=True)),
                ("payment_status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed"), ("refunded", "Refunded")], default="pending", help_text="Payment state of the order", max_length=20)),
                ("payment_method", models.CharField(choices=PAYMENT_METHOD_CHOICES, default="online", help_text="How the customer paid", max_length=20)),
                ("delivered_at", models.DateTimeField(blank=True, help_text="When the order was first marked delivered", null=True)),
                ("return_window_expires_at", models.DateTimeField(blank=True, db_index=True, help_text="End of the return window", null=True)),
                ("funds_released", models.BooleanField(db_index=True, default=False, help_text="Whether vendor earnings for this order have been settled")),
                ("cancelled_at", models.DateTimeField(blank=True, help_text="When the order was cancelled", null=True)),
                ("cancelled_by", models.UUIDField(blank=True, help_text="Actor who cancelled the order", null=True)),
                ("cancelled_by_role", models.CharField(blank=True, default="", help_text="Role of the actor who cancelled the order", max_length=16)),
                ("cancellation_reason", models.TextField(blank=True, default="", help_text="Reason recorded at cancellation")),
                ("refund_status", models.CharField(blank=True, choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed"), ("not_applicable", "Not Applicable")], default="", help_text="Refund state for a cancelled or returned order", max_length=20)),
                ("refund_amount_cents", models.BigIntegerField(default=0, help_text="Amount refunded to the customer")),
                ("coupon", models.ForeignKey(blank=True, help_text="Promo code applied at checkout", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="orders.coupon")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["customer_id", "-created_at"], name="order_customer_created_idx"),
                    models.Index(fields=["status", "funds_released", "return_window_expires_at"], name="order_settlement_scan_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("total_cents__gte", 0)), name="order_total_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("product_id", models.UUIDField(db_index=True, help_text="Catalog product")),
                ("vendor_id", models.UUIDField(db_index=True, help_text="Vendor selling the product")),
                ("name", models.CharField(blank=True, default="", help_text="Product name at checkout", max_length=255)),
                ("quantity", models.PositiveIntegerField(help_text="Units ordered")),
                ("unit_price_cents", models.BigIntegerField(help_text="Price per unit at checkout")),
                ("line_total_cents", models.BigIntegerField(help_text="quantity x unit price")),
                ("order", models.ForeignKey(help_text="Order this line belongs to", on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order")),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gt", 0)), name="order_item_quantity_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VendorBreakdown",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("vendor_id", models.UUIDField(db_index=True, help_text="Vendor receiving this slice")),
                ("position", models.PositiveSmallIntegerField(default=0, help_text="Order of appearance (0 = primary vendor)")),
                ("subtotal_cents", models.BigIntegerField(help_text="Sum of this vendor's line totals")),
                ("shipping_cents", models.BigIntegerField(default=0, help_text="Apportioned shipping")),
                ("tax_cents", models.BigIntegerField(default=0, help_text="Apportioned tax")),
                ("discount_cents", models.BigIntegerField(default=0, help_text="Apportioned discount")),
                ("commission_rate", models.DecimalField(decimal_places=4, help_text="Platform commission rate at order time (0.1000 = 10%)", max_digits=5)),
                ("commission_cents", models.BigIntegerField(default=0, help_text="Platform commission on the subtotal")),
                ("order", models.ForeignKey(help_text="Order this slice belongs to", on_delete=django.db.models.deletion.CASCADE, related_name="vendor_breakdown", to="orders.order")),
            ],
            options={
                "ordering": ["position"],
                "constraints": [
                    models.UniqueConstraint(fields=("order", "vendor_id"), name="unique_vendor_per_order"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("status", models.CharField(choices=ORDER_STATUS_CHOICES, help_text="Status entered", max_length=32)),
                ("actor_id", models.UUIDField(blank=True, help_text="Actor who made the change", null=True)),
                ("actor_role", models.CharField(help_text="Role of the actor", max_length=16)),
                ("note", models.TextField(blank=True, default="", help_text="Free-text note")),
                ("order", models.ForeignKey(help_text="Order whose status changed", on_delete=django.db.models.deletion.CASCADE, related_name="status_history", to="orders.order")),
            ],
            options={
                "verbose_name_plural": "order status history",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="CancellationRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("original_status", models.CharField(choices=ORDER_STATUS_CHOICES, help_text="Status the order returns to if the request is rejected", max_length=32)),
                ("reason", models.TextField(blank=True, default="", help_text="Reason given by the requester")),
                ("requested_by", models.UUIDField(blank=True, help_text="Actor who requested the cancellation", null=True)),
                ("resolution", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], default="pending", help_text="Outcome of the request", max_length=16)),
                ("resolved_at", models.DateTimeField(blank=True, help_text="When the request was approved or rejected", null=True)),
                ("order", models.OneToOneField(help_text="Order the request is for", on_delete=django.db.models.deletion.CASCADE, related_name="cancellation_request", to="orders.order")),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="OrderTransaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("code", models.CharField(editable=False, help_text="Human-readable unique reference code", max_length=32, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("customer_id", models.UUIDField(db_index=True, help_text="Customer paying or being refunded")),
                ("type", models.CharField(choices=[("payment", "Payment"), ("refund", "Refund")], help_text="payment or refund", max_length=16)),
                ("amount_cents", models.BigIntegerField(help_text="Amount in minor units")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed")], default="pending", help_text="Processing state", max_length=16)),
                ("method", models.CharField(choices=PAYMENT_METHOD_CHOICES, help_text="Payment method, or wallet for wallet refunds", max_length=20)),
                ("order", models.ForeignKey(help_text="Order this transaction belongs to", on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="orders.order")),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_cents__gt", 0)), name="order_txn_amount_positive"),
                ],
            },
        ),
    ]
