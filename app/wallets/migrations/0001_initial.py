import uuid

import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.db import migrations, models

TRANSACTION_TYPE_CHOICES = [
    ("credit", "Credit"),
    ("debit", "Debit"),
    ("withdrawal", "Withdrawal"),
    ("refund", "Refund"),
    ("adjustment", "Adjustment"),
]

REFERENCE_TYPE_CHOICES = [
    ("order", "Order"),
    ("withdrawal", "Withdrawal"),
    ("refund", "Refund"),
    ("manual", "Manual"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="VendorWallet",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("vendor_id", models.UUIDField(help_text="Vendor owning this wallet", unique=True)),
                ("balance_cents", models.BigIntegerField(default=0, help_text="Withdrawable balance in minor units (may be negative)")),
                ("pending_balance_cents", models.BigIntegerField(default=0, help_text="Earnings held until the return window expires")),
                ("total_withdrawn_cents", models.BigIntegerField(default=0, help_text="Total amount withdrawn through approved requests")),
                ("last_withdrawal_at", models.DateTimeField(blank=True, help_text="When the last withdrawal was approved", null=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("pending_balance_cents__gte", 0)), name="vendor_wallet_pending_non_negative"),
                    models.CheckConstraint(condition=models.Q(("total_withdrawn_cents__gte", 0)), name="vendor_wallet_withdrawn_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VendorWalletTransaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("vendor_id", models.UUIDField(db_index=True, help_text="Vendor owning the wallet (denormalized for queries)")),
                ("type", models.CharField(choices=TRANSACTION_TYPE_CHOICES, help_text="Kind of mutation", max_length=20)),
                ("amount_cents", models.BigIntegerField(help_text="Amount moved in minor units (always positive)")),
                ("balance_before_cents", models.BigIntegerField(help_text="Bucket balance before this entry")),
                ("balance_after_cents", models.BigIntegerField(help_text="Bucket balance after this entry")),
                ("balance_bucket", models.CharField(choices=[("available", "Available"), ("pending", "Pending")], default="available", help_text="Which balance the before/after figures refer to", max_length=16)),
                ("description", models.CharField(help_text="Human-readable description", max_length=500)),
                ("reference_id", models.CharField(blank=True, db_index=True, default="", help_text="Id or code of the order/withdrawal/refund behind this entry", max_length=64)),
                ("reference_type", models.CharField(choices=REFERENCE_TYPE_CHOICES, help_text="Kind of entity referenced", max_length=20)),
                ("performed_by", models.UUIDField(blank=True, help_text="Actor that triggered the mutation (if any)", null=True)),
                ("metadata", models.JSONField(blank=True, default=dict, help_text="Extra context (pending release flags, debit source)")),
                ("wallet", models.ForeignKey(help_text="Wallet this entry belongs to", on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="wallets.vendorwallet")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vendor_id", "-created_at"], name="vendor_txn_vendor_created_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="vendor_txn_reference_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_cents__gt", 0)), name="vendor_wallet_txn_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="WithdrawalRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("vendor_id", models.UUIDField(db_index=True, help_text="Vendor requesting the withdrawal")),
                ("amount_cents", models.BigIntegerField(help_text="Requested amount (the balance at request time)")),
                ("status", django_fsm.FSMField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], db_index=True, default="pending", help_text="Current state of the request (managed by FSM)", max_length=50, protected=True)),
                ("payment_method", models.CharField(default="bank_transfer", help_text="Payout channel requested by the vendor", max_length=32)),
                ("requested_at", models.DateTimeField(default=django.utils.timezone.now, help_text="When the vendor filed the request")),
                ("processed_at", models.DateTimeField(blank=True, help_text="When an admin approved or rejected the request", null=True)),
                ("processed_by", models.UUIDField(blank=True, help_text="Admin who processed the request", null=True)),
                ("admin_notes", models.TextField(blank=True, default="", help_text="Internal notes from the processing admin")),
                ("rejection_reason", models.TextField(blank=True, default="", help_text="Reason shown to the vendor on rejection")),
                ("external_transaction_id", models.CharField(blank=True, default="", help_text="Bank/payment provider reference for the payout", max_length=128)),
            ],
            options={
                "ordering": ["-requested_at"],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("status", "pending")), fields=("vendor_id",), name="one_pending_withdrawal_per_vendor"),
                    models.CheckConstraint(condition=models.Q(("amount_cents__gt", 0)), name="withdrawal_amount_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomerWallet",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("customer_id", models.UUIDField(help_text="Customer owning this wallet", unique=True)),
                ("balance_cents", models.BigIntegerField(default=0, help_text="Spendable balance in minor units")),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("balance_cents__gte", 0)), name="customer_wallet_balance_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomerWalletTransaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("customer_id", models.UUIDField(db_index=True, help_text="Customer owning the wallet (denormalized for queries)")),
                ("type", models.CharField(choices=TRANSACTION_TYPE_CHOICES, help_text="credit or debit", max_length=20)),
                ("amount_cents", models.BigIntegerField(help_text="Amount moved in minor units (always positive)")),
                ("balance_before_cents", models.BigIntegerField(help_text="Balance before this entry")),
                ("balance_after_cents", models.BigIntegerField(help_text="Balance after this entry")),
                ("description", models.CharField(help_text="Human-readable description", max_length=500)),
                ("reference_id", models.CharField(blank=True, db_index=True, default="", help_text="Id or code of the order/return behind this entry", max_length=64)),
                ("reference_type", models.CharField(choices=REFERENCE_TYPE_CHOICES, help_text="Kind of entity referenced", max_length=20)),
                ("wallet", models.ForeignKey(help_text="Wallet this entry belongs to", on_delete=django.db.models.deletion.PROTECT, related_name="transactions", to="wallets.customerwallet")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["customer_id", "-created_at"], name="cust_txn_customer_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_cents__gt", 0)), name="customer_wallet_txn_amount_positive"),
                ],
            },
        ),
    ]
