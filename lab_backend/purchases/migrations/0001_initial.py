import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import purchases.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("items", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "request_number",
                    models.CharField(
                        default=purchases.models.generate_request_number,
                        editable=False,
                        max_length=20,
                        unique=True,
                    ),
                ),
                ("department", models.CharField(blank=True, default="", max_length=120)),
                ("requested_qty", models.PositiveIntegerField()),
                ("requested_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "urgency",
                    models.CharField(
                        choices=[("NORMAL", "Normal"), ("URGENT", "Urgent"), ("CRITICAL", "Critical")],
                        default="NORMAL",
                        max_length=16,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("REQUESTED", "Requested"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("ORDERED", "Ordered"),
                            ("PARTIALLY_RECEIVED", "Partially received"),
                            ("RECEIVED", "Received"),
                        ],
                        default="REQUESTED",
                        max_length=24,
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("approval_note", models.TextField(blank=True, default="")),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True, default="")),
                ("ordered_at", models.DateTimeField(blank=True, null=True)),
                ("supplier_name", models.CharField(blank=True, default="", max_length=200)),
                ("po_number", models.CharField(blank=True, default="", max_length=64)),
                ("ordered_qty", models.PositiveIntegerField(blank=True, null=True)),
                ("received_qty_total", models.PositiveIntegerField(default=0)),
                ("last_received_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="purchases_approved",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="purchases",
                        to="items.itemdefinition",
                    ),
                ),
                (
                    "ordered_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="purchases_ordered",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "rejected_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="purchases_rejected",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "requested_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="purchases_requested",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-requested_at"],
                "indexes": [
                    models.Index(fields=["status", "requested_at"], name="idx_purchase_status_requested"),
                    models.Index(fields=["item", "status"], name="idx_purchase_item_status"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("requested_qty__gt", 0)),
                        name="chk_purchase_requested_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("ordered_qty__isnull", True), ("ordered_qty__gt", 0), _connector="OR"),
                        name="chk_purchase_ordered_gt_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Receipt",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField()),
                ("lot_number", models.CharField(max_length=128)),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("received_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("invoice_no", models.CharField(blank=True, default="", max_length=120)),
                ("attachment_url", models.CharField(blank=True, default="", max_length=500)),
                ("attachment_name", models.CharField(blank=True, default="", max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "lot",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="receipt",
                        to="items.lot",
                    ),
                ),
                (
                    "purchase",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="receipts",
                        to="purchases.purchase",
                    ),
                ),
                (
                    "received_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="receipts_recorded",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["received_at"],
                "indexes": [
                    models.Index(fields=["purchase", "received_at"], name="idx_receipt_purchase_received"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="chk_receipt_quantity_gt_zero",
                    ),
                ],
            },
        ),
    ]
