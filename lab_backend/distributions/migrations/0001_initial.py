import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("items", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Distribution",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField()),
                ("recipient", models.CharField(max_length=200)),
                ("department", models.CharField(blank=True, default="", max_length=120)),
                ("purpose", models.CharField(blank=True, default="", max_length=255)),
                ("use_fefo", models.BooleanField(default=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("OPEN", "Open"), ("COMPLETED", "Completed")],
                        default="OPEN",
                        max_length=16,
                    ),
                ),
                ("distributed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "completed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="distributions_completed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "distributed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="distributions_made",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="distributions",
                        to="items.itemdefinition",
                    ),
                ),
            ],
            options={
                "ordering": ["-distributed_at"],
                "indexes": [
                    models.Index(fields=["item", "distributed_at"], name="idx_distribution_item_at"),
                    models.Index(fields=["status", "distributed_at"], name="idx_distribution_status_at"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="chk_distribution_quantity_gt_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DistributionLot",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("lot_number", models.CharField(max_length=128)),
                ("quantity_used", models.PositiveIntegerField()),
                (
                    "distribution",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lots",
                        to="distributions.distribution",
                    ),
                ),
                (
                    "lot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="distribution_lines",
                        to="items.lot",
                    ),
                ),
            ],
            options={
                "ordering": ["distribution", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_used__gt", 0)),
                        name="chk_distribution_lot_qty_gt_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="WasteRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField()),
                (
                    "waste_type",
                    models.CharField(
                        choices=[
                            ("EXPIRED", "Expired"),
                            ("CONTAMINATED", "Contaminated"),
                            ("DAMAGED", "Damaged"),
                            ("RECALLED", "Recalled"),
                        ],
                        max_length=16,
                    ),
                ),
                ("reason", models.TextField(blank=True, default="")),
                ("disposal_method", models.CharField(blank=True, default="", max_length=200)),
                ("certificate_no", models.CharField(blank=True, default="", max_length=120)),
                ("notes", models.TextField(blank=True, default="")),
                ("disposed_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "disposed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="waste_disposed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="waste_records",
                        to="items.itemdefinition",
                    ),
                ),
            ],
            options={
                "ordering": ["-disposed_at"],
                "indexes": [
                    models.Index(fields=["item", "disposed_at"], name="idx_waste_item_at"),
                    models.Index(fields=["waste_type", "disposed_at"], name="idx_waste_type_at"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="chk_waste_quantity_gt_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="WasteLot",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("lot_number", models.CharField(max_length=128)),
                ("quantity_used", models.PositiveIntegerField()),
                (
                    "lot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="waste_lines",
                        to="items.lot",
                    ),
                ),
                (
                    "waste_record",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lots",
                        to="distributions.wasterecord",
                    ),
                ),
            ],
            options={
                "ordering": ["waste_record", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_used__gt", 0)),
                        name="chk_waste_lot_qty_gt_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="UsageRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("batch_ref", models.UUIDField(db_index=True, default=uuid.uuid4)),
                ("lot_number", models.CharField(max_length=128)),
                ("quantity_used", models.PositiveIntegerField()),
                ("received_by", models.CharField(blank=True, default="", max_length=200)),
                ("department", models.CharField(blank=True, default="", max_length=120)),
                ("purpose", models.CharField(blank=True, default="", max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                ("used_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="usage_records",
                        to="items.itemdefinition",
                    ),
                ),
                (
                    "lot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="usage_records",
                        to="items.lot",
                    ),
                ),
                (
                    "used_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="usage_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-used_at"],
                "indexes": [
                    models.Index(fields=["item", "used_at"], name="idx_usage_item_at"),
                    models.Index(fields=["department", "used_at"], name="idx_usage_department_at"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_used__gt", 0)),
                        name="chk_usage_quantity_gt_zero",
                    ),
                ],
            },
        ),
    ]
