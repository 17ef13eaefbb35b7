import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ItemDefinition",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(max_length=64, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("category", models.CharField(blank=True, default="", max_length=120)),
                ("department", models.CharField(blank=True, db_index=True, default="", max_length=120)),
                ("unit", models.CharField(default="unit", max_length=32)),
                ("min_stock", models.PositiveIntegerField(default=0)),
                ("ideal_stock", models.PositiveIntegerField(blank=True, null=True)),
                ("max_stock", models.PositiveIntegerField(blank=True, null=True)),
                ("supplier", models.CharField(blank=True, default="", max_length=200)),
                ("catalog_no", models.CharField(blank=True, default="", max_length=120)),
                ("brand", models.CharField(blank=True, default="", max_length=120)),
                ("storage_location", models.CharField(blank=True, default="", max_length=120)),
                ("storage_temp", models.CharField(blank=True, default="", max_length=64)),
                (
                    "chemical_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("ACID", "Acid"),
                            ("BASE", "Base"),
                            ("OXIDIZER", "Oxidizer"),
                            ("FLAMMABLE", "Flammable"),
                            ("TOXIC", "Toxic"),
                            ("CORROSIVE", "Corrosive"),
                            ("REACTIVE", "Reactive"),
                            ("NEUTRAL", "Neutral"),
                        ],
                        default="",
                        max_length=16,
                    ),
                ),
                ("msds_url", models.CharField(blank=True, default="", max_length=500)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("INACTIVE", "Inactive")],
                        default="ACTIVE",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="items_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="items_updated",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["name"], name="idx_item_name"),
                    models.Index(fields=["department", "code"], name="idx_item_department_code"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("code", ""), _negated=True),
                        name="chk_item_code_not_blank",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Lot",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "lot_number",
                    models.CharField(
                        help_text="Manufacturer / supplier lot reference (unique per item)",
                        max_length=128,
                    ),
                ),
                ("initial_quantity", models.PositiveIntegerField(help_text="Quantity received (immutable)")),
                (
                    "current_quantity",
                    models.PositiveIntegerField(help_text="Remaining quantity (service-managed only)"),
                ),
                ("expiry_date", models.DateField(blank=True, null=True)),
                ("received_date", models.DateField(default=django.utils.timezone.localdate)),
                ("sequence", models.PositiveIntegerField(editable=False)),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("DEPLETED", "Depleted"), ("EXPIRED", "Expired")],
                        default="ACTIVE",
                        max_length=16,
                    ),
                ),
                ("manufacturer", models.CharField(blank=True, default="", max_length=200)),
                ("catalog_no", models.CharField(blank=True, default="", max_length=120)),
                ("storage_location", models.CharField(blank=True, default="", max_length=120)),
                ("invoice_no", models.CharField(blank=True, default="", max_length=120)),
                ("attachment_url", models.CharField(blank=True, default="", max_length=500)),
                ("attachment_name", models.CharField(blank=True, default="", max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="lots_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lots",
                        to="items.itemdefinition",
                    ),
                ),
            ],
            options={
                "ordering": [
                    models.OrderBy(models.F("expiry_date"), nulls_last=True),
                    "received_date",
                    "sequence",
                ],
                "indexes": [
                    models.Index(fields=["item", "status"], name="idx_lot_item_status"),
                    models.Index(fields=["item", "expiry_date"], name="idx_lot_item_expiry"),
                    models.Index(fields=["expiry_date"], name="idx_lot_expiry"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("item", "lot_number"), name="uniq_lot_number_per_item"),
                    models.UniqueConstraint(fields=("item", "sequence"), name="uniq_lot_sequence_per_item"),
                    models.CheckConstraint(
                        condition=models.Q(("initial_quantity__gt", 0)),
                        name="chk_lot_initial_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("current_quantity__gte", 0)),
                        name="chk_lot_current_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("current_quantity__lte", models.F("initial_quantity"))),
                        name="chk_lot_current_lte_initial",
                    ),
                ],
            },
        ),
    ]
