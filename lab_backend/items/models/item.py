# items/models/item.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class ItemDefinition(models.Model):
    """
    A trackable laboratory consumable (reagent, kit, disposable...).

    STOCK MODEL (IMPORTANT):
    - ItemDefinition itself does NOT store stock
    - Stock lives in Lot rows (one per received batch)
    - Totals and stock status are recomputed from lots on every read
      (items.services.stock_view)

    code is the human-entered identity: unique, stable, and the upsert key
    for spreadsheet import.
    """

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        INACTIVE = "INACTIVE", "Inactive"

    class ChemicalType(models.TextChoices):
        ACID = "ACID", "Acid"
        BASE = "BASE", "Base"
        OXIDIZER = "OXIDIZER", "Oxidizer"
        FLAMMABLE = "FLAMMABLE", "Flammable"
        TOXIC = "TOXIC", "Toxic"
        CORROSIVE = "CORROSIVE", "Corrosive"
        REACTIVE = "REACTIVE", "Reactive"
        NEUTRAL = "NEUTRAL", "Neutral"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255, db_index=True)

    category = models.CharField(max_length=120, blank=True, default="")
    department = models.CharField(max_length=120, blank=True, default="", db_index=True)
    unit = models.CharField(max_length=32, default="unit")

    min_stock = models.PositiveIntegerField(default=0)
    ideal_stock = models.PositiveIntegerField(null=True, blank=True)
    max_stock = models.PositiveIntegerField(null=True, blank=True)

    supplier = models.CharField(max_length=200, blank=True, default="")
    catalog_no = models.CharField(max_length=120, blank=True, default="")
    brand = models.CharField(max_length=120, blank=True, default="")
    storage_location = models.CharField(max_length=120, blank=True, default="")
    storage_temp = models.CharField(max_length=64, blank=True, default="")
    chemical_type = models.CharField(
        max_length=16, choices=ChemicalType.choices, blank=True, default=""
    )
    msds_url = models.CharField(max_length=500, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="items_created",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="items_updated",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        indexes = [
            models.Index(fields=["name"], name="idx_item_name"),
            models.Index(fields=["department", "code"], name="idx_item_department_code"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_item_code_not_blank",
            ),
        ]

    def clean(self):
        if not (self.code or "").strip():
            raise ValidationError({"code": "code is required"})

        if not (self.name or "").strip():
            raise ValidationError({"name": "name is required"})

        if (
            self.ideal_stock is not None
            and self.max_stock is not None
            and self.ideal_stock > self.max_stock
        ):
            raise ValidationError({"ideal_stock": "ideal_stock cannot exceed max_stock"})

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()
        if not (self.unit or "").strip():
            self.unit = settings.DEFAULT_ITEM_UNIT

        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.code})"
