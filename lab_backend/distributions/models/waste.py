# distributions/models/waste.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from items.models import ItemDefinition, Lot


class WasteRecord(models.Model):
    """
    Stock taken out of circulation for good.

    The only way expired stock leaves the lots: expiry itself never zeroes
    a lot. Allocation uses the EXPIRED_FIRST policy.
    """

    TYPE_EXPIRED = "EXPIRED"
    TYPE_CONTAMINATED = "CONTAMINATED"
    TYPE_DAMAGED = "DAMAGED"
    TYPE_RECALLED = "RECALLED"

    WASTE_TYPES = [
        (TYPE_EXPIRED, "Expired"),
        (TYPE_CONTAMINATED, "Contaminated"),
        (TYPE_DAMAGED, "Damaged"),
        (TYPE_RECALLED, "Recalled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    item = models.ForeignKey(
        ItemDefinition,
        on_delete=models.CASCADE,
        related_name="waste_records",
    )
    quantity = models.PositiveIntegerField()
    waste_type = models.CharField(max_length=16, choices=WASTE_TYPES)

    reason = models.TextField(blank=True, default="")
    disposal_method = models.CharField(max_length=200, blank=True, default="")
    certificate_no = models.CharField(max_length=120, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    disposed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="waste_disposed",
    )
    disposed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-disposed_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="chk_waste_quantity_gt_zero",
            ),
        ]
        indexes = [
            models.Index(fields=["item", "disposed_at"], name="idx_waste_item_at"),
            models.Index(fields=["waste_type", "disposed_at"], name="idx_waste_type_at"),
        ]

    def clean(self):
        if self.waste_type not in dict(self.WASTE_TYPES):
            raise ValidationError({"waste_type": "waste_type is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        item_code = getattr(self.item, "code", "ITEM")
        return f"{item_code} x {self.quantity} ({self.waste_type})"


class WasteLot(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    waste_record = models.ForeignKey(
        WasteRecord,
        on_delete=models.CASCADE,
        related_name="lots",
    )
    lot = models.ForeignKey(
        Lot,
        on_delete=models.CASCADE,
        related_name="waste_lines",
    )
    lot_number = models.CharField(max_length=128)
    quantity_used = models.PositiveIntegerField()

    class Meta:
        ordering = ["waste_record", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_used__gt=0),
                name="chk_waste_lot_qty_gt_zero",
            ),
        ]

    def __str__(self):
        return f"Lot {self.lot_number} x {self.quantity_used}"
