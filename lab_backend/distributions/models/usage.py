# distributions/models/usage.py

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from items.models import ItemDefinition, Lot


class UsageRecord(models.Model):
    """
    In-house consumption, one row per lot drawn from.

    Rows written by a single consume() call share batch_ref.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    batch_ref = models.UUIDField(default=uuid.uuid4, db_index=True)

    item = models.ForeignKey(
        ItemDefinition,
        on_delete=models.CASCADE,
        related_name="usage_records",
    )
    lot = models.ForeignKey(
        Lot,
        on_delete=models.CASCADE,
        related_name="usage_records",
    )
    lot_number = models.CharField(max_length=128)
    quantity_used = models.PositiveIntegerField()

    used_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="usage_records",
    )
    # person who physically took the goods, free text
    received_by = models.CharField(max_length=200, blank=True, default="")
    department = models.CharField(max_length=120, blank=True, default="")
    purpose = models.CharField(max_length=255, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    used_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-used_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_used__gt=0),
                name="chk_usage_quantity_gt_zero",
            ),
        ]
        indexes = [
            models.Index(fields=["item", "used_at"], name="idx_usage_item_at"),
            models.Index(fields=["department", "used_at"], name="idx_usage_department_at"),
        ]

    def __str__(self):
        item_code = getattr(self.item, "code", "ITEM")
        return f"{item_code} | Lot {self.lot_number} x {self.quantity_used}"
