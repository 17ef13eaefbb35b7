# distributions/models/distribution.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from items.models import ItemDefinition, Lot


class Distribution(models.Model):
    """
    Stock handed out of the store to a recipient.

    Quantities were already taken from the lots when the record was written
    (distribution_service.distribute). Confirming only closes the record.
    """

    STATUS_OPEN = "OPEN"
    STATUS_COMPLETED = "COMPLETED"

    STATUSES = [
        (STATUS_OPEN, "Open"),
        (STATUS_COMPLETED, "Completed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    item = models.ForeignKey(
        ItemDefinition,
        on_delete=models.CASCADE,
        related_name="distributions",
    )
    quantity = models.PositiveIntegerField()

    recipient = models.CharField(max_length=200)
    department = models.CharField(max_length=120, blank=True, default="")
    purpose = models.CharField(max_length=255, blank=True, default="")

    # False when a specific lot was named by the caller
    use_fefo = models.BooleanField(default=True)

    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_OPEN)

    distributed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="distributions_made",
    )
    distributed_at = models.DateTimeField(default=timezone.now)

    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="distributions_completed",
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-distributed_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="chk_distribution_quantity_gt_zero",
            ),
        ]
        indexes = [
            models.Index(fields=["item", "distributed_at"], name="idx_distribution_item_at"),
            models.Index(fields=["status", "distributed_at"], name="idx_distribution_status_at"),
        ]

    def clean(self):
        if not (self.recipient or "").strip():
            raise ValidationError({"recipient": "recipient is required"})
        if self.status == self.STATUS_COMPLETED and not self.completed_at:
            raise ValidationError({"completed_at": "completed_at is required when COMPLETED"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        item_code = getattr(self.item, "code", "ITEM")
        return f"{item_code} x {self.quantity} -> {self.recipient} ({self.status})"


class DistributionLot(models.Model):
    """One allocation record: how much of one lot went into a distribution."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    distribution = models.ForeignKey(
        Distribution,
        on_delete=models.CASCADE,
        related_name="lots",
    )
    lot = models.ForeignKey(
        Lot,
        on_delete=models.CASCADE,
        related_name="distribution_lines",
    )
    # snapshot, readable without the join
    lot_number = models.CharField(max_length=128)
    quantity_used = models.PositiveIntegerField()

    class Meta:
        ordering = ["distribution", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_used__gt=0),
                name="chk_distribution_lot_qty_gt_zero",
            ),
        ]

    def __str__(self):
        return f"Lot {self.lot_number} x {self.quantity_used}"
