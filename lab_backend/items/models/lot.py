# items/models/lot.py

"""
LOT (ONE RECEIVED BATCH)

Represents one physical batch of an item with its own quantity and expiry.

CANONICAL RULES:
- initial_quantity is fixed at creation (immutable)
- current_quantity only ever decreases, and only via the lot ledger services
- 0 <= current_quantity <= initial_quantity
- status is ALWAYS derived (never user-controlled):
    DEPLETED  iff current_quantity == 0
    EXPIRED   iff expiry_date has passed and stock is left
    ACTIVE    otherwise
- Expiry never zeroes a lot: expired stock stays countable and allocatable
  until it is explicitly disposed through a waste record.
- Lots are never deleted on their own; they go away only with their item.

Created by a purchase receipt, by manual lot entry, or by import.
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Max, Q
from django.utils import timezone

from .item import ItemDefinition


class Lot(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        DEPLETED = "DEPLETED", "Depleted"
        EXPIRED = "EXPIRED", "Expired"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    item = models.ForeignKey(
        ItemDefinition,
        on_delete=models.CASCADE,
        related_name="lots",
    )

    lot_number = models.CharField(
        max_length=128,
        help_text="Manufacturer / supplier lot reference (unique per item)",
    )

    initial_quantity = models.PositiveIntegerField(help_text="Quantity received (immutable)")
    current_quantity = models.PositiveIntegerField(
        help_text="Remaining quantity (service-managed only)",
    )

    expiry_date = models.DateField(null=True, blank=True)
    received_date = models.DateField(default=timezone.localdate)

    # creation order within the item; last FEFO tie-break
    sequence = models.PositiveIntegerField(editable=False)

    # Derived field: NEVER edited directly
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)

    manufacturer = models.CharField(max_length=200, blank=True, default="")
    catalog_no = models.CharField(max_length=120, blank=True, default="")
    storage_location = models.CharField(max_length=120, blank=True, default="")
    invoice_no = models.CharField(max_length=120, blank=True, default="")

    # Opaque reference; storage is somebody else's problem.
    attachment_url = models.CharField(max_length=500, blank=True, default="")
    attachment_name = models.CharField(max_length=255, blank=True, default="")

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="lots_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = [
            F("expiry_date").asc(nulls_last=True),
            "received_date",
            "sequence",
        ]
        indexes = [
            models.Index(fields=["item", "status"], name="idx_lot_item_status"),
            models.Index(fields=["item", "expiry_date"], name="idx_lot_item_expiry"),
            models.Index(fields=["expiry_date"], name="idx_lot_expiry"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["item", "lot_number"],
                name="uniq_lot_number_per_item",
            ),
            models.UniqueConstraint(
                fields=["item", "sequence"],
                name="uniq_lot_sequence_per_item",
            ),
            models.CheckConstraint(
                condition=Q(initial_quantity__gt=0),
                name="chk_lot_initial_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(current_quantity__gte=0),
                name="chk_lot_current_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(current_quantity__lte=F("initial_quantity")),
                name="chk_lot_current_lte_initial",
            ),
        ]

    # -------------------------------------------------
    # DERIVED STATE
    # -------------------------------------------------

    @staticmethod
    def derive_status(*, current_quantity: int, expiry_date, today=None) -> str:
        if int(current_quantity or 0) == 0:
            return Lot.Status.DEPLETED
        today = today or timezone.localdate()
        if expiry_date is not None and expiry_date < today:
            return Lot.Status.EXPIRED
        return Lot.Status.ACTIVE

    def is_expired(self, today=None) -> bool:
        today = today or timezone.localdate()
        return self.expiry_date is not None and self.expiry_date < today

    # -------------------------------------------------
    # VALIDATION
    # -------------------------------------------------

    def clean(self):
        if not (self.lot_number or "").strip():
            raise ValidationError({"lot_number": "lot_number is required"})

        if self.initial_quantity is None or self.initial_quantity <= 0:
            raise ValidationError(
                {"initial_quantity": "initial_quantity must be greater than zero"}
            )

        if self.current_quantity is None or self.current_quantity < 0:
            raise ValidationError({"current_quantity": "current_quantity cannot be negative"})

        if self.current_quantity > self.initial_quantity:
            raise ValidationError(
                {"current_quantity": "current_quantity cannot exceed initial_quantity"}
            )

    # -------------------------------------------------
    # IMMUTABILITY + DERIVED STATE
    # -------------------------------------------------

    def save(self, *args, **kwargs):
        if self.lot_number is not None:
            self.lot_number = self.lot_number.strip()

        # ISO strings from service callers; status derivation compares dates
        for name in ("expiry_date", "received_date"):
            setattr(self, name, self._meta.get_field(name).to_python(getattr(self, name)))

        if self._state.adding:
            if self.current_quantity is None:
                self.current_quantity = self.initial_quantity
            if self.sequence is None:
                # callers hold the item lock (lot_ledger.lock_item)
                last = Lot.objects.filter(item_id=self.item_id).aggregate(last=Max("sequence"))["last"]
                self.sequence = (last or 0) + 1
        else:
            original = Lot.objects.only("initial_quantity", "current_quantity").get(pk=self.pk)

            if self.initial_quantity != original.initial_quantity:
                raise ValidationError({"initial_quantity": "initial_quantity is immutable"})

            if int(self.current_quantity or 0) > original.current_quantity:
                raise ValidationError(
                    {"current_quantity": "current_quantity can only decrease"}
                )

        self.status = Lot.derive_status(
            current_quantity=self.current_quantity,
            expiry_date=self.expiry_date,
        )

        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "status" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "status"]

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """
        Audit safety: lots disappear only through item deletion (cascade).
        Use a waste record to take stock out of circulation.
        """
        raise ValidationError(
            "Lots cannot be deleted individually. Record waste instead, or delete the item."
        )

    def __str__(self):
        item_code = getattr(self.item, "code", "ITEM")
        return f"{item_code} | Lot {self.lot_number} ({self.current_quantity}/{self.initial_quantity})"
