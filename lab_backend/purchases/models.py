# purchases/models.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from items.models import ItemDefinition, Lot

User = settings.AUTH_USER_MODEL


def generate_request_number() -> str:
    return f"REQ-{uuid.uuid4().hex[:8].upper()}"


class Purchase(models.Model):
    """
    One procurement request for one item.

    Lifecycle (purchases.services.purchase_lifecycle):
        REQUESTED -> APPROVED -> ORDERED -> PARTIALLY_RECEIVED* -> RECEIVED
        REQUESTED -> REJECTED

    Status moves ONLY through the lifecycle services; received_qty_total only
    moves through receive_goods(), which appends a Receipt in the same
    transaction. received_qty_total == sum(receipts.quantity) at all times.
    """

    STATUS_REQUESTED = "REQUESTED"
    STATUS_APPROVED = "APPROVED"
    STATUS_REJECTED = "REJECTED"
    STATUS_ORDERED = "ORDERED"
    STATUS_PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED"
    STATUS_RECEIVED = "RECEIVED"

    STATUSES = [
        (STATUS_REQUESTED, "Requested"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_ORDERED, "Ordered"),
        (STATUS_PARTIALLY_RECEIVED, "Partially received"),
        (STATUS_RECEIVED, "Received"),
    ]

    # ordered, goods still expected
    AWAITING_GOODS = {STATUS_ORDERED, STATUS_PARTIALLY_RECEIVED}

    URGENCY_NORMAL = "NORMAL"
    URGENCY_URGENT = "URGENT"
    URGENCY_CRITICAL = "CRITICAL"

    URGENCIES = [
        (URGENCY_NORMAL, "Normal"),
        (URGENCY_URGENT, "Urgent"),
        (URGENCY_CRITICAL, "Critical"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    request_number = models.CharField(
        max_length=20,
        unique=True,
        default=generate_request_number,
        editable=False,
    )

    item = models.ForeignKey(
        ItemDefinition,
        on_delete=models.CASCADE,
        related_name="purchases",
    )
    department = models.CharField(max_length=120, blank=True, default="")

    # Request
    requested_qty = models.PositiveIntegerField()
    requested_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases_requested",
    )
    requested_at = models.DateTimeField(default=timezone.now)
    urgency = models.CharField(max_length=16, choices=URGENCIES, default=URGENCY_NORMAL)
    notes = models.TextField(blank=True, default="")

    status = models.CharField(max_length=24, choices=STATUSES, default=STATUS_REQUESTED)

    # Approval / rejection
    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    approval_note = models.TextField(blank=True, default="")

    rejected_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases_rejected",
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    # Order
    ordered_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases_ordered",
    )
    ordered_at = models.DateTimeField(null=True, blank=True)
    supplier_name = models.CharField(max_length=200, blank=True, default="")
    po_number = models.CharField(max_length=64, blank=True, default="")
    ordered_qty = models.PositiveIntegerField(null=True, blank=True)

    # Receiving (running total over receipts)
    received_qty_total = models.PositiveIntegerField(default=0)
    last_received_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-requested_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(requested_qty__gt=0),
                name="chk_purchase_requested_gt_zero",
            ),
            models.CheckConstraint(
                condition=models.Q(ordered_qty__isnull=True) | models.Q(ordered_qty__gt=0),
                name="chk_purchase_ordered_gt_zero",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "requested_at"], name="idx_purchase_status_requested"),
            models.Index(fields=["item", "status"], name="idx_purchase_item_status"),
        ]

    def clean(self):
        if self.requested_qty is None or self.requested_qty <= 0:
            raise ValidationError({"requested_qty": "requested_qty must be greater than zero"})

        if self.status == self.STATUS_REJECTED and not (self.rejection_reason or "").strip():
            raise ValidationError({"rejection_reason": "A rejection reason is required"})

        if self.status in self.AWAITING_GOODS | {self.STATUS_RECEIVED}:
            if not (self.supplier_name or "").strip():
                raise ValidationError({"supplier_name": "supplier_name is required once ordered"})
            if not self.ordered_qty:
                raise ValidationError({"ordered_qty": "ordered_qty is required once ordered"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def pending_quantity(self) -> int:
        """Ordered but not yet received; never negative."""
        if self.status not in self.AWAITING_GOODS:
            return 0
        return max(int(self.ordered_qty or 0) - int(self.received_qty_total or 0), 0)

    def __str__(self):
        item_code = getattr(self.item, "code", "ITEM")
        return f"{self.request_number} | {item_code} x {self.requested_qty} ({self.status})"


class Receipt(models.Model):
    """
    One delivery against a Purchase.

    IMMUTABLE once written: every receipt materialized exactly one Lot, and
    editing it afterwards would break received_qty_total == sum(receipts).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.CASCADE,
        related_name="receipts",
    )
    lot = models.OneToOneField(
        Lot,
        on_delete=models.CASCADE,
        related_name="receipt",
    )

    quantity = models.PositiveIntegerField()
    lot_number = models.CharField(max_length=128)
    expiry_date = models.DateField(null=True, blank=True)

    received_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="receipts_recorded",
    )
    received_at = models.DateTimeField(default=timezone.now)

    invoice_no = models.CharField(max_length=120, blank=True, default="")
    attachment_url = models.CharField(max_length=500, blank=True, default="")
    attachment_name = models.CharField(max_length=255, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["received_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="chk_receipt_quantity_gt_zero",
            ),
        ]
        indexes = [
            models.Index(fields=["purchase", "received_at"], name="idx_receipt_purchase_received"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError({"quantity": "quantity must be greater than zero"})
        if not (self.lot_number or "").strip():
            raise ValidationError({"lot_number": "lot_number is required"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Receipts are immutable once recorded")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Receipts cannot be deleted")

    def __str__(self):
        return f"{self.purchase.request_number} | Lot {self.lot_number} x {self.quantity}"
