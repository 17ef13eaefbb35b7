# items/services/lot_ledger.py

"""
LOT LEDGER (APPLICATION SERVICE)

The append-mostly store of lots per item.

Concurrency (per-item serialization):
- Every mutation runs inside transaction.atomic and first takes a row lock on
  the owning ItemDefinition (SELECT ... FOR UPDATE). Two writers on the same
  item queue up; writers on different items never contend.
- Lots being decremented are locked as well, so no reader inside another
  transaction can act on a half-applied decrement.
- A failed call rolls back completely.

Operations:
- create_lot(): new lot with current == initial
- list_active_lots(): lots with stock left (ACTIVE or EXPIRED) in FEFO order
- decrement_lot(): the only way current_quantity goes down
- update_lot_metadata(): corrects lot number, dates and paperwork fields;
  status is re-derived, quantities are out of reach
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from items.models import ItemDefinition, Lot
from items.services.exceptions import InsufficientLotQuantityError, NotFoundError
from items.services.item_registry import get_item
from items.services.quantities import clean_text, require_positive_qty

logger = logging.getLogger(__name__)

# Allocation order: dated lots by expiry ascending, undated lots last;
# ties by received date, then the per-item creation sequence.
FEFO_ORDERING = (
    F("expiry_date").asc(nulls_last=True),
    "received_date",
    "sequence",
)

LOT_METADATA_FIELDS = (
    "manufacturer",
    "catalog_no",
    "storage_location",
    "invoice_no",
    "attachment_url",
    "attachment_name",
    "notes",
)

# Editable after creation. Quantities and status never are.
LOT_EDITABLE_FIELDS = ("lot_number", "expiry_date", "received_date", *LOT_METADATA_FIELDS)
LOT_LOCKED_FIELDS = ("initial_quantity", "current_quantity", "status", "item", "item_id")


def lock_item(item_id) -> ItemDefinition:
    """Per-item write lock. Call inside an atomic block."""
    return get_item(item_id, lock=True)


@transaction.atomic
def create_lot(
    *,
    item_id,
    lot_number,
    initial_quantity,
    expiry_date=None,
    received_date=None,
    user=None,
    **metadata,
) -> Lot:
    item = lock_item(item_id)

    lot_number = clean_text(lot_number)
    if not lot_number:
        raise ValidationError({"lot_number": "lot_number is required"})

    qty = require_positive_qty(initial_quantity, field="initial_quantity")

    if Lot.objects.filter(item=item, lot_number=lot_number).exists():
        raise ValidationError(
            {"lot_number": f"Lot {lot_number!r} already exists for item {item.code}"}
        )

    extra = {k: clean_text(v) for k, v in metadata.items() if k in LOT_METADATA_FIELDS}
    unknown = set(metadata) - set(LOT_METADATA_FIELDS)
    if unknown:
        raise ValidationError({"lot": f"Unknown lot fields: {', '.join(sorted(unknown))}"})

    try:
        lot = Lot.objects.create(
            item=item,
            lot_number=lot_number,
            initial_quantity=qty,
            current_quantity=qty,
            expiry_date=expiry_date or None,
            received_date=received_date or timezone.localdate(),
            created_by=user,
            **extra,
        )
    except IntegrityError as exc:
        raise ValidationError(
            {"lot_number": f"Lot {lot_number!r} already exists for item {item.code}"}
        ) from exc

    logger.info(
        "Lot created",
        extra={
            "item_id": str(item.id),
            "lot_id": str(lot.id),
            "lot_number": lot.lot_number,
            "quantity": qty,
        },
    )
    return lot


def active_lots_queryset(*, item_id):
    return Lot.objects.filter(item_id=item_id, current_quantity__gt=0).order_by(*FEFO_ORDERING)


def list_active_lots(*, item_id, lock: bool = False) -> list[Lot]:
    """
    Lots with stock left (ACTIVE or EXPIRED), in allocation order.
    lock=True must be used inside an atomic block.
    """
    qs = active_lots_queryset(item_id=item_id)
    if lock:
        qs = qs.select_for_update()
    return list(qs)


def get_lot(lot_id, *, item_id=None, lock: bool = False) -> Lot:
    qs = Lot.objects.all()
    if item_id is not None:
        qs = qs.filter(item_id=item_id)
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=lot_id)
    except (Lot.DoesNotExist, ValidationError, ValueError) as exc:
        raise NotFoundError(f"Lot not found: {lot_id}", lot_id=str(lot_id)) from exc


def apply_locked_decrement(lot: Lot, amount: int) -> Lot:
    """Decrement an already-locked lot in place."""
    available = int(lot.current_quantity or 0)
    if amount > available:
        raise InsufficientLotQuantityError(
            lot_number=lot.lot_number,
            requested=amount,
            available=available,
        )

    lot.current_quantity = available - amount
    lot.save(update_fields=["current_quantity"])
    return lot


def _lock_lot(lot_id) -> Lot:
    """Lock the owning item, then the lot (same order as allocation)."""
    try:
        item_id = Lot.objects.filter(pk=lot_id).values_list("item_id", flat=True).first()
    except (ValidationError, ValueError):
        item_id = None
    if item_id is None:
        raise NotFoundError(f"Lot not found: {lot_id}", lot_id=str(lot_id))
    lock_item(item_id)
    return get_lot(lot_id, lock=True)


@transaction.atomic
def decrement_lot(*, lot_id, amount) -> Lot:
    qty = require_positive_qty(amount, field="amount")
    lot = _lock_lot(lot_id)
    return apply_locked_decrement(lot, qty)


@transaction.atomic
def update_lot_metadata(*, lot_id, user=None, **fields) -> Lot:
    locked = sorted(set(fields) & set(LOT_LOCKED_FIELDS))
    if locked:
        raise ValidationError({name: f"{name} cannot be changed on a lot" for name in locked})
    unknown = sorted(set(fields) - set(LOT_EDITABLE_FIELDS))
    if unknown:
        raise ValidationError({"lot": f"Unknown lot fields: {', '.join(unknown)}"})

    lot = _lock_lot(lot_id)
    changes = {}

    if "lot_number" in fields:
        lot_number = clean_text(fields["lot_number"])
        if not lot_number:
            raise ValidationError({"lot_number": "lot_number is required"})
        if (
            lot_number != lot.lot_number
            and Lot.objects.filter(item_id=lot.item_id, lot_number=lot_number).exists()
        ):
            raise ValidationError({"lot_number": f"Lot {lot_number!r} already exists for this item"})
        changes["lot_number"] = lot_number

    if "expiry_date" in fields:
        changes["expiry_date"] = fields["expiry_date"] or None

    if "received_date" in fields:
        if not fields["received_date"]:
            raise ValidationError({"received_date": "received_date cannot be cleared"})
        changes["received_date"] = fields["received_date"]

    for name in LOT_METADATA_FIELDS:
        if name in fields:
            changes[name] = clean_text(fields[name])

    if not changes:
        return lot

    for name, value in changes.items():
        setattr(lot, name, value)
    lot.save(update_fields=list(changes))

    logger.info(
        "Lot metadata updated",
        extra={
            "lot_id": str(lot.id),
            "fields": sorted(changes),
            "user_id": str(user.pk) if user is not None else None,
        },
    )
    return lot
