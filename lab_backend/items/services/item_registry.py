# items/services/item_registry.py

"""
ITEM REGISTRY (APPLICATION SERVICE)

Canonical create / update / delete for ItemDefinition.

Rules:
- code + name are required; code is unique and stable (never renamed here).
- Deleting an item cascades to its lots and to every record that references
  the item (purchases + receipts, distributions, waste, usage).
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from items.models import ItemDefinition
from items.services.exceptions import NotFoundError
from items.services.quantities import clean_text, to_int_qty

logger = logging.getLogger(__name__)

# Fields callers may set. code is create-only.
EDITABLE_FIELDS = (
    "name",
    "category",
    "department",
    "unit",
    "min_stock",
    "ideal_stock",
    "max_stock",
    "supplier",
    "catalog_no",
    "brand",
    "storage_location",
    "storage_temp",
    "chemical_type",
    "msds_url",
    "notes",
    "status",
)

_INT_FIELDS = {"min_stock", "ideal_stock", "max_stock"}
_NULLABLE_INT_FIELDS = {"ideal_stock", "max_stock"}


def _normalize_fields(fields: dict) -> dict:
    out = {}
    for key in EDITABLE_FIELDS:
        if key not in fields:
            continue
        value = fields[key]
        if key in _INT_FIELDS:
            if key in _NULLABLE_INT_FIELDS and value in (None, ""):
                out[key] = None
                continue
            qty = to_int_qty(value, field=key)
            if qty < 0:
                raise ValidationError({key: f"{key} cannot be negative"})
            out[key] = qty
        elif key == "chemical_type":
            out[key] = clean_text(value).upper()
        else:
            out[key] = clean_text(value)
    return out


def get_item(item_id, *, lock: bool = False) -> ItemDefinition:
    qs = ItemDefinition.objects.all()
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=item_id)
    except (ItemDefinition.DoesNotExist, ValidationError, ValueError) as exc:
        raise NotFoundError(f"Item not found: {item_id}", item_id=str(item_id)) from exc


@transaction.atomic
def create_item(*, code, name, user=None, **fields) -> ItemDefinition:
    code = clean_text(code)
    name = clean_text(name)

    if not code:
        raise ValidationError({"code": "code is required"})
    if not name:
        raise ValidationError({"name": "name is required"})

    if ItemDefinition.objects.filter(code=code).exists():
        raise ValidationError({"code": f"An item with code {code!r} already exists"})

    try:
        item = ItemDefinition.objects.create(
            code=code,
            name=name,
            created_by=user,
            updated_by=user,
            **_normalize_fields(fields),
        )
    except IntegrityError as exc:
        raise ValidationError({"code": f"An item with code {code!r} already exists"}) from exc

    logger.info("Item created", extra={"item_id": str(item.id), "code": item.code})
    return item


@transaction.atomic
def update_item(*, item_id, user=None, **fields) -> ItemDefinition:
    item = get_item(item_id, lock=True)

    if "code" in fields and clean_text(fields["code"]) != item.code:
        raise ValidationError({"code": "code is immutable"})

    changes = _normalize_fields(fields)
    if "name" in changes and not changes["name"]:
        raise ValidationError({"name": "name is required"})

    for key, value in changes.items():
        setattr(item, key, value)
    item.updated_by = user
    item.save()

    logger.info(
        "Item updated",
        extra={"item_id": str(item.id), "fields": sorted(changes)},
    )
    return item


@transaction.atomic
def delete_item(*, item_id) -> dict:
    """
    Delete an item and everything it owns (cascade).
    Returns the per-model deletion counts Django reports.
    """
    item = get_item(item_id, lock=True)
    code = item.code
    total, per_model = item.delete()

    logger.warning(
        "Item deleted with cascade",
        extra={"item_id": str(item_id), "code": code, "rows": total},
    )
    return {"deleted": total, "by_model": per_model}
