# items/services/item_import.py

"""
ITEM IMPORT (UPSERT BY CODE)

Input: rows already read from a spreadsheet (dicts of header -> cell).
Headers are mapped through import_columns.COLUMN_ALIASES first.

Rules:
- a row without code or name is reported and skipped
- rows are grouped by code; the first row of a code supplies the item fields
- an existing code is updated in place (never duplicated)
- a row with a lot number + positive quantity creates a lot
- a row naming a lot the item already has refreshes that lot's dates;
  a different quantity is reported instead, since lot quantities are
  immutable once recorded
- each item and each lot row runs in its own savepoint: one bad row is
  reported in `errors` without undoing the rest of the import
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.dateparse import parse_date

from items.models import ItemDefinition, Lot
from items.services.exceptions import InventoryServiceError
from items.services.import_columns import ITEM_FIELDS, normalize_row
from items.services.item_registry import create_item, update_item
from items.services.lot_ledger import create_lot

logger = logging.getLogger(__name__)

EXCEL_EPOCH = date(1899, 12, 30)
DATE_FORMATS = ("%d.%m.%Y", "%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d")
MIN_YEAR, MAX_YEAR = 2000, 2100

_INT_ITEM_FIELDS = ("min_stock", "ideal_stock", "max_stock")


@dataclass
class ImportResult:
    created: int = 0
    updated: int = 0
    lots_created: int = 0
    lots_updated: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "created": self.created,
            "updated": self.updated,
            "lots_created": self.lots_created,
            "lots_updated": self.lots_updated,
            "errors": list(self.errors),
        }


# -------------------------------------------------
# CELL PARSERS
# -------------------------------------------------

def parse_import_int(value, *, field: str):
    """Whole number from a spreadsheet cell ("12", "12,0", 12.0). None for blank."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError({field: f"{field} must be a whole number"})
    try:
        number = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation as exc:
        raise ValidationError({field: f"{field} must be a whole number"}) from exc
    if number != number.to_integral_value():
        raise ValidationError({field: f"{field} must be a whole number"})
    return int(number)


def _from_excel_serial(value, *, field: str) -> date:
    try:
        return EXCEL_EPOCH + timedelta(days=int(value))
    except (OverflowError, ValueError) as exc:
        raise ValidationError({field: f"Unrecognized date: {value!r}"}) from exc


def parse_import_date(value, *, field: str):
    """
    Accepts date/datetime objects, ISO strings, dd.mm.yyyy / dd/mm/yyyy,
    compact yyyymmdd and Excel serial day numbers. None for blank.
    """
    if value is None or value == "":
        return None

    parsed = None
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = _from_excel_serial(value, field=field)
    else:
        text = str(value).strip()
        if text.isdigit() and len(text) == 8:
            try:
                parsed = datetime.strptime(text, "%Y%m%d").date()
            except ValueError:
                parsed = _from_excel_serial(text, field=field)
        elif text.isdigit():
            parsed = _from_excel_serial(text, field=field)
        else:
            try:
                parsed = parse_date(text[:10])
            except ValueError:
                parsed = None
            for fmt in DATE_FORMATS:
                if parsed is not None:
                    break
                try:
                    parsed = datetime.strptime(text, fmt).date()
                except ValueError:
                    continue

    if parsed is None:
        raise ValidationError({field: f"Unrecognized date: {value!r}"})
    if not (MIN_YEAR <= parsed.year <= MAX_YEAR):
        raise ValidationError({field: f"Date out of range: {parsed.isoformat()}"})
    return parsed


def _messages(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(exc.messages)
    return str(exc)


# -------------------------------------------------
# ITEM + LOT STEPS
# -------------------------------------------------

def _item_fields(row: dict) -> dict:
    fields = {k: row[k] for k in ITEM_FIELDS if k in row and k not in ("code", "name")}
    for key in _INT_ITEM_FIELDS:
        if key in fields:
            fields[key] = parse_import_int(fields[key], field=key)
            if fields[key] is None and key == "min_stock":
                fields.pop(key)
    return fields


def _upsert_item(*, code: str, row: dict, user, result: ImportResult) -> ItemDefinition:
    fields = _item_fields(row)
    existing = ItemDefinition.objects.filter(code=code).first()

    if existing is None:
        item = create_item(code=code, name=row["name"], user=user, **fields)
        result.created += 1
        return item

    item = update_item(
        item_id=existing.id,
        user=user,
        name=row["name"],
        status=ItemDefinition.Status.ACTIVE,
        **fields,
    )
    result.updated += 1
    return item


def _import_lot(*, item: ItemDefinition, row: dict, user, result: ImportResult) -> None:
    lot_number = str(row.get("lot_number") or "").strip()
    raw_qty = row.get("quantity")

    if not lot_number and raw_qty is None:
        return  # item-only row

    if not lot_number:
        raise ValidationError({"lot_number": "quantity given without a lot number"})

    qty = parse_import_int(raw_qty, field="quantity")
    expiry_date = parse_import_date(row.get("expiry_date"), field="expiry_date")
    received_date = parse_import_date(row.get("received_date"), field="received_date")

    existing = (
        Lot.objects.select_for_update()
        .filter(item=item, lot_number=lot_number)
        .first()
    )

    if existing is not None:
        if qty is not None and qty != existing.initial_quantity:
            raise ValidationError(
                {
                    "quantity": (
                        f"lot {lot_number} is already recorded with quantity "
                        f"{existing.initial_quantity}; import cannot rewrite lot quantities"
                    )
                }
            )

        changed = []
        if expiry_date and expiry_date != existing.expiry_date:
            existing.expiry_date = expiry_date
            changed.append("expiry_date")
        if received_date and received_date != existing.received_date:
            existing.received_date = received_date
            changed.append("received_date")
        if changed:
            existing.save(update_fields=changed)

        result.lots_updated += 1
        return

    if not qty or qty <= 0:
        raise ValidationError({"quantity": f"lot {lot_number} needs a positive quantity"})

    create_lot(
        item_id=item.id,
        lot_number=lot_number,
        initial_quantity=qty,
        expiry_date=expiry_date,
        received_date=received_date,
        user=user,
        notes="Imported",
    )
    result.lots_created += 1


# -------------------------------------------------
# ENTRYPOINT
# -------------------------------------------------

@transaction.atomic
def import_items(*, rows, user=None) -> ImportResult:
    if not isinstance(rows, (list, tuple)) or not rows:
        raise ValidationError({"rows": "A non-empty list of rows is required"})

    result = ImportResult()
    grouped: dict[str, list[tuple[int, dict]]] = {}

    for idx, raw in enumerate(rows, start=1):
        if not isinstance(raw, dict):
            result.errors.append(f"Row {idx}: not an object")
            continue

        row = normalize_row(raw)
        code = str(row.get("code") or "").strip()
        name = str(row.get("name") or "").strip()
        if not code or not name:
            result.errors.append(f"Row {idx}: missing code or name")
            continue

        row["code"], row["name"] = code, name
        grouped.setdefault(code, []).append((idx, row))

    for code, entries in grouped.items():
        first_idx, first_row = entries[0]
        try:
            with transaction.atomic():
                item = _upsert_item(code=code, row=first_row, user=user, result=result)
        except (ValidationError, InventoryServiceError) as exc:
            result.errors.append(f"Row {first_idx}: item {code}: {_messages(exc)}")
            continue

        for idx, row in entries:
            try:
                with transaction.atomic():
                    _import_lot(item=item, row=row, user=user, result=result)
            except (ValidationError, InventoryServiceError) as exc:
                result.errors.append(f"Row {idx}: item {code}: {_messages(exc)}")

    logger.info(
        "Item import finished",
        extra={
            "rows": len(rows),
            "created": result.created,
            "updated": result.updated,
            "lots_created": result.lots_created,
            "lots_updated": result.lots_updated,
            "errors": len(result.errors),
        },
    )
    return result
