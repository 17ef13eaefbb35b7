# items/services/fefo.py

"""
FEFO ALLOCATION ENGINE

Purpose:
- Satisfy a requested quantity for ONE item by drawing from its lots,
  first-expire-first-out.
- Used by distribution, waste and internal consumption; each caller
  persists the returned allocation records next to its own record.

Ordering (policy FEFO):
- lots with an expiry date, soonest first
- lots without an expiry date after all dated lots
- ties: received date, then creation time, then id

Ordering (policy EXPIRED_FIRST, used by waste disposal):
- lots already past their expiry date first, then the FEFO order above

All-or-nothing:
- the total of the candidate lots is checked BEFORE any lot is touched;
  a shortfall raises and nothing is mutated
- everything runs in one transaction, so a failure mid-walk rolls back
  earlier decrements too

Manual override:
- lot_id bypasses ordering; the same checks apply to that single lot.

Quantities are whole integer units.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from items.services.exceptions import InsufficientLotQuantityError, InsufficientStockError
from items.services.lot_ledger import apply_locked_decrement, get_lot, list_active_lots, lock_item
from items.services.quantities import require_positive_qty

logger = logging.getLogger(__name__)

POLICY_FEFO = "FEFO"
POLICY_EXPIRED_FIRST = "EXPIRED_FIRST"

POLICIES = {POLICY_FEFO, POLICY_EXPIRED_FIRST}


@dataclass(frozen=True)
class Allocation:
    lot_id: object
    lot_number: str
    quantity_used: int

    def as_dict(self) -> dict:
        return {
            "lot_id": str(self.lot_id),
            "lot_number": self.lot_number,
            "quantity_used": self.quantity_used,
        }


@dataclass
class AllocationResult:
    item_id: object
    requested: int
    allocations: list[Allocation] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(a.quantity_used for a in self.allocations)

    def as_dict(self) -> dict:
        return {
            "item_id": str(self.item_id),
            "requested": self.requested,
            "total": self.total,
            "allocations": [a.as_dict() for a in self.allocations],
        }


def order_lots(lots, *, policy: str = POLICY_FEFO, today=None) -> list:
    """
    Apply the allocation policy to lots that are already in FEFO order.
    The sort is stable, so EXPIRED_FIRST keeps FEFO order inside each group.
    """
    lots = list(lots)
    if policy == POLICY_EXPIRED_FIRST:
        today = today or timezone.localdate()
        lots.sort(key=lambda lot: 0 if lot.is_expired(today) else 1)
    return lots


@transaction.atomic
def allocate_fefo(
    *,
    item_id,
    quantity,
    lot_id=None,
    policy: str = POLICY_FEFO,
) -> AllocationResult:
    """
    Draw `quantity` from the item's lots and return the allocation records.

    Raises:
    - ValidationError: quantity not a positive integer, unknown policy
    - NotFoundError: unknown item, or lot_id not belonging to the item
    - InsufficientStockError: lots together hold less than requested
    - InsufficientLotQuantityError: the override lot holds less than requested
    """
    qty = require_positive_qty(quantity)

    if policy not in POLICIES:
        raise ValidationError({"policy": f"Unknown allocation policy: {policy}"})

    item = lock_item(item_id)
    result = AllocationResult(item_id=item.id, requested=qty)

    # -------------------------------
    # Manual override: one lot
    # -------------------------------
    if lot_id:
        lot = get_lot(lot_id, item_id=item.id, lock=True)
        available = int(lot.current_quantity or 0)
        if available < qty:
            raise InsufficientLotQuantityError(
                lot_number=lot.lot_number,
                requested=qty,
                available=available,
            )
        apply_locked_decrement(lot, qty)
        result.allocations.append(Allocation(lot.id, lot.lot_number, qty))

        logger.info(
            "Manual lot allocation",
            extra={"item_id": str(item.id), "lot_id": str(lot.id), "quantity": qty},
        )
        return result

    # -------------------------------
    # FEFO walk
    # -------------------------------
    lots = order_lots(list_active_lots(item_id=item.id, lock=True), policy=policy)

    total_available = sum(int(lot.current_quantity or 0) for lot in lots)
    if total_available < qty:
        logger.warning(
            "Allocation rejected: insufficient stock",
            extra={
                "item_id": str(item.id),
                "requested": qty,
                "available": total_available,
            },
        )
        raise InsufficientStockError(
            requested=qty,
            available=total_available,
            item_label=item.code,
        )

    remaining = qty
    for lot in lots:
        if remaining <= 0:
            break

        available = int(lot.current_quantity or 0)
        if available <= 0:
            continue

        consumed = min(available, remaining)
        apply_locked_decrement(lot, consumed)
        result.allocations.append(Allocation(lot.id, lot.lot_number, consumed))
        remaining -= consumed

    logger.info(
        "FEFO allocation",
        extra={
            "item_id": str(item.id),
            "policy": policy,
            "requested": qty,
            "lots": len(result.allocations),
        },
    )
    return result
