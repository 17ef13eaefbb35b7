# purchases/services/purchase_lifecycle.py

"""
PURCHASE LIFECYCLE

The ONLY allowed lifecycle transitions for Purchase, plus the services that
perform the request / approve / reject / order steps.

    REQUESTED -> APPROVED -> ORDERED -> PARTIALLY_RECEIVED* -> RECEIVED
    REQUESTED -> REJECTED (terminal)

Receiving lives in receiving_service (it also touches the lot ledger).

RULES:
- The transition table is data; can_transition() / validate_transition()
  have no side effects.
- Every service locks the purchase row and runs atomically.
- Identities (requester, approver, orderer) are passed in explicitly.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from items.services.exceptions import InvalidStateTransitionError, NotFoundError
from items.services.item_registry import get_item
from items.services.quantities import clean_text, require_positive_qty
from purchases.models import Purchase

logger = logging.getLogger(__name__)

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Purchase.STATUS_REJECTED,
}

ALLOWED_TRANSITIONS = {
    Purchase.STATUS_REQUESTED: {
        Purchase.STATUS_APPROVED,
        Purchase.STATUS_REJECTED,
    },
    Purchase.STATUS_APPROVED: {
        Purchase.STATUS_ORDERED,
    },
    Purchase.STATUS_ORDERED: {
        Purchase.STATUS_PARTIALLY_RECEIVED,
        Purchase.STATUS_RECEIVED,
    },
    Purchase.STATUS_PARTIALLY_RECEIVED: {
        Purchase.STATUS_PARTIALLY_RECEIVED,
        Purchase.STATUS_RECEIVED,
    },
    # over-receipt: more goods may still arrive against a closed order
    Purchase.STATUS_RECEIVED: {
        Purchase.STATUS_RECEIVED,
    },
}

# States that accept a new Receipt
RECEIVABLE_STATES = {
    Purchase.STATUS_ORDERED,
    Purchase.STATUS_PARTIALLY_RECEIVED,
    Purchase.STATUS_RECEIVED,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, purchase: Purchase, target_status: str):
    if not can_transition(from_status=purchase.status, to_status=target_status):
        raise InvalidStateTransitionError(
            f"Purchase {purchase.request_number} cannot transition from "
            f"'{purchase.status}' to '{target_status}'",
            purchase_id=str(purchase.id),
            from_status=purchase.status,
            to_status=target_status,
        )


def status_after_receipt(*, ordered_qty: int, received_qty_total: int) -> str:
    if int(received_qty_total) >= int(ordered_qty or 0):
        return Purchase.STATUS_RECEIVED
    return Purchase.STATUS_PARTIALLY_RECEIVED


# ============================================================
# SERVICES
# ============================================================


def get_purchase(purchase_id, *, lock: bool = False) -> Purchase:
    qs = Purchase.objects.select_related("item")
    if lock:
        qs = qs.select_for_update(of=("self",))
    try:
        return qs.get(pk=purchase_id)
    except (Purchase.DoesNotExist, ValidationError, ValueError) as exc:
        raise NotFoundError(
            f"Purchase not found: {purchase_id}", purchase_id=str(purchase_id)
        ) from exc


@transaction.atomic
def request_purchase(
    *,
    item_id,
    quantity,
    urgency: str = Purchase.URGENCY_NORMAL,
    notes: str = "",
    department: str = "",
    user=None,
) -> Purchase:
    qty = require_positive_qty(quantity)
    item = get_item(item_id)

    urgency = clean_text(urgency).upper() or Purchase.URGENCY_NORMAL
    if urgency not in dict(Purchase.URGENCIES):
        raise ValidationError({"urgency": f"Unknown urgency: {urgency}"})

    purchase = Purchase.objects.create(
        item=item,
        department=clean_text(department) or item.department,
        requested_qty=qty,
        requested_by=user,
        urgency=urgency,
        notes=clean_text(notes),
        status=Purchase.STATUS_REQUESTED,
    )

    logger.info(
        "Purchase requested",
        extra={
            "purchase_id": str(purchase.id),
            "request_number": purchase.request_number,
            "item_id": str(item.id),
            "quantity": qty,
            "urgency": urgency,
        },
    )
    return purchase


@transaction.atomic
def approve_purchase(*, purchase_id, user, note: str = "") -> Purchase:
    if user is None:
        raise ValidationError({"approved_by": "An approver is required"})

    purchase = get_purchase(purchase_id, lock=True)
    validate_transition(purchase=purchase, target_status=Purchase.STATUS_APPROVED)

    purchase.status = Purchase.STATUS_APPROVED
    purchase.approved_by = user
    purchase.approved_at = timezone.now()
    purchase.approval_note = clean_text(note)
    purchase.save()

    logger.info(
        "Purchase approved",
        extra={"purchase_id": str(purchase.id), "request_number": purchase.request_number},
    )
    return purchase


@transaction.atomic
def reject_purchase(*, purchase_id, user=None, reason) -> Purchase:
    reason = clean_text(reason)
    if not reason:
        raise ValidationError({"reason": "A rejection reason is required"})

    purchase = get_purchase(purchase_id, lock=True)
    validate_transition(purchase=purchase, target_status=Purchase.STATUS_REJECTED)

    purchase.status = Purchase.STATUS_REJECTED
    purchase.rejected_by = user
    purchase.rejected_at = timezone.now()
    purchase.rejection_reason = reason
    purchase.save()

    logger.info(
        "Purchase rejected",
        extra={"purchase_id": str(purchase.id), "request_number": purchase.request_number},
    )
    return purchase


@transaction.atomic
def order_purchase(
    *,
    purchase_id,
    supplier_name,
    po_number: str = "",
    ordered_qty=None,
    user=None,
) -> Purchase:
    supplier_name = clean_text(supplier_name)
    if not supplier_name:
        raise ValidationError({"supplier_name": "supplier_name is required"})

    purchase = get_purchase(purchase_id, lock=True)
    validate_transition(purchase=purchase, target_status=Purchase.STATUS_ORDERED)

    if ordered_qty in (None, ""):
        qty = purchase.requested_qty
    else:
        qty = require_positive_qty(ordered_qty, field="ordered_qty")

    purchase.status = Purchase.STATUS_ORDERED
    purchase.supplier_name = supplier_name
    purchase.po_number = clean_text(po_number)
    purchase.ordered_qty = qty
    purchase.ordered_by = user
    purchase.ordered_at = timezone.now()
    purchase.save()

    logger.info(
        "Purchase ordered",
        extra={
            "purchase_id": str(purchase.id),
            "request_number": purchase.request_number,
            "supplier": supplier_name,
            "ordered_qty": qty,
        },
    )
    return purchase
