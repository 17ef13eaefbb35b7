"""
======================================================
PATH: purchases/services/receiving_service.py
======================================================
PURCHASE RECEIVING SERVICE

Receive one delivery against a Purchase atomically.

Canonical flow:
1) Lock the item (per-item write lock), then the purchase
2) Validate status (ORDERED / PARTIALLY_RECEIVED / RECEIVED) + input
3) Over-receipt guard: a total beyond ordered_qty needs over_receipt_ack
4) Create the Lot through the lot ledger (initial == current == quantity)
5) Append the immutable Receipt, bump received_qty_total, derive status

Any failure rolls back all five steps: no receipt without its lot, and
no received quantity without its receipt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from items.models import Lot
from items.services.exceptions import (
    InvalidStateTransitionError,
    OverReceiptNotAcknowledgedError,
)
from items.services.lot_ledger import create_lot, lock_item
from items.services.quantities import clean_text, require_positive_qty
from purchases.models import Purchase, Receipt
from purchases.services.purchase_lifecycle import (
    RECEIVABLE_STATES,
    get_purchase,
    status_after_receipt,
    validate_transition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceiveResult:
    purchase: Purchase
    lot: Lot
    receipt: Receipt


@transaction.atomic
def receive_goods(
    *,
    purchase_id,
    lot_number,
    quantity,
    expiry_date=None,
    over_receipt_ack: bool = False,
    user=None,
    invoice_no: str = "",
    attachment_url: str = "",
    attachment_name: str = "",
    notes: str = "",
    received_at=None,
) -> ReceiveResult:
    qty = require_positive_qty(quantity)
    lot_number = clean_text(lot_number)
    if not lot_number:
        raise ValidationError({"lot_number": "lot_number is required"})

    # ------------------------------
    # Lock: item first, then purchase
    # ------------------------------
    item_id = get_purchase(purchase_id).item_id
    lock_item(item_id)
    purchase = get_purchase(purchase_id, lock=True)

    if purchase.status not in RECEIVABLE_STATES:
        raise InvalidStateTransitionError(
            f"Purchase {purchase.request_number} is {purchase.status}; "
            "goods can only be received once ordered",
            purchase_id=str(purchase.id),
            from_status=purchase.status,
        )

    ordered = int(purchase.ordered_qty or 0)
    already = int(purchase.received_qty_total or 0)
    if already + qty > ordered and not over_receipt_ack:
        raise OverReceiptNotAcknowledgedError(
            ordered=ordered,
            already_received=already,
            incoming=qty,
        )

    new_total = already + qty
    target = status_after_receipt(ordered_qty=ordered, received_qty_total=new_total)
    validate_transition(purchase=purchase, target_status=target)

    received_at = received_at or timezone.now()
    if timezone.is_naive(received_at):
        received_at = timezone.make_aware(received_at)
    invoice_no = clean_text(invoice_no)

    # ------------------------------
    # Lot (canonical intake)
    # ------------------------------
    lot = create_lot(
        item_id=item_id,
        lot_number=lot_number,
        initial_quantity=qty,
        expiry_date=expiry_date,
        received_date=timezone.localtime(received_at).date(),
        user=user,
        invoice_no=invoice_no,
        attachment_url=attachment_url,
        attachment_name=attachment_name,
        notes=notes or f"Received on {purchase.request_number}",
    )

    receipt = Receipt.objects.create(
        purchase=purchase,
        lot=lot,
        quantity=qty,
        lot_number=lot.lot_number,
        expiry_date=lot.expiry_date,
        received_by=user,
        received_at=received_at,
        invoice_no=invoice_no,
        attachment_url=clean_text(attachment_url),
        attachment_name=clean_text(attachment_name),
        notes=clean_text(notes),
    )

    # ------------------------------
    # Purchase totals + status
    # ------------------------------
    purchase.received_qty_total = new_total
    purchase.last_received_at = received_at
    purchase.status = target
    purchase.save(update_fields=["received_qty_total", "last_received_at", "status", "updated_at"])

    logger.info(
        "Goods received",
        extra={
            "purchase_id": str(purchase.id),
            "request_number": purchase.request_number,
            "lot_id": str(lot.id),
            "quantity": qty,
            "received_total": new_total,
            "ordered": ordered,
            "status": target,
            "over_receipt": new_total > ordered,
        },
    )
    return ReceiveResult(purchase=purchase, lot=lot, receipt=receipt)
