# distributions/services/waste_service.py

"""
WASTE LEDGER

record_waste() takes stock out of circulation for good.

Allocation policy is EXPIRED_FIRST: lots already past expiry are drawn
before usable stock, whatever the waste type. A caller disposing of a
specific damaged or recalled lot names it with lot_id.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from distributions.models import WasteLot, WasteRecord
from items.services.fefo import POLICY_EXPIRED_FIRST, allocate_fefo
from items.services.quantities import clean_text, require_positive_qty

logger = logging.getLogger(__name__)


@transaction.atomic
def record_waste(
    *,
    item_id,
    quantity,
    waste_type,
    reason: str = "",
    disposal_method: str = "",
    certificate_no: str = "",
    lot_id=None,
    user=None,
    notes: str = "",
) -> WasteRecord:
    qty = require_positive_qty(quantity)

    waste_type = clean_text(waste_type).upper()
    if waste_type not in dict(WasteRecord.WASTE_TYPES):
        raise ValidationError(
            {"waste_type": f"waste_type must be one of {', '.join(dict(WasteRecord.WASTE_TYPES))}"}
        )

    result = allocate_fefo(
        item_id=item_id,
        quantity=qty,
        lot_id=lot_id,
        policy=POLICY_EXPIRED_FIRST,
    )

    record = WasteRecord.objects.create(
        item_id=result.item_id,
        quantity=qty,
        waste_type=waste_type,
        reason=clean_text(reason),
        disposal_method=clean_text(disposal_method),
        certificate_no=clean_text(certificate_no),
        notes=clean_text(notes),
        disposed_by=user,
    )

    WasteLot.objects.bulk_create(
        [
            WasteLot(
                waste_record=record,
                lot_id=a.lot_id,
                lot_number=a.lot_number,
                quantity_used=a.quantity_used,
            )
            for a in result.allocations
        ]
    )

    logger.info(
        "Waste recorded",
        extra={
            "waste_id": str(record.id),
            "item_id": str(result.item_id),
            "quantity": qty,
            "waste_type": waste_type,
            "lots": len(result.allocations),
        },
    )
    return record
