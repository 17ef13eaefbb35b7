# distributions/services/usage_service.py

"""
USAGE LEDGER (internal consumption)

consume() draws stock FEFO (or from the named lot) and writes one
UsageRecord per lot touched, all sharing one batch_ref.
"""

from __future__ import annotations

import logging
import uuid

from django.db import transaction
from django.utils import timezone

from distributions.models import UsageRecord
from items.services.fefo import POLICY_FEFO, allocate_fefo
from items.services.quantities import clean_text, require_positive_qty

logger = logging.getLogger(__name__)


@transaction.atomic
def consume(
    *,
    item_id,
    quantity,
    lot_id=None,
    department: str = "",
    purpose: str = "",
    received_by: str = "",
    notes: str = "",
    user=None,
) -> list[UsageRecord]:
    qty = require_positive_qty(quantity)

    result = allocate_fefo(item_id=item_id, quantity=qty, lot_id=lot_id, policy=POLICY_FEFO)

    batch_ref = uuid.uuid4()
    used_at = timezone.now()
    records = UsageRecord.objects.bulk_create(
        [
            UsageRecord(
                batch_ref=batch_ref,
                item_id=result.item_id,
                lot_id=a.lot_id,
                lot_number=a.lot_number,
                quantity_used=a.quantity_used,
                used_by=user,
                received_by=clean_text(received_by),
                department=clean_text(department),
                purpose=clean_text(purpose),
                notes=clean_text(notes),
                used_at=used_at,
            )
            for a in result.allocations
        ]
    )

    logger.info(
        "Stock consumed",
        extra={
            "item_id": str(result.item_id),
            "quantity": qty,
            "lots": len(records),
            "batch_ref": str(batch_ref),
        },
    )
    return records
