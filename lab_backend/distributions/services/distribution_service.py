# distributions/services/distribution_service.py

"""
DISTRIBUTION LEDGER

distribute():
- validates input BEFORE touching stock
- draws the quantity through allocate_fefo() (or the named lot)
- stores one DistributionLot per allocation record
- all in one transaction: no record without its stock movement, and no
  stock movement without its record

confirm_distribution():
- OPEN -> COMPLETED; repeating it is a no-op
- never touches quantities
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from distributions.models import Distribution, DistributionLot
from items.services.exceptions import NotFoundError
from items.services.fefo import POLICY_FEFO, allocate_fefo
from items.services.quantities import clean_text, require_positive_qty

logger = logging.getLogger(__name__)


@transaction.atomic
def distribute(
    *,
    item_id,
    quantity,
    recipient,
    department: str = "",
    purpose: str = "",
    lot_id=None,
    user=None,
) -> Distribution:
    qty = require_positive_qty(quantity)
    recipient = clean_text(recipient)
    if not recipient:
        raise ValidationError({"recipient": "recipient is required"})

    result = allocate_fefo(item_id=item_id, quantity=qty, lot_id=lot_id, policy=POLICY_FEFO)

    distribution = Distribution.objects.create(
        item_id=result.item_id,
        quantity=qty,
        recipient=recipient,
        department=clean_text(department),
        purpose=clean_text(purpose),
        use_fefo=not lot_id,
        status=Distribution.STATUS_OPEN,
        distributed_by=user,
    )

    DistributionLot.objects.bulk_create(
        [
            DistributionLot(
                distribution=distribution,
                lot_id=a.lot_id,
                lot_number=a.lot_number,
                quantity_used=a.quantity_used,
            )
            for a in result.allocations
        ]
    )

    logger.info(
        "Stock distributed",
        extra={
            "distribution_id": str(distribution.id),
            "item_id": str(result.item_id),
            "quantity": qty,
            "lots": len(result.allocations),
            "recipient": recipient,
        },
    )
    return distribution


@transaction.atomic
def confirm_distribution(*, distribution_id, user=None) -> Distribution:
    try:
        distribution = Distribution.objects.select_for_update().get(pk=distribution_id)
    except (Distribution.DoesNotExist, ValidationError, ValueError) as exc:
        raise NotFoundError(
            f"Distribution not found: {distribution_id}",
            distribution_id=str(distribution_id),
        ) from exc

    if distribution.status == Distribution.STATUS_COMPLETED:
        return distribution

    distribution.status = Distribution.STATUS_COMPLETED
    distribution.completed_by = user
    distribution.completed_at = timezone.now()
    distribution.save(update_fields=["status", "completed_by", "completed_at"])

    logger.info("Distribution confirmed", extra={"distribution_id": str(distribution.id)})
    return distribution
