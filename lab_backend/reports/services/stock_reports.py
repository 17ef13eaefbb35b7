"""
STOCK REPORTS (READ ONLY)

Projections over items and lots, recomputed on every call:
- stock_summary()          headline figures for the dashboard
- list_low_stock_items()   items whose total stock is below min_stock
- list_expiring_lots()     lots with stock left that expire within N days
                           (already-expired lots with stock included)
- list_by_department()     per-department item / lot / quantity totals

Nothing here writes, locks or caches.
"""

from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import Count, IntegerField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from items.models import ItemDefinition, Lot
from items.services.stock_view import (
    STOCK_STATUS_PURCHASE_NEEDED,
    ItemStockView,
    build_item_views,
)


def _warning_days(within_days) -> int:
    if within_days is None:
        return int(settings.EXPIRY_WARNING_DAYS)
    try:
        days = int(within_days)
    except (TypeError, ValueError):
        raise ValidationError({"days": "days must be a non-negative integer"}) from None
    if days < 0:
        raise ValidationError({"days": "days must be a non-negative integer"})
    return days


def _items_queryset(include_inactive: bool):
    qs = ItemDefinition.objects.all()
    if not include_inactive:
        qs = qs.filter(status=ItemDefinition.Status.ACTIVE)
    return qs


def list_low_stock_items(*, include_inactive: bool = False, today=None) -> list[ItemStockView]:
    """
    Items flagged PURCHASE_NEEDED, most critical first
    (lowest total_stock / min_stock ratio, then code).
    """
    views = [
        v
        for v in build_item_views(_items_queryset(include_inactive), today=today)
        if v.stock_status == STOCK_STATUS_PURCHASE_NEEDED
    ]
    views.sort(key=lambda v: (v.total_stock / v.min_stock, v.code))
    return views


def list_expiring_lots(within_days=None, *, today=None) -> list[dict]:
    days = _warning_days(within_days)
    today = today or timezone.localdate()
    cutoff = today + timedelta(days=days)

    lots = (
        Lot.objects.select_related("item")
        .filter(current_quantity__gt=0, expiry_date__isnull=False, expiry_date__lte=cutoff)
        .order_by("expiry_date", "item__code", "lot_number")
    )

    return [
        {
            "lot_id": str(lot.id),
            "lot_number": lot.lot_number,
            "item_id": str(lot.item_id),
            "item_code": lot.item.code,
            "item_name": lot.item.name,
            "department": lot.item.department,
            "current_quantity": lot.current_quantity,
            "expiry_date": lot.expiry_date,
            "days_left": (lot.expiry_date - today).days,
            "is_expired": lot.is_expired(today),
            "storage_location": lot.storage_location,
        }
        for lot in lots
    ]


def list_by_department() -> list[dict]:
    has_stock = Q(lots__current_quantity__gt=0)
    rows = (
        ItemDefinition.objects.values("department")
        .annotate(
            unique_items=Count("id", distinct=True),
            total_lots=Count("lots", filter=has_stock),
            total_quantity=Coalesce(
                Sum("lots__current_quantity", filter=has_stock),
                Value(0),
                output_field=IntegerField(),
            ),
        )
        .order_by("department")
    )
    return [
        {
            "department": row["department"],
            "unique_items": row["unique_items"],
            "total_lots": row["total_lots"],
            "total_quantity": int(row["total_quantity"] or 0),
        }
        for row in rows
    ]


def stock_summary(*, today=None) -> dict:
    today = today or timezone.localdate()
    views = build_item_views(_items_queryset(include_inactive=False), today=today)

    expiring = Lot.objects.filter(
        current_quantity__gt=0,
        expiry_date__gte=today,
        expiry_date__lte=today + timedelta(days=int(settings.EXPIRY_WARNING_DAYS)),
    ).count()

    return {
        "item_count": len(views),
        "total_stock": sum(v.total_stock for v in views),
        "available_stock": sum(v.available_stock for v in views),
        "expired_stock": sum(v.expired_stock for v in views),
        "low_stock_count": sum(1 for v in views if v.stock_status == STOCK_STATUS_PURCHASE_NEEDED),
        "lots_with_stock": sum(v.active_lot_count for v in views),
        "expiring_lot_count": expiring,
        "pending_order_qty": sum(v.pending_order_qty for v in views),
        "expiry_warning_days": int(settings.EXPIRY_WARNING_DAYS),
    }
