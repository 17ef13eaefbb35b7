# items/services/stock_view.py

"""
STOCK AGGREGATOR (READ SIDE)

Derives the per-item stock picture purely from the current lot rows.
Nothing here is cached or stored: every call re-aggregates, and callers
that make decisions (allocation, purchasing) consult this, never a
client-sent or denormalized total.

Figures:
- total_stock        Σ current_quantity over lots with stock left (ACTIVE + EXPIRED)
- available_stock    the part of total_stock that is not past expiry
- expired_stock      the part of total_stock that is past expiry
- active_lot_count   lots with stock left
- nearest_expiry     min(expiry_date) over lots with stock left
- stock_status       PURCHASE_NEEDED if total_stock < min_stock else IN_STOCK
- pending_order_qty  ordered but not yet received on open purchases
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Iterable, Optional

from django.apps import apps
from django.db.models import Count, IntegerField, Min, Q, QuerySet, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from items.models import ItemDefinition
from items.services.item_registry import get_item

STOCK_STATUS_IN_STOCK = "IN_STOCK"
STOCK_STATUS_PURCHASE_NEEDED = "PURCHASE_NEEDED"


@dataclass(frozen=True)
class ItemStockView:
    item_id: str
    code: str
    name: str
    department: str
    unit: str
    min_stock: int
    total_stock: int
    available_stock: int
    expired_stock: int
    active_lot_count: int
    nearest_expiry: Optional[date]
    stock_status: str
    pending_order_qty: int

    def as_dict(self) -> dict:
        return asdict(self)


def derive_stock_status(*, total_stock: int, min_stock: int) -> str:
    if int(total_stock) < int(min_stock or 0):
        return STOCK_STATUS_PURCHASE_NEEDED
    return STOCK_STATUS_IN_STOCK


def annotate_stock(qs: QuerySet, *, today=None) -> QuerySet:
    """
    Attach stock aggregates to an ItemDefinition queryset:
    _total_stock, _expired_stock, _lot_count, _nearest_expiry.
    """
    today = today or timezone.localdate()
    has_stock = Q(lots__current_quantity__gt=0)
    expired = has_stock & Q(lots__expiry_date__lt=today)

    return qs.annotate(
        _total_stock=Coalesce(
            Sum("lots__current_quantity", filter=has_stock),
            Value(0),
            output_field=IntegerField(),
        ),
        _expired_stock=Coalesce(
            Sum("lots__current_quantity", filter=expired),
            Value(0),
            output_field=IntegerField(),
        ),
        _lot_count=Count("lots", filter=has_stock),
        _nearest_expiry=Min("lots__expiry_date", filter=has_stock),
    )


def pending_order_quantities(item_ids: Iterable) -> dict:
    """
    item_id -> outstanding ordered quantity on purchases still awaiting goods.
    Over-received purchases contribute zero, never a negative amount.
    """
    Purchase = apps.get_model("purchases", "Purchase")

    rows = (
        Purchase.objects.filter(item_id__in=list(item_ids), status__in=Purchase.AWAITING_GOODS)
        .values_list("item_id", "ordered_qty", "received_qty_total")
    )

    pending: dict = {}
    for item_id, ordered, received in rows:
        outstanding = max(int(ordered or 0) - int(received or 0), 0)
        pending[item_id] = pending.get(item_id, 0) + outstanding
    return pending


def _view_from_annotated(item: ItemDefinition, *, pending: int) -> ItemStockView:
    total = int(item._total_stock or 0)
    expired = int(item._expired_stock or 0)
    return ItemStockView(
        item_id=str(item.id),
        code=item.code,
        name=item.name,
        department=item.department,
        unit=item.unit,
        min_stock=int(item.min_stock or 0),
        total_stock=total,
        available_stock=total - expired,
        expired_stock=expired,
        active_lot_count=int(item._lot_count or 0),
        nearest_expiry=item._nearest_expiry,
        stock_status=derive_stock_status(total_stock=total, min_stock=item.min_stock),
        pending_order_qty=int(pending or 0),
    )


def build_item_views(qs: Optional[QuerySet] = None, *, today=None) -> list[ItemStockView]:
    """Stock views for many items with one aggregate query (+ one for open purchases)."""
    if qs is None:
        qs = ItemDefinition.objects.all()

    items = list(annotate_stock(qs, today=today))
    pending = pending_order_quantities(item.id for item in items)
    return [_view_from_annotated(item, pending=pending.get(item.id, 0)) for item in items]


def compute_item_view(*, item_id, today=None) -> ItemStockView:
    item = get_item(item_id)
    views = build_item_views(ItemDefinition.objects.filter(pk=item.pk), today=today)
    return views[0]
