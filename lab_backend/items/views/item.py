"""
======================================================
PATH: items/views/item.py
======================================================
ITEM VIEWSET

Purpose:
- Item registry CRUD (create / patch / delete with cascade)
- Per-item stock view, lots, direct FEFO allocation
- Spreadsheet import (rows already parsed to JSON by the client)

RULES:
- Views validate input shape, then call the services; no quantity math here.
- Service errors are translated by service_error_response().
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from items.filters import ItemDefinitionFilter
from items.models import ItemDefinition
from items.serializers import (
    AllocationRequestSerializer,
    AllocationResultSerializer,
    ItemDefinitionSerializer,
    ItemImportResultSerializer,
    ItemImportSerializer,
    ItemStockViewSerializer,
    ItemWriteSerializer,
    LotSerializer,
)
from items.services.fefo import allocate_fefo
from items.services import item_import
from items.services.item_registry import create_item, delete_item, get_item, update_item
from items.services.lot_ledger import FEFO_ORDERING, active_lots_queryset
from items.services.stock_view import build_item_views, compute_item_view
from items.views.errors import SERVICE_ERRORS, service_error_response
from permissions.roles import (
    CAP_INVENTORY_DELETE,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    CAP_STOCK_CONSUME,
    CapabilityViewMixin,
)

UUID_REGEX = r"[0-9a-fA-F-]{36}"


@extend_schema(tags=["items"])
class ItemViewSet(CapabilityViewMixin, viewsets.GenericViewSet):
    """
    /api/items/                      list (with stock view) / create
    /api/items/{id}/                 retrieve / patch / delete (cascade)
    /api/items/{id}/stock/           derived stock view
    /api/items/{id}/lots/            lots (FEFO order; ?all=true includes depleted)
    /api/items/{id}/allocate/        direct FEFO allocation
    /api/items/import/               upsert-by-code import
    """

    serializer_class = ItemDefinitionSerializer
    filterset_class = ItemDefinitionFilter
    lookup_value_regex = UUID_REGEX

    capability_map = {
        "list": CAP_INVENTORY_VIEW,
        "retrieve": CAP_INVENTORY_VIEW,
        "stock": CAP_INVENTORY_VIEW,
        "lots": CAP_INVENTORY_VIEW,
        "create": CAP_INVENTORY_EDIT,
        "partial_update": CAP_INVENTORY_EDIT,
        "import_items": CAP_INVENTORY_EDIT,
        "destroy": CAP_INVENTORY_DELETE,
        "allocate": CAP_STOCK_CONSUME,
    }

    def get_queryset(self):
        return ItemDefinition.objects.all().order_by("code")

    def get_throttles(self):
        if self.action == "import_items":
            self.throttle_scope = "item_import"
            return [ScopedRateThrottle()]
        return super().get_throttles()

    def _with_stock(self, items):
        views = build_item_views(ItemDefinition.objects.filter(pk__in=[i.pk for i in items]))
        by_id = {v.item_id: v for v in views}
        data = []
        for item in items:
            row = ItemDefinitionSerializer(item).data
            row["stock"] = ItemStockViewSerializer(by_id[str(item.pk)]).data
            data.append(row)
        return data

    # -------------------------------------------------
    # READ
    # -------------------------------------------------
    def list(self, request):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self._with_stock(page))
        return Response(self._with_stock(list(qs)))

    def retrieve(self, request, pk=None):
        try:
            item = get_item(pk)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)
        return Response(self._with_stock([item])[0])

    @extend_schema(responses={200: ItemStockViewSerializer})
    @action(detail=True, methods=["get"])
    def stock(self, request, pk=None):
        try:
            view = compute_item_view(item_id=pk)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)
        return Response(ItemStockViewSerializer(view).data)

    @extend_schema(responses={200: LotSerializer(many=True)})
    @action(detail=True, methods=["get"])
    def lots(self, request, pk=None):
        try:
            item = get_item(pk)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        include_all = (request.query_params.get("all") or "").strip().lower() in ("1", "true", "yes")
        if include_all:
            qs = item.lots.select_related("item").order_by(*FEFO_ORDERING)
        else:
            qs = active_lots_queryset(item_id=item.id).select_related("item")
        return Response(LotSerializer(qs, many=True).data)

    # -------------------------------------------------
    # WRITE
    # -------------------------------------------------
    @extend_schema(request=ItemWriteSerializer, responses={201: ItemDefinitionSerializer})
    def create(self, request):
        s = ItemWriteSerializer(data=request.data, context={"creating": True})
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        try:
            item = create_item(
                code=data.pop("code"),
                name=data.pop("name"),
                user=request.user,
                **data,
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(self._with_stock([item])[0], status=status.HTTP_201_CREATED)

    @extend_schema(request=ItemWriteSerializer, responses={200: ItemDefinitionSerializer})
    def partial_update(self, request, pk=None):
        s = ItemWriteSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            item = update_item(item_id=pk, user=request.user, **s.validated_data)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(self._with_stock([item])[0])

    def destroy(self, request, pk=None):
        try:
            delete_item(item_id=pk)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # -------------------------------------------------
    # ALLOCATION
    # -------------------------------------------------
    @extend_schema(request=AllocationRequestSerializer, responses={200: AllocationResultSerializer})
    @action(detail=True, methods=["post"])
    def allocate(self, request, pk=None):
        """
        Draw stock straight from the lots without a distribution/waste record.
        Most clients should use /api/distributions/ or /api/distributions/usage/.
        """
        s = AllocationRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        try:
            result = allocate_fefo(
                item_id=pk,
                quantity=v["quantity"],
                lot_id=v.get("lot_id"),
                policy=v["policy"],
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        payload = result.as_dict()
        payload["stock"] = ItemStockViewSerializer(compute_item_view(item_id=pk)).data
        return Response(payload)

    # -------------------------------------------------
    # IMPORT
    # -------------------------------------------------
    @extend_schema(request=ItemImportSerializer, responses={200: ItemImportResultSerializer})
    @action(detail=False, methods=["post"], url_path="import")
    def import_items(self, request):
        s = ItemImportSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = item_import.import_items(rows=s.validated_data["rows"], user=request.user)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(result.as_dict())
