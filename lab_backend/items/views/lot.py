"""
======================================================
PATH: items/views/lot.py
======================================================
LOT VIEWSET

- list / retrieve lots across items (filters: item_id, status, in_stock,
  lot_number, expires_before)
- create = manual lot entry (current == initial)
- partial_update = metadata correction (lot number, dates, paperwork)

No quantity edits and no delete: quantities move only through allocation,
and lots leave the ledger only with their item.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.response import Response

from items.filters import LotFilter
from items.models import Lot
from items.serializers import LotCreateSerializer, LotSerializer, LotUpdateSerializer
from items.services.lot_ledger import FEFO_ORDERING, create_lot, update_lot_metadata
from items.views.errors import SERVICE_ERRORS, service_error_response
from permissions.roles import CAP_INVENTORY_EDIT, CAP_INVENTORY_VIEW, CapabilityViewMixin


@extend_schema(tags=["lots"])
class LotViewSet(
    CapabilityViewMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = LotSerializer
    filterset_class = LotFilter

    capability_map = {
        "list": CAP_INVENTORY_VIEW,
        "retrieve": CAP_INVENTORY_VIEW,
        "create": CAP_INVENTORY_EDIT,
        "partial_update": CAP_INVENTORY_EDIT,
    }

    def get_queryset(self):
        return Lot.objects.select_related("item").order_by(*FEFO_ORDERING)

    @extend_schema(request=LotCreateSerializer, responses={201: LotSerializer})
    def create(self, request):
        s = LotCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        try:
            lot = create_lot(
                item_id=data.pop("item_id"),
                lot_number=data.pop("lot_number"),
                initial_quantity=data.pop("initial_quantity"),
                expiry_date=data.pop("expiry_date", None),
                received_date=data.pop("received_date", None),
                user=request.user,
                **data,
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(LotSerializer(lot).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=LotUpdateSerializer, responses={200: LotSerializer})
    def partial_update(self, request, pk=None):
        s = LotUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            lot = update_lot_metadata(lot_id=pk, user=request.user, **s.validated_data)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(LotSerializer(self.get_queryset().get(pk=lot.pk)).data)
