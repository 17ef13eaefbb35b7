# distributions/api/views.py

"""
DISTRIBUTION / WASTE / USAGE API

/api/distributions/                  list / distribute
/api/distributions/{id}/             detail
/api/distributions/{id}/confirm/     OPEN -> COMPLETED (idempotent)
/api/distributions/waste/            list / record waste
/api/distributions/usage/            list / consume

Every POST that moves stock answers with the item's fresh stock view.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.response import Response

from distributions.api.serializers import (
    ConsumeSerializer,
    DistributeSerializer,
    DistributionSerializer,
    RecordWasteSerializer,
    UsageRecordSerializer,
    WasteRecordSerializer,
)
from distributions.filters import DistributionFilter, UsageRecordFilter, WasteRecordFilter
from distributions.models import Distribution, UsageRecord, WasteRecord
from distributions.services.distribution_service import confirm_distribution, distribute
from distributions.services.usage_service import consume
from distributions.services.waste_service import record_waste
from items.serializers import ItemStockViewSerializer
from items.services.exceptions import NotFoundError
from items.services.stock_view import compute_item_view
from items.views.errors import SERVICE_ERRORS, service_error_response
from permissions.roles import (
    CAP_INVENTORY_VIEW,
    CAP_STOCK_CONSUME,
    CAP_STOCK_DISPOSE,
    CAP_STOCK_DISTRIBUTE,
    CapabilityViewMixin,
)


def _stock(item_id):
    return ItemStockViewSerializer(compute_item_view(item_id=item_id)).data


class _ListMixin:
    """Filtered, paginated GET over get_queryset()."""

    def list_response(self, request):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)


# ============================================================
# DISTRIBUTIONS
# ============================================================


class DistributionListCreateView(CapabilityViewMixin, _ListMixin, GenericAPIView):
    serializer_class = DistributionSerializer
    filterset_class = DistributionFilter
    capability_map = {
        "get": CAP_INVENTORY_VIEW,
        "post": CAP_STOCK_DISTRIBUTE,
    }

    def get_queryset(self):
        return Distribution.objects.select_related("item").prefetch_related("lots")

    @extend_schema(tags=["distributions"], responses=DistributionSerializer(many=True))
    def get(self, request):
        return self.list_response(request)

    @extend_schema(tags=["distributions"], request=DistributeSerializer, responses={201: DistributionSerializer})
    def post(self, request):
        s = DistributeSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            distribution = distribute(
                item_id=data["item_id"],
                quantity=data["quantity"],
                recipient=data["recipient"],
                department=data.get("department", ""),
                purpose=data.get("purpose", ""),
                lot_id=data.get("lot_id"),
                user=request.user,
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        payload = DistributionSerializer(self.get_queryset().get(pk=distribution.pk)).data
        payload["stock"] = _stock(distribution.item_id)
        return Response(payload, status=status.HTTP_201_CREATED)


class DistributionDetailView(CapabilityViewMixin, GenericAPIView):
    serializer_class = DistributionSerializer
    capability_map = {"get": CAP_INVENTORY_VIEW}

    @extend_schema(tags=["distributions"], responses=DistributionSerializer)
    def get(self, request, distribution_id):
        distribution = (
            Distribution.objects.select_related("item")
            .prefetch_related("lots")
            .filter(pk=distribution_id)
            .first()
        )
        if distribution is None:
            return service_error_response(
                NotFoundError(f"Distribution not found: {distribution_id}")
            )
        return Response(DistributionSerializer(distribution).data)


class DistributionConfirmView(CapabilityViewMixin, GenericAPIView):
    serializer_class = DistributionSerializer
    capability_map = {"post": CAP_STOCK_DISTRIBUTE}

    @extend_schema(tags=["distributions"], request=None, responses=DistributionSerializer)
    def post(self, request, distribution_id):
        try:
            distribution = confirm_distribution(distribution_id=distribution_id, user=request.user)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)
        return Response(DistributionSerializer(distribution).data)


# ============================================================
# WASTE
# ============================================================


class WasteListCreateView(CapabilityViewMixin, _ListMixin, GenericAPIView):
    serializer_class = WasteRecordSerializer
    filterset_class = WasteRecordFilter
    capability_map = {
        "get": CAP_INVENTORY_VIEW,
        "post": CAP_STOCK_DISPOSE,
    }

    def get_queryset(self):
        return WasteRecord.objects.select_related("item").prefetch_related("lots")

    @extend_schema(tags=["waste"], responses=WasteRecordSerializer(many=True))
    def get(self, request):
        return self.list_response(request)

    @extend_schema(tags=["waste"], request=RecordWasteSerializer, responses={201: WasteRecordSerializer})
    def post(self, request):
        s = RecordWasteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            record = record_waste(
                item_id=data["item_id"],
                quantity=data["quantity"],
                waste_type=data["waste_type"],
                reason=data.get("reason", ""),
                disposal_method=data.get("disposal_method", ""),
                certificate_no=data.get("certificate_no", ""),
                notes=data.get("notes", ""),
                lot_id=data.get("lot_id"),
                user=request.user,
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        payload = WasteRecordSerializer(self.get_queryset().get(pk=record.pk)).data
        payload["stock"] = _stock(record.item_id)
        return Response(payload, status=status.HTTP_201_CREATED)


# ============================================================
# USAGE
# ============================================================


class UsageListCreateView(CapabilityViewMixin, _ListMixin, GenericAPIView):
    serializer_class = UsageRecordSerializer
    filterset_class = UsageRecordFilter
    capability_map = {
        "get": CAP_INVENTORY_VIEW,
        "post": CAP_STOCK_CONSUME,
    }

    def get_queryset(self):
        return UsageRecord.objects.select_related("item")

    @extend_schema(tags=["usage"], responses=UsageRecordSerializer(many=True))
    def get(self, request):
        return self.list_response(request)

    @extend_schema(tags=["usage"], request=ConsumeSerializer)
    def post(self, request):
        s = ConsumeSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            records = consume(
                item_id=data["item_id"],
                quantity=data["quantity"],
                lot_id=data.get("lot_id"),
                department=data.get("department", ""),
                purpose=data.get("purpose", ""),
                received_by=data.get("received_by", ""),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(
            {
                "batch_ref": str(records[0].batch_ref),
                "records": UsageRecordSerializer(records, many=True).data,
                "stock": _stock(data["item_id"]),
            },
            status=status.HTTP_201_CREATED,
        )
