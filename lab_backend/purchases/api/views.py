# purchases/api/views.py

"""
PURCHASE API

/api/purchases/                    list (filters: status, item_id, urgency, department, open) / request
/api/purchases/{id}/               detail with receipts
/api/purchases/{id}/approve/       REQUESTED -> APPROVED
/api/purchases/{id}/reject/        REQUESTED -> REJECTED
/api/purchases/{id}/order/         APPROVED -> ORDERED
/api/purchases/{id}/receive/       receipt + new lot

Views validate input shape and call the services; lifecycle rules live in
purchases.services.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.response import Response

from items.serializers import LotSerializer
from items.views.errors import SERVICE_ERRORS, service_error_response
from permissions.roles import (
    CAP_INVENTORY_VIEW,
    CAP_PURCHASE_APPROVE,
    CAP_PURCHASE_ORDER,
    CAP_PURCHASE_RECEIVE,
    CAP_PURCHASE_REQUEST,
    CapabilityViewMixin,
)
from purchases.api.serializers import (
    ApprovePurchaseSerializer,
    OrderPurchaseSerializer,
    PurchaseRequestSerializer,
    PurchaseSerializer,
    ReceiptSerializer,
    ReceiveGoodsSerializer,
    RejectPurchaseSerializer,
)
from purchases.filters import PurchaseFilter
from purchases.models import Purchase
from purchases.services.purchase_lifecycle import (
    approve_purchase,
    get_purchase,
    order_purchase,
    reject_purchase,
    request_purchase,
)
from purchases.services.receiving_service import receive_goods


def _purchase_payload(purchase_id):
    purchase = (
        Purchase.objects.select_related("item")
        .prefetch_related("receipts", "receipts__received_by")
        .get(pk=purchase_id)
    )
    return PurchaseSerializer(purchase).data


class PurchaseListCreateView(CapabilityViewMixin, GenericAPIView):
    serializer_class = PurchaseSerializer
    filterset_class = PurchaseFilter
    capability_map = {
        "get": CAP_INVENTORY_VIEW,
        "post": CAP_PURCHASE_REQUEST,
    }

    def get_queryset(self):
        return (
            Purchase.objects.select_related("item")
            .prefetch_related("receipts", "receipts__received_by")
            .order_by("-requested_at")
        )

    @extend_schema(tags=["purchases"], responses=PurchaseSerializer(many=True))
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PurchaseSerializer(page, many=True).data)
        return Response(PurchaseSerializer(qs, many=True).data)

    @extend_schema(
        tags=["purchases"],
        request=PurchaseRequestSerializer,
        responses={201: PurchaseSerializer},
    )
    def post(self, request):
        s = PurchaseRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            purchase = request_purchase(
                item_id=data["item_id"],
                quantity=data["quantity"],
                urgency=data["urgency"],
                notes=data.get("notes", ""),
                department=data.get("department", ""),
                user=request.user,
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(_purchase_payload(purchase.id), status=status.HTTP_201_CREATED)


class PurchaseDetailView(CapabilityViewMixin, GenericAPIView):
    serializer_class = PurchaseSerializer
    capability_map = {"get": CAP_INVENTORY_VIEW}

    @extend_schema(tags=["purchases"], responses=PurchaseSerializer)
    def get(self, request, purchase_id):
        try:
            purchase = get_purchase(purchase_id)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)
        return Response(_purchase_payload(purchase.id))


class PurchaseApproveView(CapabilityViewMixin, GenericAPIView):
    serializer_class = ApprovePurchaseSerializer
    capability_map = {"post": CAP_PURCHASE_APPROVE}

    @extend_schema(tags=["purchases"], request=ApprovePurchaseSerializer, responses=PurchaseSerializer)
    def post(self, request, purchase_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            purchase = approve_purchase(
                purchase_id=purchase_id,
                user=request.user,
                note=s.validated_data.get("note", ""),
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(_purchase_payload(purchase.id))


class PurchaseRejectView(CapabilityViewMixin, GenericAPIView):
    serializer_class = RejectPurchaseSerializer
    capability_map = {"post": CAP_PURCHASE_APPROVE}

    @extend_schema(tags=["purchases"], request=RejectPurchaseSerializer, responses=PurchaseSerializer)
    def post(self, request, purchase_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            purchase = reject_purchase(
                purchase_id=purchase_id,
                user=request.user,
                reason=s.validated_data["reason"],
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(_purchase_payload(purchase.id))


class PurchaseOrderView(CapabilityViewMixin, GenericAPIView):
    serializer_class = OrderPurchaseSerializer
    capability_map = {"post": CAP_PURCHASE_ORDER}

    @extend_schema(tags=["purchases"], request=OrderPurchaseSerializer, responses=PurchaseSerializer)
    def post(self, request, purchase_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            purchase = order_purchase(
                purchase_id=purchase_id,
                supplier_name=data["supplier_name"],
                po_number=data.get("po_number", ""),
                ordered_qty=data.get("ordered_qty"),
                user=request.user,
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(_purchase_payload(purchase.id))


class PurchaseReceiveView(CapabilityViewMixin, GenericAPIView):
    serializer_class = ReceiveGoodsSerializer
    capability_map = {"post": CAP_PURCHASE_RECEIVE}

    @extend_schema(tags=["purchases"], request=ReceiveGoodsSerializer)
    def post(self, request, purchase_id):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = receive_goods(
                purchase_id=purchase_id,
                lot_number=data["lot_number"],
                quantity=data["quantity"],
                expiry_date=data.get("expiry_date"),
                over_receipt_ack=data["over_receipt_ack"],
                user=request.user,
                invoice_no=data.get("invoice_no", ""),
                attachment_url=data.get("attachment_url", ""),
                attachment_name=data.get("attachment_name", ""),
                notes=data.get("notes", ""),
                received_at=data.get("received_at"),
            )
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        return Response(
            {
                "purchase": _purchase_payload(result.purchase.id),
                "lot": LotSerializer(result.lot).data,
                "receipt": ReceiptSerializer(result.receipt).data,
            },
            status=status.HTTP_201_CREATED,
        )
