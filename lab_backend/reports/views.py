# reports/views.py

"""
REPORT ENDPOINTS (read only)

GET /api/reports/stock-summary/
GET /api/reports/low-stock/?include_inactive=true
GET /api/reports/expiring-lots/?days=30
GET /api/reports/departments/
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from items.serializers import ItemStockViewSerializer
from items.views.errors import SERVICE_ERRORS, service_error_response
from permissions.roles import CAP_REPORTS_VIEW, HasCapability
from reports.serializers import (
    DepartmentTotalsSerializer,
    ExpiringLotSerializer,
    StockSummarySerializer,
)
from reports.services.stock_reports import (
    list_by_department,
    list_expiring_lots,
    list_low_stock_items,
    stock_summary,
)


def _truthy(value) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


class _ReportView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW


class StockSummaryView(_ReportView):
    @extend_schema(tags=["reports"], responses={200: StockSummarySerializer})
    def get(self, request):
        return Response(StockSummarySerializer(stock_summary()).data)


class LowStockView(_ReportView):
    @extend_schema(
        tags=["reports"],
        parameters=[
            OpenApiParameter(
                name="include_inactive",
                type=OpenApiTypes.BOOL,
                required=False,
                description="Include INACTIVE items (default false).",
            )
        ],
        responses={200: ItemStockViewSerializer(many=True)},
    )
    def get(self, request):
        views = list_low_stock_items(
            include_inactive=_truthy(request.query_params.get("include_inactive"))
        )
        data = ItemStockViewSerializer(views, many=True).data
        return Response({"count": len(data), "results": data})


class ExpiringLotsView(_ReportView):
    @extend_schema(
        tags=["reports"],
        parameters=[
            OpenApiParameter(
                name="days",
                type=OpenApiTypes.INT,
                required=False,
                description="Look-ahead window in days. Defaults to EXPIRY_WARNING_DAYS.",
            )
        ],
        responses={200: ExpiringLotSerializer(many=True)},
    )
    def get(self, request):
        raw_days = (request.query_params.get("days") or "").strip() or None
        try:
            lots = list_expiring_lots(raw_days)
        except SERVICE_ERRORS as exc:
            return service_error_response(exc)

        data = ExpiringLotSerializer(lots, many=True).data
        return Response({"count": len(data), "results": data})


class DepartmentTotalsView(_ReportView):
    @extend_schema(tags=["reports"], responses={200: DepartmentTotalsSerializer(many=True)})
    def get(self, request):
        data = DepartmentTotalsSerializer(list_by_department(), many=True).data
        return Response({"count": len(data), "results": data})
