# reports/urls.py

from django.urls import path

from reports.views import (
    DepartmentTotalsView,
    ExpiringLotsView,
    LowStockView,
    StockSummaryView,
)

urlpatterns = [
    path("stock-summary/", StockSummaryView.as_view(), name="report-stock-summary"),
    path("low-stock/", LowStockView.as_view(), name="report-low-stock"),
    path("expiring-lots/", ExpiringLotsView.as_view(), name="report-expiring-lots"),
    path("departments/", DepartmentTotalsView.as_view(), name="report-departments"),
]
