# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    PurchaseApproveView,
    PurchaseDetailView,
    PurchaseListCreateView,
    PurchaseOrderView,
    PurchaseReceiveView,
    PurchaseRejectView,
)

urlpatterns = [
    path("", PurchaseListCreateView.as_view(), name="purchases"),
    path("<uuid:purchase_id>/", PurchaseDetailView.as_view(), name="purchase-detail"),
    path("<uuid:purchase_id>/approve/", PurchaseApproveView.as_view(), name="purchase-approve"),
    path("<uuid:purchase_id>/reject/", PurchaseRejectView.as_view(), name="purchase-reject"),
    path("<uuid:purchase_id>/order/", PurchaseOrderView.as_view(), name="purchase-order"),
    path("<uuid:purchase_id>/receive/", PurchaseReceiveView.as_view(), name="purchase-receive"),
]
