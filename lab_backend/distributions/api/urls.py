# distributions/api/urls.py

from django.urls import path

from distributions.api.views import (
    DistributionConfirmView,
    DistributionDetailView,
    DistributionListCreateView,
    UsageListCreateView,
    WasteListCreateView,
)

urlpatterns = [
    path("", DistributionListCreateView.as_view(), name="distributions"),
    path("waste/", WasteListCreateView.as_view(), name="waste-records"),
    path("usage/", UsageListCreateView.as_view(), name="usage-records"),
    path("<uuid:distribution_id>/", DistributionDetailView.as_view(), name="distribution-detail"),
    path(
        "<uuid:distribution_id>/confirm/",
        DistributionConfirmView.as_view(),
        name="distribution-confirm",
    ),
]
