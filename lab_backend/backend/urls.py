# backend/urls.py
"""
PROJECT URLS

Everything is served under /api/:
- /api/health/ is public and reports database reachability (503 when down)
- the Django admin mounts at settings.ADMIN_PATH
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import connections
from django.db.utils import OperationalError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema, inline_serializer
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

API_INDEX = {
    "items": "/api/items/",
    "lots": "/api/items/lots/",
    "purchases": "/api/purchases/",
    "distributions": "/api/distributions/",
    "waste": "/api/distributions/waste/",
    "usage": "/api/distributions/usage/",
    "reports": "/api/reports/",
    "me": "/api/auth/me/",
    "jwt_create": "/api/auth/jwt/create/",
    "docs": "/api/docs/",
}

_HealthSerializer = inline_serializer(
    name="Health",
    fields={
        "status": serializers.CharField(),
        "db": serializers.CharField(),
        "error": serializers.CharField(required=False),
    },
)


@extend_schema(responses={200: inline_serializer(name="ApiIndex", fields={
    "message": serializers.CharField(),
    "endpoints": serializers.DictField(child=serializers.CharField()),
})})
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response({"message": "Lab Inventory API is running", "endpoints": API_INDEX})


@extend_schema(responses={200: _HealthSerializer, 503: _HealthSerializer})
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """App is responding and the database answers a trivial query."""
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1")
    except OperationalError as exc:
        return Response({"status": "degraded", "db": "down", "error": str(exc)}, status=503)
    return Response({"status": "ok", "db": "ok"})


ADMIN_PATH = settings.ADMIN_PATH.rstrip("/") + "/"

api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("auth/", include("users.urls")),
    path("items/", include("items.urls")),
    path("purchases/", include("purchases.api.urls")),
    path("distributions/", include("distributions.api.urls")),
    path("reports/", include("reports.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
