# items/urls.py

"""
ITEMS URLS

Registered under /api/items/:
- /api/items/lots/...   lot ledger (registered first so "lots" never
                        reaches the item detail route)
- /api/items/...        item registry, stock view, allocation, import
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from items.views import ItemViewSet, LotViewSet

router = DefaultRouter()
router.include_root_view = False

router.register(r"lots", LotViewSet, basename="lots")
router.register(r"", ItemViewSet, basename="items")

urlpatterns = [
    path("", include(router.urls)),
]
