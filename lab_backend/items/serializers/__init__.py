# items/serializers/__init__.py

from .item import (
    ItemDefinitionSerializer,
    ItemImportResultSerializer,
    ItemImportSerializer,
    ItemStockViewSerializer,
    ItemWriteSerializer,
)
from .lot import (
    AllocationRequestSerializer,
    AllocationResultSerializer,
    LotCreateSerializer,
    LotSerializer,
    LotUpdateSerializer,
)

__all__ = [
    "ItemDefinitionSerializer",
    "ItemImportResultSerializer",
    "ItemImportSerializer",
    "ItemStockViewSerializer",
    "ItemWriteSerializer",
    "AllocationRequestSerializer",
    "AllocationResultSerializer",
    "LotCreateSerializer",
    "LotSerializer",
    "LotUpdateSerializer",
]
