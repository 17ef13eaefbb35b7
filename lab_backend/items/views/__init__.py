# items/views/__init__.py

"""
Items views package exports (router imports).
"""

from .item import ItemViewSet
from .lot import LotViewSet

__all__ = [
    "ItemViewSet",
    "LotViewSet",
]
