"""
PATH: items/models/__init__.py

Items models export surface.
"""

from .item import ItemDefinition
from .lot import Lot

__all__ = [
    "ItemDefinition",
    "Lot",
]
