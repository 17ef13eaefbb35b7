from .fefo import POLICY_EXPIRED_FIRST, POLICY_FEFO, allocate_fefo
from .item_import import import_items
from .item_registry import create_item, delete_item, update_item
from .lot_ledger import create_lot, decrement_lot, list_active_lots
from .stock_view import compute_item_view

__all__ = [
    "POLICY_FEFO",
    "POLICY_EXPIRED_FIRST",
    "allocate_fefo",
    "import_items",
    "create_item",
    "update_item",
    "delete_item",
    "create_lot",
    "decrement_lot",
    "list_active_lots",
    "compute_item_view",
]
