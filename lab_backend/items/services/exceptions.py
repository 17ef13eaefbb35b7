# items/services/exceptions.py

"""
INVENTORY SERVICE ERRORS

Centralized domain errors for the lot ledger, allocation and purchasing
services. Input validation failures use django.core.exceptions.ValidationError;
everything here is a rejected operation on otherwise valid input.

Every error carries:
- code: stable machine-readable identifier returned to API clients
- http_status: the status the API boundary answers with
"""

from __future__ import annotations


class InventoryServiceError(Exception):
    """Base exception for all inventory service failures."""

    code = "INVENTORY_ERROR"
    http_status = 400

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.context = context

    @property
    def detail(self) -> str:
        return str(self)


class NotFoundError(InventoryServiceError):
    """Unknown item, lot, purchase or record id."""

    code = "NOT_FOUND"
    http_status = 404


class InsufficientStockError(InventoryServiceError):
    """The item's lots together cannot cover the requested quantity."""

    code = "INSUFFICIENT_STOCK"
    http_status = 409

    def __init__(self, *, requested: int, available: int, item_label: str = "item"):
        super().__init__(
            f"Insufficient stock for {item_label}. Requested: {requested}, Available: {available}",
            requested=requested,
            available=available,
        )
        self.requested = requested
        self.available = available


class InsufficientLotQuantityError(InventoryServiceError):
    """A single lot cannot cover the requested quantity."""

    code = "INSUFFICIENT_LOT_QUANTITY"
    http_status = 409

    def __init__(self, *, lot_number: str, requested: int, available: int):
        super().__init__(
            f"Lot {lot_number} has {available} left; requested {requested}",
            lot_number=lot_number,
            requested=requested,
            available=available,
        )
        self.lot_number = lot_number
        self.requested = requested
        self.available = available


class InvalidStateTransitionError(InventoryServiceError):
    """A lifecycle operation was attempted from a state that does not allow it."""

    code = "INVALID_STATE_TRANSITION"
    http_status = 409


class OverReceiptNotAcknowledgedError(InventoryServiceError):
    """A receipt would push the received total past the ordered quantity."""

    code = "OVER_RECEIPT_NOT_ACKNOWLEDGED"
    http_status = 409

    def __init__(self, *, ordered: int, already_received: int, incoming: int):
        super().__init__(
            f"Receipt would bring received total to {already_received + incoming} "
            f"(ordered {ordered}). Resubmit with over_receipt_ack=true to accept.",
            ordered=ordered,
            already_received=already_received,
            incoming=incoming,
        )
        self.ordered = ordered
        self.already_received = already_received
        self.incoming = incoming
