from datetime import date, datetime

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from items.models import Lot
from items.services.exceptions import (
    InvalidStateTransitionError,
    OverReceiptNotAcknowledgedError,
)
from items.services.item_registry import create_item, delete_item
from items.services.lot_ledger import create_lot
from items.services.stock_view import compute_item_view
from purchases.models import Purchase, Receipt
from purchases.services.purchase_lifecycle import (
    approve_purchase,
    order_purchase,
    request_purchase,
)
from purchases.services.receiving_service import receive_goods

User = get_user_model()


class ReceiveGoodsTests(TestCase):
    """
    Receiving tests.

    GUARANTEES:
    - Every receipt creates exactly one lot with current == initial == quantity
    - received_qty_total always equals the sum of the receipts
    - Over-receipt needs an explicit acknowledgement
    - Nothing is received before the order is placed
    """

    def setUp(self):
        self.manager = User.objects.create_user(
            email="manager@lab.test", password="pass", role="logistics"
        )
        self.buyer = User.objects.create_user(
            email="buyer@lab.test", password="pass", role="procurement"
        )
        self.item = create_item(code="PCR-001", name="PCR kit", min_stock=5)
        self.purchase = request_purchase(item_id=self.item.id, quantity=10, user=self.manager)

    def _order(self, ordered_qty=None):
        approve_purchase(purchase_id=self.purchase.id, user=self.manager)
        return order_purchase(
            purchase_id=self.purchase.id,
            supplier_name="Acme Diagnostics",
            ordered_qty=ordered_qty,
            user=self.buyer,
        )

    def _receipt_sum(self):
        return sum(Receipt.objects.filter(purchase=self.purchase).values_list("quantity", flat=True))

    def test_requested_purchase_cannot_receive(self):
        with self.assertRaises(InvalidStateTransitionError):
            receive_goods(purchase_id=self.purchase.id, lot_number="A", quantity=5)

        self.assertFalse(Lot.objects.exists())
        self.assertFalse(Receipt.objects.exists())

    def test_approved_purchase_cannot_receive(self):
        approve_purchase(purchase_id=self.purchase.id, user=self.manager)

        with self.assertRaises(InvalidStateTransitionError):
            receive_goods(purchase_id=self.purchase.id, lot_number="A", quantity=5)

    def test_partial_then_full_receipt(self):
        self._order()

        first = receive_goods(
            purchase_id=self.purchase.id,
            lot_number="A",
            quantity=5,
            expiry_date=date(2027, 12, 31),
            invoice_no="INV-1",
            user=self.buyer,
        )
        self.assertEqual(first.purchase.status, Purchase.STATUS_PARTIALLY_RECEIVED)
        self.assertEqual(first.purchase.received_qty_total, 5)
        self.assertEqual(first.lot.initial_quantity, 5)
        self.assertEqual(first.lot.current_quantity, 5)
        self.assertEqual(first.lot.invoice_no, "INV-1")
        self.assertEqual(first.receipt.lot, first.lot)
        self.assertEqual(first.purchase.pending_quantity, 5)

        second = receive_goods(purchase_id=self.purchase.id, lot_number="B", quantity=5)
        self.assertEqual(second.purchase.status, Purchase.STATUS_RECEIVED)
        self.assertEqual(second.purchase.received_qty_total, 10)
        self.assertEqual(second.purchase.pending_quantity, 0)

        self.assertEqual(self._receipt_sum(), 10)
        self.assertEqual(Lot.objects.filter(item=self.item).count(), 2)
        self.assertEqual(compute_item_view(item_id=self.item.id).total_stock, 10)

    def test_naive_received_at_and_iso_expiry(self):
        self._order()

        result = receive_goods(
            purchase_id=self.purchase.id,
            lot_number="N-1",
            quantity=4,
            expiry_date="2028-05-31",
            received_at=datetime(2026, 3, 4, 9, 30),
        )

        self.assertTrue(timezone.is_aware(result.receipt.received_at))
        self.assertEqual(result.lot.received_date, date(2026, 3, 4))
        self.assertEqual(result.lot.expiry_date, date(2028, 5, 31))
        self.assertEqual(result.lot.status, Lot.Status.ACTIVE)

    def test_over_receipt_requires_ack(self):
        self._order()
        receive_goods(purchase_id=self.purchase.id, lot_number="A", quantity=8)

        with self.assertRaises(OverReceiptNotAcknowledgedError) as ctx:
            receive_goods(purchase_id=self.purchase.id, lot_number="B", quantity=5)

        self.assertEqual(ctx.exception.context["ordered"], 10)
        self.assertEqual(ctx.exception.context["already_received"], 8)
        self.assertFalse(Lot.objects.filter(lot_number="B").exists())

        result = receive_goods(
            purchase_id=self.purchase.id, lot_number="B", quantity=5, over_receipt_ack=True
        )
        self.assertEqual(result.purchase.status, Purchase.STATUS_RECEIVED)
        self.assertEqual(result.purchase.received_qty_total, 13)
        self.assertEqual(self._receipt_sum(), 13)

    def test_received_purchase_accepts_acknowledged_extra(self):
        self._order()
        receive_goods(purchase_id=self.purchase.id, lot_number="A", quantity=10)

        result = receive_goods(
            purchase_id=self.purchase.id, lot_number="EXTRA", quantity=1, over_receipt_ack=True
        )

        self.assertEqual(result.purchase.status, Purchase.STATUS_RECEIVED)
        self.assertEqual(result.purchase.received_qty_total, 11)

    def test_duplicate_lot_number_rolls_back(self):
        self._order()
        create_lot(item_id=self.item.id, lot_number="A", initial_quantity=1)

        with self.assertRaises(ValidationError):
            receive_goods(purchase_id=self.purchase.id, lot_number="A", quantity=5)

        self.purchase.refresh_from_db()
        self.assertEqual(self.purchase.received_qty_total, 0)
        self.assertEqual(self.purchase.status, Purchase.STATUS_ORDERED)
        self.assertFalse(Receipt.objects.exists())

    def test_invalid_receipt_input(self):
        self._order()

        with self.assertRaises(ValidationError):
            receive_goods(purchase_id=self.purchase.id, lot_number="A", quantity=0)
        with self.assertRaises(ValidationError):
            receive_goods(purchase_id=self.purchase.id, lot_number=" ", quantity=2)

    def test_pending_quantity_in_stock_view(self):
        self._order(ordered_qty=12)
        receive_goods(purchase_id=self.purchase.id, lot_number="A", quantity=4)

        view = compute_item_view(item_id=self.item.id)

        self.assertEqual(view.total_stock, 4)
        self.assertEqual(view.pending_order_qty, 8)

    def test_receipts_are_immutable(self):
        self._order()
        receipt = receive_goods(purchase_id=self.purchase.id, lot_number="A", quantity=5).receipt

        receipt.quantity = 50
        with self.assertRaises(ValidationError):
            receipt.save()
        with self.assertRaises(ValidationError):
            receipt.delete()

    def test_item_delete_cascades_through_purchases(self):
        self._order()
        receive_goods(purchase_id=self.purchase.id, lot_number="A", quantity=5)

        delete_item(item_id=self.item.id)

        self.assertFalse(Purchase.objects.exists())
        self.assertFalse(Receipt.objects.exists())
        self.assertFalse(Lot.objects.exists())
