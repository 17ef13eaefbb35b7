from datetime import date, timedelta

from django.test import TestCase
from django.utils import timezone

from items.models import Lot
from items.services.fefo import allocate_fefo
from items.services.item_registry import create_item
from items.services.lot_ledger import create_lot
from items.services.stock_view import (
    STOCK_STATUS_IN_STOCK,
    STOCK_STATUS_PURCHASE_NEEDED,
    build_item_views,
    compute_item_view,
    derive_stock_status,
)


class StockViewTests(TestCase):
    """
    Stock view tests.

    GUARANTEES:
    - total_stock is always the sum of the lots' current quantities
    - stock_status compares total_stock against min_stock
    - Expired stock is counted, and reported separately
    """

    def setUp(self):
        self.today = timezone.localdate()
        self.item = create_item(code="GLV-M", name="Nitrile gloves M", min_stock=10)

    def test_item_without_lots(self):
        view = compute_item_view(item_id=self.item.id)

        self.assertEqual(view.total_stock, 0)
        self.assertEqual(view.active_lot_count, 0)
        self.assertIsNone(view.nearest_expiry)
        self.assertEqual(view.stock_status, STOCK_STATUS_PURCHASE_NEEDED)
        self.assertEqual(view.pending_order_qty, 0)

    def test_total_matches_lot_sum(self):
        create_lot(item_id=self.item.id, lot_number="A", initial_quantity=7)
        create_lot(item_id=self.item.id, lot_number="B", initial_quantity=5)
        allocate_fefo(item_id=self.item.id, quantity=4)

        view = compute_item_view(item_id=self.item.id)
        lot_sum = sum(Lot.objects.filter(item=self.item).values_list("current_quantity", flat=True))

        self.assertEqual(view.total_stock, lot_sum)
        self.assertEqual(view.total_stock, 8)
        self.assertEqual(view.stock_status, STOCK_STATUS_PURCHASE_NEEDED)

    def test_depleted_lots_do_not_count(self):
        create_lot(item_id=self.item.id, lot_number="A", initial_quantity=3)
        create_lot(
            item_id=self.item.id,
            lot_number="B",
            initial_quantity=20,
            expiry_date=self.today + timedelta(days=400),
        )
        allocate_fefo(item_id=self.item.id, quantity=3, lot_id=Lot.objects.get(lot_number="A").id)

        view = compute_item_view(item_id=self.item.id)

        self.assertEqual(view.total_stock, 20)
        self.assertEqual(view.active_lot_count, 1)
        self.assertEqual(view.nearest_expiry, self.today + timedelta(days=400))
        self.assertEqual(view.stock_status, STOCK_STATUS_IN_STOCK)

    def test_expired_stock_split_out(self):
        create_lot(
            item_id=self.item.id,
            lot_number="OLD",
            initial_quantity=4,
            expiry_date=self.today - timedelta(days=3),
        )
        create_lot(
            item_id=self.item.id,
            lot_number="NEW",
            initial_quantity=6,
            expiry_date=self.today + timedelta(days=30),
        )

        view = compute_item_view(item_id=self.item.id)

        self.assertEqual(view.total_stock, 10)
        self.assertEqual(view.expired_stock, 4)
        self.assertEqual(view.available_stock, 6)
        self.assertEqual(view.nearest_expiry, self.today - timedelta(days=3))

    def test_status_threshold_is_strictly_below_min(self):
        self.assertEqual(derive_stock_status(total_stock=9, min_stock=10), STOCK_STATUS_PURCHASE_NEEDED)
        self.assertEqual(derive_stock_status(total_stock=10, min_stock=10), STOCK_STATUS_IN_STOCK)
        self.assertEqual(derive_stock_status(total_stock=0, min_stock=0), STOCK_STATUS_IN_STOCK)

    def test_build_item_views_covers_every_item(self):
        other = create_item(code="GLV-L", name="Nitrile gloves L")
        create_lot(item_id=other.id, lot_number="X", initial_quantity=2)

        views = {v.code: v for v in build_item_views()}

        self.assertEqual(set(views), {"GLV-M", "GLV-L"})
        self.assertEqual(views["GLV-L"].total_stock, 2)
        self.assertEqual(views["GLV-M"].total_stock, 0)


class StockScenarioTests(TestCase):
    """Receive two lots, hand out 8 units, check the derived figures at each step."""

    def test_pcr_scenario(self):
        item = create_item(code="PCR-001", name="PCR kit", min_stock=5)
        lot_a = create_lot(
            item_id=item.id,
            lot_number="A",
            initial_quantity=10,
            expiry_date=date(2025, 12, 31),
        )
        lot_b = create_lot(
            item_id=item.id,
            lot_number="B",
            initial_quantity=5,
            expiry_date=date(2025, 6, 30),
        )

        view = compute_item_view(item_id=item.id)
        self.assertEqual(view.total_stock, 15)
        self.assertEqual(view.nearest_expiry, date(2025, 6, 30))

        result = allocate_fefo(item_id=item.id, quantity=8)
        self.assertEqual(
            [(a.lot_number, a.quantity_used) for a in result.allocations],
            [("B", 5), ("A", 3)],
        )

        lot_a.refresh_from_db()
        lot_b.refresh_from_db()
        self.assertEqual(lot_b.current_quantity, 0)
        self.assertEqual(lot_b.status, Lot.Status.DEPLETED)
        self.assertEqual(lot_a.current_quantity, 7)

        view = compute_item_view(item_id=item.id)
        self.assertEqual(view.total_stock, 7)
        self.assertEqual(view.stock_status, STOCK_STATUS_IN_STOCK)
