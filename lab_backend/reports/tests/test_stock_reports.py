from datetime import timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings
from django.utils import timezone

from items.models import ItemDefinition
from items.services.item_registry import create_item, update_item
from items.services.lot_ledger import create_lot
from reports.services.stock_reports import (
    list_by_department,
    list_expiring_lots,
    list_low_stock_items,
    stock_summary,
)


class StockReportTests(TestCase):
    """
    Report projection tests.

    GUARANTEES:
    - Low stock lists only PURCHASE_NEEDED items, most critical first
    - Expiring lots include already-expired lots that still hold stock
    - Department totals count items without stock
    """

    def setUp(self):
        self.today = timezone.localdate()

        self.buffer = create_item(code="BUF-1", name="PBS buffer", department="Cell", min_stock=10)
        create_lot(
            item_id=self.buffer.id,
            lot_number="B-1",
            initial_quantity=5,
            expiry_date=self.today + timedelta(days=10),
        )
        create_lot(
            item_id=self.buffer.id,
            lot_number="B-0",
            initial_quantity=2,
            expiry_date=self.today - timedelta(days=3),
        )

        self.swab = create_item(code="SWB-1", name="Swabs", department="Micro", min_stock=4)
        create_lot(
            item_id=self.swab.id,
            lot_number="S-1",
            initial_quantity=1,
            expiry_date=self.today + timedelta(days=400),
        )

        self.plate = create_item(code="PLT-1", name="96 well plate", department="Cell", min_stock=1)
        create_lot(item_id=self.plate.id, lot_number="P-1", initial_quantity=8)

        self.empty = create_item(code="EMP-1", name="Never stocked", department="Micro")

    def test_low_stock_ordered_by_ratio(self):
        codes = [v.code for v in list_low_stock_items()]

        # swab 1/4 before buffer 7/10
        self.assertEqual(codes, ["SWB-1", "BUF-1"])

    def test_low_stock_skips_inactive_unless_asked(self):
        update_item(item_id=self.swab.id, status=ItemDefinition.Status.INACTIVE)

        self.assertEqual([v.code for v in list_low_stock_items()], ["BUF-1"])
        self.assertEqual(
            [v.code for v in list_low_stock_items(include_inactive=True)],
            ["SWB-1", "BUF-1"],
        )

    def test_expiring_lots_window(self):
        lots = list_expiring_lots(30)

        self.assertEqual([row["lot_number"] for row in lots], ["B-0", "B-1"])
        self.assertTrue(lots[0]["is_expired"])
        self.assertEqual(lots[0]["days_left"], -3)
        self.assertEqual(lots[1]["days_left"], 10)

    def test_expiring_lots_zero_days_keeps_expired(self):
        self.assertEqual([row["lot_number"] for row in list_expiring_lots(0)], ["B-0"])

    @override_settings(EXPIRY_WARNING_DAYS=5)
    def test_expiring_lots_default_window(self):
        self.assertEqual([row["lot_number"] for row in list_expiring_lots()], ["B-0"])

    def test_expiring_lots_rejects_negative(self):
        with self.assertRaises(ValidationError):
            list_expiring_lots(-1)
        with self.assertRaises(ValidationError):
            list_expiring_lots("soon")

    def test_department_totals(self):
        rows = {row["department"]: row for row in list_by_department()}

        self.assertEqual(rows["Cell"], {"department": "Cell", "unique_items": 2, "total_lots": 3, "total_quantity": 15})
        self.assertEqual(rows["Micro"]["unique_items"], 2)
        self.assertEqual(rows["Micro"]["total_quantity"], 1)

    def test_summary(self):
        summary = stock_summary()

        self.assertEqual(summary["item_count"], 4)
        self.assertEqual(summary["total_stock"], 16)
        self.assertEqual(summary["expired_stock"], 2)
        self.assertEqual(summary["available_stock"], 14)
        self.assertEqual(summary["low_stock_count"], 2)
        self.assertEqual(summary["lots_with_stock"], 4)
