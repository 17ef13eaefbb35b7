from datetime import date

from django.core.exceptions import ValidationError
from django.test import TestCase

from items.models import ItemDefinition, Lot
from items.services.item_import import import_items, parse_import_date, parse_import_int


class ItemImportTests(TestCase):
    """
    Spreadsheet import tests.

    GUARANTEES:
    - Items are upserted by code, never duplicated
    - Lot rows create lots; re-importing the same lot is harmless
    - A bad row is reported without undoing the good ones
    """

    def test_creates_items_and_lots(self):
        result = import_items(
            rows=[
                {
                    "Malzeme Kodu": "ETH-70",
                    "Malzeme Adı": "Ethanol 70%",
                    "Departman": "Microbiology",
                    "Min Stok": "4",
                    "Lot No": "E-1",
                    "Miktar": "10",
                    "SKT": "31.12.2027",
                },
                {"code": "ETH-70", "name": "Ethanol 70%", "lotNumber": "E-2", "initialStock": 3},
                {"code": "SWAB", "name": "Sterile swab"},
            ]
        )

        self.assertEqual(result.created, 2)
        self.assertEqual(result.updated, 0)
        self.assertEqual(result.lots_created, 2)
        self.assertEqual(result.errors, [])

        item = ItemDefinition.objects.get(code="ETH-70")
        self.assertEqual(item.department, "Microbiology")
        self.assertEqual(item.min_stock, 4)
        lot = Lot.objects.get(item=item, lot_number="E-1")
        self.assertEqual(lot.current_quantity, 10)
        self.assertEqual(lot.expiry_date, date(2027, 12, 31))
        self.assertFalse(ItemDefinition.objects.get(code="SWAB").lots.exists())

    def test_reimport_updates_in_place(self):
        rows = [{"code": "SWAB", "name": "Sterile swab", "lot_number": "S-1", "quantity": 50}]
        import_items(rows=rows)

        rows[0]["name"] = "Sterile swab (wood)"
        result = import_items(rows=rows)

        self.assertEqual(result.created, 0)
        self.assertEqual(result.updated, 1)
        self.assertEqual(result.lots_created, 0)
        self.assertEqual(result.lots_updated, 1)
        self.assertEqual(ItemDefinition.objects.filter(code="SWAB").count(), 1)
        self.assertEqual(ItemDefinition.objects.get(code="SWAB").name, "Sterile swab (wood)")
        self.assertEqual(Lot.objects.filter(lot_number="S-1").count(), 1)

    def test_changed_lot_quantity_is_reported(self):
        import_items(rows=[{"code": "SWAB", "name": "Swab", "lot_number": "S-1", "quantity": 50}])

        result = import_items(
            rows=[{"code": "SWAB", "name": "Swab", "lot_number": "S-1", "quantity": 60}]
        )

        self.assertEqual(len(result.errors), 1)
        self.assertIn("S-1", result.errors[0])
        self.assertEqual(Lot.objects.get(lot_number="S-1").initial_quantity, 50)

    def test_bad_rows_reported_good_rows_kept(self):
        result = import_items(
            rows=[
                {"code": "", "name": "No code"},
                {"code": "OK-1", "name": "Fine"},
                {"code": "BAD-LOT", "name": "Bad lot", "lot_number": "L", "quantity": "lots"},
                {"code": "NO-LOT", "name": "Quantity only", "quantity": 5},
                "not a row",
            ]
        )

        self.assertEqual(len(result.errors), 4)
        self.assertTrue(result.errors[0].startswith("Row 1"))
        self.assertTrue(ItemDefinition.objects.filter(code="OK-1").exists())
        # the item part of a row survives a bad lot cell
        self.assertTrue(ItemDefinition.objects.filter(code="BAD-LOT").exists())
        self.assertFalse(Lot.objects.exists())

    def test_unparseable_expiry_is_a_row_error(self):
        result = import_items(
            rows=[
                {"code": "OK-1", "name": "Fine", "lot_number": "G-1", "quantity": 2, "skt": "20270630"},
                {"code": "BAD-1", "name": "Bad date", "lot_number": "L1", "quantity": 5, "skt": "99999999"},
            ]
        )

        self.assertEqual(len(result.errors), 1)
        self.assertIn("BAD-1", result.errors[0])
        self.assertEqual(result.lots_created, 1)
        self.assertEqual(Lot.objects.get(lot_number="G-1").expiry_date, date(2027, 6, 30))
        self.assertFalse(Lot.objects.filter(lot_number="L1").exists())

    def test_empty_payload_rejected(self):
        with self.assertRaises(ValidationError):
            import_items(rows=[])


class ImportCellParserTests(TestCase):
    def test_int_cells(self):
        self.assertEqual(parse_import_int("12", field="q"), 12)
        self.assertEqual(parse_import_int("12,0", field="q"), 12)
        self.assertEqual(parse_import_int(7.0, field="q"), 7)
        self.assertIsNone(parse_import_int("", field="q"))
        with self.assertRaises(ValidationError):
            parse_import_int("1.5", field="q")

    def test_date_cells(self):
        self.assertEqual(parse_import_date("2027-03-01", field="d"), date(2027, 3, 1))
        self.assertEqual(parse_import_date("01.03.2027", field="d"), date(2027, 3, 1))
        self.assertEqual(parse_import_date(46082, field="d"), date(2026, 3, 1))
        self.assertIsNone(parse_import_date(None, field="d"))
        with self.assertRaises(ValidationError):
            parse_import_date("someday", field="d")
        with self.assertRaises(ValidationError):
            parse_import_date("01.01.1990", field="d")

    def test_compact_and_oversized_date_cells(self):
        self.assertEqual(parse_import_date("20250630", field="d"), date(2025, 6, 30))
        with self.assertRaises(ValidationError):
            parse_import_date("123456789", field="d")
        with self.assertRaises(ValidationError):
            parse_import_date(float("inf"), field="d")
