from datetime import timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from distributions.models import WasteRecord
from distributions.services.waste_service import record_waste
from items.models import Lot
from items.services.exceptions import InsufficientLotQuantityError
from items.services.item_registry import create_item
from items.services.lot_ledger import create_lot


class WasteServiceTests(TestCase):
    """
    Waste ledger tests.

    GUARANTEES:
    - Expired lots are drawn before usable ones
    - Waste type is validated before stock moves
    - A named lot is the only one touched
    """

    def setUp(self):
        today = timezone.localdate()
        self.item = create_item(code="AGR-500", name="Agar plates")
        self.usable = create_lot(
            item_id=self.item.id,
            lot_number="A-OK",
            initial_quantity=5,
            expiry_date=today + timedelta(days=10),
        )
        self.expired = create_lot(
            item_id=self.item.id,
            lot_number="A-OLD",
            initial_quantity=3,
            expiry_date=today - timedelta(days=5),
        )

    def _current(self, lot):
        return Lot.objects.get(pk=lot.pk).current_quantity

    def test_expired_lot_drawn_first(self):
        record = record_waste(
            item_id=self.item.id,
            quantity=4,
            waste_type="expired",
            certificate_no="DISP-0042",
        )

        self.assertEqual(record.waste_type, WasteRecord.TYPE_EXPIRED)
        self.assertEqual(
            list(record.lots.values_list("lot_number", "quantity_used").order_by("quantity_used")),
            [("A-OK", 1), ("A-OLD", 3)],
        )
        self.assertEqual(self._current(self.expired), 0)
        self.assertEqual(self._current(self.usable), 4)

    def test_unknown_waste_type_rejected(self):
        with self.assertRaises(ValidationError):
            record_waste(item_id=self.item.id, quantity=1, waste_type="LOST")

        self.assertFalse(WasteRecord.objects.exists())
        self.assertEqual(self._current(self.expired), 3)

    def test_named_lot(self):
        record = record_waste(
            item_id=self.item.id,
            quantity=2,
            waste_type=WasteRecord.TYPE_DAMAGED,
            lot_id=self.usable.id,
        )

        self.assertEqual(record.lots.get().lot_id, self.usable.id)
        self.assertEqual(self._current(self.expired), 3)

    def test_named_lot_short(self):
        with self.assertRaises(InsufficientLotQuantityError):
            record_waste(
                item_id=self.item.id,
                quantity=4,
                waste_type=WasteRecord.TYPE_RECALLED,
                lot_id=self.expired.id,
            )

        self.assertFalse(WasteRecord.objects.exists())
