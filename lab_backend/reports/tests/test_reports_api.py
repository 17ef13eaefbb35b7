from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from items.services.item_registry import create_item
from items.services.lot_ledger import create_lot

User = get_user_model()


class ReportApiTests(TestCase):
    """
    Report endpoint tests.

    GUARANTEES:
    - Every role with reports.view can read; anonymous users cannot
    - Bad query parameters answer 400 VALIDATION_ERROR
    """

    def setUp(self):
        self.client = APIClient()
        self.observer = User.objects.create_user(
            email="observer@lab.test", password="pass", role="observer"
        )
        item = create_item(code="CUV-1", name="Cuvettes", department="Chem", min_stock=10)
        create_lot(
            item_id=item.id,
            lot_number="C-1",
            initial_quantity=3,
            expiry_date=timezone.localdate() + timedelta(days=7),
        )

    def test_anonymous_rejected(self):
        response = self.client.get("/api/reports/stock-summary/")
        self.assertEqual(response.status_code, 401)

    def test_observer_reads_every_report(self):
        self.client.force_authenticate(self.observer)

        summary = self.client.get("/api/reports/stock-summary/")
        low = self.client.get("/api/reports/low-stock/")
        expiring = self.client.get("/api/reports/expiring-lots/", {"days": 10})
        departments = self.client.get("/api/reports/departments/")

        self.assertEqual(summary.status_code, 200)
        self.assertEqual(summary.data["low_stock_count"], 1)
        self.assertEqual(low.data["results"][0]["code"], "CUV-1")
        self.assertEqual(expiring.data["results"][0]["days_left"], 7)
        self.assertEqual(departments.data["results"][0]["total_quantity"], 3)

    def test_short_window_excludes_lot(self):
        self.client.force_authenticate(self.observer)

        response = self.client.get("/api/reports/expiring-lots/", {"days": 3})

        self.assertEqual(response.data["count"], 0)

    def test_bad_days(self):
        self.client.force_authenticate(self.observer)

        response = self.client.get("/api/reports/expiring-lots/", {"days": "-4"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")
