from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from distributions.models import Distribution, UsageRecord
from items.services.item_registry import create_item
from items.services.lot_ledger import create_lot

User = get_user_model()


class DistributionApiTests(TestCase):
    """
    Distribution / waste / usage API tests.

    GUARANTEES:
    - Stock-moving POSTs answer 201 with the item's fresh stock
    - Shortfalls answer 409 INSUFFICIENT_STOCK and move nothing
    - Procurement and observers cannot move stock out
    """

    def setUp(self):
        self.client = APIClient()
        self.logistics = User.objects.create_user(
            email="logistics@lab.test", password="pass", role="logistics"
        )
        self.procurement = User.objects.create_user(
            email="procurement@lab.test", password="pass", role="procurement"
        )
        self.observer = User.objects.create_user(
            email="observer@lab.test", password="pass", role="observer"
        )

        today = timezone.localdate()
        self.item = create_item(code="ETH-70", name="Ethanol 70%", min_stock=2)
        self.lot = create_lot(
            item_id=self.item.id,
            lot_number="E-1",
            initial_quantity=6,
            expiry_date=today + timedelta(days=120),
        )
        self.old_lot = create_lot(
            item_id=self.item.id,
            lot_number="E-0",
            initial_quantity=2,
            expiry_date=today - timedelta(days=1),
        )

    def test_distribute_returns_lines_and_stock(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(
            "/api/distributions/",
            {"item_id": str(self.item.id), "quantity": 3, "recipient": "Virology"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], "OPEN")
        self.assertEqual(
            sorted((line["lot_number"], line["quantity_used"]) for line in response.data["lots"]),
            [("E-0", 2), ("E-1", 1)],
        )
        self.assertEqual(response.data["stock"]["total_stock"], 5)

    def test_distribute_shortfall_409(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(
            "/api/distributions/",
            {"item_id": str(self.item.id), "quantity": 50, "recipient": "Virology"},
            format="json",
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(response.data["context"]["available"], 8)
        self.assertFalse(Distribution.objects.exists())

    def test_distribute_unknown_item_404(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(
            "/api/distributions/",
            {"item_id": "00000000-0000-0000-0000-000000000000", "quantity": 1, "recipient": "X"},
            format="json",
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "NOT_FOUND")

    def test_confirm_and_detail(self):
        self.client.force_authenticate(self.logistics)
        created = self.client.post(
            "/api/distributions/",
            {"item_id": str(self.item.id), "quantity": 1, "recipient": "Virology"},
            format="json",
        )
        url = f"/api/distributions/{created.data['id']}/"

        first = self.client.post(url + "confirm/")
        again = self.client.post(url + "confirm/")
        detail = self.client.get(url)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(again.data["completed_at"], first.data["completed_at"])
        self.assertEqual(detail.data["status"], "COMPLETED")

    def test_detail_404(self):
        self.client.force_authenticate(self.observer)

        response = self.client.get("/api/distributions/00000000-0000-0000-0000-000000000000/")

        self.assertEqual(response.status_code, 404)

    def test_procurement_cannot_distribute(self):
        self.client.force_authenticate(self.procurement)

        response = self.client.post(
            "/api/distributions/",
            {"item_id": str(self.item.id), "quantity": 1, "recipient": "Virology"},
            format="json",
        )

        self.assertEqual(response.status_code, 403)

    def test_waste_draws_expired_lot(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(
            "/api/distributions/waste/",
            {"item_id": str(self.item.id), "quantity": 2, "waste_type": "EXPIRED"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["lots"][0]["lot_number"], "E-0")
        self.assertEqual(response.data["stock"]["expired_stock"], 0)

    def test_observer_cannot_record_waste(self):
        self.client.force_authenticate(self.observer)

        response = self.client.post(
            "/api/distributions/waste/",
            {"item_id": str(self.item.id), "quantity": 1, "waste_type": "DAMAGED"},
            format="json",
        )

        self.assertEqual(response.status_code, 403)

    def test_usage_batch(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(
            "/api/distributions/usage/",
            {"item_id": str(self.item.id), "quantity": 4, "department": "Virology"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.data["records"]), 2)
        self.assertEqual(
            UsageRecord.objects.filter(batch_ref=response.data["batch_ref"]).count(), 2
        )
        self.assertEqual(response.data["stock"]["total_stock"], 4)

    def test_lists_filter_by_item(self):
        self.client.force_authenticate(self.logistics)
        self.client.post(
            "/api/distributions/usage/",
            {"item_id": str(self.item.id), "quantity": 1},
            format="json",
        )

        self.client.force_authenticate(self.observer)
        usage = self.client.get("/api/distributions/usage/", {"item_id": str(self.item.id)})
        dists = self.client.get("/api/distributions/")

        self.assertEqual(usage.data["count"], 1)
        self.assertEqual(dists.data["count"], 0)
