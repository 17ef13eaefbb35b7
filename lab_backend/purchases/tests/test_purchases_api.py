from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from items.models import Lot
from items.services.item_registry import create_item
from purchases.models import Purchase

User = get_user_model()


class PurchaseApiTests(TestCase):
    """
    Purchase API tests.

    GUARANTEES:
    - Each lifecycle step is gated by its own capability
    - The full request -> approve -> order -> receive flow works over HTTP
    - Lifecycle violations answer 409 with a stable code
    """

    def setUp(self):
        self.client = APIClient()
        self.logistics = User.objects.create_user(
            email="logistics@lab.test", password="pass", role="logistics"
        )
        self.procurement = User.objects.create_user(
            email="procurement@lab.test", password="pass", role="procurement"
        )
        self.observer = User.objects.create_user(email="observer@lab.test", password="pass")
        self.item = create_item(code="EDTA-3", name="EDTA tube 3ml", min_stock=100)

    def _create(self, quantity=10):
        self.client.force_authenticate(self.logistics)
        response = self.client.post(
            "/api/purchases/",
            {"item_id": str(self.item.id), "quantity": quantity, "urgency": "URGENT"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        return response.data["id"]

    def test_full_flow(self):
        purchase_id = self._create()

        response = self.client.post(f"/api/purchases/{purchase_id}/approve/", {}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "APPROVED")

        self.client.force_authenticate(self.procurement)
        response = self.client.post(
            f"/api/purchases/{purchase_id}/order/",
            {"supplier_name": "MedLab Ltd", "po_number": "PO-1"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["ordered_qty"], 10)

        response = self.client.post(
            f"/api/purchases/{purchase_id}/receive/",
            {"lot_number": "E-2026-01", "quantity": 6, "expiry_date": "2027-06-30"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["purchase"]["status"], "PARTIALLY_RECEIVED")
        self.assertEqual(response.data["purchase"]["received_qty_total"], 6)
        self.assertEqual(len(response.data["purchase"]["receipts"]), 1)
        self.assertEqual(response.data["lot"]["current_quantity"], 6)
        self.assertTrue(Lot.objects.filter(lot_number="E-2026-01", item=self.item).exists())

    def test_receive_before_order_is_409(self):
        purchase_id = self._create()
        self.client.force_authenticate(self.procurement)

        response = self.client.post(
            f"/api/purchases/{purchase_id}/receive/",
            {"lot_number": "X", "quantity": 1},
            format="json",
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "INVALID_STATE_TRANSITION")

    def test_over_receipt_is_409_until_acknowledged(self):
        purchase_id = self._create(quantity=2)
        self.client.post(f"/api/purchases/{purchase_id}/approve/", {}, format="json")
        self.client.force_authenticate(self.procurement)
        self.client.post(
            f"/api/purchases/{purchase_id}/order/", {"supplier_name": "MedLab"}, format="json"
        )

        url = f"/api/purchases/{purchase_id}/receive/"
        response = self.client.post(url, {"lot_number": "L", "quantity": 3}, format="json")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "OVER_RECEIPT_NOT_ACKNOWLEDGED")

        response = self.client.post(
            url, {"lot_number": "L", "quantity": 3, "over_receipt_ack": True}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["purchase"]["status"], "RECEIVED")

    def test_reject_requires_reason(self):
        purchase_id = self._create()

        response = self.client.post(f"/api/purchases/{purchase_id}/reject/", {}, format="json")
        self.assertEqual(response.status_code, 400)

        response = self.client.post(
            f"/api/purchases/{purchase_id}/reject/", {"reason": "out of budget"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "REJECTED")

    def test_capabilities_per_step(self):
        purchase_id = self._create()

        self.client.force_authenticate(self.procurement)
        response = self.client.post(f"/api/purchases/{purchase_id}/approve/", {}, format="json")
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.observer)
        response = self.client.post(
            "/api/purchases/", {"item_id": str(self.item.id), "quantity": 1}, format="json"
        )
        self.assertEqual(response.status_code, 403)

        response = self.client.get("/api/purchases/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)

    def test_list_filters(self):
        self._create()
        other = create_item(code="OTHER", name="Other")
        self.client.post(
            "/api/purchases/", {"item_id": str(other.id), "quantity": 1}, format="json"
        )

        response = self.client.get(f"/api/purchases/?item_id={self.item.id}")
        self.assertEqual(response.data["count"], 1)

        response = self.client.get("/api/purchases/?open=true")
        self.assertEqual(response.data["count"], 0)

        response = self.client.get("/api/purchases/?status=REQUESTED")
        self.assertEqual(response.data["count"], 2)

    def test_detail_and_unknown_id(self):
        purchase_id = self._create()

        response = self.client.get(f"/api/purchases/{purchase_id}/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["urgency"], Purchase.URGENCY_URGENT)

        response = self.client.get("/api/purchases/00000000-0000-0000-0000-000000000000/")
        self.assertEqual(response.status_code, 404)
