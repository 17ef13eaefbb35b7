from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from items.models import ItemDefinition, Lot
from items.services.item_registry import create_item
from items.services.lot_ledger import create_lot

User = get_user_model()


class ItemApiTests(TestCase):
    """
    Items API tests.

    GUARANTEES:
    - Anonymous users are rejected everywhere
    - Observers can read but not write
    - Service errors surface as stable codes with the right status
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@lab.test", password="pass", role="admin")
        self.logistics = User.objects.create_user(
            email="logistics@lab.test", password="pass", role="logistics"
        )
        self.observer = User.objects.create_user(
            email="observer@lab.test", password="pass", role="observer"
        )

        self.item = create_item(code="PIP-10", name="Pipette 10ml", min_stock=5)
        self.today = timezone.localdate()
        create_lot(
            item_id=self.item.id,
            lot_number="P-1",
            initial_quantity=4,
            expiry_date=self.today + timedelta(days=60),
        )

    def _url(self, suffix=""):
        return f"/api/items/{self.item.id}/{suffix}"

    # --------------------------------------------------
    # Access
    # --------------------------------------------------

    def test_anonymous_rejected(self):
        response = self.client.get("/api/items/")
        self.assertEqual(response.status_code, 401)

    def test_observer_can_list_with_stock(self):
        self.client.force_authenticate(self.observer)

        response = self.client.get("/api/items/")

        self.assertEqual(response.status_code, 200)
        row = response.data["results"][0]
        self.assertEqual(row["code"], "PIP-10")
        self.assertEqual(row["stock"]["total_stock"], 4)
        self.assertEqual(row["stock"]["stock_status"], "PURCHASE_NEEDED")

    def test_observer_cannot_create(self):
        self.client.force_authenticate(self.observer)

        response = self.client.post("/api/items/", {"code": "X", "name": "X"}, format="json")

        self.assertEqual(response.status_code, 403)
        self.assertFalse(ItemDefinition.objects.filter(code="X").exists())

    def test_logistics_cannot_delete(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.delete(self._url())

        self.assertEqual(response.status_code, 403)

    # --------------------------------------------------
    # Registry
    # --------------------------------------------------

    def test_create_and_patch_item(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(
            "/api/items/",
            {"code": "TUBE-15", "name": "Falcon tube 15ml", "min_stock": 20, "unit": "box"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["stock"]["total_stock"], 0)

        item_id = response.data["id"]
        response = self.client.patch(
            f"/api/items/{item_id}/", {"storage_location": "Shelf B2"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(ItemDefinition.objects.get(pk=item_id).storage_location, "Shelf B2")

    def test_create_requires_code_and_name(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post("/api/items/", {"name": "No code"}, format="json")

        self.assertEqual(response.status_code, 400)

    def test_duplicate_code_is_validation_error(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(
            "/api/items/", {"code": "PIP-10", "name": "Again"}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")

    def test_code_is_immutable(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.patch(self._url(), {"code": "PIP-99"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.item.refresh_from_db()
        self.assertEqual(self.item.code, "PIP-10")

    def test_admin_delete_cascades(self):
        self.client.force_authenticate(self.admin)

        response = self.client.delete(self._url())

        self.assertEqual(response.status_code, 204)
        self.assertFalse(Lot.objects.exists())

    def test_unknown_item_is_404(self):
        self.client.force_authenticate(self.observer)

        response = self.client.get("/api/items/00000000-0000-0000-0000-000000000000/stock/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "NOT_FOUND")

    # --------------------------------------------------
    # Lots + allocation
    # --------------------------------------------------

    def test_manual_lot_entry(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(
            "/api/items/lots/",
            {"item_id": str(self.item.id), "lot_number": "P-2", "initial_quantity": 6},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["current_quantity"], 6)

        stock = self.client.get(self._url("stock/")).data
        self.assertEqual(stock["total_stock"], 10)
        self.assertEqual(stock["stock_status"], "IN_STOCK")

    def test_item_lots_in_allocation_order(self):
        create_lot(
            item_id=self.item.id,
            lot_number="P-0",
            initial_quantity=1,
            expiry_date=self.today + timedelta(days=5),
        )
        self.client.force_authenticate(self.observer)

        response = self.client.get(self._url("lots/"))

        self.assertEqual([row["lot_number"] for row in response.data], ["P-0", "P-1"])

    def test_patch_lot_expiry_rederives_status(self):
        lot = Lot.objects.get(lot_number="P-1")
        self.client.force_authenticate(self.logistics)

        response = self.client.patch(
            f"/api/items/lots/{lot.id}/",
            {"expiry_date": str(self.today - timedelta(days=1)), "manufacturer": "Acme"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], Lot.Status.EXPIRED)
        self.assertEqual(response.data["current_quantity"], 4)
        lot.refresh_from_db()
        self.assertEqual(lot.manufacturer, "Acme")

    def test_patch_lot_rejects_quantity_and_observer(self):
        lot = Lot.objects.get(lot_number="P-1")
        url = f"/api/items/lots/{lot.id}/"

        self.client.force_authenticate(self.observer)
        response = self.client.patch(url, {"lot_number": "P-9"}, format="json")
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.logistics)
        response = self.client.patch(url, {"current_quantity": 40}, format="json")
        self.assertEqual(response.status_code, 400)

        lot.refresh_from_db()
        self.assertEqual((lot.lot_number, lot.current_quantity), ("P-1", 4))

    def test_allocate_shortfall_is_409(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(self._url("allocate/"), {"quantity": 5}, format="json")

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(response.data["context"]["available"], 4)
        self.assertEqual(Lot.objects.get(lot_number="P-1").current_quantity, 4)

    def test_allocate_returns_records_and_stock(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(self._url("allocate/"), {"quantity": 3}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["allocations"][0]["quantity_used"], 3)
        self.assertEqual(response.data["stock"]["total_stock"], 1)

    # --------------------------------------------------
    # Import
    # --------------------------------------------------

    def test_import_endpoint(self):
        self.client.force_authenticate(self.logistics)

        response = self.client.post(
            "/api/items/import/",
            {
                "rows": [
                    {"code": "PIP-10", "name": "Pipette 10ml", "lot_number": "P-5", "quantity": 2},
                    {"code": "NEW-1", "name": "New reagent"},
                ]
            },
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["created"], 1)
        self.assertEqual(response.data["updated"], 1)
        self.assertEqual(response.data["lots_created"], 1)
