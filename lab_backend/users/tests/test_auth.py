from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient, APIRequestFactory

from permissions.roles import (
    CAP_INVENTORY_DELETE,
    CAP_INVENTORY_VIEW,
    CAP_PURCHASE_APPROVE,
    CAP_PURCHASE_RECEIVE,
    HasCapability,
    effective_capabilities_for,
    user_has_capability,
)

User = get_user_model()


class RoleCapabilityTests(TestCase):
    """
    Role -> capability tests.

    GUARANTEES:
    - Each role gets exactly the capabilities of its duties
    - Anonymous users have none
    - Views without a declared capability deny
    """

    def setUp(self):
        self.factory = APIRequestFactory()
        self.procurement = User.objects.create_user(
            email="buyer@lab.test", password="pass", role="procurement"
        )
        self.logistics = User.objects.create_user(
            email="store@lab.test", password="pass", role="logistics"
        )
        self.observer = User.objects.create_user(email="viewer@lab.test", password="pass")

    def test_default_role_is_observer(self):
        self.assertEqual(self.observer.role, "observer")
        self.assertEqual(
            effective_capabilities_for(self.observer),
            {CAP_INVENTORY_VIEW, "reports.view"},
        )

    def test_procurement_receives_but_does_not_approve(self):
        self.assertTrue(user_has_capability(self.procurement, CAP_PURCHASE_RECEIVE))
        self.assertFalse(user_has_capability(self.procurement, CAP_PURCHASE_APPROVE))

    def test_logistics_approves_but_does_not_receive(self):
        self.assertTrue(user_has_capability(self.logistics, CAP_PURCHASE_APPROVE))
        self.assertFalse(user_has_capability(self.logistics, CAP_PURCHASE_RECEIVE))

    def test_superuser_has_everything(self):
        root = User.objects.create_superuser(email="root@lab.test", password="pass")
        self.assertEqual(root.role, "admin")
        self.assertTrue(user_has_capability(root, CAP_INVENTORY_DELETE))

    def test_has_capability_denies_without_declaration(self):
        request = self.factory.get("/")
        request.user = self.logistics

        class View:
            required_capability = None

        self.assertFalse(HasCapability().has_permission(request, View()))

        View.required_capability = CAP_INVENTORY_VIEW
        self.assertTrue(HasCapability().has_permission(request, View()))


class AuthApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="Tech@Lab.test",
            password="s3cret-pass",
            role="logistics",
            department="Microbiology",
        )

    def test_jwt_login_with_email(self):
        response = self.client.post(
            "/api/auth/jwt/create/",
            {"email": "Tech@lab.test", "password": "s3cret-pass"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)

    def test_wrong_password_rejected(self):
        response = self.client.post(
            "/api/auth/jwt/create/",
            {"email": "Tech@lab.test", "password": "nope"},
            format="json",
        )

        self.assertEqual(response.status_code, 401)

    def test_me_lists_capabilities(self):
        self.client.force_authenticate(self.user)

        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["role"], "logistics")
        self.assertEqual(response.data["department"], "Microbiology")
        self.assertIn("stock.distribute", response.data["capabilities"])
        self.assertEqual(response.data["capabilities"], sorted(response.data["capabilities"]))

    def test_health_is_public(self):
        response = self.client.get("/api/health/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "ok")

    def test_api_index_is_public(self):
        response = self.client.get("/api/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["endpoints"]["reports"], "/api/reports/")
