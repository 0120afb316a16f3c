from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase, APIClient
from rest_framework.authtoken.models import Token

User = get_user_model()


class UserAdminTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(
            username="admin", email="admin@mail.de", password="Pass123!", is_staff=True
        )
        self.buyer = User.objects.create_user(
            username="buyer", email="buyer@mail.de", password="Pass123!", first_name="Bea"
        )
        self.idle = User.objects.create_user(
            username="idle", email="idle@mail.de", password="Pass123!", is_active=False
        )
        self.client_admin = APIClient()
        self.client_admin.credentials(HTTP_AUTHORIZATION="Token " + Token.objects.create(user=self.admin).key)
        self.client_buyer = APIClient()
        self.client_buyer.credentials(HTTP_AUTHORIZATION="Token " + Token.objects.create(user=self.buyer).key)
        self.url = reverse("user-list")

    def test_staff_lists_users(self):
        resp = self.client_admin.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["count"], 3)
        self.assertIn("library_count", resp.data["results"][0])

    def test_search_and_active_filter(self):
        resp = self.client_admin.get(self.url, {"search": "bea"})
        self.assertEqual([u["id"] for u in resp.data["results"]], [self.buyer.id])
        resp = self.client_admin.get(self.url, {"is_active": "false"})
        self.assertEqual([u["id"] for u in resp.data["results"]], [self.idle.id])
        resp = self.client_admin.get(self.url, {"is_active": "maybe"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_buyer_forbidden_403(self):
        resp = self.client_buyer.get(self.url)
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_deactivate_user(self):
        url = reverse("user-status", kwargs={"pk": self.buyer.id})
        resp = self.client_admin.patch(url, {"is_active": False}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(resp.data["is_active"])
        self.buyer.refresh_from_db()
        self.assertFalse(self.buyer.is_active)

    def test_status_requires_flag_400(self):
        url = reverse("user-status", kwargs={"pk": self.buyer.id})
        resp = self.client_admin.patch(url, {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_user_404(self):
        url = reverse("user-status", kwargs={"pk": 999999})
        resp = self.client_admin.patch(url, {"is_active": True}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
