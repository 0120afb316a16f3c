from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

User = get_user_model()


class LoginTests(APITestCase):
    def setUp(self):
        self.url = reverse("login")
        self.player = User.objects.create_user(
            username="nightowl", email="owl@games.test", password="Hoot-Hoot-42"
        )

    def login(self, username, password="Hoot-Hoot-42"):
        return self.client.post(self.url, {"username": username, "password": password}, format="json")

    def test_login_by_username_returns_token(self):
        resp = self.login("nightowl")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["user_id"], self.player.id)
        self.assertEqual(resp.data["username"], "nightowl")
        self.assertEqual(resp.data["email"], "owl@games.test")
        self.assertFalse(resp.data["is_staff"])
        self.assertEqual(resp.data["token"], Token.objects.get(user=self.player).key)

    def test_login_by_email_is_case_insensitive(self):
        resp = self.login("OWL@Games.test")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["user_id"], self.player.id)

    def test_repeated_login_reuses_token(self):
        first = self.login("nightowl").data["token"]
        second = self.login("nightowl").data["token"]
        self.assertEqual(first, second)
        self.assertEqual(Token.objects.filter(user=self.player).count(), 1)

    def test_staff_flag_is_reported(self):
        User.objects.create_user("boss", "boss@games.test", "Hoot-Hoot-42", is_staff=True)
        resp = self.login("boss")
        self.assertTrue(resp.data["is_staff"])

    def test_deactivated_account_is_rejected(self):
        self.player.is_active = False
        self.player.save(update_fields=["is_active"])
        resp = self.login("nightowl")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Token.objects.filter(user=self.player).exists())

    def test_bad_credentials_400(self):
        for username, password in (("nightowl", "wrong"), ("ghost", "Hoot-Hoot-42"), ("ghost@games.test", "x")):
            resp = self.login(username, password)
            self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(resp.data["code"], "invalid")
            self.assertIn("detail", resp.data)

    def test_password_is_required(self):
        resp = self.client.post(self.url, {"username": "nightowl"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", resp.data)
