from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from games.models import Game
from orders import services


User = get_user_model()

BILLING = {
    "first_name": "Barbara",
    "last_name": "Liskov",
    "email": "bl@example.com",
    "address1": "6 Substitution Ln",
    "city": "Cambridge",
    "country": "US",
}


def make_game(title, price):
    return Game.objects.create(
        title=title,
        price=Decimal(price),
        description="desc",
        short_description="short",
        developer="Dev",
        publisher="Pub",
        release_date=date(2022, 1, 1),
        header_image="https://img.example.com/h.jpg",
        capsule_image="https://img.example.com/c.jpg",
    )


class OrderStatsTests(APITestCase):
    def setUp(self):
        self.url = reverse("order-stats")
        self.admin = User.objects.create_user("admin", "admin@example.com", "pass1234", is_staff=True)
        self.admin_token = Token.objects.create(user=self.admin)
        self.buyer = User.objects.create_user("buyer", "buyer@example.com", "pass1234")
        self.buyer_token = Token.objects.create(user=self.buyer)

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def test_empty_ledger(self):
        self.auth(self.admin_token)
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["total_orders"], 0)
        self.assertEqual(res.data["total_revenue"], "0.00")
        self.assertEqual(set(res.data["counts_by_status"]), {
            "pending", "processing", "completed", "failed", "refunded", "cancelled",
        })
        self.assertEqual(res.data["recent_orders"], [])

    def test_revenue_counts_only_completed_orders(self):
        services.create_order(self.buyer, [{"game_id": make_game("A", "10.00").id}], "paypal", BILLING)
        services.create_order(self.buyer, [{"game_id": make_game("B", "20.00").id}], "paypal", BILLING)
        with override_settings(STORE_SIMULATE_PAYMENT_FAILURE=True):
            services.create_order(self.buyer, [{"game_id": make_game("C", "30.00").id}], "paypal", BILLING)

        self.auth(self.admin_token)
        res = self.client.get(self.url)
        self.assertEqual(res.data["total_orders"], 3)
        self.assertEqual(res.data["completed_orders"], 2)
        self.assertEqual(res.data["counts_by_status"]["failed"], 1)
        self.assertEqual(res.data["pending_orders"], 0)
        self.assertEqual(res.data["refunded_orders"], 0)
        # 10.80 + 21.60
        self.assertEqual(res.data["total_revenue"], "32.40")
        self.assertEqual(len(res.data["recent_orders"]), 3)

    def test_buyer_forbidden_403(self):
        self.auth(self.buyer_token)
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
