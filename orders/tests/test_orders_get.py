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
    "first_name": "Grace",
    "last_name": "Hopper",
    "email": "grace@example.com",
    "address1": "2 Compiler Rd",
    "city": "Arlington",
    "country": "US",
}


def make_game(title, price="9.99"):
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


def place_order(user, game):
    return services.create_order(
        user, [{"game_id": game.id, "quantity": 1}], "paypal", BILLING
    )


class OrderListTests(APITestCase):
    def setUp(self):
        self.url = reverse("order-list")

        self.buyer = User.objects.create_user("buyer", "buyer@example.com", "pass1234")
        self.buyer_token = Token.objects.create(user=self.buyer)
        self.other = User.objects.create_user("other", "other@example.com", "pass1234")
        self.other_token = Token.objects.create(user=self.other)

        self.g1 = make_game("Alpha")
        self.g2 = make_game("Beta")
        self.g3 = make_game("Gamma")

        self.o1 = place_order(self.buyer, self.g1)
        with override_settings(STORE_SIMULATE_PAYMENT_FAILURE=True):
            self.o2 = place_order(self.buyer, self.g2)
        self.foreign = place_order(self.other, self.g3)

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def test_lists_only_own_orders_newest_first(self):
        self.auth(self.buyer_token)
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 2)
        ids = [row["id"] for row in res.data["results"]]
        self.assertEqual(ids, [self.o2.id, self.o1.id])
        self.assertNotIn(self.foreign.id, ids)
        self.assertEqual(res.data["results"][0]["item_count"], 1)
        self.assertEqual(res.data["results"][0]["username"], "buyer")

    def test_status_filter(self):
        self.auth(self.buyer_token)
        res = self.client.get(self.url, {"status": "failed"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in res.data["results"]], [self.o2.id])

    def test_invalid_status_filter_400(self):
        self.auth(self.buyer_token)
        res = self.client.get(self.url, {"status": "shipped"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "invalid")

    def test_page_size_is_capped(self):
        self.auth(self.buyer_token)
        res = self.client.get(self.url, {"page_size": 1})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data["results"]), 1)
        self.assertIsNotNone(res.data["next"])

    def test_unauthenticated_401(self):
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)


class OrderDetailTests(APITestCase):
    def setUp(self):
        self.buyer = User.objects.create_user("buyer", "buyer@example.com", "pass1234")
        self.buyer_token = Token.objects.create(user=self.buyer)
        self.other = User.objects.create_user("other", "other@example.com", "pass1234")
        self.other_token = Token.objects.create(user=self.other)

        self.order = place_order(self.buyer, make_game("Alpha", "59.99"))
        self.url = reverse("order-detail", kwargs={"pk": self.order.id})

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def test_owner_gets_full_order(self):
        self.auth(self.buyer_token)
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["order_number"], self.order.order_number)
        self.assertEqual(res.data["payment_method"], "paypal")
        self.assertEqual(res.data["payment_details"]["last4"], "")
        self.assertEqual(res.data["payment_details"]["payment_processor"], "simulated:paypal")
        self.assertEqual(res.data["refund"]["requested"], False)
        self.assertEqual(res.data["status_history"], [])
        self.assertEqual(res.data["age_in_days"], 0)

    def test_foreign_order_404(self):
        self.auth(self.other_token)
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["code"], "not_found")

    def test_missing_order_404(self):
        self.auth(self.buyer_token)
        res = self.client.get(reverse("order-detail", kwargs={"pk": 999999}))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
