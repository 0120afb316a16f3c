from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from games.models import Game
from reviews.models import Review

User = get_user_model()


def make_user(username, **extra):
    u = User.objects.create_user(username, f"{username}@ex.com", "pass1234", **extra)
    tok = Token.objects.create(user=u)
    return u, tok


class ReviewPatchTests(APITestCase):
    def setUp(self):
        self.owner, self.owner_tok = make_user("author")
        self.other, self.other_tok = make_user("reader")

        self.game = Game.objects.create(
            title="Starfall",
            price=Decimal("29.99"),
            description="desc",
            short_description="short",
            developer="Dev",
            publisher="Pub",
            release_date=date(2022, 1, 1),
            header_image="https://img.example.com/h.jpg",
            capsule_image="https://img.example.com/c.jpg",
        )
        self.review = Review.objects.create(
            game=self.game,
            user=self.owner,
            rating=3,
            content="It is okay I guess.",
            recommended=True,
        )
        self.game.recalculate_rating()
        self.url = reverse("review-detail", args=[self.review.id])

    def auth(self, tok):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {tok.key}")

    def test_owner_can_patch_and_review_is_marked_edited(self):
        self.auth(self.owner_tok)
        res = self.client.patch(
            self.url, {"rating": 5, "content": "Grew on me after the patch."}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["id"], self.review.id)
        self.assertEqual(res.data["rating"], 5)
        self.assertEqual(res.data["content"], "Grew on me after the patch.")
        self.assertTrue(res.data["is_edited"])
        self.assertIsNotNone(res.data["edited_at"])

        self.game.refresh_from_db()
        self.assertEqual(self.game.rating, Decimal("5.00"))

    def test_requires_auth_401(self):
        res = self.client.patch(self.url, {"rating": 4}, format="json")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_forbidden_if_not_owner_403(self):
        self.auth(self.other_tok)
        res = self.client.patch(self.url, {"rating": 4}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_cannot_edit_someone_elses_review_403(self):
        _, staff_tok = make_user("mod", is_staff=True)
        self.auth(staff_tok)
        res = self.client.patch(self.url, {"rating": 1}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_rating_400(self):
        self.auth(self.owner_tok)
        res = self.client.patch(self.url, {"rating": 0}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_extra_fields_rejected_400(self):
        self.auth(self.owner_tok)
        res = self.client.patch(self.url, {"helpful": 999}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.review.refresh_from_db()
        self.assertEqual(self.review.helpful, 0)

    def test_not_found_404(self):
        self.auth(self.owner_tok)
        res = self.client.patch(reverse("review-detail", args=[999999]), {"rating": 4}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
