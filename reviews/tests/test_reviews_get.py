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


def make_game(title):
    return Game.objects.create(
        title=title,
        price=Decimal("29.99"),
        description="desc",
        short_description="short",
        developer="Dev",
        publisher="Pub",
        release_date=date(2022, 1, 1),
        header_image="https://img.example.com/h.jpg",
        capsule_image="https://img.example.com/c.jpg",
    )


def make_review(game, user, rating, helpful=0, **extra):
    return Review.objects.create(
        game=game,
        user=user,
        rating=rating,
        content="Long enough review content.",
        recommended=rating >= 3,
        helpful=helpful,
        **extra,
    )


class ReviewListTests(APITestCase):
    def setUp(self):
        self.url = reverse("review-list")
        self.a = User.objects.create_user("a", "a@ex.com", "pass1234")
        self.b = User.objects.create_user("b", "b@ex.com", "pass1234")
        self.c = User.objects.create_user("c", "c@ex.com", "pass1234")
        self.game = make_game("Starfall")
        self.other_game = make_game("Moonrise")

        self.r_a = make_review(self.game, self.a, 5, helpful=1)
        self.r_b = make_review(self.game, self.b, 2, helpful=7)
        self.r_c = make_review(self.game, self.c, 4, helpful=3)
        self.hidden = make_review(self.other_game, self.a, 1, is_visible=False)
        self.r_other = make_review(self.other_game, self.b, 3)

    def ids(self, res):
        return [row["id"] for row in res.data["results"]]

    def test_public_list_for_game_sorted_by_helpful(self):
        res = self.client.get(self.url, {"game_id": self.game.id})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(self.ids(res), [self.r_b.id, self.r_c.id, self.r_a.id])
        self.assertEqual(
            res.data["rating_distribution"], {"1": 0, "2": 1, "3": 0, "4": 1, "5": 1}
        )
        self.assertIsNone(res.data["results"][0]["user_vote"])

    def test_sort_by_rating(self):
        res = self.client.get(self.url, {"game_id": self.game.id, "sort": "rating"})
        self.assertEqual(self.ids(res), [self.r_a.id, self.r_c.id, self.r_b.id])

    def test_sort_by_recent(self):
        res = self.client.get(self.url, {"game_id": self.game.id, "sort": "recent"})
        self.assertEqual(self.ids(res), [self.r_c.id, self.r_b.id, self.r_a.id])

    def test_positive_and_negative_filters(self):
        res = self.client.get(self.url, {"game_id": self.game.id, "filter": "positive"})
        self.assertEqual(sorted(self.ids(res)), sorted([self.r_a.id, self.r_c.id]))
        res = self.client.get(self.url, {"game_id": self.game.id, "filter": "negative"})
        self.assertEqual(self.ids(res), [self.r_b.id])

    def test_hidden_reviews_are_not_listed(self):
        res = self.client.get(self.url, {"user_id": self.a.id})
        self.assertEqual(self.ids(res), [self.r_a.id])
        res = self.client.get(self.url, {"game_id": self.other_game.id})
        self.assertEqual(self.ids(res), [self.r_other.id])
        self.assertEqual(res.data["rating_distribution"]["1"], 0)

    def test_invalid_params_400(self):
        self.assertEqual(self.client.get(self.url, {"sort": "loudest"}).status_code, 400)
        self.assertEqual(self.client.get(self.url, {"filter": "mixed"}).status_code, 400)
        self.assertEqual(self.client.get(self.url, {"game_id": "abc"}).status_code, 400)

    def test_authenticated_caller_sees_own_vote(self):
        self.r_b.add_vote(self.c, "helpful")
        tok = Token.objects.create(user=self.c)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {tok.key}")
        res = self.client.get(self.url, {"game_id": self.game.id})
        votes = {row["id"]: row["user_vote"] for row in res.data["results"]}
        self.assertEqual(votes[self.r_b.id], "helpful")
        self.assertIsNone(votes[self.r_a.id])

    def test_detail_is_public_for_visible_review(self):
        res = self.client.get(reverse("review-detail", args=[self.r_a.id]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        res = self.client.get(reverse("review-detail", args=[self.hidden.id]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
