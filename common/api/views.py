from django.contrib.auth import get_user_model
from django.db.models import Avg
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from games.models import Game
from reviews.models import Review


class BaseInfoAPIView(APIView):
    """
    GET /api/base-info/

    Returns storefront-wide aggregate statistics:
    - game_count: number of active catalog games
    - review_count: number of visible reviews
    - average_rating: average rating of visible reviews (rounded to 1 decimal)
    - user_count: number of registered users

    Authentication: none
    Permissions: AllowAny
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        """Compute the counters; average_rating is 0.0 (not null) without reviews."""
        visible = Review.objects.filter(is_visible=True)
        avg = visible.aggregate(avg=Avg("rating"))["avg"] or 0.0

        data = {
            "game_count": Game.objects.active().count(),
            "review_count": visible.count(),
            "average_rating": round(float(avg), 1),
            "user_count": get_user_model().objects.count(),
        }
        return Response(data, status=status.HTTP_200_OK)


class HealthCheckAPIView(APIView):
    """GET /api/health/ -> {"status": "ok"} for load balancers."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        return Response({"status": "ok"}, status=status.HTTP_200_OK)
