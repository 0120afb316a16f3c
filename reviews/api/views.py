"""Reviews API views.

List reviews (public) and create them (auth required) on the same endpoint.
Supports filtering by game_id or user_id, sorting by helpfulness, recency or
rating, and a positive/negative rating filter; game listings include the
rating distribution. Owners edit their reviews; owners or staff delete them.
Any user may vote once or report a review; staff work the moderation queue.
"""

import logging

from django.db.models import Count, F
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from games.models import Game
from reviews.models import Review, ReviewVote
from .permissions import IsModerator, IsReviewOwner, IsReviewOwnerOrStaff
from .serializers import (
    ReportedReviewSerializer,
    ReviewCreateSerializer,
    ReviewModerateSerializer,
    ReviewOutputSerializer,
    ReviewPatchSerializer,
    ReviewReportSerializer,
    ReviewVoteSerializer,
)

logger = logging.getLogger(__name__)

SORTS = {
    "helpful": ("-helpful", "-created_at", "-id"),
    "recent": ("-created_at", "-id"),
    "rating": ("-rating", "-created_at", "-id"),
}


class ReviewsPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 50


class ReportedReviewsPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


# ----------------------------- helpers (module-level) -----------------------------

def _int_param(params, name):
    value = params.get(name)
    if not value:
        return None
    if not value.isdigit():
        raise ValidationError({name: "Must be an integer."})
    return int(value)


def _apply_filters_and_sort(qs, params):
    """Filter by ids and rating band, then sort; raises ValidationError on bad input."""
    game_id = _int_param(params, "game_id")
    if game_id is not None:
        qs = qs.filter(game_id=game_id)

    user_id = _int_param(params, "user_id")
    if user_id is not None:
        qs = qs.filter(user_id=user_id)

    band = params.get("filter", "all")
    if band == "positive":
        qs = qs.filter(rating__gte=4)
    elif band == "negative":
        qs = qs.filter(rating__lte=2)
    elif band != "all":
        raise ValidationError({"filter": "Allowed values: all, positive, negative."})

    sort = params.get("sort", "helpful")
    if sort not in SORTS:
        raise ValidationError({"sort": "Allowed values: helpful, recent, rating."})
    return qs.order_by(*SORTS[sort])


def _rating_distribution(game_id):
    distribution = {str(star): 0 for star in range(1, 6)}
    rows = (
        Review.objects.filter(game_id=game_id, is_visible=True)
        .order_by()
        .values("rating")
        .annotate(n=Count("id"))
    )
    for row in rows:
        distribution[str(row["rating"])] = row["n"]
    return distribution


def _validate_patch_fields(data: dict):
    """Allow only the editable review fields; return Response(400) on extras."""
    allowed = {"rating", "title", "content", "recommended", "playtime"}
    extra = set(data.keys()) - allowed
    if extra:
        return Response(
            {
                "detail": (
                    f"Only {', '.join(sorted(allowed))} may be updated. "
                    f"Invalid: {', '.join(sorted(extra))}."
                ),
                "code": "invalid",
            },
            status=status.HTTP_400_BAD_REQUEST,
        )
    return None


# --------------------------------------- views ---------------------------------------

class ReviewListCreateAPIView(generics.ListCreateAPIView):
    """GET: list visible reviews (filter/sort). POST: create a review."""

    queryset = Review.objects.filter(is_visible=True).select_related("user", "game")
    pagination_class = ReviewsPagination

    def get_permissions(self):
        """Public read; authenticated write."""
        if self.request.method == "POST":
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_serializer_class(self):
        """Use output serializer for GET and create serializer for POST."""
        return ReviewOutputSerializer if self.request.method == "GET" else ReviewCreateSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        user = self.request.user
        if self.request.method == "GET" and user.is_authenticated:
            context["user_votes"] = dict(
                ReviewVote.objects.filter(user=user).values_list("review_id", "vote")
            )
        return context

    # --- GET ---
    def get_queryset(self):
        """Apply optional filters and sorting from query parameters."""
        return _apply_filters_and_sort(super().get_queryset(), self.request.query_params)

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        game_id = _int_param(request.query_params, "game_id")
        if game_id is not None:
            response.data["rating_distribution"] = _rating_distribution(game_id)
        return response

    # --- POST ---
    def create(self, request, *args, **kwargs):
        """Validate and create a review; return the created representation."""
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        game = get_object_or_404(Game.objects.active(), pk=ser.validated_data["game_id"])
        ser.context["game"] = game
        review = ser.save()
        game.recalculate_rating()
        logger.info("Review %s created for game %s by user %s", review.id, game.id, request.user.id)
        return Response(ReviewOutputSerializer(review).data, status=status.HTTP_201_CREATED)


class ReviewDetailUpdateDeleteAPIView(generics.RetrieveUpdateDestroyAPIView):
    """GET: public read. PATCH: owner-only edit. DELETE: owner or staff."""

    queryset = Review.objects.all().select_related("user", "game")

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        if self.request.method == "DELETE":
            return [IsAuthenticated(), IsReviewOwnerOrStaff()]
        return [IsAuthenticated(), IsReviewOwner()]

    def get_queryset(self):
        qs = super().get_queryset()
        if self.request.method == "GET":
            qs = qs.filter(is_visible=True)
        return qs

    def get_serializer_class(self):
        """Use patch serializer for PATCH; output serializer otherwise."""
        return ReviewPatchSerializer if self.request.method in ("PATCH", "PUT") else ReviewOutputSerializer

    def partial_update(self, request, *args, **kwargs):
        """Update only the editable fields; flag the review as edited."""
        bad = _validate_patch_fields(request.data)
        if bad is not None:
            return bad
        instance = self.get_object()
        ser = self.get_serializer(instance, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save(is_edited=True, edited_at=timezone.now())
        instance.game.recalculate_rating()
        return Response(ReviewOutputSerializer(instance).data, status=status.HTTP_200_OK)

    def update(self, request, *args, **kwargs):
        """Force partial updates via PATCH semantics."""
        kwargs["partial"] = True
        return self.partial_update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        """Delete the review and refresh the game's rating aggregates."""
        instance = self.get_object()
        game = instance.game
        self.perform_destroy(instance)
        game.recalculate_rating()
        logger.info("Review %s deleted by user %s", kwargs.get("pk"), request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ReviewVoteAPIView(APIView):
    """POST /api/reviews/{id}/vote/ {"vote": "helpful"|"not_helpful"}."""

    permission_classes = [IsAuthenticated]

    def post(self, request, pk: int):
        review = get_object_or_404(Review, pk=pk, is_visible=True)
        ser = ReviewVoteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        if review.user_id == request.user.id:
            raise ValidationError({"detail": "You cannot vote on your own review."})
        if not review.add_vote(request.user, ser.validated_data["vote"]):
            raise ValidationError({"detail": "You have already voted on this review."})

        return Response(
            {"helpful": review.helpful, "not_helpful": review.not_helpful},
            status=status.HTTP_200_OK,
        )


class ReviewReportAPIView(APIView):
    """POST /api/reviews/{id}/report/ {"reason": ...} -> flags the review for moderators."""

    permission_classes = [IsAuthenticated]

    def post(self, request, pk: int):
        review = get_object_or_404(Review, pk=pk)
        ser = ReviewReportSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        Review.objects.filter(pk=review.pk).update(
            is_reported=True, report_count=F("report_count") + 1
        )
        logger.info(
            "Review %s reported by user %s: %s",
            review.id,
            request.user.id,
            ser.validated_data["reason"],
        )
        return Response({"detail": "Review reported."}, status=status.HTTP_200_OK)


class ReportedReviewListAPIView(generics.ListAPIView):
    """GET /api/reviews/reported/ (staff) -> reported reviews, most reported first."""

    serializer_class = ReportedReviewSerializer
    permission_classes = [IsAuthenticated, IsModerator]
    pagination_class = ReportedReviewsPagination

    def get_queryset(self):
        return (
            Review.objects.filter(is_reported=True)
            .select_related("user", "game")
            .order_by("-report_count", "-created_at", "-id")
        )


class ReviewModerateAPIView(APIView):
    """PATCH /api/reviews/{id}/moderate/ {"action": "approve"|"hide", "moderator_notes"?}."""

    permission_classes = [IsAuthenticated, IsModerator]

    def patch(self, request, pk: int):
        review = get_object_or_404(Review.objects.select_related("game"), pk=pk)
        ser = ReviewModerateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        review.is_visible = ser.validated_data["action"] == "approve"
        review.is_reported = False
        review.moderator_notes = ser.validated_data["moderator_notes"]
        review.save(update_fields=["is_visible", "is_reported", "moderator_notes", "updated_at"])
        review.game.recalculate_rating()

        logger.info(
            "Review %s moderated (%s) by user %s",
            review.id,
            ser.validated_data["action"],
            request.user.id,
        )
        return Response(ReportedReviewSerializer(review).data, status=status.HTTP_200_OK)
