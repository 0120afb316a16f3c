"""Games API views.

List and create games on the same endpoint with pagination, searching and
filtering. Retrieve, patch and (soft) delete are provided on the detail route.
Only active games are ever visible to the public.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db.models import Q
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from games.models import Game
from profiles.models import LibraryEntry
from .permissions import IsStaffOrReadOnly
from .serializers import GameDetailSerializer, GameListSerializer, GameWriteSerializer

logger = logging.getLogger(__name__)

ORDERING_FIELDS = {"title", "price", "rating", "release_date", "total_sales"}


class GamesPagination(PageNumberPagination):
    """Default catalog pagination with an adjustable page size via query param."""

    page_size = 12
    page_size_query_param = "page_size"
    max_page_size = 50


# ----------------------------- helpers (module-level) -----------------------------

def _decimal_param(params, name, lo=None, hi=None):
    raw = params.get(name)
    if raw is None:
        return None
    try:
        value = Decimal(raw)
    except (InvalidOperation, TypeError):
        raise ValidationError({name: "Must be a number."})
    if (lo is not None and value < lo) or (hi is not None and value > hi):
        raise ValidationError({name: "Out of range."})
    return value


def _csv_param(params, name):
    raw = params.get(name)
    if not raw:
        return set()
    return {part.strip().lower() for part in raw.split(",") if part.strip()}


def _filter_by_list_field(qs, field, wanted):
    """Keep games whose list field shares at least one (case-insensitive) value."""
    if not wanted:
        return qs
    ids = [
        game_id
        for game_id, values in qs.values_list("id", field)
        if wanted & {str(v).lower() for v in (values or [])}
    ]
    return qs.filter(id__in=ids)


def _user_context(user):
    """Owned and wishlisted game ids for an authenticated caller, else {}."""
    if not user or not user.is_authenticated:
        return {}
    owned = set(LibraryEntry.objects.filter(user=user).values_list("game_id", flat=True))
    profile = getattr(user, "profile", None)
    wished = set(profile.wishlist.values_list("id", flat=True)) if profile else set()
    return {"owned_ids": owned, "wishlist_ids": wished}


# --------------------------------------- views ---------------------------------------

class GameListCreateAPIView(generics.ListCreateAPIView):
    """GET: paginated public catalog with filters; POST: create game (staff-only)."""

    queryset = Game.objects.all()
    pagination_class = GamesPagination
    permission_classes = [IsStaffOrReadOnly]

    def get_serializer_class(self):
        """Use list serializer for GET and write serializer for POST."""
        if self.request.method == "GET":
            return GameListSerializer
        return GameWriteSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.method == "GET":
            context.update(_user_context(self.request.user))
        return context

    def get_queryset(self):
        qs = super().get_queryset().active()
        qs = self._apply_filters(qs, self.request.query_params)
        return self._apply_ordering(qs, self.request.query_params.get("ordering"))

    # --- helpers ---
    def _apply_filters(self, qs, params):
        min_price = _decimal_param(params, "min_price", lo=0)
        if min_price is not None:
            qs = qs.filter(price__gte=min_price)

        max_price = _decimal_param(params, "max_price", lo=0)
        if max_price is not None:
            qs = qs.filter(price__lte=max_price)

        min_rating = _decimal_param(params, "min_rating", lo=0, hi=5)
        if min_rating is not None:
            qs = qs.filter(rating__gte=min_rating)

        if params.get("featured") == "true":
            qs = qs.filter(is_featured=True)

        search = params.get("search")
        if search:
            qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))

        qs = _filter_by_list_field(qs, "tags", _csv_param(params, "tags"))
        return _filter_by_list_field(qs, "categories", _csv_param(params, "categories"))

    def _apply_ordering(self, qs, ordering):
        if not ordering:
            return qs.order_by("-release_date", "-id")
        if ordering.lstrip("-") not in ORDERING_FIELDS:
            raise ValidationError(
                {"ordering": f"Allowed values: {', '.join(sorted(ORDERING_FIELDS))} (optionally prefixed with '-')."}
            )
        return qs.order_by(ordering, "id")

    def create(self, request, *args, **kwargs):
        """Create a game and return its full representation."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        game = serializer.save()
        logger.info("Game %s created by %s", game.id, request.user.username)
        return Response(GameDetailSerializer(game).data, status=status.HTTP_201_CREATED)


class GameRetrieveUpdateDestroyAPIView(generics.RetrieveUpdateDestroyAPIView):
    """GET: public retrieve, PATCH: staff update, DELETE: staff soft delete."""

    permission_classes = [IsStaffOrReadOnly]

    def get_queryset(self):
        """Public reads only see active games; staff may edit retired ones."""
        if self.request.method == "GET":
            return Game.objects.active()
        return Game.objects.all()

    def get_serializer_class(self):
        if self.request.method in ["PATCH", "PUT"]:
            return GameWriteSerializer
        return GameDetailSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.method == "GET":
            context.update(_user_context(self.request.user))
        return context

    def update(self, request, *args, **kwargs):
        """Perform a partial update and return the full game payload."""
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return Response(GameDetailSerializer(instance).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        """Retire the game (is_active=False); orders keep referencing it."""
        instance = self.get_object()
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])
        logger.info("Game %s deactivated by %s", instance.id, request.user.username)
        return Response(status=status.HTTP_204_NO_CONTENT)
