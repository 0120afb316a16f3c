"""Profiles API views.

Provides endpoints to retrieve and update the caller's own profile, to read
the owned-games library (and record playtime), and to read or toggle the
wishlist. Staff users additionally get a searchable user list and an
activation toggle. Authentication is required for all endpoints.
"""

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from games.models import Game
from ..models import LibraryEntry, Profile
from .permissions import IsAdminStaff, IsProfileOwner
from .serializers import (
    GameSummarySerializer,
    LibraryEntrySerializer,
    PlaytimeSerializer,
    ProfileDetailSerializer,
    ProfilePatchSerializer,
    UserAdminSerializer,
    UserStatusSerializer,
)

User = get_user_model()


class UsersPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


def _own_profile(user):
    """Return the caller's profile, lazily creating it on first access."""
    profile, _ = Profile.objects.select_related("user").get_or_create(user=user)
    return profile


class ProfileView(generics.RetrieveUpdateAPIView):
    """
    API endpoint for retrieving or partially updating the caller's profile.

    - GET `/api/profile/` returns the profile of the authenticated user.
    - PATCH `/api/profile/` updates only the fields provided.

    The owner is inferred from the authenticated request and never taken from
    the payload.
    """

    permission_classes = [IsAuthenticated, IsProfileOwner]
    http_method_names = ["get", "patch", "head", "options"]

    def get_serializer_class(self):
        """Use the patch serializer for PATCH; the detail serializer otherwise."""
        if self.request.method == "PATCH":
            return ProfilePatchSerializer
        return ProfileDetailSerializer

    def get_object(self):
        obj = _own_profile(self.request.user)
        self.check_object_permissions(self.request, obj)
        return obj

    def partial_update(self, request, *args, **kwargs):
        """Apply the patch and return the full profile representation."""
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(ProfileDetailSerializer(instance).data, status=status.HTTP_200_OK)


class LibraryListView(generics.ListAPIView):
    """GET `/api/profile/library/` lists the caller's owned games, newest purchase first."""

    serializer_class = LibraryEntrySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return (
            LibraryEntry.objects.filter(user=self.request.user)
            .select_related("game")
            .order_by("-purchase_date", "-id")
        )


class LibraryPlaytimeView(APIView):
    """PATCH `/api/profile/library/<game_id>/playtime/` -> {"playtime": <int>}."""

    permission_classes = [IsAuthenticated]

    def patch(self, request, game_id: int):
        entry = get_object_or_404(LibraryEntry, user=request.user, game_id=game_id)
        serializer = PlaytimeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry.playtime_hours = serializer.validated_data["playtime"]
        entry.save(update_fields=["playtime_hours"])
        return Response({"playtime": entry.playtime_hours}, status=status.HTTP_200_OK)


class WishlistListView(generics.ListAPIView):
    """GET `/api/profile/wishlist/` lists the caller's wishlisted active games."""

    serializer_class = GameSummarySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        profile = _own_profile(self.request.user)
        return profile.wishlist.filter(is_active=True).order_by("title", "id")


class WishlistToggleView(APIView):
    """POST `/api/profile/wishlist/<game_id>/` adds or removes a game."""

    permission_classes = [IsAuthenticated]

    def post(self, request, game_id: int):
        game = get_object_or_404(Game.objects.active(), id=game_id)
        profile = _own_profile(request.user)
        added = profile.toggle_wishlist(game)
        return Response(
            {
                "detail": "Game added to wishlist" if added else "Game removed from wishlist",
                "added": added,
                "wishlist_count": profile.wishlist.count(),
            },
            status=status.HTTP_200_OK,
        )


class UserAdminListView(generics.ListAPIView):
    """GET `/api/users/` (staff) with `search` and `is_active` filters."""

    serializer_class = UserAdminSerializer
    permission_classes = [IsAuthenticated, IsAdminStaff]
    pagination_class = UsersPagination

    def get_queryset(self):
        qs = User.objects.annotate(library_count=Count("library")).order_by("-date_joined", "-id")
        params = self.request.query_params

        search = params.get("search")
        if search:
            qs = qs.filter(
                Q(username__icontains=search)
                | Q(email__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
            )

        is_active = params.get("is_active")
        if is_active is not None:
            if is_active not in ("true", "false"):
                raise ValidationError({"is_active": "Must be 'true' or 'false'."})
            qs = qs.filter(is_active=is_active == "true")
        return qs


class UserStatusView(APIView):
    """PATCH `/api/users/<pk>/status/` (staff) -> activate or deactivate an account."""

    permission_classes = [IsAuthenticated, IsAdminStaff]

    def patch(self, request, pk: int):
        user = get_object_or_404(User, pk=pk)
        serializer = UserStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user.is_active = serializer.validated_data["is_active"]
        user.save(update_fields=["is_active"])
        data = UserAdminSerializer(
            User.objects.annotate(library_count=Count("library")).get(pk=user.pk)
        ).data
        return Response(data, status=status.HTTP_200_OK)
