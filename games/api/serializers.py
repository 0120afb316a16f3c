"""Games API serializers.

Provide serializers for listing the catalog (with per-user library/wishlist
flags), retrieving one game with its most recent reviews, and creating or
partially updating a game as staff.
"""

from decimal import Decimal

from rest_framework import serializers

from games.models import Game
from reviews.api.serializers import ReviewOutputSerializer


# --------------------------- helpers (pure functions) ---------------------------

def _ensure_str_list(value, field):
    if not isinstance(value, list):
        raise serializers.ValidationError({field: "Must be an array of strings."})
    if any(not isinstance(x, str) for x in value):
        raise serializers.ValidationError({field: "All entries must be strings."})


def _user_flags(context, game_id):
    owned = context.get("owned_ids")
    wished = context.get("wishlist_ids")
    if owned is None or wished is None:
        return None
    return {"is_in_library": game_id in owned, "is_in_wishlist": game_id in wished}


# --------------------------------- serializers ---------------------------------

class GameListSerializer(serializers.ModelSerializer):
    """Catalog card representation; user flags only for authenticated callers."""

    class Meta:
        model = Game
        fields = [
            "id",
            "title",
            "price",
            "original_price",
            "discount",
            "short_description",
            "developer",
            "publisher",
            "release_date",
            "tags",
            "categories",
            "capsule_image",
            "rating",
            "review_count",
            "total_sales",
            "is_featured",
        ]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        flags = _user_flags(self.context, instance.id)
        if flags is not None:
            data.update(flags)
        return data


class GameDetailSerializer(serializers.ModelSerializer):
    """Full game representation including up to ten recent visible reviews."""

    recent_reviews = serializers.SerializerMethodField()

    class Meta:
        model = Game
        fields = [
            "id",
            "title",
            "price",
            "original_price",
            "discount",
            "description",
            "short_description",
            "developer",
            "publisher",
            "release_date",
            "tags",
            "categories",
            "features",
            "header_image",
            "capsule_image",
            "rating",
            "review_count",
            "total_sales",
            "is_featured",
            "created_at",
            "updated_at",
            "recent_reviews",
        ]

    def get_recent_reviews(self, obj):
        qs = (
            obj.reviews.filter(is_visible=True)
            .select_related("user")
            .order_by("-helpful", "-created_at")[:10]
        )
        return ReviewOutputSerializer(qs, many=True).data

    def to_representation(self, instance):
        data = super().to_representation(instance)
        flags = _user_flags(self.context, instance.id)
        if flags is not None:
            data.update(flags)
        return data


class GameWriteSerializer(serializers.ModelSerializer):
    """Staff serializer for creating and patching catalog entries."""

    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    original_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True
    )
    discount = serializers.IntegerField(min_value=0, max_value=100, required=False, allow_null=True)
    short_description = serializers.CharField(max_length=200)

    class Meta:
        model = Game
        fields = [
            "id",
            "title",
            "price",
            "original_price",
            "discount",
            "description",
            "short_description",
            "developer",
            "publisher",
            "release_date",
            "tags",
            "categories",
            "features",
            "header_image",
            "capsule_image",
            "is_active",
            "is_featured",
        ]
        read_only_fields = ["id"]

    def validate(self, attrs):
        """Tags, categories and features must be lists of strings."""
        for field in ("tags", "categories", "features"):
            if field in attrs:
                _ensure_str_list(attrs[field], field)
        return attrs
