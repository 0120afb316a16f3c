"""Profiles API serializers.

Contains serializers for:
- reading and partially updating the caller's own profile,
- listing library entries and wishlist games,
- the staff-only user listing and activation toggle.

Serializers ensure certain string fields never return `null` in responses, but
empty strings instead.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from games.models import Game
from ..models import LibraryEntry, Profile

User = get_user_model()


# ------------------------------ helpers ------------------------------

def _apply_user_updates(user, data: dict):
    for attr, val in data.items():
        setattr(user, attr, val if val is not None else "")
    if data:
        user.save(update_fields=list(data.keys()))


def _coalesce_fields(data: dict, keys: set):
    for k in keys:
        if data.get(k) is None:
            data[k] = ""


# ------------------------------ serializers ------------------------------

class ProfileDetailSerializer(serializers.ModelSerializer):
    """Read-only profile serializer (coalesces selected string fields to '')."""

    username = serializers.CharField(source="user.username", read_only=True)
    first_name = serializers.CharField(source="user.first_name", read_only=True)
    last_name = serializers.CharField(source="user.last_name", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    is_staff = serializers.BooleanField(source="user.is_staff", read_only=True)
    library_count = serializers.SerializerMethodField()
    wishlist_count = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = [
            "user",
            "username",
            "first_name",
            "last_name",
            "email",
            "is_staff",
            "avatar",
            "bio",
            "location",
            "website",
            "country",
            "library_count",
            "wishlist_count",
            "created_at",
        ]
        read_only_fields = fields

    _no_null = {"first_name", "last_name", "avatar", "bio", "location", "website", "country"}

    def get_library_count(self, obj):
        return LibraryEntry.objects.filter(user_id=obj.user_id).count()

    def get_wishlist_count(self, obj):
        return obj.wishlist.count()

    def to_representation(self, instance: Profile):
        data = super().to_representation(instance)
        _coalesce_fields(data, self._no_null)
        return data


class ProfilePatchSerializer(serializers.ModelSerializer):
    """Partial update of the caller's own profile and basic user fields."""

    first_name = serializers.CharField(
        source="user.first_name", required=False, allow_blank=True, allow_null=True, max_length=50
    )
    last_name = serializers.CharField(
        source="user.last_name", required=False, allow_blank=True, allow_null=True, max_length=50
    )
    email = serializers.EmailField(source="user.email", required=False)

    class Meta:
        model = Profile
        fields = [
            "first_name",
            "last_name",
            "email",
            "avatar",
            "bio",
            "location",
            "website",
            "country",
        ]
        extra_kwargs = {
            "avatar": {"required": False, "allow_blank": True},
            "bio": {"required": False, "allow_blank": True},
            "location": {"required": False, "allow_blank": True},
            "website": {"required": False, "allow_blank": True},
            "country": {"required": False, "allow_blank": True},
        }

    def validate_email(self, value):
        """Email must stay unique across accounts."""
        user = self.instance.user if self.instance else None
        clash = User.objects.filter(email__iexact=value)
        if user is not None:
            clash = clash.exclude(id=user.id)
        if clash.exists():
            raise serializers.ValidationError("Email already in use.")
        return value

    def update(self, instance: Profile, validated_data):
        """Handle nested user fields and normalize None -> ''."""
        _apply_user_updates(instance.user, validated_data.pop("user", {}))
        for attr, val in validated_data.items():
            setattr(instance, attr, val if val is not None else "")
        instance.save()
        return instance


class GameSummarySerializer(serializers.ModelSerializer):
    """Compact game representation used inside library and wishlist lists."""

    class Meta:
        model = Game
        fields = [
            "id",
            "title",
            "capsule_image",
            "price",
            "original_price",
            "discount",
            "developer",
            "tags",
            "rating",
            "review_count",
        ]


class LibraryEntrySerializer(serializers.ModelSerializer):
    """One owned game with purchase metadata."""

    game = GameSummarySerializer(read_only=True)

    class Meta:
        model = LibraryEntry
        fields = ["id", "game", "purchase_date", "price_paid", "playtime_hours"]
        read_only_fields = fields


class PlaytimeSerializer(serializers.Serializer):
    """Input serializer for updating playtime on an owned game."""

    playtime = serializers.IntegerField(min_value=0)


class UserAdminSerializer(serializers.ModelSerializer):
    """Staff-facing user representation."""

    library_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "is_active",
            "is_staff",
            "date_joined",
            "last_login",
            "library_count",
        ]
        read_only_fields = fields


class UserStatusSerializer(serializers.Serializer):
    """Input serializer for activating/deactivating an account."""

    is_active = serializers.BooleanField(required=True)
