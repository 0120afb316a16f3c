"""Reviews API serializers.

Provide serializers for creating a review, returning review data, partially
updating the editable fields, voting, reporting and moderation. Enforces one
review per (game, user) and marks verified purchases from the library.
"""

from rest_framework import serializers

from profiles.models import LibraryEntry
from reviews.models import Review, ReviewVote


class ReviewCreateSerializer(serializers.Serializer):
    """Input serializer for creating a new review.

    The view resolves `game_id` to an active game and passes it as
    context["game"].
    """

    game_id = serializers.IntegerField(min_value=1)
    rating = serializers.IntegerField(min_value=1, max_value=5)
    title = serializers.CharField(max_length=100, allow_blank=True, required=False, default="")
    content = serializers.CharField(min_length=10, max_length=2000)
    recommended = serializers.BooleanField()
    playtime = serializers.IntegerField(min_value=0, required=False, default=0)

    def validate(self, attrs):
        """Ensure the user hasn't reviewed this game before."""
        user = self.context["request"].user
        if Review.objects.filter(game_id=attrs["game_id"], user=user).exists():
            raise serializers.ValidationError(
                {"non_field_errors": ["You have already reviewed this game."]}
            )
        return attrs

    def create(self, validated_data):
        game = self.context["game"]
        user = self.context["request"].user
        return Review.objects.create(
            game=game,
            user=user,
            rating=validated_data["rating"],
            title=validated_data.get("title", "") or "",
            content=validated_data["content"],
            recommended=validated_data["recommended"],
            playtime=validated_data.get("playtime", 0),
            is_verified_purchase=LibraryEntry.objects.owns(user, game.id),
        )


class ReviewOutputSerializer(serializers.ModelSerializer):
    """Read serializer for returning a review."""

    username = serializers.CharField(source="user.username", read_only=True)
    user_vote = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            "id",
            "game",
            "user",
            "username",
            "rating",
            "title",
            "content",
            "recommended",
            "playtime",
            "is_verified_purchase",
            "helpful",
            "not_helpful",
            "user_vote",
            "is_edited",
            "edited_at",
            "created_at",
            "updated_at",
        ]

    def get_user_vote(self, obj):
        votes = self.context.get("user_votes")
        if votes is None:
            return None
        return votes.get(obj.id)


class ReviewPatchSerializer(serializers.ModelSerializer):
    """Patch serializer for the author-editable fields."""

    content = serializers.CharField(min_length=10, max_length=2000, required=False)

    class Meta:
        model = Review
        fields = ["rating", "title", "content", "recommended", "playtime"]


class ReviewVoteSerializer(serializers.Serializer):
    vote = serializers.ChoiceField(choices=ReviewVote.Vote.choices)


class ReviewReportSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000)


class ReviewModerateSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["approve", "hide"])
    moderator_notes = serializers.CharField(allow_blank=True, required=False, default="")


class ReportedReviewSerializer(ReviewOutputSerializer):
    """Moderation queue row: the review plus its report bookkeeping."""

    game_title = serializers.CharField(source="game.title", read_only=True)

    class Meta(ReviewOutputSerializer.Meta):
        fields = ReviewOutputSerializer.Meta.fields + [
            "game_title",
            "is_visible",
            "is_reported",
            "report_count",
            "moderator_notes",
        ]
