"""Reviews app models.

Defines the Review model and the per-user helpfulness vote. A user can leave
at most one review per game and vote at most once per review. Ratings are
constrained between 1 and 5; the game's rating aggregates are recomputed from
visible reviews whenever a review changes.
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import IntegrityError, models, transaction
from django.db.models import F


class Review(models.Model):
    """Represents a review written by a user for a catalog game."""

    game = models.ForeignKey(
        "games.Game",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews",
    )

    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    title = models.CharField(max_length=100, blank=True, default="")
    content = models.TextField(max_length=2000)
    recommended = models.BooleanField()
    playtime = models.PositiveIntegerField(default=0)
    is_verified_purchase = models.BooleanField(default=False)

    helpful = models.PositiveIntegerField(default=0)
    not_helpful = models.PositiveIntegerField(default=0)

    is_visible = models.BooleanField(default=True)
    is_reported = models.BooleanField(default=False)
    report_count = models.PositiveIntegerField(default=0)
    moderator_notes = models.TextField(blank=True, default="")

    is_edited = models.BooleanField(default=False)
    edited_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["game", "user"],
                name="unique_review_per_game_and_user",
            )
        ]
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["game", "-helpful"]),
            models.Index(fields=["user", "-created_at"]),
        ]

    def __str__(self) -> str:
        """Readable representation for admin and debugging."""
        return f"Review<{self.id} {self.user_id}->{self.game_id} {self.rating}>"

    def add_vote(self, user, vote) -> bool:
        """Record one helpfulness vote; returns False if `user` already voted."""
        try:
            with transaction.atomic():
                ReviewVote.objects.create(review=self, user=user, vote=vote)
        except IntegrityError:
            return False
        field = "helpful" if vote == ReviewVote.Vote.HELPFUL else "not_helpful"
        Review.objects.filter(pk=self.pk).update(**{field: F(field) + 1})
        self.refresh_from_db(fields=["helpful", "not_helpful"])
        return True


class ReviewVote(models.Model):
    """One user's helpful / not helpful vote on a review."""

    class Vote(models.TextChoices):
        HELPFUL = "helpful", "helpful"
        NOT_HELPFUL = "not_helpful", "not_helpful"

    review = models.ForeignKey(Review, on_delete=models.CASCADE, related_name="votes")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="review_votes",
    )
    vote = models.CharField(max_length=12, choices=Vote.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["review", "user"],
                name="unique_vote_per_review_and_user",
            )
        ]
