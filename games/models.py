"""Games app models.

Defines the Game model, the purchasable catalog record. Orders snapshot the
commercial fields (title, price, discount) at checkout, so edits here never
change what a buyer was charged.
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Avg, Count, F, Q


class GameQuerySet(models.QuerySet):
    """Catalog reads used by the storefront and the fulfillment engine."""

    def active(self):
        return self.filter(is_active=True)

    def find_active_by_ids(self, ids):
        """Return active games whose id is in `ids` (one query, unordered)."""
        return list(self.active().filter(id__in=list(ids)))

    def increment_sales(self, game_id, amount):
        """Atomically add `amount` to the sales counter of one game."""
        return self.filter(id=game_id).update(total_sales=F("total_sales") + amount)


class Game(models.Model):
    """Represents a purchasable title in the catalog."""

    title = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    original_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    discount = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MaxValueValidator(100)]
    )
    description = models.TextField()
    short_description = models.CharField(max_length=200)
    developer = models.CharField(max_length=200)
    publisher = models.CharField(max_length=200)
    release_date = models.DateField()
    tags = models.JSONField(default=list, blank=True)
    categories = models.JSONField(default=list, blank=True)
    features = models.JSONField(default=list, blank=True)
    header_image = models.URLField()
    capsule_image = models.URLField()

    rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    review_count = models.PositiveIntegerField(default=0)
    total_sales = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = GameQuerySet.as_manager()

    class Meta:
        db_table = "games"
        ordering = ["-release_date", "-id"]
        indexes = [
            models.Index(fields=["price"]),
            models.Index(fields=["-rating"]),
            models.Index(fields=["-release_date"]),
        ]

    def __str__(self):
        return f"{self.title} (#{self.pk})"

    def recalculate_rating(self):
        """Refresh rating/review_count from the game's visible reviews."""
        agg = self.reviews.aggregate(
            avg=Avg("rating", filter=Q(is_visible=True)),
            count=Count("id", filter=Q(is_visible=True)),
        )
        self.rating = round(agg["avg"] or 0, 2)
        self.review_count = agg["count"] or 0
        self.save(update_fields=["rating", "review_count", "updated_at"])
