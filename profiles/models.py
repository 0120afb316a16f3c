"""Profiles app models.

Defines the Profile model that extends the base user with storefront metadata
and a wishlist, and the LibraryEntry model that records which games an
account owns. String fields default to empty strings to avoid nulls in API
responses.
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.utils import timezone


class Profile(models.Model):
    """
    Profile for a single user.

    A profile is created at most once per user (OneToOne relationship).
    Administrators are plain users with `is_staff` set.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    avatar = models.URLField(blank=True, default="")
    bio = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    website = models.URLField(blank=True, default="")
    country = models.CharField(max_length=50, blank=True, default="")
    wishlist = models.ManyToManyField(
        "games.Game", blank=True, related_name="wishlisted_by"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        """Readable representation for admin and debugging."""
        return f"Profile<{self.user_id}:{self.user.username}>"

    def toggle_wishlist(self, game):
        """Add the game if absent, remove it otherwise; return True when added."""
        if self.wishlist.filter(id=game.id).exists():
            self.wishlist.remove(game)
            return False
        self.wishlist.add(game)
        return True


class LibraryEntryQuerySet(models.QuerySet):
    """Ownership reads and the idempotent library append."""

    def owns(self, user, game_id):
        return self.filter(user=user, game_id=game_id).exists()

    def owned_game_ids(self, user, game_ids):
        """Subset of `game_ids` the user already owns."""
        return set(
            self.filter(user=user, game_id__in=list(game_ids)).values_list("game_id", flat=True)
        )

    def append(self, user, game, purchase_date=None, price=None):
        """
        Add `game` to the user's library unless it is already there.

        Returns (entry, created). A concurrent insert of the same pair loses on
        the unique constraint and falls back to the existing row.
        """
        defaults = {
            "purchase_date": purchase_date or timezone.now(),
            "price_paid": price,
        }
        try:
            with transaction.atomic():
                return self.get_or_create(user=user, game=game, defaults=defaults)
        except IntegrityError:
            return self.get(user=user, game=game), False


class LibraryEntry(models.Model):
    """One owned game in an account's library."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="library",
    )
    game = models.ForeignKey(
        "games.Game",
        on_delete=models.PROTECT,
        related_name="library_entries",
    )
    purchase_date = models.DateTimeField(default=timezone.now)
    price_paid = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    playtime_hours = models.PositiveIntegerField(default=0)

    objects = LibraryEntryQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "game"],
                name="unique_library_entry_per_user_and_game",
            )
        ]
        ordering = ("-purchase_date", "-id")

    def __str__(self) -> str:
        return f"LibraryEntry<{self.user_id}:{self.game_id}>"
