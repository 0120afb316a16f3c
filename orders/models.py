"""Orders app models.

Defines the Order ledger. An Order is created from a cart of catalog games and
snapshots the commercial fields (title, price, original price, discount) of
each line item so historical orders show what was actually charged, even if
the Game changes later. Status changes after creation are recorded in an
append-only OrderStatusEntry log. Orders are permanent financial records and
are never deleted.
"""

import random
import string
import time
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

CENT = Decimal("0.01")
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def round_money(value) -> Decimal:
    """Quantize to cents, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def generate_order_number() -> str:
    """STR-<last 8 digits of the ms timestamp>-<6 random base36 chars>."""
    stamp = str(int(time.time() * 1000))[-8:]
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=6))
    return f"STR-{stamp}-{suffix}"


class Order(models.Model):
    """Represents one purchase transaction of a user."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        PROCESSING = "processing", "processing"
        COMPLETED = "completed", "completed"
        FAILED = "failed", "failed"
        REFUNDED = "refunded", "refunded"
        CANCELLED = "cancelled", "cancelled"

    class PaymentMethod(models.TextChoices):
        CREDIT_CARD = "credit_card", "credit_card"
        PAYPAL = "paypal", "paypal"
        STORE_WALLET = "store_wallet", "store_wallet"
        GIFT_CARD = "gift_card", "gift_card"

    class Currency(models.TextChoices):
        USD = "USD", "USD"
        EUR = "EUR", "EUR"
        GBP = "GBP", "GBP"
        CAD = "CAD", "CAD"
        AUD = "AUD", "AUD"

    order_number = models.CharField(max_length=32, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    subtotal = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)]
    )
    tax = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)]
    )
    coupon_code = models.CharField(max_length=64, blank=True, default="")
    coupon_discount = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)]
    )
    total = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)]
    )
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.USD)

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )

    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    transaction_id = models.CharField(max_length=64, blank=True, default="")
    payment_processor = models.CharField(max_length=64, blank=True, default="")
    card_last4 = models.CharField(max_length=4, blank=True, default="")
    card_type = models.CharField(max_length=20, blank=True, default="")

    billing_first_name = models.CharField(max_length=100)
    billing_last_name = models.CharField(max_length=100)
    billing_email = models.EmailField()
    billing_address1 = models.CharField(max_length=255)
    billing_address2 = models.CharField(max_length=255, blank=True, default="")
    billing_city = models.CharField(max_length=100)
    billing_state = models.CharField(max_length=100, blank=True, default="")
    billing_postal_code = models.CharField(max_length=20, blank=True, default="")
    billing_country = models.CharField(max_length=100)

    refund_requested = models.BooleanField(default=False)
    refund_reason = models.TextField(blank=True, default="")
    refund_requested_at = models.DateTimeField(null=True, blank=True)
    refund_processed_at = models.DateTimeField(null=True, blank=True)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    notes = models.TextField(blank=True, default="")
    # Set when the library grant failed after a successful charge; needs operator follow-up.
    fulfillment_issue = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["user", "-created_at"]),
            models.Index(fields=["status"]),
            models.Index(fields=["-created_at"]),
        ]

    def __str__(self) -> str:
        """Readable representation for admin and debugging."""
        return f"Order<{self.order_number} {self.status}>"

    def save(self, *args, **kwargs):
        # the order number is assigned exactly once, on first save
        if not self.order_number:
            self.order_number = generate_order_number()
        super().save(*args, **kwargs)

    def calculate_totals(self, items=None, tax_rate=None):
        """
        Recompute subtotal, tax and total together from the line items.

        `items` defaults to the persisted line items; pass the unsaved list
        while building a new order. Tax is rounded to cents (half-up).
        """
        if items is None:
            items = list(self.items.all())
        if tax_rate is None:
            tax_rate = settings.STORE_TAX_RATE
        subtotal = sum((Decimal(i.price) * i.quantity for i in items), Decimal("0"))
        self.subtotal = round_money(subtotal)
        self.tax = round_money(self.subtotal * Decimal(tax_rate))
        self.total = round_money(self.subtotal + self.tax - Decimal(self.coupon_discount or 0))
        return self.total

    def can_refund(self, now=None) -> bool:
        """Completed, within the refund window, and never asked for a refund before."""
        now = now or timezone.now()
        window = timedelta(days=settings.STORE_REFUND_WINDOW_DAYS)
        return (
            self.status == self.Status.COMPLETED
            and not self.refund_requested
            and self.refund_requested_at is None
            and self.created_at is not None
            and now - self.created_at <= window
        )

    @property
    def age_in_days(self) -> int:
        if self.created_at is None:
            return 0
        return (timezone.now() - self.created_at).days

    @property
    def formatted_total(self) -> str:
        return f"${self.total:.2f}"


class OrderItem(models.Model):
    """One purchased game in an order, with its price snapshot."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    game = models.ForeignKey(
        "games.Game",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
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
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    class Meta:
        ordering = ("id",)

    def __str__(self) -> str:
        return f"OrderItem<{self.order_id} {self.title} x{self.quantity}>"

    @property
    def line_total(self) -> Decimal:
        return round_money(Decimal(self.price) * self.quantity)


class OrderStatusEntry(models.Model):
    """Append-only audit record of one status transition."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_history")
    status = models.CharField(max_length=20, choices=Order.Status.choices)
    timestamp = models.DateTimeField(default=timezone.now)
    note = models.TextField(blank=True, default="")
    # True for administrative moves outside the regular transition table.
    is_override = models.BooleanField(default=False)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ("timestamp", "id")
        verbose_name_plural = "order status entries"

    def __str__(self) -> str:
        return f"OrderStatusEntry<{self.order_id} {self.status}>"
