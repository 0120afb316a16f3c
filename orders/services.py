"""Order lifecycle operations.

- create_order: the fulfillment engine (resolve cart, ownership check, price
  snapshot, totals, simulated payment, persistence, entitlement grant).
- grant_entitlements: library append-if-absent plus atomic sales counters.
- change_status: the status state machine with its append-only history.
- request_refund / resolve_refund: the refund workflow.
- summary_stats: admin dashboard numbers.

Every function raises the errors from orders.exceptions (or DRF's
ValidationError) before mutating anything, except for the entitlement grant,
which runs after the charge and reports failures on the order instead.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Count, Sum
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from games.models import Game
from profiles.models import LibraryEntry
from .exceptions import AlreadyOwned, InvalidReference, NotEligible, Unauthorized
from .models import Order, OrderItem, OrderStatusEntry
from .payments import get_payment_processor

logger = logging.getLogger(__name__)

S = Order.Status

# Regular moves; anything else is an administrative override and needs a note.
ALLOWED_TRANSITIONS = {
    S.PENDING: {S.PROCESSING, S.COMPLETED, S.FAILED, S.CANCELLED},
    S.PROCESSING: {S.COMPLETED, S.FAILED, S.CANCELLED},
    S.COMPLETED: {S.REFUNDED},
    S.FAILED: set(),
    S.REFUNDED: set(),
    S.CANCELLED: set(),
}

BILLING_REQUIRED = ("first_name", "last_name", "email", "address1", "city", "country")
BILLING_OPTIONAL = ("address2", "state", "postal_code")


# ----------------------------- helpers (module-level) -----------------------------

def _validate_items(items):
    if not items:
        raise ValidationError({"items": "Order must contain at least one item."})
    game_ids = []
    for item in items:
        try:
            quantity = int(item.get("quantity", 1))
            game_id = int(item["game_id"])
        except (KeyError, TypeError, ValueError):
            raise ValidationError({"items": "Each item needs a valid game_id and quantity."})
        if quantity < 1:
            raise ValidationError({"items": "Quantity must be at least 1."})
        game_ids.append(game_id)
    return game_ids


def _validate_billing(billing_address):
    billing_address = billing_address or {}
    missing = [key for key in BILLING_REQUIRED if not str(billing_address.get(key) or "").strip()]
    if missing:
        raise ValidationError(
            {"billing_address": f"Missing required fields: {', '.join(missing)}."}
        )
    return {
        f"billing_{key}": str(billing_address.get(key) or "").strip()
        for key in BILLING_REQUIRED + BILLING_OPTIONAL
    }


def _coupon_amount(value):
    try:
        amount = Decimal(value or 0)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError({"coupon_discount": "Must be a number."})
    if amount < 0:
        raise ValidationError({"coupon_discount": "Must be >= 0."})
    return amount


def _snapshot_line(game, quantity):
    """Copy the commercial fields of the live catalog record into a line item."""
    return OrderItem(
        game=game,
        title=game.title,
        price=game.price,
        original_price=game.original_price,
        discount=game.discount,
        quantity=quantity,
    )


# ------------------------------- fulfillment engine -------------------------------

def create_order(
    buyer,
    items,
    payment_method,
    billing_address,
    coupon_code="",
    coupon_discount=0,
):
    """
    Turn a cart into a persisted, priced order and charge it.

    `items` is a list of {"game_id", "quantity"} dicts. Returns the order in
    status `completed` (entitlements granted) or `failed` (payment declined).
    Raises ValidationError, InvalidReference or AlreadyOwned without writing
    anything.
    """
    game_ids = _validate_items(items)
    if payment_method not in Order.PaymentMethod.values:
        raise ValidationError({"payment_method": "Invalid payment method."})
    billing = _validate_billing(billing_address)
    discount = _coupon_amount(coupon_discount)

    # 1. resolve all references in one read
    duplicates = sorted({gid for gid in game_ids if game_ids.count(gid) > 1})
    if duplicates:
        raise InvalidReference("Each game may appear only once per order.", duplicates=duplicates)
    games = {game.id: game for game in Game.objects.find_active_by_ids(game_ids)}
    if len(games) != len(game_ids):
        raise InvalidReference(missing=[gid for gid in game_ids if gid not in games])

    # 2. ownership
    owned = LibraryEntry.objects.owned_game_ids(buyer, game_ids)
    if owned:
        raise AlreadyOwned([gid for gid in game_ids if gid in owned])

    # 3. snapshot + 4. totals
    order = Order(
        user=buyer,
        payment_method=payment_method,
        coupon_code=(coupon_code or "").strip(),
        coupon_discount=discount,
        currency=settings.STORE_CURRENCY,
        **billing,
    )
    lines = [
        _snapshot_line(games[int(item["game_id"])], int(item.get("quantity", 1)))
        for item in items
    ]
    order.calculate_totals(items=lines)
    if order.total < 0:
        raise ValidationError({"coupon_discount": "Coupon discount exceeds the order amount."})

    # 5. simulated payment
    result = get_payment_processor().charge(order)
    if result.approved:
        order.status = S.COMPLETED
        order.transaction_id = result.transaction_id
        order.payment_processor = result.processor
        order.card_last4 = result.card_last4
        order.card_type = result.card_type
    else:
        order.status = S.FAILED

    # 6. persist order and line items together
    with transaction.atomic():
        order.save()
        for line in lines:
            line.order = order
        OrderItem.objects.bulk_create(lines)

    if order.status == S.FAILED:
        logger.info(
            "Order %s for user %s failed: %s", order.order_number, buyer.id, result.message
        )
        return order

    logger.info(
        "Order %s completed for user %s (total %s %s)",
        order.order_number,
        buyer.id,
        order.total,
        order.currency,
    )
    # 7. entitlements
    grant_entitlements(order, lines)
    return order


def grant_entitlements(order, items=None):
    """
    Add every line item to the buyer's library and bump the sales counters.

    Library appends are idempotent, so re-running (or racing) never duplicates
    an entry; the sales counter moves by the purchased quantity every time.
    Failures are logged and recorded on `order.fulfillment_issue`; returns
    True on success.
    """
    if items is None:
        items = list(order.items.select_related("game"))
    try:
        with transaction.atomic():
            for item in items:
                LibraryEntry.objects.append(
                    order.user,
                    item.game,
                    purchase_date=order.created_at,
                    price=item.price,
                )
                Game.objects.increment_sales(item.game_id, item.quantity)
    except DatabaseError as exc:
        logger.exception("Entitlement grant failed for order %s", order.order_number)
        order.fulfillment_issue = f"Entitlement grant failed: {exc}"
        order.save(update_fields=["fulfillment_issue", "updated_at"])
        return False

    if order.fulfillment_issue:
        order.fulfillment_issue = ""
        order.save(update_fields=["fulfillment_issue", "updated_at"])
    return True


# ------------------------------- status state machine -------------------------------

def change_status(order, new_status, note="", actor=None):
    """
    Move an order to `new_status` and append exactly one history entry.

    Moves outside ALLOWED_TRANSITIONS are administrative overrides and need a
    note. Entering `refunded` with a pending request stamps the refund; without
    one it is allowed but flagged as an override. Entering `completed` grants
    the library entries.
    """
    if new_status not in S.values:
        raise ValidationError({"status": f"Invalid status '{new_status}'."})
    note = (note or "").strip()
    previous = order.status
    is_override = new_status not in ALLOWED_TRANSITIONS.get(previous, set())
    if is_override and not note:
        raise ValidationError(
            {"note": f"A note is required to move an order from '{previous}' to '{new_status}'."}
        )

    now = timezone.now()
    with transaction.atomic():
        if new_status == S.REFUNDED:
            if order.refund_requested and order.refund_processed_at is None:
                order.refund_processed_at = now
                order.refund_amount = order.total
            else:
                is_override = True
                logger.warning(
                    "Order %s moved to refunded without a pending refund request (actor=%s)",
                    order.order_number,
                    getattr(actor, "id", None),
                )
        order.status = new_status
        order.save()
        OrderStatusEntry.objects.create(
            order=order,
            status=new_status,
            timestamp=now,
            note=note,
            is_override=is_override,
            changed_by=actor,
        )

    log = logger.warning if is_override else logger.info
    log("Order %s status %s -> %s", order.order_number, previous, new_status)

    if new_status == S.COMPLETED and previous != S.COMPLETED:
        grant_entitlements(order)
    return order


# ----------------------------------- refund workflow -----------------------------------

def request_refund(order, requester, reason, now=None):
    """Record a refund request by the order's owner; status is left unchanged."""
    if order.user_id != getattr(requester, "id", None):
        raise Unauthorized("Only the purchaser may request a refund for this order.")
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError({"reason": "Refund reason is required."})
    now = now or timezone.now()
    if not order.can_refund(now):
        raise NotEligible()

    # conditional update: the flag flips at most once per order
    updated = Order.objects.filter(
        pk=order.pk, refund_requested=False, refund_requested_at__isnull=True
    ).update(
        refund_requested=True,
        refund_reason=reason,
        refund_requested_at=now,
        updated_at=now,
    )
    if not updated:
        raise NotEligible()
    order.refresh_from_db()
    logger.info("Refund requested for order %s: %s", order.order_number, reason)
    return order


def resolve_refund(order, approve, note="", actor=None):
    """Approve (-> refunded) or deny a pending refund request.

    A denial clears `refund_requested` but keeps `refund_requested_at`, so the
    order cannot be submitted for a refund again.
    """
    if not order.refund_requested or order.status != S.COMPLETED:
        raise NotEligible("There is no pending refund request for this order.")

    if approve:
        return change_status(order, S.REFUNDED, note=note or "Refund approved.", actor=actor)

    note = (note or "").strip()
    entry = f"Refund denied: {note}" if note else "Refund denied."
    order.refund_requested = False
    order.notes = f"{order.notes}\n{entry}".strip()
    order.save(update_fields=["refund_requested", "notes", "updated_at"])
    logger.info("Refund denied for order %s", order.order_number)
    return order


# ----------------------------------- statistics -----------------------------------

def summary_stats(recent=5):
    """Totals for the admin dashboard; `recent_orders` is a queryset slice."""
    counts = {value: 0 for value in S.values}
    for row in Order.objects.order_by().values("status").annotate(n=Count("id")):
        counts[row["status"]] = row["n"]
    revenue = (
        Order.objects.filter(status=S.COMPLETED).aggregate(total=Sum("total"))["total"]
        or Decimal("0.00")
    )
    return {
        "total_orders": sum(counts.values()),
        "total_revenue": revenue,
        "counts_by_status": counts,
        "pending_orders": counts[S.PENDING],
        "completed_orders": counts[S.COMPLETED],
        "refunded_orders": counts[S.REFUNDED],
        "recent_orders": Order.objects.select_related("user").order_by("-created_at", "-id")[:recent],
    }
