"""Orders API serializers.

Input serializers for checkout, refund requests, refund resolution and admin
status updates; output serializers for the full order representation (line
items, billing address, payment record, refund record and status history)
and for compact list rows.
"""

from decimal import Decimal

from rest_framework import serializers

from orders.models import Order, OrderItem, OrderStatusEntry


# ------------------------------------ input ------------------------------------

class CartItemSerializer(serializers.Serializer):
    game_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, default=1)


class BillingAddressSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    address1 = serializers.CharField(max_length=255)
    address2 = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    postal_code = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    country = serializers.CharField(max_length=100)


class OrderCreateSerializer(serializers.Serializer):
    """Input serializer for checkout.

    Validates the shape of the cart and billing address; catalog resolution,
    ownership and pricing happen in orders.services.create_order.
    """

    items = CartItemSerializer(many=True, allow_empty=False)
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices)
    billing_address = BillingAddressSerializer()
    coupon_code = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    coupon_discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False, default=Decimal("0")
    )


class RefundRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=2000)


class RefundResolveSerializer(serializers.Serializer):
    approve = serializers.BooleanField()
    note = serializers.CharField(max_length=2000, required=False, allow_blank=True, default="")


class OrderStatusUpdateSerializer(serializers.Serializer):
    """Admin status update; only `status` and an optional `note` are accepted."""

    status = serializers.ChoiceField(choices=Order.Status.choices)
    note = serializers.CharField(max_length=2000, required=False, allow_blank=True, default="")


# ------------------------------------ output ------------------------------------

class OrderItemSerializer(serializers.ModelSerializer):
    game_id = serializers.IntegerField(read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ["game_id", "title", "price", "original_price", "discount", "quantity", "line_total"]


class OrderStatusEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusEntry
        fields = ["status", "timestamp", "note", "is_override"]


class OrderOutputSerializer(serializers.ModelSerializer):
    """Read serializer for returning a complete order representation."""

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusEntrySerializer(many=True, read_only=True)
    billing_address = serializers.SerializerMethodField()
    payment_details = serializers.SerializerMethodField()
    refund = serializers.SerializerMethodField()
    formatted_total = serializers.CharField(read_only=True)
    age_in_days = serializers.IntegerField(read_only=True)
    can_refund = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user",
            "items",
            "subtotal",
            "tax",
            "coupon_code",
            "coupon_discount",
            "total",
            "formatted_total",
            "currency",
            "status",
            "status_history",
            "payment_method",
            "payment_details",
            "billing_address",
            "refund",
            "can_refund",
            "notes",
            "fulfillment_issue",
            "age_in_days",
            "created_at",
            "updated_at",
        ]

    def get_billing_address(self, obj):
        return {
            "first_name": obj.billing_first_name,
            "last_name": obj.billing_last_name,
            "email": obj.billing_email,
            "address1": obj.billing_address1,
            "address2": obj.billing_address2,
            "city": obj.billing_city,
            "state": obj.billing_state,
            "postal_code": obj.billing_postal_code,
            "country": obj.billing_country,
        }

    def get_payment_details(self, obj):
        return {
            "transaction_id": obj.transaction_id,
            "payment_processor": obj.payment_processor,
            "last4": obj.card_last4,
            "card_type": obj.card_type,
        }

    def get_refund(self, obj):
        return {
            "requested": obj.refund_requested,
            "reason": obj.refund_reason,
            "requested_at": obj.refund_requested_at,
            "processed_at": obj.refund_processed_at,
            "amount": obj.refund_amount,
        }

    def get_can_refund(self, obj):
        return obj.can_refund()


class OrderListSerializer(serializers.ModelSerializer):
    """Compact list row for order history and admin listings."""

    username = serializers.CharField(source="user.username", read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user",
            "username",
            "item_count",
            "total",
            "currency",
            "status",
            "payment_method",
            "billing_email",
            "refund_requested",
            "created_at",
        ]

    def get_item_count(self, obj):
        return len(obj.items.all())
