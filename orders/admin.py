from django.contrib import admin
from django.utils.html import format_html

from .models import Order, OrderItem, OrderStatusEntry


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("game", "title", "price", "original_price", "discount", "quantity")

    def has_add_permission(self, request, obj=None):
        return False


class OrderStatusEntryInline(admin.TabularInline):
    model = OrderStatusEntry
    extra = 0
    can_delete = False
    readonly_fields = ("status", "timestamp", "note", "is_override", "changed_by")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Order ledger in the admin:
    - List: number, status badge, buyer, total, refund flag, created
    - Filter: status, payment method, refund flag, created (date hierarchy)
    - Search: order number, buyer username, billing email
    - Read-only: totals, line items and history; status changes go through the API
    """
    list_display = (
        "order_number",
        "status_badge",
        "buyer_username",
        "total",
        "currency",
        "payment_method",
        "refund_requested",
        "created_at",
    )
    list_select_related = ("user",)
    list_filter = ("status", "payment_method", "refund_requested", "created_at")
    date_hierarchy = "created_at"
    ordering = ("-created_at", "-id")
    search_fields = ("order_number", "user__username", "billing_email")
    inlines = (OrderItemInline, OrderStatusEntryInline)

    readonly_fields = (
        "order_number",
        "user",
        "status",
        "subtotal",
        "tax",
        "coupon_code",
        "coupon_discount",
        "total",
        "currency",
        "payment_method",
        "transaction_id",
        "payment_processor",
        "card_last4",
        "card_type",
        "refund_requested",
        "refund_reason",
        "refund_requested_at",
        "refund_processed_at",
        "refund_amount",
        "fulfillment_issue",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):
        return False

    def status_badge(self, obj):
        color = {
            "pending": "#9ca3af",
            "processing": "#0ea5e9",
            "completed": "#22c55e",
            "failed": "#ef4444",
            "refunded": "#a855f7",
            "cancelled": "#f59e0b",
        }.get(obj.status, "#9ca3af")
        return format_html(
            '<span style="display:inline-block;padding:2px 8px;border-radius:999px;'
            'font-size:12px;font-weight:600;color:#fff;background:{};">{}</span>',
            color,
            obj.status,
        )
    status_badge.short_description = "status"
    status_badge.admin_order_field = "status"

    def buyer_username(self, obj):
        return obj.user.username if obj.user_id else ""
    buyer_username.short_description = "buyer"
