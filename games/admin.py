from django.contrib import admin
from .models import Game


@admin.register(Game)
class GameAdmin(admin.ModelAdmin):
    """
    Catalog management:
    - list with price, rating, sales and activity flags
    - search over title, developer, publisher
    - rating/review_count/total_sales are maintained by the store, read-only here
    """
    list_display = (
        "id",
        "title",
        "price_display",
        "discount",
        "rating",
        "review_count",
        "total_sales",
        "is_active",
        "is_featured",
        "release_date",
    )
    list_filter = ("is_active", "is_featured", "release_date")
    list_editable = ("is_active", "is_featured")
    search_fields = ("title", "developer", "publisher")
    date_hierarchy = "release_date"
    ordering = ("-release_date", "-id")
    readonly_fields = ("rating", "review_count", "total_sales", "created_at", "updated_at")

    def price_display(self, obj):
        return f"{obj.price:.2f}"
    price_display.short_description = "price"
    price_display.admin_order_field = "price"
