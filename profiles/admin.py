from django.contrib import admin
from .models import LibraryEntry, Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """
    Profile list with its own id plus the related user id.
    """
    list_display = ("id", "user_id_display", "user", "country", "wishlist_count", "created_at")
    list_select_related = ("user",)
    search_fields = ("user__username", "user__email", "country")
    list_filter = ("country", "created_at")
    ordering = ("-created_at", "-id")
    autocomplete_fields = ("user",)
    filter_horizontal = ("wishlist",)
    readonly_fields = ("created_at",)

    def user_id_display(self, obj):
        return obj.user_id
    user_id_display.short_description = "user id"
    user_id_display.admin_order_field = "user__id"

    def wishlist_count(self, obj):
        return obj.wishlist.count()
    wishlist_count.short_description = "wishlist"


@admin.register(LibraryEntry)
class LibraryEntryAdmin(admin.ModelAdmin):
    """
    Library entries across all users (entitlements granted by fulfilled orders).
    """
    list_display = ("id", "user", "game", "purchase_date", "price_paid", "playtime_hours")
    list_select_related = ("user", "game")
    search_fields = ("user__username", "game__title")
    date_hierarchy = "purchase_date"
    ordering = ("-purchase_date", "-id")
    readonly_fields = ("purchase_date",)
