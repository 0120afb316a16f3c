from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.db.models import Count

User = get_user_model()

# replace the stock registration with the storefront account view
if admin.site.is_registered(User):
    admin.site.unregister(User)


@admin.register(User)
class StoreAccountAdmin(DjangoUserAdmin):
    """
    Accounts with their library size; staff accounts are the store administrators.
    """
    list_display = (
        "id",
        "username",
        "email",
        "full_name",
        "library_size",
        "is_staff",
        "is_active",
        "date_joined",
        "last_login",
    )
    ordering = ("-date_joined", "-id")
    search_fields = ("username", "email", "first_name", "last_name")
    list_filter = ("is_staff", "is_active", "date_joined")
    actions = ("deactivate_accounts",)

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_library_size=Count("library"))

    def full_name(self, obj):
        return obj.get_full_name()
    full_name.short_description = "name"

    def library_size(self, obj):
        return obj._library_size
    library_size.short_description = "library"
    library_size.admin_order_field = "_library_size"

    @admin.action(description="Deactivate selected accounts")
    def deactivate_accounts(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} account(s) deactivated.")
