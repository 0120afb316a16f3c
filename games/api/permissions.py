"""Games API permissions: the catalog is public to read, staff-only to change."""

from rest_framework.permissions import SAFE_METHODS

from common.api.permissions import IsStoreStaff


class IsStaffOrReadOnly(IsStoreStaff):
    message = "Only admin staff users may modify the catalog."

    def has_permission(self, request, view):
        return request.method in SAFE_METHODS or super().has_permission(request, view)
