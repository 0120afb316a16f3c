"""Shared permission building blocks.

Store resources are owned through a `user` foreign key; administrative
endpoints are open to staff accounts only. App-level permission modules
subclass these with their own messages.
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission


def _is_signed_in(request):
    user = request.user
    return bool(user and user.is_authenticated)


class IsStoreStaff(BasePermission):
    message = "Only store staff may perform this action."

    def has_permission(self, request, view):
        return _is_signed_in(request) and request.user.is_staff


class IsResourceOwner(BasePermission):
    """Object-level check against `obj.<owner_field>_id`."""

    message = "You do not own this resource."
    owner_field = "user"
    allow_safe_methods = False
    allow_staff = False

    def has_object_permission(self, request, view, obj):
        if self.allow_safe_methods and request.method in SAFE_METHODS:
            return True
        if not _is_signed_in(request):
            return False
        if self.allow_staff and request.user.is_staff:
            return True
        return getattr(obj, f"{self.owner_field}_id") == request.user.id
