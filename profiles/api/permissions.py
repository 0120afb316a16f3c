"""Profile and account permissions: anyone signed in may read a profile, only its owner may change it."""

from common.api.permissions import IsResourceOwner, IsStoreStaff


class IsProfileOwner(IsResourceOwner):
    message = "You may only modify your own profile."
    allow_safe_methods = True


class IsAdminStaff(IsStoreStaff):
    message = "Only admin staff users may manage accounts."
