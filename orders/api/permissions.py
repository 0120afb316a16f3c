from common.api.permissions import IsResourceOwner, IsStoreStaff


class IsOrderOwner(IsResourceOwner):
    message = "Only the purchaser of this order may access it."


class IsAdminStaff(IsStoreStaff):
    message = "Only admin staff users may manage orders."
