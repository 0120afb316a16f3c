"""Reviews API permissions.

Authors edit their own reviews; deleting is also open to staff, who are the
moderators of the review queue.
"""

from common.api.permissions import IsResourceOwner, IsStoreStaff


class IsReviewOwner(IsResourceOwner):
    message = "Only the review owner may modify this review."


class IsReviewOwnerOrStaff(IsResourceOwner):
    message = "Only the review owner or a moderator may delete this review."
    allow_staff = True


class IsModerator(IsStoreStaff):
    message = "Only staff users may moderate reviews."
