"""Orders domain errors.

Each error is a DRF APIException with a stable `default_code`, so views can
let them propagate and the project exception handler renders them as
`{"detail": ..., "code": ...}` plus any extra payload.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class StoreError(APIException):
    """Base class for storefront business errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The request could not be processed."
    default_code = "store_error"

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail=detail, code=code)
        self.extra = extra

    def payload(self) -> dict:
        return {"detail": str(self.detail), "code": self.default_code, **self.extra}


class InvalidReference(StoreError):
    default_detail = "One or more games not found or inactive."
    default_code = "invalid_reference"


class AlreadyOwned(StoreError):
    default_detail = "You already own some of these games."
    default_code = "already_owned"

    def __init__(self, owned_games, detail=None):
        super().__init__(detail=detail, owned_games=list(owned_games))

    @property
    def owned_games(self):
        return self.extra["owned_games"]


class NotEligible(StoreError):
    default_detail = "This order is not eligible for refund."
    default_code = "not_eligible"


class Unauthorized(StoreError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to act on this order."
    default_code = "permission_denied"


class InternalError(StoreError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal store error."
    default_code = "internal_error"
