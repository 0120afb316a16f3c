"""Project-wide DRF exception handler.

Wraps DRF's default handler so every error body carries a stable `code`
next to `detail`. Store errors render their own payload (including extras
such as `owned_games` or `missing`).
"""

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework.exceptions import ValidationError
from rest_framework.views import exception_handler

from orders.exceptions import StoreError


def _code_for(exc):
    if isinstance(exc, ValidationError):
        return "invalid"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, DjangoPermissionDenied):
        return "permission_denied"
    return getattr(exc, "default_code", "error")


def store_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, StoreError):
        response.data = exc.payload()
        return response

    if isinstance(response.data, dict) and "code" not in response.data:
        response.data["code"] = _code_for(exc)
    return response
