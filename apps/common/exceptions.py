# apps/common/exceptions.py
import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class Conflict(exceptions.APIException):
    """A uniqueness invariant would be violated (duplicate application etc)."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


class InvalidTransition(exceptions.APIException):
    """The requested status change is not in the entity's transition table."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid status transition."
    default_code = "invalid_transition"


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return "Invalid input."
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid input."
    return str(detail)


def _first_code(codes, default):
    while isinstance(codes, (list, dict)):
        if not codes:
            return default
        codes = next(iter(codes.values())) if isinstance(codes, dict) else codes[0]
    return codes


def api_exception_handler(exc, context):
    """
    Shape every error as {"success": False, "message": ..., "code": ...}.
    Unexpected exceptions become a 500; their detail is only exposed in DEBUG.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound(*exc.args)
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied(*exc.args)

    response = exception_handler(exc, context)

    if response is not None:
        body = {
            "success": False,
            "message": _first_message(exc.detail),
            "code": _first_code(exc.get_codes(), exc.default_code),
        }
        if isinstance(exc, exceptions.ValidationError):
            body["errors"] = response.data
        response.data = body
        return response

    view = context.get("view")
    logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "unknown view")
    set_rollback()

    body = {
        "success": False,
        "message": "Internal server error",
        "code": "server_error",
    }
    if settings.DEBUG:
        body["detail"] = f"{exc.__class__.__name__}: {exc}"
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
