"""Custom exception handling to enforce the API error envelope."""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from authentication.services import BlocklistUnavailable
from core.errors import UNAUTHORIZED_MESSAGE, Forbidden
from core.response import envelope

logger = logging.getLogger(__name__)

FORBIDDEN_MESSAGE = "You do not have permission to perform this action on this resource."


def _normalize_errors(payload: Any) -> list[Any]:
    """Convert DRF's response.data into a list for the envelope."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and "detail" in payload:
        # Common DRF pattern: {"detail": "..."}
        return [payload["detail"]]
    return [payload]


def _unavailable(message: str) -> Response:
    return Response(envelope(errors=[message]), status=status.HTTP_503_SERVICE_UNAVAILABLE)


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap DRF errors in `{ "data": null, "errors": [...] }` shape.

    - Blocklist and storage outages become 503 (fail closed).
    - AuthenticationFailed/NotAuthenticated always become 401 with a generic
      message, unless DEBUG_AUTH_ERRORS is enabled.
    - Permission failures raised by DRF permission classes get a generic
      message; ``core.errors.Forbidden`` raised by the workflow keeps its reason.
    """

    if isinstance(exc, BlocklistUnavailable):
        logger.error("Token blocklist unavailable: %s", exc)
        return _unavailable("Authentication service unavailable (blocklist).")

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("Storage failure in %s", type(view).__name__ if view else "request")
        return _unavailable("Service temporarily unavailable.")

    response = drf_exception_handler(exc, context)
    if response is None:
        return response

    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code < 400:
        return response

    if response.status_code == status.HTTP_401_UNAUTHORIZED:
        if getattr(settings, "DEBUG_AUTH_ERRORS", False):
            # Surface the underlying message (e.g. "Token has expired").
            errors = _normalize_errors(response.data)
        else:
            errors = [UNAUTHORIZED_MESSAGE]
    elif response.status_code == status.HTTP_403_FORBIDDEN and not isinstance(exc, Forbidden):
        errors = [FORBIDDEN_MESSAGE]
    else:
        if response.status_code >= 500:
            logger.error("Unhandled API error %s: %s", response.status_code, exc)
        errors = _normalize_errors(response.data)

    response.data = envelope(errors=errors)
    return response
