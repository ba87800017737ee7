"""Error kinds raised by the service layer.

They subclass DRF's ``APIException`` family so views can let them propagate
and ``custom_exception_handler`` renders them inside the standard envelope.
Storage failures are not wrapped: ``django.db.DatabaseError`` reaches the
handler as-is and is reported as 503.
"""

from rest_framework import exceptions, status
from rest_framework.exceptions import ValidationError

UNAUTHORIZED_MESSAGE = (
    "Authentication credentials were not provided or are invalid, token revoked, or user is inactive."
)


class Unauthenticated(exceptions.AuthenticationFailed):
    """Missing, invalid, expired, or revoked credentials."""

    default_detail = "Authentication credentials were not provided or are invalid."
    default_code = "unauthenticated"


class Forbidden(exceptions.PermissionDenied):
    """An authorization predicate evaluated to False for the caller."""

    default_detail = "You do not have permission to perform this action on this resource."
    default_code = "forbidden"


class NotFound(exceptions.NotFound):
    default_detail = "Resource not found."
    default_code = "not_found"


class Conflict(exceptions.APIException):
    """Uniqueness or concurrent-modification conflict."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state of the resource."
    default_code = "conflict"


class InvalidTransition(exceptions.APIException):
    """A workflow action was attempted from a status that does not allow it."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This status transition is not allowed."
    default_code = "invalid_transition"


__all__ = [
    "UNAUTHORIZED_MESSAGE",
    "Conflict",
    "Forbidden",
    "InvalidTransition",
    "NotFound",
    "Unauthenticated",
    "ValidationError",
]
