"""Middleware to authenticate requests via JWT and Redis blocklist."""

import logging

from django.contrib.auth.models import AnonymousUser
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from authentication.repositories import UserRepository
from authentication.services import BlocklistUnavailable, TokenService
from core.errors import UNAUTHORIZED_MESSAGE
from core.response import error_response

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(MiddlewareMixin):
    """Verify the caller's access token and attach ``request.user``.

    Requests without a bearer token are anonymous readers. A token that is
    present but invalid, expired, revoked, or bound to an inactive user is
    rejected with 401 even on public endpoints.
    """

    users = UserRepository()

    def process_request(self, request):  # type: ignore[override]
        """Authenticate request using Bearer access token if present."""
        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth_header or not auth_header.startswith("Bearer "):
            request.user = AnonymousUser()
            return None

        token = auth_header.split(" ", 1)[1]

        try:
            claims = TokenService.verify_caller_token(token)
        except AuthenticationFailed as exc:
            logger.debug("Rejected bearer token: %s", exc.detail)
            return _unauthorized()
        except BlocklistUnavailable:
            return _service_unavailable()

        user = self.users.find_by_id(claims["id"])
        if user is None or not user.is_active:
            return _unauthorized()

        request.user = user
        return None


def _unauthorized() -> JsonResponse:
    return error_response(UNAUTHORIZED_MESSAGE, status.HTTP_401_UNAUTHORIZED)


def _service_unavailable() -> JsonResponse:
    return error_response("Authentication service unavailable (blocklist).", status.HTTP_503_SERVICE_UNAVAILABLE)


__all__ = ["JWTAuthMiddleware"]
