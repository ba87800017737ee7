"""Bridge between the JWT middleware and DRF's authentication hooks.

``JWTAuthMiddleware`` verifies the bearer token and attaches the user to the
Django request before any view runs. DRF still needs an authentication class
so that ``request.user`` is populated and so that rejected anonymous calls are
reported as 401 (with a ``WWW-Authenticate: Bearer`` challenge) rather than 403.
"""

from typing import Any, Optional, Tuple

from django.contrib.auth.models import AnonymousUser
from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Expose the user resolved by ``JWTAuthMiddleware`` to DRF.

    No credential parsing happens here; anonymous or missing users simply
    leave the request unauthenticated so public endpoints keep working.
    """

    keyword = "Bearer"

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        # DRF's Request wraps the original Django HttpRequest as ``._request``.
        django_request = getattr(request, "_request", None)
        if django_request is None:
            return None

        user = getattr(django_request, "user", None)
        if user is None or isinstance(user, AnonymousUser):
            return None

        if not getattr(user, "is_authenticated", False):
            return None

        return user, None

    def authenticate_header(self, request) -> str:
        return self.keyword


__all__ = ["MiddlewareUserAuthentication"]
