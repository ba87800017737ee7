"""Authentication endpoints: register, login, refresh, logout, and profile."""

from typing import Any

from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.response import BaseAPIView, api_response
from .serializers import (
    LoginSerializer,
    RefreshSerializer,
    RegisterSerializer,
    UserDetailSerializer,
    auth_payload,
)
from .services import AccountService, TokenService


class RegisterView(BaseAPIView):
    permission_classes: list[Any] = [AllowAny]
    service_class = AccountService

    def post(self, request):
        """Register a new account and return its profile with a token pair."""
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.service_class().register(**serializer.validated_data)
        return api_response(auth_payload(result), status=status.HTTP_201_CREATED)


class LoginView(BaseAPIView):
    permission_classes: list[Any] = [AllowAny]
    service_class = AccountService

    def post(self, request):
        """Authenticate and issue access + refresh tokens."""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.service_class().login(**serializer.validated_data)
        return api_response(auth_payload(result))


class RefreshView(BaseAPIView):
    permission_classes: list[Any] = [AllowAny]
    service_class = AccountService

    def post(self, request):
        """Exchange a valid refresh token for new access/refresh tokens."""
        serializer = RefreshSerializer(data=request.data)
        if not serializer.is_valid():
            raise AuthenticationFailed("Refresh token required")
        result = self.service_class().refresh(serializer.validated_data["refresh"])
        return api_response(auth_payload(result))


class LogoutView(APIView):
    """Invalidate the current access token by blocklisting its jti."""

    permission_classes: list[Any] = [IsAuthenticated]

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Blocklist the bearer access token and return 204 No Content."""
        token = _get_bearer_token(request)
        if not token:
            raise AuthenticationFailed("Missing token.")

        payload = TokenService.decode_token(token, expected_type="access")
        TokenService.block_token(payload["jti"], payload["exp"])
        # 204 responses must not include a body.
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(BaseAPIView):
    permission_classes: list[Any] = [IsAuthenticated]

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the current user's profile."""
        return api_response(UserDetailSerializer(request.user).data)


def _get_bearer_token(request) -> str | None:
    """Extract the Bearer token from Authorization header if present."""
    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None
