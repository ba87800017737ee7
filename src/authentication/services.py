"""Token and account services: JWT issuance/verification, blocklist, register/login."""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Tuple

import jwt
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed, ValidationError

from access_control.roles import Role
from core.errors import Conflict, Forbidden, Unauthenticated
from core.redis_client import get_redis_client

from .managers import UserManager
from .repositories import DuplicateEmail, UserRepository

logger = logging.getLogger(__name__)


class BlocklistUnavailable(Exception):
    """Raised when Redis blocklist cannot be checked (fail-closed)."""


class TokenService:
    """Handle JWT issuance, decoding, and blocklist operations."""

    ALGORITHM = "HS256"
    BLOCKLIST_PREFIX = "blocklist:token:"

    @classmethod
    def generate_tokens(cls, user) -> Tuple[str, str]:
        """Generate signed access and refresh tokens for the given user."""

        now = datetime.now(timezone.utc)
        access_payload = cls._build_payload(user, "access", now, settings.ACCESS_TOKEN_LIFETIME)
        refresh_payload = cls._build_payload(user, "refresh", now, settings.REFRESH_TOKEN_LIFETIME)

        access_token = jwt.encode(access_payload, settings.JWT_SECRET, algorithm=cls.ALGORITHM)
        refresh_token = jwt.encode(refresh_payload, settings.JWT_SECRET, algorithm=cls.ALGORITHM)
        return access_token, refresh_token

    @classmethod
    def _build_payload(cls, user, token_type: str, issued_at: datetime, ttl: timedelta) -> dict[str, Any]:
        exp = issued_at + ttl
        return {
            "sub": str(user.id),
            "email": user.email,
            "role": str(user.role),
            "jti": str(uuid.uuid4()),
            "exp": int(exp.timestamp()),
            "iat": int(issued_at.timestamp()),
            "type": token_type,
        }

    @classmethod
    def decode_token(cls, token: str, expected_type: str | None = None) -> dict[str, Any]:
        """Decode and validate a JWT; optionally enforce token type."""

        try:
            payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[cls.ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise Unauthenticated("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise Unauthenticated("Invalid token") from exc

        if expected_type and payload.get("type") != expected_type:
            raise Unauthenticated("Invalid token type")

        return payload

    @classmethod
    def verify_caller_token(cls, token: str) -> dict[str, Any]:
        """Resolve an access token to the caller's claims ``{id, email, role}``.

        Raises ``Unauthenticated`` for malformed, expired, or revoked tokens and
        ``BlocklistUnavailable`` when revocation cannot be checked.
        """

        payload = cls.decode_token(token, expected_type="access")
        jti = payload.get("jti")
        if not jti or not payload.get("sub"):
            raise Unauthenticated("Invalid token")
        if cls.is_token_blocked(jti):
            raise Unauthenticated("Token has been revoked")
        return {"id": payload["sub"], "email": payload.get("email"), "role": payload.get("role")}

    @classmethod
    def block_token(cls, jti: str, exp: int) -> None:
        """Add token jti to blocklist until its expiration timestamp."""

        client = get_redis_client()
        ttl_seconds = max(1, exp - int(time.time()))
        try:
            client.setex(f"{cls.BLOCKLIST_PREFIX}{jti}", ttl_seconds, "1")
        except Exception as exc:  # pragma: no cover - network failure
            raise BlocklistUnavailable("Redis unavailable while blocklisting") from exc

    @classmethod
    def is_token_blocked(cls, jti: str) -> bool:
        """Check if a token jti is present in the blocklist."""

        client = get_redis_client()
        try:
            return client.get(f"{cls.BLOCKLIST_PREFIX}{jti}") is not None
        except Exception as exc:  # pragma: no cover - network failure
            raise BlocklistUnavailable("Redis unavailable while checking blocklist") from exc


@dataclass
class AuthResult:
    user: Any
    access: str
    refresh: str


class AccountService:
    """Registration and login on top of the user repository."""

    INVALID_CREDENTIALS = "Invalid email or password"

    def __init__(self, users: Optional[UserRepository] = None):
        self.users = users or UserRepository()

    def register(self, email: str, password: str, name: str, role: Any = None) -> AuthResult:
        """Create an account and sign the caller in.

        The role defaults to PUBLISHER. Self-registering as ADMIN is only
        possible when ``ALLOW_ADMIN_SELF_REGISTRATION`` is enabled.
        """
        email = (email or "").strip()
        name = (name or "").strip()
        if not email or not password or not name:
            raise ValidationError("Email, password and name are required")
        min_length = settings.PASSWORD_MIN_LENGTH
        if len(password) < min_length:
            raise ValidationError(f"Password must be at least {min_length} characters long")

        if role in (None, ""):
            chosen = Role.PUBLISHER
        else:
            chosen = Role.parse(role)
            if chosen is None:
                raise ValidationError(f"Unknown role: {role}")
        if chosen == Role.ADMIN and not settings.ALLOW_ADMIN_SELF_REGISTRATION:
            raise Forbidden("Administrator accounts cannot be self-registered")

        if self.users.find_by_email(email) is not None:
            raise Conflict("Email already registered")
        try:
            user = self.users.create(email=email, password=password, name=name, role=chosen)
        except DuplicateEmail:
            raise Conflict("Email already registered") from None

        logger.info("Registered user %s with role %s", user.id, user.role)
        access, refresh = TokenService.generate_tokens(user)
        return AuthResult(user=user, access=access, refresh=refresh)

    def login(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.users.find_by_email(email.strip())
        if user is None or not UserManager.verify_password(user, password):
            logger.warning("Failed login attempt for %s", email)
            raise Unauthenticated(self.INVALID_CREDENTIALS)
        if not user.is_active:
            logger.warning("Login attempt for inactive user %s", user.id)
            raise Unauthenticated("User is inactive")

        access, refresh = TokenService.generate_tokens(user)
        return AuthResult(user=user, access=access, refresh=refresh)

    def refresh(self, refresh_token: str) -> AuthResult:
        """Exchange a valid refresh token for a fresh token pair."""
        if not refresh_token:
            raise AuthenticationFailed("Refresh token required")

        payload = TokenService.decode_token(refresh_token, expected_type="refresh")
        jti = payload.get("jti")
        if jti and TokenService.is_token_blocked(jti):
            raise Unauthenticated("Token has been revoked")
        user = self.users.find_by_id(payload.get("sub"))
        if user is None or not user.is_active:
            raise Unauthenticated("User not found or inactive")

        access, new_refresh = TokenService.generate_tokens(user)
        return AuthResult(user=user, access=access, refresh=new_refresh)


__all__ = ["AccountService", "AuthResult", "BlocklistUnavailable", "TokenService"]
