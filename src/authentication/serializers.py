"""Serializers for authentication flows (register, login, refresh, profile)."""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from access_control.roles import Role

User = get_user_model()


class RegisterSerializer(serializers.Serializer):
    """Request shape for registration; business rules live in AccountService."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    name = serializers.CharField(max_length=150)
    role = serializers.ChoiceField(choices=Role.choices, required=False, allow_blank=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class RefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class UserDetailSerializer(serializers.ModelSerializer):
    """Read-only user profile payload for responses."""

    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        """Expose basic identity fields and role."""
        model = User
        fields = ["id", "email", "name", "role", "createdAt"]
        read_only_fields = fields


def auth_payload(result) -> dict:
    """Response body shared by register, login, and refresh."""
    return {
        "user": UserDetailSerializer(result.user).data,
        "access": result.access,
        "refresh": result.refresh,
    }


__all__ = [
    "LoginSerializer",
    "RefreshSerializer",
    "RegisterSerializer",
    "UserDetailSerializer",
    "auth_payload",
]
