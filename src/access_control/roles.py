"""Closed set of user roles."""

from django.db import models


class Role(models.TextChoices):
    """Roles stored on ``User.role``; the values are part of the wire contract."""

    ADMIN = "ADMIN", "Admin"
    PUBLISHER = "PUBLISHER", "Publisher"

    @classmethod
    def parse(cls, value) -> "Role | None":
        """Return the matching Role, or None for unknown/empty values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


__all__ = ["Role"]
