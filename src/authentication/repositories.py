"""User persistence lookups used by the account service and middleware."""

from typing import Any, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction


class DuplicateEmail(Exception):
    """Raised when the unique constraint on ``User.email`` rejects an insert."""


class UserRepository:
    """Thin wrapper over the User table."""

    @property
    def model(self):
        return get_user_model()

    def find_by_email(self, email: str) -> Optional[Any]:
        return self.model.objects.filter(email__iexact=email).first()

    def find_by_id(self, user_id: Any) -> Optional[Any]:
        if not user_id:
            return None
        try:
            return self.model.objects.get(id=user_id)
        except (self.model.DoesNotExist, DjangoValidationError, ValueError):
            # Malformed UUIDs behave like unknown ids.
            return None

    def create(self, email: str, password: str, **fields: Any) -> Any:
        try:
            with transaction.atomic():
                return self.model.objects.create_user(email=email, password=password, **fields)
        except IntegrityError as exc:
            raise DuplicateEmail(email) from exc


__all__ = ["DuplicateEmail", "UserRepository"]
