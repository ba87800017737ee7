"""Post persistence behind a small interface the workflow service depends on.

``PostRepository`` is the Django ORM implementation. Tests substitute an
in-memory fake exposing the same methods.
"""

from typing import Any, Iterable, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q

from .models import Post


class SlugTaken(Exception):
    """The unique constraint on ``Post.slug`` rejected a write."""

    def __init__(self, slug: str):
        super().__init__(slug)
        self.slug = slug


def _violates_slug_constraint(exc: IntegrityError) -> bool:
    """True when the failed write hit the unique constraint on ``slug``.

    PostgreSQL reports the constraint name on the driver error; SQLite only
    names the column in the message (``UNIQUE constraint failed: posts_post.slug``).
    """
    diag = getattr(exc.__cause__, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    if constraint:
        return "slug" in constraint
    message = str(exc).lower()
    return "slug" in message and "unique" in message


class PostRepository:
    def _queryset(self):
        return Post.objects.select_related("author", "approved_by")

    def find_by_id(self, post_id: Any) -> Optional[Post]:
        try:
            return self._queryset().get(pk=post_id)
        except (Post.DoesNotExist, DjangoValidationError, ValueError):
            return None

    def find_by_slug(self, slug: str, status: Optional[str] = None) -> Optional[Post]:
        queryset = self._queryset().filter(slug=slug)
        if status is not None:
            queryset = queryset.filter(status=status)
        return queryset.first()

    def slug_exists(self, slug: str, exclude_id: Any = None) -> bool:
        queryset = Post.objects.filter(slug=slug)
        if exclude_id is not None:
            queryset = queryset.exclude(pk=exclude_id)
        return queryset.exists()

    def find_posts(
        self,
        predicate: Q,
        offset: int,
        limit: int,
        order_by: Iterable[str] = ("-created_at",),
    ) -> tuple[list[Post], int]:
        """Return one page of posts matching ``predicate`` and the total count."""
        queryset = self._queryset().filter(predicate).order_by(*order_by)
        total = queryset.count()
        return list(queryset[offset:offset + limit]), total

    def create(self, **fields: Any) -> Post:
        try:
            with transaction.atomic():
                post = Post.objects.create(**fields)
        except IntegrityError as exc:
            slug = fields.get("slug")
            if slug and _violates_slug_constraint(exc) and self.slug_exists(slug):
                raise SlugTaken(slug) from exc
            raise
        return self.find_by_id(post.pk) or post

    def update(self, post_id: Any, changes: dict[str, Any], expected_status: Optional[str] = None) -> Optional[Post]:
        """Apply ``changes`` in one conditional UPDATE.

        When ``expected_status`` is given the row is only written if it still
        has that status. Returns the refreshed post, or None when no row
        matched (deleted, or status changed by a concurrent request).
        """
        queryset = Post.objects.filter(pk=post_id)
        if expected_status is not None:
            queryset = queryset.filter(status=expected_status)
        try:
            with transaction.atomic():
                updated = queryset.update(**changes)
        except IntegrityError as exc:
            slug = changes.get("slug")
            if slug and _violates_slug_constraint(exc) and self.slug_exists(slug, exclude_id=post_id):
                raise SlugTaken(slug) from exc
            raise
        if not updated:
            return None
        return self.find_by_id(post_id)

    def delete(self, post_id: Any) -> bool:
        deleted, _ = Post.objects.filter(pk=post_id).delete()
        return deleted > 0


__all__ = ["PostRepository", "SlugTaken"]
