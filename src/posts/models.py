"""Post model for the publishing workflow."""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q

from .state_machine import PostStatus

SLUG_MAX_LENGTH = 255


class Post(models.Model):
    """Blog post owned by its author and moderated by an ADMIN.

    ``approved_by`` points at the moderator who published or rejected the post;
    it is a back-reference, not ownership. The check constraints mirror the
    state machine's invariants at the storage layer.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    content = models.TextField()
    excerpt = models.TextField(blank=True, default="")
    cover_image = models.URLField(max_length=500, blank=True, default="")
    slug = models.SlugField(max_length=SLUG_MAX_LENGTH, unique=True)
    status = models.CharField(max_length=16, choices=PostStatus.choices, default=PostStatus.PENDING)
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="posts")
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="moderated_posts",
    )
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-created_at"], name="posts_status_created_idx"),
            models.Index(fields=["status", "-published_at"], name="posts_status_published_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status=PostStatus.PUBLISHED, published_at__isnull=False)
                    | (~Q(status=PostStatus.PUBLISHED) & Q(published_at__isnull=True))
                ),
                name="posts_published_at_iff_published",
            ),
            models.CheckConstraint(
                condition=(
                    Q(status__in=[PostStatus.PUBLISHED, PostStatus.REJECTED], approved_by__isnull=False)
                    | (
                        Q(status__in=[PostStatus.DRAFT, PostStatus.PENDING])
                        & Q(approved_by__isnull=True)
                    )
                ),
                name="posts_approved_by_iff_moderated",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title


__all__ = ["Post", "SLUG_MAX_LENGTH"]
