"""Post status lifecycle.

    create(draft) ─▶ DRAFT ──submit──▶ PENDING ──approve──▶ PUBLISHED
    create ─────────────────────────▶    │
                                         └──reject───▶ REJECTED ──submit──▶ PENDING

Edits never change the status and deletion is allowed from any status, so
neither appears in the table. Every transition rewrites the moderation
fields together with the status so that ``published_at`` is set exactly
when the post is PUBLISHED and ``approved_by`` exactly when it is PUBLISHED
or REJECTED.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from django.db import models

from core.errors import InvalidTransition


class PostStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    PENDING = "PENDING", "Pending review"
    PUBLISHED = "PUBLISHED", "Published"
    REJECTED = "REJECTED", "Rejected"


class PostAction(str, Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"


AUTHOR_EDITABLE_STATUSES = frozenset({PostStatus.DRAFT, PostStatus.REJECTED})
MODERATED_STATUSES = frozenset({PostStatus.PUBLISHED, PostStatus.REJECTED})

TRANSITIONS: dict[tuple[PostStatus, PostAction], PostStatus] = {
    (PostStatus.DRAFT, PostAction.SUBMIT): PostStatus.PENDING,
    (PostStatus.REJECTED, PostAction.SUBMIT): PostStatus.PENDING,
    (PostStatus.PENDING, PostAction.APPROVE): PostStatus.PUBLISHED,
    (PostStatus.PENDING, PostAction.REJECT): PostStatus.REJECTED,
}

_FAILURE_MESSAGES = {
    PostAction.SUBMIT: "Only draft or rejected posts can be submitted for review.",
    PostAction.APPROVE: "Only pending posts can be approved.",
    PostAction.REJECT: "Only pending posts can be rejected.",
}


def initial_status(draft: bool = False) -> PostStatus:
    """Status of a newly created post: submission implies a review request."""
    return PostStatus.DRAFT if draft else PostStatus.PENDING


def can_transition(current: str, action: PostAction) -> bool:
    return current in PostStatus.values and (PostStatus(current), action) in TRANSITIONS


def next_status(current: str, action: PostAction) -> PostStatus:
    """Return the target status or raise InvalidTransition."""
    try:
        return TRANSITIONS[(PostStatus(current), action)]
    except (KeyError, ValueError):
        raise transition_error(action, current) from None


def transition_error(action: PostAction, current: str | None = None) -> InvalidTransition:
    message = _FAILURE_MESSAGES[action]
    if current:
        message = f"{message} Current status: {current}."
    return InvalidTransition(message)


def transition_changes(current: str, action: PostAction, actor_id: Any, now: datetime) -> dict[str, Any]:
    """Field updates that move a post from ``current`` through ``action``.

    The returned mapping always carries ``status``, ``approved_by_id`` and
    ``published_at`` so the moderation invariants hold after the write.
    """
    target = next_status(current, action)
    changes: dict[str, Any] = {"status": target, "approved_by_id": None, "published_at": None}
    if target in MODERATED_STATUSES:
        changes["approved_by_id"] = actor_id
    if target == PostStatus.PUBLISHED:
        changes["published_at"] = now
    return changes


def invariants_hold(post: Any) -> bool:
    """Check the moderation-field invariants on a post-like object."""
    published = post.status == PostStatus.PUBLISHED
    moderated = post.status in MODERATED_STATUSES
    return (post.published_at is not None) == published and (post.approved_by_id is not None) == moderated


__all__ = [
    "AUTHOR_EDITABLE_STATUSES",
    "MODERATED_STATUSES",
    "PostAction",
    "PostStatus",
    "TRANSITIONS",
    "can_transition",
    "initial_status",
    "invariants_hold",
    "next_status",
    "transition_changes",
    "transition_error",
]
