"""Authorization policy for posts.

Each role maps to a :class:`RolePolicy` row of own/all flags, the same shape
as a per-role access rule. Callers without a known role (anonymous visitors,
or accounts whose stored role is not recognised) fall back to
``READER_POLICY``. The predicates below are pure: they never touch the
database, and the workflow service turns a ``False`` into ``Forbidden``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Optional

from posts.state_machine import AUTHOR_EDITABLE_STATUSES, PostStatus

from .roles import Role


@dataclass(frozen=True)
class Caller:
    """Who is making the request: an authenticated user or an anonymous reader."""

    id: Optional[uuid.UUID] = None
    role: Optional[Role] = None

    @property
    def is_anonymous(self) -> bool:
        return self.id is None

    @classmethod
    def from_user(cls, user: Any) -> "Caller":
        """Build a Caller from ``request.user`` (a User or AnonymousUser)."""
        if user is None or not getattr(user, "is_authenticated", False):
            return ANONYMOUS
        return cls(id=user.id, role=Role.parse(getattr(user, "role", None)))


ANONYMOUS = Caller()


@dataclass(frozen=True)
class RolePolicy:
    """Permission flags for one role.

    ``*_all`` flags grant the action on every post; without them the action
    is limited to the caller's own posts (and, for updates, to posts in an
    author-editable status).
    """

    can_read_all: bool = False
    can_create: bool = False
    can_update_all: bool = False
    can_delete_all: bool = False
    can_moderate: bool = False


ROLE_POLICIES: dict[Role, RolePolicy] = {
    Role.ADMIN: RolePolicy(
        can_read_all=True,
        can_create=True,
        can_update_all=True,
        can_delete_all=True,
        can_moderate=True,
    ),
    Role.PUBLISHER: RolePolicy(can_create=True),
}

READER_POLICY = RolePolicy()


def policy_for(caller: Caller) -> RolePolicy:
    if caller.role is None:
        return READER_POLICY
    return ROLE_POLICIES.get(caller.role, READER_POLICY)


def is_owner(caller: Caller, post: Any) -> bool:
    return not caller.is_anonymous and caller.id == post.author_id


def can_view(caller: Caller, post: Any) -> bool:
    return post.status == PostStatus.PUBLISHED or policy_for(caller).can_read_all or is_owner(caller, post)


def can_edit(caller: Caller, post: Any) -> bool:
    if policy_for(caller).can_update_all:
        return True
    return is_owner(caller, post) and post.status in AUTHOR_EDITABLE_STATUSES


def can_delete(caller: Caller, post: Any) -> bool:
    return policy_for(caller).can_delete_all or is_owner(caller, post)


def can_create(caller: Caller) -> bool:
    return not caller.is_anonymous and policy_for(caller).can_create


def can_moderate(caller: Caller) -> bool:
    return not caller.is_anonymous and policy_for(caller).can_moderate


def can_submit(caller: Caller, post: Any) -> bool:
    """Submitting for review is allowed to the author and to moderators."""
    return is_owner(caller, post) or can_moderate(caller)


__all__ = [
    "ANONYMOUS",
    "Caller",
    "READER_POLICY",
    "ROLE_POLICIES",
    "RolePolicy",
    "can_create",
    "can_delete",
    "can_edit",
    "can_moderate",
    "can_submit",
    "can_view",
    "is_owner",
    "policy_for",
]
