"""Query predicates deciding which posts a listing may return.

Two list-visibility modes exist because earlier revisions of the product
disagreed on what publishers see in listings:

``strict``
    ADMIN sees everything, PUBLISHER sees only their own posts, everyone
    else sees PUBLISHED posts only.
``own_or_published``
    ADMIN sees everything, any other signed-in user sees PUBLISHED posts
    plus their own posts in any status.

Anonymous callers are limited to PUBLISHED posts in both modes. The mode is
picked with ``settings.POSTS_LIST_VISIBILITY``.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from django.conf import settings
from django.db.models import Q

from posts.state_machine import PostStatus

from .policy import Caller
from .roles import Role


class ListScope(enum.Enum):
    ALL = "all"
    OWN = "own"
    PUBLISHED = "published"
    OWN_OR_PUBLISHED = "own_or_published"


DEFAULT_MODE = "strict"

# Scope for signed-in callers, per mode and role. ``None`` is the fallback
# for roles that have no row of their own.
VISIBILITY_MODES: dict[str, dict[Optional[Role], ListScope]] = {
    "strict": {
        Role.ADMIN: ListScope.ALL,
        Role.PUBLISHER: ListScope.OWN,
        None: ListScope.PUBLISHED,
    },
    "own_or_published": {
        Role.ADMIN: ListScope.ALL,
        Role.PUBLISHER: ListScope.OWN_OR_PUBLISHED,
        None: ListScope.OWN_OR_PUBLISHED,
    },
}


def current_mode() -> str:
    return getattr(settings, "POSTS_LIST_VISIBILITY", DEFAULT_MODE) or DEFAULT_MODE


def list_scope(caller: Caller, mode: Optional[str] = None) -> ListScope:
    if caller.is_anonymous:
        return ListScope.PUBLISHED
    table = VISIBILITY_MODES[mode or current_mode()]
    return table.get(caller.role, table[None])


def scope_filter(scope: ListScope, caller: Caller) -> Q:
    published = Q(status=PostStatus.PUBLISHED)
    if scope is ListScope.ALL:
        return Q()
    if scope is ListScope.OWN:
        return Q(author_id=caller.id)
    if scope is ListScope.OWN_OR_PUBLISHED:
        return published | Q(author_id=caller.id)
    return published


def build_list_filter(caller: Caller, mode: Optional[str] = None) -> Q:
    """Visibility predicate for ``caller`` under the configured mode."""
    return scope_filter(list_scope(caller, mode), caller)


def search_filter(search: Optional[str]) -> Q:
    """Case-insensitive substring match over title or content."""
    term = (search or "").strip()
    if not term:
        return Q()
    return Q(title__icontains=term) | Q(content__icontains=term)


def compose_filters(
    visibility: Q,
    status: Optional[str] = None,
    author_id: Any = None,
    search: Optional[str] = None,
) -> Q:
    """AND caller-supplied filters onto a visibility predicate.

    Filters can only narrow the result: a status the caller may not see
    yields an empty listing rather than widening the visibility predicate.
    """
    predicate = visibility
    if status:
        predicate &= Q(status=status)
    if author_id:
        predicate &= Q(author_id=author_id)
    return predicate & search_filter(search)


def public_filter(search: Optional[str] = None) -> Q:
    """Predicate for the unauthenticated surface: PUBLISHED only, optional search."""
    return Q(status=PostStatus.PUBLISHED) & search_filter(search)


__all__ = [
    "DEFAULT_MODE",
    "ListScope",
    "VISIBILITY_MODES",
    "build_list_filter",
    "compose_filters",
    "current_mode",
    "list_scope",
    "public_filter",
    "scope_filter",
    "search_filter",
]
