"""Post workflow service: creation, editing, moderation, and listing.

The service owns every authorization decision for posts. It takes a
:class:`~access_control.policy.Caller`, checks the policy, applies the state
machine, and talks to storage only through the injected repository.
Transitions and edits are conditional writes keyed on the status read at the
start of the operation, so two racing moderators cannot both succeed.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from access_control import policy
from access_control.policy import Caller
from access_control.visibility import build_list_filter, compose_filters, public_filter
from core.errors import Conflict, Forbidden, NotFound

from .models import SLUG_MAX_LENGTH, Post
from .repositories import PostRepository, SlugTaken
from .slugs import base_slug, with_suffix
from .state_machine import (
    PostAction,
    PostStatus,
    can_transition,
    initial_status,
    transition_changes,
    transition_error,
)

logger = logging.getLogger(__name__)

_cover_image_validator = URLValidator(schemes=["http", "https"])

PUBLIC_ORDERING = ("-published_at", "-created_at")
DEFAULT_RECENT_LIMIT = 5


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class PostPage:
    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class PostFilters:
    status: Optional[str] = None
    author_id: Any = None
    search: Optional[str] = None


def _require_text(value: Optional[str], field_name: str, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError({field_name: [f"{label} is required."]})
    return text


def _clean_cover_image(value: Optional[str]) -> str:
    url = (value or "").strip()
    if url:
        try:
            _cover_image_validator(url)
        except DjangoValidationError:
            raise ValidationError({"coverImage": ["Cover image must be a valid http(s) URL."]}) from None
    return url


class PostWorkflowService:
    """Operations on posts on behalf of a caller."""

    def __init__(
        self,
        repository: Optional[PostRepository] = None,
        clock: Callable[[], Any] = timezone.now,
        visibility_mode: Optional[str] = None,
        slug_attempts: Optional[int] = None,
    ):
        self.repository = repository or PostRepository()
        self.clock = clock
        self.visibility_mode = visibility_mode
        self.slug_attempts = slug_attempts or settings.POSTS_SLUG_MAX_ATTEMPTS

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    @staticmethod
    def page_request(page: Optional[int] = None, limit: Optional[int] = None) -> PageRequest:
        page = 1 if page is None else page
        limit = settings.POSTS_PAGE_SIZE if limit is None else limit
        errors = {}
        if page < 1:
            errors["page"] = ["Page must be 1 or greater."]
        if not 1 <= limit <= settings.POSTS_MAX_PAGE_SIZE:
            errors["limit"] = [f"Limit must be between 1 and {settings.POSTS_MAX_PAGE_SIZE}."]
        if errors:
            raise ValidationError(errors)
        return PageRequest(page=page, limit=limit)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_or_404(self, post_id: Any) -> Post:
        post = self.repository.find_by_id(post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    def get_post(self, caller: Caller, post_id: Any = None, slug: Optional[str] = None) -> Post:
        """Fetch a post by id or slug, enforcing ``can_view``."""
        if post_id is None and not slug:
            raise ValidationError("Either a post id or a slug is required.")
        post = self.repository.find_by_id(post_id) if post_id is not None else self.repository.find_by_slug(slug)
        if post is None:
            raise NotFound("Post not found")
        if not policy.can_view(caller, post):
            raise Forbidden("You do not have permission to view this post.")
        return post

    def list_posts(self, caller: Caller, filters: PostFilters, page: PageRequest) -> PostPage:
        if filters.status and filters.status not in PostStatus.values:
            raise ValidationError({"status": [f"Unknown status: {filters.status}"]})
        predicate = compose_filters(
            build_list_filter(caller, self.visibility_mode),
            status=filters.status,
            author_id=filters.author_id,
            search=filters.search,
        )
        items, total = self.repository.find_posts(predicate, page.offset, page.limit)
        return PostPage(items=items, total=total, page=page.page, limit=page.limit)

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    def list_public_posts(self, search: Optional[str], page: PageRequest) -> PostPage:
        items, total = self.repository.find_posts(public_filter(search), page.offset, page.limit, PUBLIC_ORDERING)
        return PostPage(items=items, total=total, page=page.page, limit=page.limit)

    def get_public_post(self, slug: str) -> Post:
        post = self.repository.find_by_slug(slug, status=PostStatus.PUBLISHED)
        if post is None:
            raise NotFound("Post not found")
        return post

    def recent_public_posts(self, limit: Optional[int] = None) -> list[Post]:
        limit = DEFAULT_RECENT_LIMIT if not limit or limit < 1 else min(limit, settings.POSTS_MAX_PAGE_SIZE)
        items, _ = self.repository.find_posts(public_filter(), 0, limit, PUBLIC_ORDERING)
        return items

    # ------------------------------------------------------------------
    # Authoring
    # ------------------------------------------------------------------

    def _write_with_unique_slug(self, title: str, write: Callable[[str], Any], exclude_id: Any = None) -> Any:
        """Run ``write(slug)`` with a slug derived from ``title``.

        A taken base slug gets a millisecond timestamp suffix; if the unique
        constraint still rejects the write the suffix is bumped and retried.
        """
        base = base_slug(title, SLUG_MAX_LENGTH)
        stamp = int(self.clock().timestamp() * 1000)
        candidate = base
        if self.repository.slug_exists(candidate, exclude_id=exclude_id):
            logger.info("Slug %s already in use, adding suffix", candidate)
            candidate = with_suffix(base, stamp)

        for attempt in range(1, self.slug_attempts + 1):
            try:
                return write(candidate)
            except SlugTaken:
                logger.info("Slug %s taken at write time (attempt %d)", candidate, attempt)
                candidate = with_suffix(base, stamp + attempt)

        logger.warning("Could not find a free slug for %r after %d attempts", base, self.slug_attempts)
        raise Conflict("Could not generate a unique slug for this title; please retry.")

    def create_post(
        self,
        caller: Caller,
        title: str,
        content: str,
        excerpt: Optional[str] = None,
        cover_image: Optional[str] = None,
        draft: bool = False,
    ) -> Post:
        """Create a post owned by ``caller``.

        New posts go straight to PENDING review unless ``draft`` is set.
        """
        if not policy.can_create(caller):
            raise Forbidden("Only publishers or administrators can create posts.")
        title = _require_text(title, "title", "Title")
        content = _require_text(content, "content", "Content")
        cover_image = _clean_cover_image(cover_image)
        status = initial_status(draft)

        post = self._write_with_unique_slug(
            title,
            lambda slug: self.repository.create(
                title=title,
                content=content,
                excerpt=(excerpt or "").strip(),
                cover_image=cover_image,
                slug=slug,
                status=status,
                author_id=caller.id,
            ),
        )
        logger.info("Post %s created by %s with status %s", post.id, caller.id, post.status)
        return post

    def update_post(
        self,
        caller: Caller,
        post_id: Any,
        title: Optional[str] = None,
        content: Optional[str] = None,
        excerpt: Optional[str] = None,
        cover_image: Optional[str] = None,
    ) -> Post:
        """Edit a post's text fields. The status never changes here."""
        changes: dict[str, Any] = {}
        if title is not None:
            changes["title"] = _require_text(title, "title", "Title")
        if content is not None:
            changes["content"] = _require_text(content, "content", "Content")
        if excerpt is not None:
            changes["excerpt"] = excerpt.strip()
        if cover_image is not None:
            changes["cover_image"] = _clean_cover_image(cover_image)
        if not changes:
            raise ValidationError("Provide at least one field to update.")

        post = self._get_or_404(post_id)
        if not policy.can_edit(caller, post):
            if policy.is_owner(caller, post):
                raise Forbidden("You can only edit posts that are drafts or were rejected.")
            raise Forbidden("You do not have permission to edit this post.")

        changes["updated_at"] = self.clock()
        new_title = changes.get("title")
        if new_title and new_title != post.title and base_slug(new_title, SLUG_MAX_LENGTH) != post.slug:
            updated = self._write_with_unique_slug(
                new_title,
                lambda slug: self.repository.update(post.id, {**changes, "slug": slug}, expected_status=post.status),
                exclude_id=post.id,
            )
        else:
            updated = self.repository.update(post.id, changes, expected_status=post.status)

        if updated is None:
            logger.warning("Post %s changed while being edited by %s", post.id, caller.id)
            raise Conflict("The post was modified concurrently; reload it and try again.")
        return updated

    def delete_post(self, caller: Caller, post_id: Any) -> None:
        post = self._get_or_404(post_id)
        if not policy.can_delete(caller, post):
            raise Forbidden("You do not have permission to delete this post.")
        self.repository.delete(post.id)
        logger.info("Post %s deleted by %s", post.id, caller.id)

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------

    def _transition(self, caller: Caller, post: Post, action: PostAction) -> Post:
        now = self.clock()
        changes = transition_changes(post.status, action, caller.id, now)
        changes["updated_at"] = now

        updated = self.repository.update(post.id, changes, expected_status=post.status)
        if updated is None:
            current = self.repository.find_by_id(post.id)
            if current is None:
                raise NotFound("Post not found")
            logger.warning(
                "Lost race on post %s: %s expected %s but found %s",
                post.id, action.value, post.status, current.status,
            )
            raise transition_error(action, current.status)

        logger.info("Post %s %s: %s -> %s by %s", post.id, action.value, post.status, updated.status, caller.id)
        return updated

    def submit_post(self, caller: Caller, post_id: Any) -> Post:
        """Send a draft or rejected post (back) to the review queue."""
        post = self._get_or_404(post_id)
        if not policy.can_submit(caller, post):
            raise Forbidden("Only the author or an administrator can submit this post.")
        return self._transition(caller, post, PostAction.SUBMIT)

    def _moderate(self, caller: Caller, post_id: Any, action: PostAction) -> Post:
        if not policy.can_moderate(caller):
            raise Forbidden("Only administrators can moderate posts.")
        post = self._get_or_404(post_id)
        if not can_transition(post.status, action):
            raise transition_error(action, post.status)
        return self._transition(caller, post, action)

    def approve_post(self, caller: Caller, post_id: Any) -> Post:
        """PENDING -> PUBLISHED, stamping the approver and publication time."""
        return self._moderate(caller, post_id, PostAction.APPROVE)

    def reject_post(self, caller: Caller, post_id: Any) -> Post:
        """PENDING -> REJECTED, stamping the moderator."""
        return self._moderate(caller, post_id, PostAction.REJECT)


__all__ = ["PageRequest", "PostFilters", "PostPage", "PostWorkflowService"]
