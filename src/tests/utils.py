"""Shared helpers for tests (seeding, user creation, fakes for Redis and storage)."""

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from access_control.roles import Role
from authentication.managers import UserManager
from authentication.services import TokenService
from posts.models import Post
from posts.repositories import SlugTaken
from scripts.management.commands.seed_blog import create_seed_posts, create_seed_users

User = get_user_model()


class FakeRedis:
    """Minimal Redis stub supporting the commands used by TokenService."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)


class FakeRedisTestCase(TestCase):
    """TestCase with Redis clients patched to an in-memory fake."""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.patchers = [
            mock.patch("core.redis_client.get_redis_client", return_value=cls.fake_redis),
            mock.patch("authentication.services.get_redis_client", return_value=cls.fake_redis),
        ]
        for patcher in cls.patchers:
            patcher.start()

    @classmethod
    def tearDownClass(cls):
        for patcher in cls.patchers:
            patcher.stop()
        super().tearDownClass()

    @staticmethod
    def auth_client(user) -> APIClient:
        """Return an APIClient authenticated with a fresh access token."""
        token, _ = TokenService.generate_tokens(user)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class InMemoryPostRepository:
    """Minimal PostRepository stub supporting the calls used by the workflow tests.

    ``reserved_slugs`` behave like rows inserted by a concurrent request: the
    pre-check does not see them but writes using them fail with SlugTaken.
    ``before_update`` runs just before a conditional update, to simulate a
    competing writer.
    """

    def __init__(self, clock: Optional[FixedClock] = None):
        self.clock = clock or FixedClock()
        self.posts: Dict[uuid.UUID, Post] = {}
        self.reserved_slugs: set[str] = set()
        self.before_update = None

    def _slug_in_use(self, slug: str, exclude_id: Any = None) -> bool:
        return any(p.slug == slug and p.id != exclude_id for p in self.posts.values())

    def find_by_id(self, post_id: Any) -> Optional[Post]:
        post = self.posts.get(post_id)
        return copy.copy(post) if post else None

    def find_by_slug(self, slug: str, status: Optional[str] = None) -> Optional[Post]:
        for post in self.posts.values():
            if post.slug == slug and (status is None or post.status == status):
                return copy.copy(post)
        return None

    def slug_exists(self, slug: str, exclude_id: Any = None) -> bool:
        return self._slug_in_use(slug, exclude_id)

    def find_posts(self, predicate, offset, limit, order_by=("-created_at",)):
        raise NotImplementedError("Listing is covered by the ORM-backed tests")

    def create(self, **fields: Any) -> Post:
        slug = fields["slug"]
        if slug in self.reserved_slugs or self._slug_in_use(slug):
            raise SlugTaken(slug)
        now = self.clock()
        post = Post(id=uuid.uuid4(), created_at=now, updated_at=now, **fields)
        self.posts[post.id] = post
        return copy.copy(post)

    def update(self, post_id: Any, changes: Dict[str, Any], expected_status: Optional[str] = None) -> Optional[Post]:
        if self.before_update is not None:
            hook, self.before_update = self.before_update, None
            hook(self)
        post = self.posts.get(post_id)
        if post is None or (expected_status is not None and post.status != expected_status):
            return None
        slug = changes.get("slug")
        if slug and (slug in self.reserved_slugs or self._slug_in_use(slug, exclude_id=post_id)):
            raise SlugTaken(slug)
        for name, value in changes.items():
            setattr(post, name, value)
        return copy.copy(post)

    def delete(self, post_id: Any) -> bool:
        return self.posts.pop(post_id, None) is not None


def seed_blog_basics() -> tuple[dict, dict]:
    """Create demo users and one post per status.

    Delegates to the same helpers used by the ``seed_blog`` management
    command to keep seeding logic in a single place.
    """

    users = create_seed_users()
    posts = create_seed_posts(users)
    return users, posts


def create_user(email: str, password: str, role: Role = Role.PUBLISHER, **extra):
    """Create a user with a bcrypt-hashed password for tests."""

    extra.setdefault("name", email.split("@")[0].title())
    return User.objects.create(
        email=email,
        password_hash=UserManager.hash_password(password),
        role=role,
        **extra,
    )
