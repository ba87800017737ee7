"""HTTP tests for the authenticated post endpoints under /api/posts/."""

from __future__ import annotations

import uuid
from unittest import mock

from django.db import DatabaseError
from django.test import override_settings
from rest_framework.test import APIClient

from access_control.roles import Role
from core.exceptions import FORBIDDEN_MESSAGE
from posts.models import Post
from tests.utils import FakeRedisTestCase, create_user, seed_blog_basics


class PostApiTests(FakeRedisTestCase):
    @classmethod
    def setUpTestData(cls):
        cls.users, cls.posts = seed_blog_basics()

    def setUp(self):
        self.anonymous = APIClient()
        self.admin = self.auth_client(self.users["admin"])
        self.alice = self.auth_client(self.users["alice"])
        self.bruno = self.auth_client(self.users["bruno"])

    def _create(self, client, **payload):
        payload.setdefault("title", "A brand new post")
        payload.setdefault("content", "Some content")
        return client.post("/api/posts/", payload, format="json")

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def test_publisher_creates_pending_post(self):
        response = self._create(self.alice, excerpt="Teaser", coverImage="https://img.example.com/a.png")
        body = response.json()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(body["errors"], [])
        data = body["data"]
        self.assertEqual(data["status"], "PENDING")
        self.assertEqual(data["slug"], "a-brand-new-post")
        self.assertEqual(data["authorId"], str(self.users["alice"].id))
        self.assertEqual(data["author"]["name"], "Alice Publisher")
        self.assertEqual(data["coverImage"], "https://img.example.com/a.png")
        self.assertIsNone(data["approvedBy"])
        self.assertIsNone(data["approver"])
        self.assertIsNone(data["publishedAt"])

    def test_draft_creation(self):
        response = self._create(self.alice, draft=True)
        self.assertEqual(response.json()["data"]["status"], "DRAFT")

    def test_anonymous_create_401(self):
        response = self._create(self.anonymous)
        self.assertEqual(response.status_code, 401)
        self.assertIsNone(response.json()["data"])
        self.assertEqual(Post.objects.filter(title="A brand new post").count(), 0)

    def test_user_with_unrecognised_role_cannot_create(self):
        stranger = create_user("stranger@example.com", "Stranger123", role="EDITOR")
        response = self._create(self.auth_client(stranger))
        self.assertEqual(response.status_code, 403)

    def test_missing_title_400(self):
        response = self._create(self.alice, title="  ")
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()["errors"])

    def test_identical_titles_get_distinct_slugs(self):
        first = self._create(self.alice, title="Same Title").json()["data"]
        second = self._create(self.bruno, title="Same Title").json()["data"]

        self.assertEqual(first["slug"], "same-title")
        self.assertNotEqual(first["slug"], second["slug"])
        self.assertTrue(second["slug"].startswith("same-title-"))

        by_slug = self.admin.get(f"/api/posts/slug/{second['slug']}/")
        self.assertEqual(by_slug.status_code, 200)
        self.assertEqual(by_slug.json()["data"]["id"], second["id"])

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def test_pending_post_visibility(self):
        pending = self.posts["PENDING"]
        url = f"/api/posts/{pending.id}/"

        self.assertEqual(self.alice.get(url).status_code, 200)
        self.assertEqual(self.admin.get(url).status_code, 200)

        forbidden = self.bruno.get(url)
        self.assertEqual(forbidden.status_code, 403)
        self.assertEqual(forbidden.json()["errors"], ["You do not have permission to view this post."])

        self.assertEqual(self.anonymous.get(url).status_code, 401)

    def test_anonymous_slug_lookup(self):
        published = self.posts["PUBLISHED"]
        pending = self.posts["PENDING"]

        self.assertEqual(self.anonymous.get(f"/api/posts/slug/{published.slug}/").status_code, 200)
        self.assertEqual(self.anonymous.get(f"/api/posts/slug/{pending.slug}/").status_code, 403)
        self.assertEqual(self.anonymous.get("/api/posts/slug/does-not-exist/").status_code, 404)

    def test_unknown_post_404(self):
        response = self.admin.get(f"/api/posts/{uuid.uuid4()}/")
        self.assertEqual(response.status_code, 404)
        self.assertIsNone(response.json()["data"])

    def test_anonymous_listing_only_published_even_when_filtering_pending(self):
        response = self.anonymous.get("/api/posts/", {"status": "PENDING"})
        body = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["data"]["posts"], [])
        self.assertEqual(body["data"]["pagination"]["total"], 0)

        everything = self.anonymous.get("/api/posts/").json()["data"]
        self.assertEqual([p["status"] for p in everything["posts"]], ["PUBLISHED"])

    def test_publisher_listing_is_own_posts(self):
        data = self.alice.get("/api/posts/").json()["data"]
        self.assertEqual(
            {p["authorId"] for p in data["posts"]},
            {str(self.users["alice"].id)},
        )
        self.assertEqual(data["pagination"]["total"], 2)

    @override_settings(POSTS_LIST_VISIBILITY="own_or_published")
    def test_publisher_listing_includes_published_in_alternate_mode(self):
        data = self.alice.get("/api/posts/").json()["data"]
        self.assertEqual(sorted(p["status"] for p in data["posts"]), ["DRAFT", "PENDING", "PUBLISHED"])

    def test_admin_listing_with_pagination(self):
        response = self.admin.get("/api/posts/", {"limit": 3, "page": 1})
        data = response.json()["data"]

        self.assertEqual(len(data["posts"]), 3)
        self.assertEqual(data["pagination"], {"total": 4, "page": 1, "limit": 3, "totalPages": 2})

    def test_listing_rejects_bad_query(self):
        self.assertEqual(self.admin.get("/api/posts/", {"status": "ARCHIVED"}).status_code, 400)
        self.assertEqual(self.admin.get("/api/posts/", {"limit": 1000}).status_code, 400)
        self.assertEqual(self.admin.get("/api/posts/", {"page": 0}).status_code, 400)

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------

    def test_admin_approves_pending_post(self):
        pending = self.posts["PENDING"]

        response = self.admin.patch(f"/api/posts/{pending.id}/approve/")
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["status"], "PUBLISHED")
        self.assertEqual(data["approvedBy"], str(self.users["admin"].id))
        self.assertEqual(data["approver"]["name"], "Admin")
        self.assertIsNotNone(data["publishedAt"])

        again = self.admin.patch(f"/api/posts/{pending.id}/approve/")
        self.assertEqual(again.status_code, 400)
        self.assertTrue(again.json()["errors"])

    def test_publisher_cannot_approve(self):
        pending = self.posts["PENDING"]

        response = self.alice.patch(f"/api/posts/{pending.id}/approve/")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["errors"], [FORBIDDEN_MESSAGE])
        pending.refresh_from_db()
        self.assertEqual(pending.status, "PENDING")

    def test_anonymous_approve_401(self):
        response = self.anonymous.patch(f"/api/posts/{self.posts['PENDING'].id}/approve/")
        self.assertEqual(response.status_code, 401)

    def test_admin_rejects_and_author_resubmits(self):
        pending = self.posts["PENDING"]

        rejected = self.admin.patch(f"/api/posts/{pending.id}/reject/").json()["data"]
        self.assertEqual(rejected["status"], "REJECTED")
        self.assertIsNone(rejected["publishedAt"])

        edited = self.alice.patch(f"/api/posts/{pending.id}/", {"content": "Revised"}, format="json")
        self.assertEqual(edited.status_code, 200)
        self.assertEqual(edited.json()["data"]["content"], "Revised")

        submitted = self.alice.patch(f"/api/posts/{pending.id}/submit/").json()["data"]
        self.assertEqual(submitted["status"], "PENDING")
        self.assertIsNone(submitted["approvedBy"])

    def test_reject_published_post_is_invalid(self):
        response = self.admin.patch(f"/api/posts/{self.posts['PUBLISHED'].id}/reject/")
        self.assertEqual(response.status_code, 400)

    def test_moderating_unknown_post_404(self):
        response = self.admin.patch(f"/api/posts/{uuid.uuid4()}/approve/")
        self.assertEqual(response.status_code, 404)

    # ------------------------------------------------------------------
    # Editing and deletion
    # ------------------------------------------------------------------

    def test_author_cannot_edit_pending_post(self):
        response = self.alice.put(
            f"/api/posts/{self.posts['PENDING'].id}/",
            {"title": "Edited"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(
            response.json()["errors"],
            ["You can only edit posts that are drafts or were rejected."],
        )

    def test_author_edits_draft_and_slug_follows_title(self):
        draft = self.posts["DRAFT"]

        response = self.alice.patch(f"/api/posts/{draft.id}/", {"title": "Renamed Draft"}, format="json")
        data = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["slug"], "renamed-draft")
        self.assertEqual(data["status"], "DRAFT")

    def test_empty_update_400(self):
        response = self.alice.patch(f"/api/posts/{self.posts['DRAFT'].id}/", {}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_other_publisher_cannot_delete(self):
        response = self.bruno.delete(f"/api/posts/{self.posts['DRAFT'].id}/")
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Post.objects.filter(pk=self.posts["DRAFT"].id).exists())

    def test_author_deletes_published_post(self):
        published = self.posts["PUBLISHED"]

        response = self.bruno.delete(f"/api/posts/{published.id}/")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(Post.objects.filter(pk=published.id).exists())

    def test_admin_deletes_any_post(self):
        response = self.admin.delete(f"/api/posts/{self.posts['DRAFT'].id}/")
        self.assertEqual(response.status_code, 204)

    # ------------------------------------------------------------------
    # Failures
    # ------------------------------------------------------------------

    def test_storage_failure_returns_503_envelope(self):
        with mock.patch(
                "posts.repositories.PostRepository.find_posts",
                side_effect=DatabaseError("DB down"),
        ):
            response = self.admin.get("/api/posts/")

        body = response.json()
        self.assertEqual(response.status_code, 503)
        self.assertIsNone(body["data"])
        self.assertTrue(body["errors"])

    def test_revoked_token_401(self):
        user = create_user("temp@example.com", "TempPass123", Role.PUBLISHER)
        client = self.auth_client(user)
        self.assertEqual(client.post("/api/auth/logout/").status_code, 204)

        self.assertEqual(self._create(client).status_code, 401)
