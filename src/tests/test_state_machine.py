"""Transition table and moderation-field bookkeeping."""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

from django.test import SimpleTestCase

from core.errors import InvalidTransition
from posts.state_machine import (
    PostAction,
    PostStatus,
    TRANSITIONS,
    can_transition,
    initial_status,
    invariants_hold,
    next_status,
    transition_changes,
)

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


class TransitionTableTests(SimpleTestCase):
    def test_allowed_transitions(self):
        self.assertEqual(next_status(PostStatus.PENDING, PostAction.APPROVE), PostStatus.PUBLISHED)
        self.assertEqual(next_status(PostStatus.PENDING, PostAction.REJECT), PostStatus.REJECTED)
        self.assertEqual(next_status(PostStatus.DRAFT, PostAction.SUBMIT), PostStatus.PENDING)
        self.assertEqual(next_status(PostStatus.REJECTED, PostAction.SUBMIT), PostStatus.PENDING)

    def test_everything_else_is_rejected(self):
        for status in PostStatus:
            for action in PostAction:
                if (status, action) in TRANSITIONS:
                    continue
                with self.subTest(status=status, action=action):
                    self.assertFalse(can_transition(status, action))
                    with self.assertRaises(InvalidTransition):
                        next_status(status, action)

    def test_published_is_terminal(self):
        for action in PostAction:
            self.assertFalse(can_transition(PostStatus.PUBLISHED, action))

    def test_unknown_status_is_rejected(self):
        self.assertFalse(can_transition("ARCHIVED", PostAction.APPROVE))
        with self.assertRaises(InvalidTransition):
            next_status("ARCHIVED", PostAction.APPROVE)

    def test_error_mentions_current_status(self):
        with self.assertRaises(InvalidTransition) as ctx:
            next_status(PostStatus.PUBLISHED, PostAction.APPROVE)
        self.assertIn("PUBLISHED", str(ctx.exception.detail))

    def test_initial_status(self):
        self.assertEqual(initial_status(), PostStatus.PENDING)
        self.assertEqual(initial_status(draft=True), PostStatus.DRAFT)


class TransitionChangesTests(SimpleTestCase):
    def setUp(self):
        self.admin_id = uuid.uuid4()

    def test_approve_stamps_approver_and_publication_time(self):
        changes = transition_changes(PostStatus.PENDING, PostAction.APPROVE, self.admin_id, NOW)
        self.assertEqual(
            changes,
            {"status": PostStatus.PUBLISHED, "approved_by_id": self.admin_id, "published_at": NOW},
        )

    def test_reject_stamps_approver_only(self):
        changes = transition_changes(PostStatus.PENDING, PostAction.REJECT, self.admin_id, NOW)
        self.assertEqual(
            changes,
            {"status": PostStatus.REJECTED, "approved_by_id": self.admin_id, "published_at": None},
        )

    def test_resubmission_clears_moderation_fields(self):
        changes = transition_changes(PostStatus.REJECTED, PostAction.SUBMIT, uuid.uuid4(), NOW)
        self.assertEqual(changes, {"status": PostStatus.PENDING, "approved_by_id": None, "published_at": None})

    def test_changes_always_satisfy_invariants(self):
        for (status, action) in TRANSITIONS:
            with self.subTest(status=status, action=action):
                changes = transition_changes(status, action, self.admin_id, NOW)
                post = SimpleNamespace(**changes)
                self.assertTrue(invariants_hold(post))

    def test_invariants_detect_inconsistent_rows(self):
        self.assertFalse(invariants_hold(SimpleNamespace(status="PUBLISHED", published_at=None, approved_by_id=1)))
        self.assertFalse(invariants_hold(SimpleNamespace(status="PENDING", published_at=None, approved_by_id=1)))
        self.assertFalse(invariants_hold(SimpleNamespace(status="REJECTED", published_at=NOW, approved_by_id=1)))
        self.assertTrue(invariants_hold(SimpleNamespace(status="DRAFT", published_at=None, approved_by_id=None)))
