"""Seed demo users and posts covering every workflow status."""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from access_control.policy import Caller
from access_control.roles import Role
from authentication.managers import UserManager
from posts.models import Post
from posts.services import PostWorkflowService

DEMO_USERS = {
    "admin": ("admin@example.com", "Admin", Role.ADMIN, "adminpass"),
    "alice": ("alice@example.com", "Alice Publisher", Role.PUBLISHER, "alicepass"),
    "bruno": ("bruno@example.com", "Bruno Publisher", Role.PUBLISHER, "brunopass"),
}


def create_seed_users() -> dict:
    """Create the demo accounts if missing and return a key->User map."""
    User = get_user_model()
    users = {}
    for key, (email, name, role, password) in DEMO_USERS.items():
        user, _ = User.objects.get_or_create(
            email=email,
            defaults={
                "name": name,
                "role": role,
                "password_hash": UserManager.hash_password(password),
            },
        )
        users[key] = user
    return users


def create_seed_posts(users: dict, service: PostWorkflowService | None = None) -> dict:
    """Create one post per status through the workflow so invariants hold.

    Posts are keyed by status name. Existing posts with the same title are
    reused, which keeps the command idempotent.
    """
    service = service or PostWorkflowService()
    admin = Caller.from_user(users["admin"])
    alice = Caller.from_user(users["alice"])
    bruno = Caller.from_user(users["bruno"])

    def ensure(caller, title, content, draft=False):
        existing = Post.objects.filter(title=title, author_id=caller.id).first()
        if existing is not None:
            return existing, False
        return service.create_post(caller, title=title, content=content, draft=draft), True

    posts = {}
    posts["DRAFT"], _ = ensure(alice, "Notes for a future post", "Still thinking about this one.", draft=True)
    posts["PENDING"], _ = ensure(alice, "Waiting for review", "An article submitted for moderation.")

    published, created = ensure(bruno, "Hello World", "The first published article on the blog.")
    if created:
        published = service.approve_post(admin, published.id)
    posts["PUBLISHED"] = published

    rejected, created = ensure(bruno, "Needs more work", "An article the editors sent back.")
    if created:
        rejected = service.reject_post(admin, rejected.id)
    posts["REJECTED"] = rejected
    return posts


class Command(BaseCommand):
    """Management command to seed demo accounts and posts."""

    help = (
        "Seed demo ADMIN/PUBLISHER accounts and posts in every workflow status. "
        "Use --reset to remove previously seeded data first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the demo users (and, by cascade, their posts) before seeding.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        with transaction.atomic():
            if options.get("reset"):
                self._reset_seeded_data()

            self.stdout.write("Seeding blog data...")
            users = create_seed_users()
            posts = create_seed_posts(users)
        for status, post in posts.items():
            self.stdout.write(f"  {status:<9} {post.slug}")
        self.stdout.write(self.style.SUCCESS("Blog seed completed."))

    def _reset_seeded_data(self) -> None:
        """Remove the demo accounts and everything they wrote or moderated."""
        self.stdout.write("Resetting previously seeded data...")
        User = get_user_model()
        emails = [email for email, *_ in DEMO_USERS.values()]
        # Moderated posts reference their moderator with PROTECT, so remove
        # posts first, then the accounts.
        Post.objects.filter(author__email__in=emails).delete()
        Post.objects.filter(approved_by__email__in=emails).delete()
        User.objects.filter(email__in=emails).delete()
        self.stdout.write(self.style.WARNING("Seeded data cleared."))
