from django.apps import AppConfig


class PostsConfig(AppConfig):
    """Posts app: model, approval workflow, and post endpoints."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "posts"
