"""App configuration for the shared project plumbing."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Core app holds settings, URLs, middleware, and the error kinds."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Blog API core"
