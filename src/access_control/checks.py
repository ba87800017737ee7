"""System checks for the role policy and list-visibility configuration."""

from django.conf import settings
from django.core.checks import Error, register

from .policy import ROLE_POLICIES
from .roles import Role
from .visibility import VISIBILITY_MODES


@register()
def role_policies_are_exhaustive(app_configs, **kwargs):
    """Every Role must have a policy row and a row in each visibility mode."""
    errors: list[Error] = []

    for role in Role:
        if role not in ROLE_POLICIES:
            errors.append(
                Error(
                    f"Role {role.value} has no entry in ROLE_POLICIES.",
                    hint="Add a RolePolicy for it in access_control.policy.",
                    id="access_control.E001",
                )
            )
        for mode, table in VISIBILITY_MODES.items():
            if role not in table:
                errors.append(
                    Error(
                        f"Role {role.value} has no list scope in visibility mode '{mode}'.",
                        id="access_control.E001",
                    )
                )

    return errors


@register()
def list_visibility_mode_is_known(app_configs, **kwargs):
    mode = getattr(settings, "POSTS_LIST_VISIBILITY", None)
    if mode and mode not in VISIBILITY_MODES:
        return [
            Error(
                f"POSTS_LIST_VISIBILITY={mode!r} is not a known visibility mode.",
                hint=f"Use one of: {', '.join(sorted(VISIBILITY_MODES))}.",
                id="access_control.E002",
            )
        ]
    return []
