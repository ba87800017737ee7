"""DRF permission classes mirroring the role policy at the view layer.

The workflow service re-checks every predicate; these gates only reject
requests early (401 for anonymous callers, 403 for the wrong role). Gate
rejections carry the generic 403 message from ``custom_exception_handler``;
specific reasons come from the workflow service.
"""

from rest_framework import permissions

from .policy import Caller, can_create, can_moderate


class CallerPermission(permissions.BasePermission):
    """Require an authenticated caller satisfying ``check``."""

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not user or not getattr(user, "is_authenticated", False):
            return False
        return self.check(Caller.from_user(user))

    def check(self, caller: Caller) -> bool:
        return True


class IsAuthenticatedCaller(CallerPermission):
    """Any signed-in user."""


class CanCreatePosts(CallerPermission):
    def check(self, caller: Caller) -> bool:
        return can_create(caller)


class CanModeratePosts(CallerPermission):
    def check(self, caller: Caller) -> bool:
        return can_moderate(caller)


__all__ = ["CallerPermission", "CanCreatePosts", "CanModeratePosts", "IsAuthenticatedCaller"]
