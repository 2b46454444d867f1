from django.conf import settings
from rest_framework.permissions import SAFE_METHODS, BasePermission


def is_admin_role(user, roles=None) -> bool:
    """
    True when ``user`` holds one of the coverage moderation roles.
    Superusers always qualify.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False
    if getattr(user, "is_superuser", False):
        return True
    allowed = roles if roles is not None else getattr(settings, "COVERAGE_ADMIN_ROLES", [])
    return getattr(user, "role", "") in set(allowed)


class IsAdminRole(BasePermission):
    message = "Admin access required."

    def has_permission(self, request, view):
        return is_admin_role(request.user)


class IsAdminRoleOrReadOnly(BasePermission):
    message = "Admin access required."

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_admin_role(request.user)
