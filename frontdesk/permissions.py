"""
Custom permission classes for role based access control.
"""
from rest_framework.permissions import BasePermission

from .models import User

ADMIN_ROLES = {User.ROLE_SYSTEM_ADMIN, User.ROLE_ADMIN}
FRONT_DESK_ROLES = ADMIN_ROLES | {
    User.ROLE_RECEPTIONIST,
    User.ROLE_RECEPTIONIST_INFERTILITY,
    User.ROLE_STAFF,
}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsAdminRole(BasePermission):
    """Allow access only to system administrators and administrators."""
    message = "Administrator role required"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in ADMIN_ROLES


class IsFrontDesk(BasePermission):
    """Roles that register patients and handle cash at the front desk."""
    message = "Front desk role required"

    def has_permission(self, request, view) -> bool:
        return _role(request) in FRONT_DESK_ROLES


class HasStaffRecord(BasePermission):
    """The login must be linked to a staff member (shifts belong to staff)."""
    message = "No staff record is linked to this account"

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "staff_id", None))
