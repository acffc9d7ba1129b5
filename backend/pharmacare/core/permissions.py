"""
Role -> permission lookup. Single source of truth for sign-up, user add and user edit.

Admins always hold every permission; other roles get a fixed canonical set
unless an explicit list is stored on the user.
"""
from typing import Iterable, List

MANAGE_INVENTORY = "manage_inventory"
MANAGE_USERS = "manage_users"
MANAGE_SALES = "manage_sales"
VIEW_REPORTS = "view_reports"
PROCESS_SALES = "process_sales"
VIEW_INVENTORY = "view_inventory"
VIEW_SALES = "view_sales"

ALL_PERMISSIONS: List[str] = [
    MANAGE_INVENTORY,
    MANAGE_USERS,
    MANAGE_SALES,
    VIEW_REPORTS,
    PROCESS_SALES,
    VIEW_INVENTORY,
    VIEW_SALES,
]

ROLE_PERMISSIONS = {
    "admin": list(ALL_PERMISSIONS),
    "pharmacist": [MANAGE_INVENTORY, VIEW_SALES, VIEW_REPORTS],
    "cashier": [PROCESS_SALES, VIEW_INVENTORY],
    "user": [VIEW_INVENTORY, VIEW_SALES],
}

ROLES = tuple(ROLE_PERMISSIONS)
DEFAULT_ROLE = "user"


def permissions_for_role(role: str) -> List[str]:
    """Canonical permission set for a role. Unknown roles get nothing."""
    return list(ROLE_PERMISSIONS.get(role, []))


def resolve_permissions(role: str, requested: Iterable[str] | None = None) -> List[str]:
    """
    Permissions to store for a user.

    admin -> every permission regardless of request.
    Explicit request -> filtered to known permission names, order preserved.
    No request -> the role's canonical set.
    """
    if role == "admin":
        return list(ALL_PERMISSIONS)
    if requested is None:
        return permissions_for_role(role)
    seen = []
    for p in requested:
        if p in ALL_PERMISSIONS and p not in seen:
            seen.append(p)
    return seen


def has_any_permission(granted: Iterable[str] | None, *required: str) -> bool:
    granted_set = set(granted or [])
    return any(p in granted_set for p in required)
