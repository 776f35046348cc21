# Overview: Permission system package.
# Re-exports all public APIs.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    CATALOG_PERMISSIONS,
    INVENTORY_PERMISSIONS,
    PURCHASE_PERMISSIONS,
    TRANSFER_PERMISSIONS,
    ASSIGNMENT_PERMISSIONS,
    USER_PERMISSIONS,
    SYSTEM_PERMISSIONS,
)
from .roles import DEFAULT_ROLE_PERMISSIONS
from .helpers import (
    get_all_permission_codes,
    validate_permission_code,
    get_role_permissions,
    role_has_permission,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "CATALOG_PERMISSIONS",
    "INVENTORY_PERMISSIONS",
    "PURCHASE_PERMISSIONS",
    "TRANSFER_PERMISSIONS",
    "ASSIGNMENT_PERMISSIONS",
    "USER_PERMISSIONS",
    "SYSTEM_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_all_permission_codes",
    "validate_permission_code",
    "get_role_permissions",
    "role_has_permission",
]
