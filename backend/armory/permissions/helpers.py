# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()


def get_role_permissions(role):
    """Permission codes granted to a role (empty for unknown roles)."""
    from .roles import DEFAULT_ROLE_PERMISSIONS

    return set(DEFAULT_ROLE_PERMISSIONS.get(role, ()))


def role_has_permission(role, code):
    return code in get_role_permissions(role)
