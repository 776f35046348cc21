# Overview: Fixed role -> permission grants.
#
# Roles are a closed set (admin, commander, logistics), so grants live in code
# rather than in role tables. Base scoping is not expressed here; see
# services/access_policy.py.

from .helpers import get_all_permission_codes


_READ_ONLY = [
    "VIEW_BASES",
    "VIEW_ASSETS",
    "VIEW_STOCKS",
    "VIEW_DASHBOARD",
    "VIEW_PURCHASES",
    "VIEW_TRANSFERS",
    "VIEW_ASSIGNMENTS",
]


DEFAULT_ROLE_PERMISSIONS = {
    # Admin gets ALL permissions
    "admin": get_all_permission_codes(),

    "commander": _READ_ONLY + [
        "CREATE_TRANSFERS",
        "UPDATE_TRANSFER_STATUS",
        "CREATE_ASSIGNMENTS",
        "UPDATE_ASSIGNMENT_STATUS",
        "VIEW_AUDIT_LOG",
    ],

    "logistics": _READ_ONLY + [
        "MANAGE_ASSETS",
        "CREATE_PURCHASES",
        "CREATE_TRANSFERS",
        "UPDATE_TRANSFER_STATUS",
    ],
}
