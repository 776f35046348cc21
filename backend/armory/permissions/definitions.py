# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        "VIEW_BASES",
        "View Bases",
        "List bases and their locations",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_BASES",
        "Manage Bases",
        "Create bases and edit their name or location",
        PermissionCategory.CATALOG,
    ),
    (
        "VIEW_ASSETS",
        "View Assets",
        "List the asset catalog",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_ASSETS",
        "Manage Assets",
        "Add entries to the asset catalog",
        PermissionCategory.CATALOG,
    ),
]


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_STOCKS",
        "View Stocks",
        "View per-base stock ledger rows",
        PermissionCategory.INVENTORY,
    ),
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "View dashboard metrics and recent activity",
        PermissionCategory.INVENTORY,
    ),
]


# -- PURCHASES --

PURCHASE_PERMISSIONS = [
    (
        "VIEW_PURCHASES",
        "View Purchases",
        "List purchase records",
        PermissionCategory.PURCHASES,
    ),
    (
        "CREATE_PURCHASES",
        "Create Purchases",
        "Record purchases (increases base stock)",
        PermissionCategory.PURCHASES,
    ),
]


# -- TRANSFERS --

TRANSFER_PERMISSIONS = [
    (
        "VIEW_TRANSFERS",
        "View Transfers",
        "List inter-base transfers",
        PermissionCategory.TRANSFERS,
    ),
    (
        "CREATE_TRANSFERS",
        "Create Transfers",
        "Initiate inter-base transfers",
        PermissionCategory.TRANSFERS,
    ),
    (
        "UPDATE_TRANSFER_STATUS",
        "Update Transfer Status",
        "Complete or cancel pending transfers",
        PermissionCategory.TRANSFERS,
    ),
]


# -- ASSIGNMENTS --

ASSIGNMENT_PERMISSIONS = [
    (
        "VIEW_ASSIGNMENTS",
        "View Assignments",
        "List assignments to personnel",
        PermissionCategory.ASSIGNMENTS,
    ),
    (
        "CREATE_ASSIGNMENTS",
        "Create Assignments",
        "Assign assets to personnel or units",
        PermissionCategory.ASSIGNMENTS,
    ),
    (
        "UPDATE_ASSIGNMENT_STATUS",
        "Update Assignment Status",
        "Mark assigned assets as expended",
        PermissionCategory.ASSIGNMENTS,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "VIEW_USERS",
        "View Users",
        "List user accounts",
        PermissionCategory.USERS,
    ),
    (
        "CREATE_USER",
        "Create User",
        "Register new user accounts",
        PermissionCategory.USERS,
    ),
]


# -- SYSTEM --

SYSTEM_PERMISSIONS = [
    (
        "VIEW_AUDIT_LOG",
        "View Audit Log",
        "Read the audit trail",
        PermissionCategory.SYSTEM,
    ),
]


PERMISSION_DEFINITIONS = (
    CATALOG_PERMISSIONS
    + INVENTORY_PERMISSIONS
    + PURCHASE_PERMISSIONS
    + TRANSFER_PERMISSIONS
    + ASSIGNMENT_PERMISSIONS
    + USER_PERMISSIONS
    + SYSTEM_PERMISSIONS
)
