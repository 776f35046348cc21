# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    CATALOG = "CATALOG"
    INVENTORY = "INVENTORY"
    PURCHASES = "PURCHASES"
    TRANSFERS = "TRANSFERS"
    ASSIGNMENTS = "ASSIGNMENTS"
    USERS = "USERS"
    SYSTEM = "SYSTEM"
