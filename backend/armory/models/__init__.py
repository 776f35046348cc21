from .bases import Base
from .inventory import Asset, Stock, ASSET_TYPES
from .documents import Purchase, Transfer, Assignment, TRANSFER_STATUSES, ASSIGNMENT_STATUSES
from .auth import User, ROLES
from .audit import AuditLog, LOG_ACTION_TYPES

__all__ = [
    'Base',
    'Asset', 'Stock', 'ASSET_TYPES',
    'Purchase', 'Transfer', 'Assignment', 'TRANSFER_STATUSES', 'ASSIGNMENT_STATUSES',
    'User', 'ROLES',
    'AuditLog', 'LOG_ACTION_TYPES',
]
