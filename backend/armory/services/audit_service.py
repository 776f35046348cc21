# Overview: Service-layer operations for the audit trail; encapsulates business logic and database work.

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..extensions import db
from ..models import AuditLog, LOG_ACTION_TYPES
from armory.time_utils import utcnow


class AuditError(Exception):
    """Raised when an audit entry is malformed."""
    pass


def record(
    *,
    user_id: int,
    action_type: str,
    resource_id: int | None = None,
    old_data: Optional[Any] = None,
    new_data: Optional[Any] = None,
) -> AuditLog:
    """
    Append an audit entry to the current transaction.

    - No updates or deletes of existing entries, ever.
    - Does not commit: the entry is persisted with the action it records.
    """
    if action_type not in LOG_ACTION_TYPES:
        raise AuditError(f"Unknown audit action type: {action_type}")

    entry = AuditLog(
        user_id=user_id,
        action_type=action_type,
        resource_id=resource_id,
        old_data=old_data,
        new_data=new_data,
        timestamp=utcnow(),
    )
    db.session.add(entry)
    db.session.flush()
    return entry


def list_logs(
    *,
    user_id: int | None = None,
    action_type: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[AuditLog]:
    query = db.session.query(AuditLog)

    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if action_type:
        query = query.filter(AuditLog.action_type == action_type)
    if start is not None:
        query = query.filter(AuditLog.timestamp >= start)
    if end is not None:
        query = query.filter(AuditLog.timestamp <= end)

    return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).all()
