from __future__ import annotations

from ..extensions import db
from armory.time_utils import to_utc_z, utcnow


LOG_ACTION_TYPES = (
    "purchase",
    "transfer",
    "assignment",
    "login",
    "logout",
    "base",
    "asset",
    "user",
)


class AuditLog(db.Model):
    """
    Audit trail of user actions.

    IMMUTABLE: Never update or delete. Append-only for audit integrity.
    Rows are written inside the same DB transaction as the action they record.
    old_data/new_data hold JSON snapshots (e.g. a status before and after).
    """
    __tablename__ = "logs"
    __table_args__ = (
        db.Index("ix_logs_user_timestamp", "user_id", "timestamp"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    action_type = db.Column(db.String(32), nullable=False, index=True)
    resource_id = db.Column(db.Integer, nullable=True)
    old_data = db.Column(db.JSON, nullable=True)
    new_data = db.Column(db.JSON, nullable=True)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    user = db.relationship("User", backref=db.backref("logs", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "actionType": self.action_type,
            # Older dashboard builds read "action"
            "action": self.action_type,
            "resourceId": self.resource_id,
            "oldData": self.old_data,
            "newData": self.new_data,
            "timestamp": to_utc_z(self.timestamp),
        }
