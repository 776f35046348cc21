from __future__ import annotations

from ..extensions import db
from armory.time_utils import to_utc_z, utcnow


TRANSFER_STATUSES = ("pending", "completed", "cancelled")
ASSIGNMENT_STATUSES = ("assigned", "expended")


def _user_summary(user) -> dict | None:
    return user.to_summary() if user else None


class Purchase(db.Model):
    """
    Receipt of new materiel at a base.

    IMMUTABLE: A purchase is never edited after creation. Creating one adds
    its quantity to the base's Stock.closing_balance in the same transaction.
    """
    __tablename__ = "purchases"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_purchases_quantity_positive"),
        db.Index("ix_purchases_base_date", "base_id", "purchase_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("assets.id"), nullable=False, index=True)
    base_id = db.Column(db.Integer, db.ForeignKey("bases.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    purchase_date = db.Column(db.DateTime(timezone=True), nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    asset = db.relationship("Asset")
    base = db.relationship("Base")
    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assetId": self.asset_id,
            "baseId": self.base_id,
            "quantity": self.quantity,
            "purchaseDate": to_utc_z(self.purchase_date),
            "createdBy": self.created_by,
            "createdAt": to_utc_z(self.created_at),
        }

    def to_detail_dict(self) -> dict:
        return {
            **self.to_dict(),
            "asset": self.asset.to_dict() if self.asset else None,
            "base": self.base.to_dict() if self.base else None,
            "user": _user_summary(self.user),
        }


class Transfer(db.Model):
    """
    Movement of materiel between two bases.

    LIFECYCLE:
    1. pending: created, no ledger effect yet
    2. completed: source stock decremented (clamped at 0), destination incremented
    3. cancelled: closed without ledger effect

    completed and cancelled are terminal.
    """
    __tablename__ = "transfers"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_transfers_quantity_positive"),
        db.CheckConstraint("from_base_id <> to_base_id", name="ck_transfers_distinct_bases"),
        db.CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled')",
            name="ck_transfers_status",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("assets.id"), nullable=False, index=True)
    from_base_id = db.Column(db.Integer, db.ForeignKey("bases.id"), nullable=False, index=True)
    to_base_id = db.Column(db.Integer, db.ForeignKey("bases.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    transfer_date = db.Column(db.DateTime(timezone=True), nullable=False)
    initiated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    asset = db.relationship("Asset")
    from_base = db.relationship("Base", foreign_keys=[from_base_id])
    to_base = db.relationship("Base", foreign_keys=[to_base_id])
    user = db.relationship("User")

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assetId": self.asset_id,
            "fromBaseId": self.from_base_id,
            "toBaseId": self.to_base_id,
            "quantity": self.quantity,
            "transferDate": to_utc_z(self.transfer_date),
            "initiatedBy": self.initiated_by,
            "status": self.status,
            "createdAt": to_utc_z(self.created_at),
        }

    def to_detail_dict(self) -> dict:
        return {
            **self.to_dict(),
            "asset": self.asset.to_dict() if self.asset else None,
            "fromBase": self.from_base.to_dict() if self.from_base else None,
            "toBase": self.to_base.to_dict() if self.to_base else None,
            "user": _user_summary(self.user),
        }


class Assignment(db.Model):
    """
    Materiel issued to a unit or person.

    Creating an assignment moves quantity out of closing_balance into
    Stock.assigned. Marking it expended moves the same quantity from
    assigned to expended (consumed, never returned).
    """
    __tablename__ = "assignments"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_assignments_quantity_positive"),
        db.CheckConstraint("status IN ('assigned', 'expended')", name="ck_assignments_status"),
        db.Index("ix_assignments_base_date", "base_id", "assigned_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("assets.id"), nullable=False, index=True)
    base_id = db.Column(db.Integer, db.ForeignKey("bases.id"), nullable=False, index=True)
    assigned_to = db.Column(db.String(255), nullable=False)
    personnel_id = db.Column(db.String(64), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    assigned_date = db.Column(db.DateTime(timezone=True), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="assigned", index=True)
    reason = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    asset = db.relationship("Asset")
    base = db.relationship("Base")
    user = db.relationship("User")

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assetId": self.asset_id,
            "baseId": self.base_id,
            "assignedTo": self.assigned_to,
            "personnelId": self.personnel_id,
            "quantity": self.quantity,
            "assignedDate": to_utc_z(self.assigned_date),
            "status": self.status,
            "reason": self.reason,
            "createdBy": self.created_by,
            "createdAt": to_utc_z(self.created_at),
        }

    def to_detail_dict(self) -> dict:
        return {
            **self.to_dict(),
            "asset": self.asset.to_dict() if self.asset else None,
            "base": self.base.to_dict() if self.base else None,
            "user": _user_summary(self.user),
        }
