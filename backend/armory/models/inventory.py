from __future__ import annotations

from ..extensions import db
from armory.time_utils import to_utc_z, utcnow


ASSET_TYPES = ("vehicles", "weapons", "ammunition", "equipment")


class Asset(db.Model):
    """Catalog entry for a kind of materiel. Quantities live on Stock."""
    __tablename__ = "assets"
    __table_args__ = (
        db.CheckConstraint(
            "type IN ('vehicles', 'weapons', 'ammunition', 'equipment')",
            name="ck_assets_type",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(32), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Asset id={self.id} type={self.type} description={self.description!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "createdAt": to_utc_z(self.created_at),
        }


class Stock(db.Model):
    """
    Running balance for one (base, asset) pair.

    INVARIANTS:
    - Exactly one row per (base_id, asset_id).
    - closing_balance, assigned and expended never go below zero. Decrements
      are clamped by the ledger service; the CHECK constraints are the backstop.
    - opening_balance is the seeded baseline and is never touched by the ledger.

    version_id turns concurrent read-modify-write of the same row into a
    StaleDataError instead of a silently lost update.
    """
    __tablename__ = "stocks"
    __table_args__ = (
        db.UniqueConstraint("base_id", "asset_id", name="uq_stocks_base_asset"),
        db.CheckConstraint("closing_balance >= 0", name="ck_stocks_closing_nonneg"),
        db.CheckConstraint("assigned >= 0", name="ck_stocks_assigned_nonneg"),
        db.CheckConstraint("expended >= 0", name="ck_stocks_expended_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    base_id = db.Column(db.Integer, db.ForeignKey("bases.id"), nullable=False, index=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("assets.id"), nullable=False, index=True)

    opening_balance = db.Column(db.Integer, nullable=False, default=0)
    closing_balance = db.Column(db.Integer, nullable=False, default=0)
    assigned = db.Column(db.Integer, nullable=False, default=0)
    expended = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    base = db.relationship("Base", backref=db.backref("stocks", lazy=True))
    asset = db.relationship("Asset", backref=db.backref("stocks", lazy=True))

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return (
            f"<Stock base={self.base_id} asset={self.asset_id} "
            f"closing={self.closing_balance} assigned={self.assigned} expended={self.expended}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "baseId": self.base_id,
            "assetId": self.asset_id,
            "openingBalance": self.opening_balance,
            "closingBalance": self.closing_balance,
            "assigned": self.assigned,
            "expended": self.expended,
            "updatedAt": to_utc_z(self.updated_at),
        }
