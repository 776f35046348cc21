from __future__ import annotations

from ..extensions import db
from armory.time_utils import to_utc_z, utcnow


ROLES = ("admin", "commander", "logistics")


class User(db.Model):
    """
    User accounts for authentication and attribution.

    WHY: Every purchase, transfer and assignment records who made it.
    base_id is the user's home base; commanders and logistics officers are
    scoped to it, admins usually have none.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint("role IN ('admin', 'commander', 'logistics')", name="ck_users_role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False)
    base_id = db.Column(db.Integer, db.ForeignKey("bases.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    base = db.relationship("Base", backref=db.backref("users", lazy=True))

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

    def to_summary(self) -> dict:
        """Identity fields embedded in transaction listings and auth responses."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "baseId": self.base_id,
        }

    def to_dict(self) -> dict:
        return {
            **self.to_summary(),
            "createdAt": to_utc_z(self.created_at),
        }
