from __future__ import annotations

from ..extensions import db
from armory.time_utils import to_utc_z, utcnow


class Base(db.Model):
    """
    A military installation holding stock.

    Names are unique; name/location may be edited by an admin but a base is
    never deleted once stock or transactions reference it.
    """
    __tablename__ = "bases"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True)
    location = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Base id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "createdAt": to_utc_z(self.created_at),
        }
