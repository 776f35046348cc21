# Overview: Service-layer operations for the recent-activity feed.

from __future__ import annotations

from datetime import timezone

from sqlalchemy import or_

from armory.extensions import db
from armory.models import Assignment, Purchase, Transfer
from armory.time_utils import to_utc_z


DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def clamp_limit(limit: int | None, default: int = DEFAULT_LIMIT) -> int:
    if limit is None:
        return default
    return max(1, min(MAX_LIMIT, limit))


def _sort_key(item: dict):
    # Postgres hands back aware datetimes, SQLite naive ones.
    ts = item["_ts"]
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts, item["type"], item["id"]


def _name(obj) -> str | None:
    return obj.name if obj is not None else None


def _description(obj) -> str | None:
    return obj.description if obj is not None else None


def _purchase_items(base_id: int | None, limit: int) -> list[dict]:
    query = db.session.query(Purchase)
    if base_id is not None:
        query = query.filter(Purchase.base_id == base_id)
    rows = query.order_by(Purchase.created_at.desc(), Purchase.id.desc()).limit(limit).all()
    return [
        {
            "id": p.id,
            "type": "purchase",
            "description": f"Purchase of {p.quantity} {_description(p.asset)}",
            "base": _name(p.base),
            "user": _name(p.user),
            "_ts": p.created_at,
        }
        for p in rows
    ]


def _transfer_items(base_id: int | None, limit: int) -> list[dict]:
    query = db.session.query(Transfer)
    if base_id is not None:
        query = query.filter(or_(Transfer.from_base_id == base_id, Transfer.to_base_id == base_id))
    rows = query.order_by(Transfer.created_at.desc(), Transfer.id.desc()).limit(limit).all()
    return [
        {
            "id": t.id,
            "type": "transfer",
            "description": f"Transfer of {t.quantity} {_description(t.asset)}",
            "base": f"{_name(t.from_base)} to {_name(t.to_base)}",
            "user": _name(t.user),
            "_ts": t.created_at,
        }
        for t in rows
    ]


def _assignment_items(base_id: int | None, limit: int) -> list[dict]:
    query = db.session.query(Assignment)
    if base_id is not None:
        query = query.filter(Assignment.base_id == base_id)
    rows = query.order_by(Assignment.created_at.desc(), Assignment.id.desc()).limit(limit).all()
    return [
        {
            "id": a.id,
            "type": "assignment",
            "description": f"Assignment of {a.quantity} {_description(a.asset)}",
            "base": _name(a.base),
            "user": _name(a.user),
            "_ts": a.created_at,
        }
        for a in rows
    ]


def get_recent_activity(base_id: int | None = None, limit: int | None = DEFAULT_LIMIT) -> list[dict]:
    """
    Newest purchases, transfers and assignments merged into one feed.

    Each source contributes at most `limit` rows; the merged list is sorted
    newest first and cut to `limit`.
    """
    limit = clamp_limit(limit)

    items = (
        _purchase_items(base_id, limit)
        + _transfer_items(base_id, limit)
        + _assignment_items(base_id, limit)
    )
    items.sort(key=_sort_key, reverse=True)

    feed = []
    for item in items[:limit]:
        ts = item.pop("_ts")
        item["timestamp"] = to_utc_z(ts)
        feed.append(item)
    return feed
