from __future__ import annotations

from armory.extensions import db
from armory.models import Base
from armory.services import audit_service
from armory.services.access_policy import Principal
from armory.services.concurrency import lock_for_update, run_in_transaction
from armory.validation import BASE_POLICY, ConflictError, validate_payload


class BaseNotFoundError(Exception):
    """Raised when a base id does not resolve."""
    pass


def _ensure_unique_name(name: str, *, exclude_id: int | None = None) -> None:
    query = db.session.query(Base).filter(Base.name == name)
    if exclude_id is not None:
        query = query.filter(Base.id != exclude_id)
    if query.first():
        raise ConflictError(f"Base name already exists: {name}")


def create_base(principal: Principal, payload: dict) -> Base:
    cleaned = validate_payload(model=Base, payload=payload, policy=BASE_POLICY, partial=False)

    def _op():
        _ensure_unique_name(cleaned["name"])

        base = Base(**cleaned)
        db.session.add(base)
        db.session.flush()

        audit_service.record(
            user_id=principal.user_id,
            action_type="base",
            resource_id=base.id,
            new_data=payload,
        )
        return base

    return run_in_transaction(_op)


def update_base(principal: Principal, base_id: int, payload: dict) -> Base:
    cleaned = validate_payload(model=Base, payload=payload, policy=BASE_POLICY, partial=True)

    def _op():
        base = lock_for_update(db.session.query(Base).filter_by(id=base_id)).first()
        if not base:
            raise BaseNotFoundError("Base not found")

        if "name" in cleaned:
            _ensure_unique_name(cleaned["name"], exclude_id=base_id)

        old_data = {"name": base.name, "location": base.location}
        for attr, value in cleaned.items():
            setattr(base, attr, value)

        audit_service.record(
            user_id=principal.user_id,
            action_type="base",
            resource_id=base.id,
            old_data=old_data,
            new_data=payload,
        )
        return base

    return run_in_transaction(_op)


def get_base(base_id: int) -> Base | None:
    return db.session.get(Base, base_id)


def list_bases() -> list[Base]:
    return db.session.query(Base).order_by(Base.name.asc()).all()
