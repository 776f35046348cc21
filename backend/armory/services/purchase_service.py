# Overview: Service-layer operations for purchases; encapsulates business logic and database work.

"""
Purchase Service

A purchase records new materiel arriving at a base. Recording one is a
single unit of work:
1. Insert the Purchase row (attributed to the caller)
2. Add the quantity to the base's Stock.closing_balance
3. Append a "purchase" audit entry

All three commit together or not at all.
"""

from __future__ import annotations

from datetime import datetime

from armory.extensions import db
from armory.models import Asset, Base, Purchase
from armory.services import audit_service, ledger_service
from armory.services.access_policy import Principal, ensure_can_create_purchase, scoped_base_id
from armory.services.concurrency import run_in_transaction
from armory.validation import (
    PURCHASE_POLICY,
    enforce_positive_quantity,
    require_existing,
    validate_payload,
)


def create_purchase(principal: Principal, payload: dict) -> Purchase:
    """
    Record a purchase and apply it to the stock ledger.

    Raises:
        ValidationError: malformed payload, non-positive quantity, unknown asset/base
        AccessDeniedError: logistics user buying for another base
    """
    cleaned = validate_payload(model=Purchase, payload=payload, policy=PURCHASE_POLICY, partial=False)
    enforce_positive_quantity(cleaned)
    require_existing(Asset, cleaned["asset_id"], "assetId")
    require_existing(Base, cleaned["base_id"], "baseId")
    ensure_can_create_purchase(principal, cleaned["base_id"])

    def _op():
        purchase = Purchase(created_by=principal.user_id, **cleaned)
        db.session.add(purchase)
        db.session.flush()

        ledger_service.apply_purchase(purchase.base_id, purchase.asset_id, purchase.quantity)

        audit_service.record(
            user_id=principal.user_id,
            action_type="purchase",
            resource_id=purchase.id,
            new_data=payload,
        )
        return purchase

    return run_in_transaction(_op)


def list_purchases(
    principal: Principal,
    *,
    base_id: int | None = None,
    asset_type: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Purchase]:
    """Purchases newest first by purchase date, scoped to the caller's base where required."""
    base_id = scoped_base_id(principal, base_id, resource="purchases")

    query = db.session.query(Purchase)
    if base_id is not None:
        query = query.filter(Purchase.base_id == base_id)
    if asset_type:
        query = query.join(Asset, Purchase.asset_id == Asset.id).filter(Asset.type == asset_type)
    if start is not None:
        query = query.filter(Purchase.purchase_date >= start)
    if end is not None:
        query = query.filter(Purchase.purchase_date <= end)

    return query.order_by(Purchase.purchase_date.desc(), Purchase.id.desc()).all()
