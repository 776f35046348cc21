from __future__ import annotations

from armory.extensions import db
from armory.models import Asset
from armory.services import audit_service
from armory.services.access_policy import Principal
from armory.services.concurrency import run_in_transaction
from armory.validation import ASSET_POLICY, enforce_rules_asset, validate_payload


def create_asset(principal: Principal, payload: dict) -> Asset:
    cleaned = validate_payload(model=Asset, payload=payload, policy=ASSET_POLICY, partial=False)
    enforce_rules_asset(cleaned)

    def _op():
        asset = Asset(**cleaned)
        db.session.add(asset)
        db.session.flush()

        audit_service.record(
            user_id=principal.user_id,
            action_type="asset",
            resource_id=asset.id,
            new_data=payload,
        )
        return asset

    return run_in_transaction(_op)


def get_asset(asset_id: int) -> Asset | None:
    return db.session.get(Asset, asset_id)


def list_assets(asset_type: str | None = None) -> list[Asset]:
    query = db.session.query(Asset)
    if asset_type:
        query = query.filter(Asset.type == asset_type)
    return query.order_by(Asset.type.asc(), Asset.description.asc()).all()
