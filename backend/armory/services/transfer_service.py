# Overview: Service-layer operations for inter-base transfers; encapsulates business logic and database work.

"""
Inter-base transfer service.

Moves materiel between two bases with an explicit status workflow and an
audit entry for every change.

LIFECYCLE:
1. pending: transfer recorded, no stock moves
2. completed: source closing balance decremented (clamped at 0),
   destination closing balance incremented, in the same transaction
3. cancelled: closed without stock effect

Only pending transfers may change status. A second completion is
rejected, so ledger effects are applied exactly once.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import or_

from armory.extensions import db
from armory.models import Asset, Base, Transfer, TRANSFER_STATUSES
from armory.services import audit_service, ledger_service
from armory.services.access_policy import Principal, ensure_can_manage_transfer, scoped_base_id
from armory.services.concurrency import lock_for_update, run_in_transaction
from armory.validation import (
    TRANSFER_POLICY,
    ValidationError,
    enforce_rules_transfer,
    require_existing,
    validate_payload,
)


TRANSFER_STATUS_PENDING = "pending"
TRANSFER_STATUS_COMPLETED = "completed"
TRANSFER_STATUS_CANCELLED = "cancelled"


class TransferError(Exception):
    """Raised when transfer operations fail."""
    pass


class TransferNotFoundError(TransferError):
    pass


class TransferStateError(TransferError):
    """Raised when a status change is not allowed from the current status."""
    pass


def create_transfer(principal: Principal, payload: dict) -> Transfer:
    """
    Record a pending transfer. Stock is untouched until completion.

    Raises:
        ValidationError: malformed payload, same source and destination, unknown asset/base
        AccessDeniedError: commander whose base is on neither side
    """
    cleaned = validate_payload(model=Transfer, payload=payload, policy=TRANSFER_POLICY, partial=False)
    enforce_rules_transfer(cleaned)
    require_existing(Asset, cleaned["asset_id"], "assetId")
    require_existing(Base, cleaned["from_base_id"], "fromBaseId")
    require_existing(Base, cleaned["to_base_id"], "toBaseId")
    ensure_can_manage_transfer(principal, cleaned["from_base_id"], cleaned["to_base_id"])

    def _op():
        transfer = Transfer(
            initiated_by=principal.user_id,
            status=TRANSFER_STATUS_PENDING,
            **cleaned,
        )
        db.session.add(transfer)
        db.session.flush()

        audit_service.record(
            user_id=principal.user_id,
            action_type="transfer",
            resource_id=transfer.id,
            new_data=payload,
        )
        return transfer

    return run_in_transaction(_op)


def update_transfer_status(principal: Principal, transfer_id: int, status: str) -> Transfer:
    """
    Complete or cancel a pending transfer.

    Completing applies the stock movement; cancelling only closes the
    record. Either way the old and new status are audited.

    Raises:
        ValidationError: unknown status
        TransferNotFoundError: no such transfer
        AccessDeniedError: commander whose base is on neither side
        TransferStateError: transfer is not pending, or status is "pending"
    """
    if status not in TRANSFER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(TRANSFER_STATUSES)}")

    def _op():
        transfer = lock_for_update(db.session.query(Transfer).filter_by(id=transfer_id)).first()
        if not transfer:
            raise TransferNotFoundError("Transfer not found")

        ensure_can_manage_transfer(principal, transfer.from_base_id, transfer.to_base_id)

        if transfer.status != TRANSFER_STATUS_PENDING:
            raise TransferStateError(
                f"Transfer is already {transfer.status}; only pending transfers can change status"
            )
        if status == TRANSFER_STATUS_PENDING:
            raise TransferStateError("Transfer is already pending")

        old_status = transfer.status
        transfer.status = status

        if status == TRANSFER_STATUS_COMPLETED:
            ledger_service.apply_transfer_completion(
                transfer.from_base_id,
                transfer.to_base_id,
                transfer.asset_id,
                transfer.quantity,
            )

        audit_service.record(
            user_id=principal.user_id,
            action_type="transfer",
            resource_id=transfer.id,
            old_data={"status": old_status},
            new_data={"status": status},
        )
        return transfer

    return run_in_transaction(_op)


def get_transfer(transfer_id: int) -> Transfer | None:
    return db.session.get(Transfer, transfer_id)


def list_transfers(
    principal: Principal,
    *,
    base_id: int | None = None,
    asset_type: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Transfer]:
    """Transfers touching the base on either side, newest first by transfer date."""
    base_id = scoped_base_id(principal, base_id, resource="transfers")

    query = db.session.query(Transfer)
    if base_id is not None:
        query = query.filter(or_(Transfer.from_base_id == base_id, Transfer.to_base_id == base_id))
    if asset_type:
        query = query.join(Asset, Transfer.asset_id == Asset.id).filter(Asset.type == asset_type)
    if start is not None:
        query = query.filter(Transfer.transfer_date >= start)
    if end is not None:
        query = query.filter(Transfer.transfer_date <= end)

    return query.order_by(Transfer.transfer_date.desc(), Transfer.id.desc()).all()
