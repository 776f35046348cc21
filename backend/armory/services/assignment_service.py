# Overview: Service-layer operations for assignments; encapsulates business logic and database work.

"""
Assignment Service

An assignment issues materiel from a base to a unit or person.

LIFECYCLE:
1. assigned: Stock.assigned += q, Stock.closing_balance -= q (clamped at 0)
2. expended: Stock.assigned -= q (clamped at 0), Stock.expended += q

expended is terminal; assignments are never returned to stock.
"""

from __future__ import annotations

from datetime import datetime

from armory.extensions import db
from armory.models import Asset, Assignment, Base, ASSIGNMENT_STATUSES
from armory.services import audit_service, ledger_service
from armory.services.access_policy import Principal, ensure_can_manage_assignment, scoped_base_id
from armory.services.concurrency import lock_for_update, run_in_transaction
from armory.validation import (
    ASSIGNMENT_POLICY,
    ValidationError,
    enforce_positive_quantity,
    require_existing,
    validate_payload,
)


ASSIGNMENT_STATUS_ASSIGNED = "assigned"
ASSIGNMENT_STATUS_EXPENDED = "expended"


class AssignmentError(Exception):
    """Raised when assignment operations fail."""
    pass


class AssignmentNotFoundError(AssignmentError):
    pass


class AssignmentStateError(AssignmentError):
    """Raised when a status change is not allowed from the current status."""
    pass


def create_assignment(principal: Principal, payload: dict) -> Assignment:
    """
    Issue materiel and move it from closing balance into assigned.

    Raises:
        ValidationError: malformed payload, non-positive quantity, unknown asset/base
        AccessDeniedError: commander assigning at another base
    """
    cleaned = validate_payload(model=Assignment, payload=payload, policy=ASSIGNMENT_POLICY, partial=False)
    enforce_positive_quantity(cleaned)
    require_existing(Asset, cleaned["asset_id"], "assetId")
    require_existing(Base, cleaned["base_id"], "baseId")
    ensure_can_manage_assignment(principal, cleaned["base_id"])

    def _op():
        assignment = Assignment(
            created_by=principal.user_id,
            status=ASSIGNMENT_STATUS_ASSIGNED,
            **cleaned,
        )
        db.session.add(assignment)
        db.session.flush()

        ledger_service.apply_assignment_creation(
            assignment.base_id, assignment.asset_id, assignment.quantity
        )

        audit_service.record(
            user_id=principal.user_id,
            action_type="assignment",
            resource_id=assignment.id,
            new_data=payload,
        )
        return assignment

    return run_in_transaction(_op)


def update_assignment_status(
    principal: Principal,
    assignment_id: int,
    status: str,
    reason: str | None = None,
) -> Assignment:
    """
    Mark an assignment expended.

    Raises:
        ValidationError: unknown status
        AssignmentNotFoundError: no such assignment
        AccessDeniedError: commander acting on another base
        AssignmentStateError: anything other than assigned -> expended
    """
    if status not in ASSIGNMENT_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ASSIGNMENT_STATUSES)}")
    if reason is not None and not isinstance(reason, str):
        raise ValidationError("reason must be a string")

    def _op():
        assignment = lock_for_update(db.session.query(Assignment).filter_by(id=assignment_id)).first()
        if not assignment:
            raise AssignmentNotFoundError("Assignment not found")

        ensure_can_manage_assignment(principal, assignment.base_id)

        if assignment.status != ASSIGNMENT_STATUS_ASSIGNED or status != ASSIGNMENT_STATUS_EXPENDED:
            raise AssignmentStateError(
                f"Cannot change assignment status from {assignment.status} to {status}"
            )

        old_data = {"status": assignment.status, "reason": assignment.reason}
        assignment.status = status
        if reason is not None:
            assignment.reason = reason.strip() or None

        ledger_service.apply_assignment_expenditure(
            assignment.base_id, assignment.asset_id, assignment.quantity
        )

        audit_service.record(
            user_id=principal.user_id,
            action_type="assignment",
            resource_id=assignment.id,
            old_data=old_data,
            new_data={"status": status, "reason": assignment.reason},
        )
        return assignment

    return run_in_transaction(_op)


def get_assignment(assignment_id: int) -> Assignment | None:
    return db.session.get(Assignment, assignment_id)


def list_assignments(
    principal: Principal,
    *,
    base_id: int | None = None,
    status: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Assignment]:
    base_id = scoped_base_id(principal, base_id, resource="assignments")

    query = db.session.query(Assignment)
    if base_id is not None:
        query = query.filter(Assignment.base_id == base_id)
    if status:
        query = query.filter(Assignment.status == status)
    if start is not None:
        query = query.filter(Assignment.assigned_date >= start)
    if end is not None:
        query = query.filter(Assignment.assigned_date <= end)

    return query.order_by(Assignment.assigned_date.desc(), Assignment.id.desc()).all()
