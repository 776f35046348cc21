# Overview: Flask API routes for assignments; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_permission
from ..services import assignment_service
from ..services.assignment_service import AssignmentNotFoundError, AssignmentStateError
from .common import json_body, json_error, query_date_range, query_int, query_str


assignments_bp = Blueprint("assignments", __name__, url_prefix="/api/assignments")


@assignments_bp.get("")
@require_auth
@require_permission("VIEW_ASSIGNMENTS")
def list_assignments_route():
    """
    List assignments, newest assigned date first.

    Query params:
    - baseId: int (optional; commanders see their own base)
    - status: "assigned" | "expended" (optional)
    - startDate, endDate: ISO-8601 (optional)
    """
    try:
        start, end = query_date_range()
        assignments = assignment_service.list_assignments(
            g.principal,
            base_id=query_int("baseId"),
            status=query_str("status"),
            start=start,
            end=end,
        )
    except Exception as e:
        return json_error(e, generic="Failed to fetch assignments")
    return jsonify([a.to_detail_dict() for a in assignments]), 200


@assignments_bp.post("")
@require_auth
@require_permission("CREATE_ASSIGNMENTS")
def create_assignment_route():
    """
    Issue materiel to a unit or person.

    Request body:
    {
        "assetId": int,
        "baseId": int,
        "assignedTo": str,
        "personnelId": str (optional),
        "quantity": int (> 0),
        "assignedDate": ISO-8601,
        "reason": str (optional)
    }
    """
    try:
        assignment = assignment_service.create_assignment(g.principal, json_body())
    except Exception as e:
        return json_error(e, generic="Failed to create assignment")
    return jsonify(assignment.to_dict()), 201


@assignments_bp.patch("/<int:assignment_id>/status")
@require_auth
@require_permission("UPDATE_ASSIGNMENT_STATUS")
def update_assignment_status_route(assignment_id: int):
    """
    Mark an assignment expended.

    Request body:
    {
        "status": "expended",
        "reason": str (optional)
    }
    """
    try:
        data = json_body()
        assignment = assignment_service.update_assignment_status(
            g.principal,
            assignment_id,
            data.get("status"),
            data.get("reason"),
        )
    except Exception as e:
        return json_error(
            e,
            generic="Failed to update assignment status",
            not_found=(AssignmentNotFoundError,),
            conflict=(AssignmentStateError,),
        )
    return jsonify(assignment.to_dict()), 200
