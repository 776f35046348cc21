# Overview: Flask API routes for the audit trail; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..services import audit_service
from .common import json_error, query_date_range, query_int, query_str


logs_bp = Blueprint("logs", __name__, url_prefix="/api/logs")


@logs_bp.get("")
@require_auth
@require_permission("VIEW_AUDIT_LOG")
def list_logs_route():
    """
    Audit entries, newest first.

    Query params:
    - userId: int (optional)
    - actionType: str (optional)
    - startDate, endDate: ISO-8601 (optional)
    """
    try:
        start, end = query_date_range()
        logs = audit_service.list_logs(
            user_id=query_int("userId"),
            action_type=query_str("actionType"),
            start=start,
            end=end,
        )
    except Exception as e:
        return json_error(e, generic="Failed to fetch logs")
    return jsonify([entry.to_dict() for entry in logs]), 200
