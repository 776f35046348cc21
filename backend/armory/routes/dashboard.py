# Overview: Flask API routes for the dashboard; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify

from ..decorators import require_auth, require_permission
from ..services import activity_service, metrics_service
from ..services.access_policy import scoped_base_id
from .common import json_error, query_date_range, query_int


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/metrics")
@require_auth
@require_permission("VIEW_DASHBOARD")
def metrics_route():
    """
    Balance and movement totals.

    Query params:
    - baseId: int (optional, ignored for commanders, who see their own base)
    - startDate, endDate: ISO-8601 (optional) - window for purchases and transfers only
    """
    try:
        base_id = scoped_base_id(g.principal, query_int("baseId"), resource="dashboard")
        start, end = query_date_range()
        metrics = metrics_service.get_dashboard_metrics(base_id, start, end)
    except Exception as e:
        return json_error(e, generic="Failed to fetch dashboard metrics")
    return jsonify(metrics), 200


@dashboard_bp.get("/activity")
@require_auth
@require_permission("VIEW_DASHBOARD")
def activity_route():
    """
    Recent purchases, transfers and assignments, newest first.

    Query params:
    - limit: int (optional, default 10, max 100)
    - baseId: int (optional, ignored for commanders)
    """
    try:
        base_id = scoped_base_id(g.principal, query_int("baseId"), resource="dashboard")
        limit = activity_service.clamp_limit(
            query_int("limit"),
            default=current_app.config.get("ACTIVITY_DEFAULT_LIMIT", activity_service.DEFAULT_LIMIT),
        )
        activity = activity_service.get_recent_activity(base_id, limit)
    except Exception as e:
        return json_error(e, generic="Failed to fetch recent activity")
    return jsonify(activity), 200
