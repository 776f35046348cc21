# Overview: Flask API routes for purchases; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_permission
from ..services import purchase_service
from .common import json_body, json_error, query_date_range, query_int, query_str


purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")


@purchases_bp.get("")
@require_auth
@require_permission("VIEW_PURCHASES")
def list_purchases_route():
    """
    List purchases, newest purchase date first.

    Query params:
    - baseId: int (optional; commanders and based logistics users see their own base)
    - assetType: str (optional)
    - startDate, endDate: ISO-8601 (optional)
    """
    try:
        start, end = query_date_range()
        purchases = purchase_service.list_purchases(
            g.principal,
            base_id=query_int("baseId"),
            asset_type=query_str("assetType"),
            start=start,
            end=end,
        )
    except Exception as e:
        return json_error(e, generic="Failed to fetch purchases")
    return jsonify([p.to_detail_dict() for p in purchases]), 200


@purchases_bp.post("")
@require_auth
@require_permission("CREATE_PURCHASES")
def create_purchase_route():
    """
    Record a purchase and add it to the base's closing balance.

    Request body:
    {
        "assetId": int,
        "baseId": int,
        "quantity": int (> 0),
        "purchaseDate": ISO-8601
    }

    Returns:
        201: Purchase recorded
        400: Invalid request
        403: Base outside the caller's scope
    """
    try:
        purchase = purchase_service.create_purchase(g.principal, json_body())
    except Exception as e:
        return json_error(e, generic="Failed to create purchase")
    return jsonify(purchase.to_dict()), 201
