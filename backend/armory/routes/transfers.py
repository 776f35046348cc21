# Overview: Flask API routes for inter-base transfers; parses input and returns JSON responses.

"""
Inter-base transfer API routes.
"""
from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_permission
from ..services import transfer_service
from ..services.transfer_service import TransferNotFoundError, TransferStateError
from .common import json_body, json_error, query_date_range, query_int, query_str


transfers_bp = Blueprint("transfers", __name__, url_prefix="/api/transfers")


@transfers_bp.get("")
@require_auth
@require_permission("VIEW_TRANSFERS")
def list_transfers_route():
    """
    List transfers, newest transfer date first.

    Query params:
    - baseId: int (optional) - matches source or destination
    - assetType: str (optional)
    - startDate, endDate: ISO-8601 (optional)
    """
    try:
        start, end = query_date_range()
        transfers = transfer_service.list_transfers(
            g.principal,
            base_id=query_int("baseId"),
            asset_type=query_str("assetType"),
            start=start,
            end=end,
        )
    except Exception as e:
        return json_error(e, generic="Failed to fetch transfers")
    return jsonify([t.to_detail_dict() for t in transfers]), 200


@transfers_bp.post("")
@require_auth
@require_permission("CREATE_TRANSFERS")
def create_transfer_route():
    """
    Create a pending transfer.

    Request body:
    {
        "assetId": int,
        "fromBaseId": int,
        "toBaseId": int,
        "quantity": int (> 0),
        "transferDate": ISO-8601
    }

    Returns:
        201: Transfer created
        400: Invalid request
        403: Neither base is the commander's own
    """
    try:
        transfer = transfer_service.create_transfer(g.principal, json_body())
    except Exception as e:
        return json_error(e, generic="Failed to create transfer")
    return jsonify(transfer.to_dict()), 201


@transfers_bp.patch("/<int:transfer_id>/status")
@require_auth
@require_permission("UPDATE_TRANSFER_STATUS")
def update_transfer_status_route(transfer_id: int):
    """
    Complete or cancel a pending transfer.

    Request body:
    {
        "status": "completed" | "cancelled"
    }

    Returns:
        200: Status changed (stock moved if completed)
        400: Unknown status
        404: Transfer not found
        409: Transfer is no longer pending
    """
    try:
        data = json_body()
        transfer = transfer_service.update_transfer_status(g.principal, transfer_id, data.get("status"))
    except Exception as e:
        return json_error(
            e,
            generic="Failed to update transfer status",
            not_found=(TransferNotFoundError,),
            conflict=(TransferStateError,),
        )
    return jsonify(transfer.to_dict()), 200
