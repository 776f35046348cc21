# Overview: Flask API routes for the stock ledger; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_permission
from ..services import ledger_service
from ..services.access_policy import scoped_base_id
from .common import json_error, query_int


stocks_bp = Blueprint("stocks", __name__, url_prefix="/api/stocks")


@stocks_bp.get("")
@require_auth
@require_permission("VIEW_STOCKS")
def list_stocks_route():
    """Stock rows, one per base/asset pair. Commanders only see their own base."""
    try:
        base_id = scoped_base_id(g.principal, query_int("baseId"), resource="stocks")
        stocks = ledger_service.list_stocks(base_id)
    except Exception as e:
        return json_error(e, generic="Failed to fetch stocks")
    return jsonify([s.to_dict() for s in stocks]), 200
