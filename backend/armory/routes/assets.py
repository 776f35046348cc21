# Overview: Flask API routes for the asset catalog; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_permission
from ..services import asset_service
from .common import json_body, json_error, query_str


assets_bp = Blueprint("assets", __name__, url_prefix="/api/assets")


@assets_bp.get("")
@require_auth
@require_permission("VIEW_ASSETS")
def list_assets_route():
    """
    List catalog assets.

    Query params:
    - type: str (optional) - vehicles, weapons, ammunition or equipment
    """
    try:
        assets = asset_service.list_assets(query_str("type"))
    except Exception as e:
        return json_error(e, generic="Failed to fetch assets")
    return jsonify([a.to_dict() for a in assets]), 200


@assets_bp.post("")
@require_auth
@require_permission("MANAGE_ASSETS")
def create_asset_route():
    """
    Add an asset to the catalog.

    Request body:
    {
        "type": "vehicles" | "weapons" | "ammunition" | "equipment",
        "description": str
    }
    """
    try:
        asset = asset_service.create_asset(g.principal, json_body())
    except Exception as e:
        return json_error(e, generic="Failed to create asset")
    return jsonify(asset.to_dict()), 201
