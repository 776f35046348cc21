# Overview: Flask API routes for bases; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify

from ..decorators import require_auth, require_permission
from ..services import base_service
from ..services.base_service import BaseNotFoundError
from .common import json_body, json_error


bases_bp = Blueprint("bases", __name__, url_prefix="/api/bases")


@bases_bp.get("")
@require_auth
@require_permission("VIEW_BASES")
def list_bases_route():
    """List all bases ordered by name."""
    try:
        bases = base_service.list_bases()
    except Exception as e:
        return json_error(e, generic="Failed to fetch bases")
    return jsonify([b.to_dict() for b in bases]), 200


@bases_bp.post("")
@require_auth
@require_permission("MANAGE_BASES")
def create_base_route():
    """
    Create a base.

    Request body:
    {
        "name": str,
        "location": str
    }

    Returns:
        201: Base created
        400: Invalid request
        409: Name already in use
    """
    try:
        base = base_service.create_base(g.principal, json_body())
    except Exception as e:
        return json_error(e, generic="Failed to create base")
    return jsonify(base.to_dict()), 201


@bases_bp.put("/<int:base_id>")
@require_auth
@require_permission("MANAGE_BASES")
def update_base_route(base_id: int):
    """Rename or relocate a base. Either field may be omitted."""
    try:
        base = base_service.update_base(g.principal, base_id, json_body())
    except Exception as e:
        return json_error(e, generic="Failed to update base", not_found=(BaseNotFoundError,))
    return jsonify(base.to_dict()), 200
