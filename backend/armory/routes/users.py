# Overview: Flask API routes for user listings; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..services import auth_service
from .common import json_error


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("VIEW_USERS")
def list_users_route():
    """All user accounts. Password hashes are never serialized."""
    try:
        users = auth_service.list_users()
    except Exception as e:
        return json_error(e, generic="Failed to fetch users")
    return jsonify([u.to_dict() for u in users]), 200
