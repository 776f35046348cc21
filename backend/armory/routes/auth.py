# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

SECURITY FEATURES:
- bcrypt password verification
- Signed, expiring bearer tokens (see services/token_service.py)
- Login and logout recorded in the audit trail
- Accounts are created by administrators only
"""

from flask import Blueprint, current_app, g, jsonify

from ..decorators import require_auth, require_permission
from ..extensions import db
from ..models import User
from ..services import audit_service, auth_service, token_service
from ..services.concurrency import run_in_transaction
from .common import json_body, json_error


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate with email and password.

    Returns a bearer token and the caller's identity. The token must be
    sent as `Authorization: Bearer <token>` on every other route.
    """
    try:
        data = json_body()
    except Exception as e:
        return json_error(e, generic="Invalid request data")

    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify({"error": "Invalid request data", "message": "email and password required"}), 400

    user = auth_service.authenticate(email, password)
    if not user:
        current_app.logger.info("Failed login for %s", auth_service.normalize_email(email))
        return jsonify({"error": "Invalid credentials"}), 401

    try:
        run_in_transaction(lambda: audit_service.record(
            user_id=user.id,
            action_type="login",
            new_data={"email": user.email},
        ))
    except Exception as e:
        return json_error(e, generic="Login failed")

    return jsonify({
        "token": token_service.issue_token(user),
        "user": user.to_summary(),
    }), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """
    Record a logout.

    Tokens are stateless, so the client is responsible for discarding its
    token; this only writes the audit entry.
    """
    principal = g.principal
    try:
        run_in_transaction(lambda: audit_service.record(
            user_id=principal.user_id,
            action_type="logout",
            new_data={"email": principal.email},
        ))
    except Exception as e:
        return json_error(e, generic="Logout failed")

    return jsonify({"ok": True}), 200


@auth_bp.post("/register")
@require_auth
@require_permission("CREATE_USER")
def register_route():
    """
    Create a user account (admin only).

    Request body:
    {
        "name": str,
        "email": str,
        "password": str,
        "role": "admin" | "commander" | "logistics",
        "baseId": int (optional)
    }
    """
    principal = g.principal

    try:
        data = json_body()

        def _op():
            user = auth_service.create_user(
                name=data.get("name"),
                email=data.get("email"),
                password=data.get("password"),
                role=data.get("role"),
                base_id=data.get("baseId"),
            )
            audit_service.record(
                user_id=principal.user_id,
                action_type="user",
                resource_id=user.id,
                new_data={"email": user.email, "role": user.role},
            )
            return user

        user = run_in_transaction(_op)
    except Exception as e:
        return json_error(e, generic="Failed to create user")

    return jsonify(user.to_summary()), 201


@auth_bp.get("/me")
@require_auth
def me_route():
    user = db.session.get(User, g.principal.user_id)
    if not user:
        return jsonify({"error": "User not found"}), 404
    return jsonify(user.to_summary()), 200
