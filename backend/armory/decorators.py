# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import current_app, g, jsonify, request

from .permissions import role_has_permission, validate_permission_code
from .services import token_service
from .services.token_service import TokenError


def _is_authenticated() -> bool:
    return hasattr(g, "principal")


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.principal, the caller identity every service call receives.

    Returns 401 if no Bearer token is sent, 403 if the token is invalid or
    expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Access token required"}), 401

        token = auth_header.split(" ", 1)[1].strip()
        if not token:
            return jsonify({"error": "Access token required"}), 401

        try:
            g.principal = token_service.verify_token(token)
        except TokenError as e:
            current_app.logger.info("Rejected bearer token on %s: %s", request.path, e)
            return jsonify({"error": "Invalid or expired token"}), 403

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """Require the caller's role to grant a specific permission. Use after @require_auth."""
    if not validate_permission_code(permission_code):
        raise ValueError(f"Unknown permission code: {permission_code}")

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Access token required"}), 401

            principal = g.principal
            if not role_has_permission(principal.role, permission_code):
                current_app.logger.warning(
                    "Permission denied: user_id=%s role=%s permission=%s path=%s",
                    principal.user_id, principal.role, permission_code, request.path,
                )
                return jsonify({
                    "error": "Insufficient permissions",
                    "required_permission": permission_code,
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
