# Overview: Shared request parsing and error mapping for API routes.

from flask import current_app, jsonify, request

from ..extensions import db
from ..services.access_policy import AccessDeniedError
from ..services.ledger_service import StockLimitError, StockRowMissingError
from ..time_utils import parse_date_range
from ..validation import MAX_INT, ConflictError, ValidationError


class QueryParamError(ValidationError):
    """Raised when a query-string filter cannot be parsed."""
    pass


def query_int(name: str) -> int | None:
    raw = request.args.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise QueryParamError(f"{name} must be an integer")
    if abs(value) > MAX_INT:
        raise QueryParamError(f"{name} is out of range")
    return value


def query_str(name: str) -> str | None:
    raw = request.args.get(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def query_date_range():
    """(start, end) from startDate/endDate; a date-only endDate covers the whole day."""
    try:
        return parse_date_range(request.args.get("startDate"), request.args.get("endDate"))
    except ValueError:
        raise QueryParamError("startDate and endDate must be ISO-8601 dates")


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def json_error(exc: Exception, *, generic: str = "Request failed", not_found: tuple = (), conflict: tuple = ()):
    """
    Map a service exception to a JSON error response.

    not_found and conflict list the caller's domain errors that mean 404
    and 409.
    Anything unrecognised is logged with its traceback and returned as a
    generic 500.
    """
    if isinstance(exc, ValidationError):
        return jsonify({"error": generic, "message": str(exc)}), 400
    if isinstance(exc, AccessDeniedError):
        return jsonify({"error": str(exc)}), 403
    if not_found and isinstance(exc, not_found):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, (ConflictError, StockRowMissingError, StockLimitError) + tuple(conflict)):
        return jsonify({"error": str(exc)}), 409

    db.session.rollback()
    current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"error": "Internal server error"}), 500
