# Overview: Flask API routes for system health; returns JSON responses.

"""
System health endpoint.

Reports database reachability and whether the reference data the rest of
the API depends on (bases, assets, accounts) has been seeded.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Asset, Base, Stock, User
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Check database connectivity with a count per core table."""
    start_time = time.time()
    try:
        details = {
            "bases": db.session.query(Base).count(),
            "assets": db.session.query(Asset).count(),
            "stocks": db.session.query(Stock).count(),
            "users": db.session.query(User).count(),
        }
        elapsed_ms = (time.time() - start_time) * 1000
    except SQLAlchemyError:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }

    if details["users"] == 0 or details["bases"] == 0:
        return {
            "status": "degraded",
            "latency_ms": round(elapsed_ms, 2),
            "warning": "Database reachable but not seeded (run `flask system seed`)",
            "details": details,
        }

    return {
        "status": "healthy",
        "latency_ms": round(elapsed_ms, 2),
        "details": details,
    }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy or degraded (reachable, empty)
    - 503: database unreachable
    """
    database_health = check_database_health()
    http_status = 503 if database_health["status"] == "unhealthy" else 200

    return {
        "status": database_health["status"],
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {"database": database_health},
    }, http_status
