# backend/quotedesk/routes/system.py
"""
System health endpoints.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy import text
from ..extensions import db
from quotedesk.time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/")
def index():
    return {"message": "Quoting backend is running. Visit /health to check status."}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable
    - 503: database unreachable
    """
    database_health = check_database_health()

    if database_health["status"] == "healthy":
        overall_status, http_status = "ok", 200
    else:
        overall_status, http_status = "unhealthy", 503

    response = {
        "status": overall_status,
        "env": "testing" if current_app.testing else ("debug" if current_app.debug else "production"),
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "database": database_health,
        }
    }

    return response, http_status
