"""
Health check blueprint.

Endpoints (no session required):
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — database and relay status
"""

import logging
import time

import redis
from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from facilities.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Readiness check: always 200 if the app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Liveness check with dependency status. Redis is optional."""
    checks = {}
    overall = True

    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        checks["database"] = {"status": "ok", "latency_ms": round((time.perf_counter() - t0) * 1000, 1)}
    except SQLAlchemyError as exc:
        checks["database"] = {"status": "error"}
        overall = False
        logger.error("Health check: database failed: %s", exc)

    if current_app.config.get("REALTIME_ENABLED") and current_app.config.get("REDIS_URL"):
        try:
            t0 = time.perf_counter()
            redis.from_url(current_app.config["REDIS_URL"], socket_timeout=2).ping()
            checks["realtime"] = {"status": "ok", "latency_ms": round((time.perf_counter() - t0) * 1000, 1)}
        except redis.RedisError as exc:
            checks["realtime"] = {"status": "error"}
            logger.warning("Health check: realtime relay unreachable: %s", exc)
    else:
        checks["realtime"] = {"status": "skipped", "detail": "realtime relay disabled"}

    checks["app"] = {
        "name": "Hotel Facilities Platform",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
