"""
Startup diagnostics: runs once when the Flask app starts.

Checks the database, the relay's Redis and the session secret, then logs a
summary banner.
"""

import logging
import sys

import redis
from flask import Flask
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError

from facilities.models import db

logger = logging.getLogger(__name__)


def run_startup_diagnostics(app: Flask):
    """Run diagnostic checks during app startup (inside app context)."""
    if app.config.get("TESTING"):
        return  # skip during tests for speed

    issues: list[str] = []

    with app.app_context():
        py = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

        # ── Database ─────────────────────────────────────────────────
        db_status = "ok"
        db_uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
        db_type = "PostgreSQL" if "postgresql" in db_uri else "SQLite" if "sqlite" in db_uri else "unknown"
        table_count = "?"
        try:
            db.session.execute(db.text("SELECT 1"))
            table_count = len(sa_inspect(db.engine).get_table_names())
            if table_count == 0:
                issues.append("No tables found, run 'flask db upgrade'")
        except SQLAlchemyError as exc:
            db_status = "FAILED"
            issues.append(f"Database unreachable: {exc}")

        # ── Real-time relay (Redis) ──────────────────────────────────
        realtime_status = "disabled"
        if app.config.get("REALTIME_ENABLED") and app.config.get("REDIS_URL"):
            try:
                redis.from_url(app.config["REDIS_URL"], socket_timeout=2).ping()
                realtime_status = "ok"
            except redis.RedisError:
                realtime_status = "unreachable"
                issues.append("Redis unreachable, real-time events will be dropped")

        # ── Session tokens ───────────────────────────────────────────
        session_secret = bool(app.config.get("SESSION_SECRET_KEY"))
        if not session_secret:
            issues.append("SESSION_SECRET_KEY not set, every API request will be rejected")

        banner = f"""
╔══════════════════════════════════════════════════════════════╗
║  Hotel Facilities Platform — Startup Diagnostics             ║
╠══════════════════════════════════════════════════════════════╣
║  Python      : {py:<46s}║
║  Debug       : {str(app.debug):<46s}║
║  Database    : {f'{db_type} ({db_status})':<46s}║
║  Tables      : {str(table_count):<46s}║
║  Realtime    : {realtime_status:<46s}║
║  Sessions    : {'secret configured' if session_secret else 'NOT CONFIGURED':<46s}║
╚══════════════════════════════════════════════════════════════╝"""
        logger.info(banner)

        if issues:
            logger.warning("Startup issues detected:")
            for issue in issues:
                logger.warning("  ⚠ %s", issue)
        else:
            logger.info("All startup checks passed")
