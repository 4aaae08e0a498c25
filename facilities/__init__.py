"""
Hotel Facilities Platform
Flask Application Factory.

Usage:
    from facilities import create_app
    app = create_app()           # defaults to APP_ENV or "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event
from sqlalchemy.exc import SQLAlchemyError

from facilities.config import config
from facilities.models import db
from facilities.middleware.diagnostics import run_startup_diagnostics
from facilities.middleware.logging_config import configure_logging
from facilities.middleware.rate_limiter import init_rate_limits
from facilities.middleware.security_headers import init_security_headers
from facilities.middleware.session_context import init_session_middleware
from facilities.middleware.timing import init_request_timing
from facilities.services.realtime import relay
from facilities.utils.errors import E, api_error

logger = logging.getLogger(__name__)


# ── SQLite FK enforcement (global engine event) ─────────────────────────
@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit — apply per-blueprint
    storage_uri=os.getenv("REDIS_URL", "memory://"),  # Redis in production, memory for dev
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiate so ProductionConfig can refuse to start without its env vars
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)
    relay.init_app(app)

    # ── Request middleware ───────────────────────────────────────────────
    init_request_timing(app)
    init_session_middleware(app)
    init_security_headers(app)

    # ── Import all models so Alembic can detect them ─────────────────────
    from facilities.models import asset as _asset_models          # noqa: F401
    from facilities.models import hotel as _hotel_models          # noqa: F401
    from facilities.models import ppm as _ppm_models              # noqa: F401
    from facilities.models import safety as _safety_models        # noqa: F401
    from facilities.models import work_order as _work_order_models  # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS; migrations own ALTERs) ──
    os.makedirs(app.instance_path, exist_ok=True)
    with app.app_context():
        try:
            db.create_all()
        except SQLAlchemyError as exc:
            logger.warning("db.create_all() failed: %s", exc)

    # ── Blueprints ───────────────────────────────────────────────────────
    from facilities.blueprints.asset_bp import asset_bp
    from facilities.blueprints.assignment_rule_bp import assignment_rule_bp
    from facilities.blueprints.dashboard_bp import dashboard_bp
    from facilities.blueprints.health_bp import health_bp
    from facilities.blueprints.location_bp import location_bp
    from facilities.blueprints.ppm_bp import ppm_bp
    from facilities.blueprints.safety_bp import safety_bp
    from facilities.blueprints.sla_bp import sla_bp
    from facilities.blueprints.work_order_bp import work_order_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(ppm_bp)
    app.register_blueprint(work_order_bp)
    app.register_blueprint(assignment_rule_bp)
    app.register_blueprint(asset_bp)
    app.register_blueprint(safety_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(location_bp)
    app.register_blueprint(sla_bp)

    init_rate_limits(app, limiter)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("mark-overdue-ppm")
    def mark_overdue_ppm_cmd():
        """Move SCHEDULED PPM tasks past their due date to OVERDUE."""
        from facilities.services.ppm_service import mark_overdue_tasks
        count = mark_overdue_tasks()
        click.echo(f"Marked {count} PPM task(s) OVERDUE.")

    @app.cli.command("mark-overdue-sla")
    def mark_overdue_sla_cmd():
        """Flag work order SLAs that have missed their response or resolution target."""
        from facilities.services.sla_service import mark_overdue_slas
        count = mark_overdue_slas()
        click.echo(f"Marked {count} work order SLA(s) overdue.")

    @app.cli.command("send-certificate-reminders")
    def send_certificate_reminders_cmd():
        """Raise one expiry reminder for each EXPIRING certificate."""
        from facilities.services.safety_service import send_expiry_reminders
        count = send_expiry_reminders()
        click.echo(f"Sent {count} certificate expiry reminder(s).")

    # ── App-level error handlers (outside any blueprint) ─────────────────
    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, f"Not found: {request.path}")

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_error(E.VALIDATION_INVALID, "Method not allowed", status=405)

    @app.errorhandler(429)
    def rate_limited(e):
        return api_error(E.VALIDATION_INVALID, "Too many requests", status=429)

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error on %s: %s", request.path, e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")

    run_startup_diagnostics(app)

    return app
