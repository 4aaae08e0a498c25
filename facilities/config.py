"""
Hotel Facilities Platform
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

# Default SQLite path for local dev when PostgreSQL is not running
_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'facilities_dev.db')}"
_SQLITE_TEST = "sqlite:///:memory:"

# Generate a random key for development; production MUST use a stable env var
_DEV_SECRET = secrets.token_hex(32)


def _env_flag(name, default):
    return os.getenv(name, default).lower() in ("true", "1", "yes", "on")


class Config:
    """Base configuration shared across all environments."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    # Session tokens are issued by the external identity provider (HS256).
    SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY")
    SESSION_TOKEN_ALGORITHM = "HS256"

    # SQLAlchemy
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,   # recycle connections every 5 min
        "pool_timeout": 20,    # wait max 20s for a connection from pool
    }

    # Redis — rate limiter storage and real-time relay
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Real-time relay (room fan-out lives outside this service)
    REALTIME_ENABLED = _env_flag("REALTIME_ENABLED", "true")
    REALTIME_CHANNEL_PREFIX = os.getenv("REALTIME_CHANNEL_PREFIX", "facilities:room:")

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Dashboard figures that are not computed from data yet
    DASHBOARD_AVERAGE_RESPONSE_MINUTES = int(os.getenv("DASHBOARD_AVERAGE_RESPONSE_MINUTES", "45"))
    DASHBOARD_MONTHLY_SPEND = float(os.getenv("DASHBOARD_MONTHLY_SPEND", "12500"))
    DASHBOARD_ASSET_UPTIME = float(os.getenv("DASHBOARD_ASSET_UPTIME", "98.5"))


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    _raw_db_url = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI = (
        _raw_db_url.replace("postgres://", "postgresql://", 1) if _raw_db_url else _SQLITE_DEV
    )
    SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "dev-session-secret")


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", _SQLITE_TEST)
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SESSION_SECRET_KEY = "test-session-secret-with-enough-bytes"
    REALTIME_ENABLED = False
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    # Heroku-style URLs use postgres:// but SQLAlchemy 2.0 requires postgresql://
    _raw_db_url = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI = _raw_db_url.replace("postgres://", "postgresql://", 1) if _raw_db_url else None
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    # Override engine options with PostgreSQL statement timeout
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,
        "pool_timeout": 20,
        "connect_args": {
            "options": "-c statement_timeout=30000",  # 30s query timeout
        },
    }

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL environment variable is required in production")
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")
        if not self.SESSION_SECRET_KEY:
            raise RuntimeError("SESSION_SECRET_KEY environment variable must be set in production")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
