"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter. The Limiter instance is
created in facilities/__init__.py with no default limits and keyed by remote
address; this module attaches limits per route group.

Usage:
    from facilities.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"

# Blueprints whose routes mutate data
WRITE_BLUEPRINTS = ("work_orders", "ppm", "assets", "safety", "assignment_rules")

# Read-only blueprints polled by dashboards and pickers
READ_BLUEPRINTS = ("dashboard", "locations", "sla")


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Mutation blueprints:  60/minute
        - Read blueprints:      200/minute
        - Health checks:        exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING"):
        logger.info("Rate limiter disabled (TESTING=True)")
        return

    for bp_name in WRITE_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT)(bp)

    for bp_name in READ_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    logger.info("Rate limiter configured: write=%s read=%s", WRITE_LIMIT, READ_LIMIT)
