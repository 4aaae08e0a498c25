"""
Hotel Facilities Platform
Route guards over the per-request session.

Provides:
    - require_session: reject requests without a valid session (401)
    - require_role:    enforce a minimum role (403)
    - current_session: the SessionContext for this request

Role hierarchy: ADMIN > MANAGER > TECHNICIAN > STAFF

Guards raise AuthenticationError / ForbiddenError; the blueprint error
handlers turn them into JSON responses.
"""

import functools
import logging

from flask import g, request

from facilities.core.exceptions import AuthenticationError, ForbiddenError
from facilities.models.hotel import ROLE_RANK

logger = logging.getLogger(__name__)


def current_session():
    """Return g.session or raise AuthenticationError."""
    session = getattr(g, "session", None)
    if session is None:
        raise AuthenticationError()
    return session


def require_session(f):
    """Decorator: the endpoint needs an authenticated session."""
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        current_session()
        return f(*args, **kwargs)

    return decorated


def require_role(minimum_role: str):
    """
    Decorator: require a minimum role level.

    Usage:
        @require_role("MANAGER")
        def bulk(): ...

    Implies require_session.
    """
    required_rank = ROLE_RANK[minimum_role]

    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            session = current_session()
            if ROLE_RANK.get(session.role, -1) < required_rank:
                logger.warning(
                    "Access denied: role '%s' tried to access '%s'-level endpoint %s",
                    session.role, minimum_role, request.path,
                )
                raise ForbiddenError()
            return f(*args, **kwargs)
        return decorated
    return decorator
