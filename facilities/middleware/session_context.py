"""
Session Context Middleware: parses the identity provider's bearer token into g.session.

The external identity provider signs HS256 tokens with SESSION_SECRET_KEY.
Claims used here:

    sub       user id (string, as PyJWT requires)
    role      STAFF | TECHNICIAN | MANAGER | ADMIN
    hotel_id  hotel the user belongs to (may be null)
    name      display name (optional)
    exp       expiry

A missing, expired or tampered token leaves g.session = None. Rejecting the
request is left to facilities.auth.require_session, so public routes (health
checks) never need a token.
"""

import logging
from dataclasses import dataclass

import jwt as pyjwt
from flask import current_app, g, request

from facilities.models.hotel import USER_ROLES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    user_id: int
    role: str
    hotel_id: int | None = None
    name: str | None = None


def decode_session_token(token: str) -> SessionContext:
    """Verify a bearer token and build the session from its claims.

    Raises:
        jwt.InvalidTokenError: Bad signature, expired, or malformed claims.
    """
    payload = pyjwt.decode(
        token,
        current_app.config["SESSION_SECRET_KEY"],
        algorithms=[current_app.config["SESSION_TOKEN_ALGORITHM"]],
        options={"require": ["sub", "exp"]},
    )
    role = str(payload.get("role") or "").upper()
    if role not in USER_ROLES:
        raise pyjwt.InvalidTokenError(f"Unknown role claim: {role!r}")
    try:
        user_id = int(payload["sub"])
        hotel_id = int(payload["hotel_id"]) if payload.get("hotel_id") is not None else None
    except (TypeError, ValueError) as exc:
        raise pyjwt.InvalidTokenError("Non-numeric sub/hotel_id claim") from exc
    return SessionContext(user_id=user_id, role=role, hotel_id=hotel_id, name=payload.get("name"))


def init_session_middleware(app):
    """Register session parsing as a before_request hook."""

    @app.before_request
    def _load_session():
        g.session = None

        if not request.path.startswith("/api/v1/"):
            return

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return

        token = auth_header[7:]  # Strip "Bearer "
        try:
            g.session = decode_session_token(token)
        except pyjwt.ExpiredSignatureError:
            logger.info("Expired session token on %s", request.path)
        except pyjwt.InvalidTokenError as exc:
            logger.warning("Rejected session token on %s: %s", request.path, exc)
