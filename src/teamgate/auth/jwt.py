"""Session token issue and validation for Teamgate actors."""

from __future__ import annotations

import logging
import os
import time
from typing import Any

import jwt

logger = logging.getLogger(__name__)

DEFAULT_SECRET = "test-secret-key-do-not-use"


class TokenExpiredError(Exception):
    """Raised when a session token has expired."""


class TokenInvalidError(Exception):
    """Raised when a session token is invalid."""


def default_secret() -> str:
    return os.environ.get("TEAMGATE_JWT_SECRET", DEFAULT_SECRET)


def create_token(
    actor_id: str,
    *,
    team_id: str | None = None,
    exp_minutes: int = 60,
    secret: str | None = None,
) -> str:
    """Create a session token for an actor, optionally carrying the active team."""
    now = int(time.time())
    payload: dict[str, Any] = {
        "sub": actor_id,
        "iat": now,
        "exp": now + (exp_minutes * 60),
    }
    if team_id:
        payload["team"] = team_id
    return jwt.encode(payload, secret or default_secret(), algorithm="HS256")


def verify_token(token: str, secret: str) -> dict[str, Any]:
    """Verify and decode a session token."""
    try:
        payload = jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as e:
        logger.warning("Token expired: %s", e)
        raise TokenExpiredError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token: %s", e)
        raise TokenInvalidError("Token is invalid") from e
    if not payload.get("sub"):
        raise TokenInvalidError("Token missing actor ID")
    return payload
