"""Identity store backed by a signed session token and the profile table."""

from __future__ import annotations

import logging
from typing import Any

from teamgate.auth.jwt import TokenExpiredError, TokenInvalidError, verify_token
from teamgate.storage.base import IdentityStore
from teamgate.storage.metadata_store import MetadataStore

logger = logging.getLogger(__name__)


class TokenIdentity(IdentityStore):
    """The current actor is whoever the session token names.

    An absent, expired or tampered token means nobody is signed in. The
    token's ``team`` claim, when present, is the session's active team.
    """

    def __init__(self, profiles: MetadataStore, token: str | None, secret: str) -> None:
        self._profiles = profiles
        self._token = token
        self._secret = secret

    def _claims(self) -> dict[str, Any] | None:
        if not self._token:
            return None
        try:
            return verify_token(self._token, self._secret)
        except (TokenExpiredError, TokenInvalidError) as e:
            logger.info("Session token rejected: %s", e)
            return None

    async def get_current_actor(self) -> str | None:
        claims = self._claims()
        return claims["sub"] if claims else None

    async def get_active_team(self) -> str | None:
        claims = self._claims()
        return claims.get("team") if claims else None

    async def get_legacy_role(self, actor_id: str) -> str | None:
        return await self._profiles.get_legacy_role(actor_id)
