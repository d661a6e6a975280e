"""Role sources tried in priority order during resolution."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from teamgate.models.role import Role, parse_role
from teamgate.storage.base import IdentityStore, TeamRoleStore

logger = logging.getLogger(__name__)


class RoleSource(ABC):
    """One place a role can come from."""

    name: ClassVar[str]

    @abstractmethod
    async def lookup(self, actor_id: str, team_id: str) -> Role | None:
        """Return the role this source knows for the pair, or None."""


def _to_role(raw: str | None, *, source: str, actor_id: str) -> Role | None:
    role = parse_role(raw)
    if raw and role is None:
        logger.warning("Ignoring unknown role %r from %s for actor %s", raw, source, actor_id)
    return role


class TeamAssignmentSource(RoleSource):
    """Explicit per-team assignment. Authoritative when present."""

    name = "team_assignment"

    def __init__(self, store: TeamRoleStore) -> None:
        self._store = store

    async def lookup(self, actor_id: str, team_id: str) -> Role | None:
        raw = await self._store.get_assignment(actor_id, team_id)
        return _to_role(raw, source=self.name, actor_id=actor_id)


class LegacyProfileSource(RoleSource):
    """Profile-level role field kept for data created before per-team roles."""

    name = "legacy_profile"

    def __init__(self, identity: IdentityStore) -> None:
        self._identity = identity

    async def lookup(self, actor_id: str, team_id: str) -> Role | None:
        raw = await self._identity.get_legacy_role(actor_id)
        return _to_role(raw, source=self.name, actor_id=actor_id)
