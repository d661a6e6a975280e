"""Effective role resolution for an actor inside a team."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from teamgate.core.sources import LegacyProfileSource, RoleSource, TeamAssignmentSource
from teamgate.events.bus import EventBus
from teamgate.events.types import EventType
from teamgate.models.role import Role
from teamgate.storage.base import IdentityStore, TeamRoleStore

logger = logging.getLogger(__name__)


class RoleResolver:
    """Walks an ordered chain of role sources and returns the first hit.

    Sources are queried one at a time. A source that raises or times out is
    treated exactly like a source that found nothing, so an outage can only
    ever lower the result towards ``member``.
    """

    def __init__(
        self,
        sources: Sequence[RoleSource],
        *,
        event_bus: EventBus | None = None,
        timeout: float | None = None,
    ) -> None:
        self._sources = tuple(sources)
        self._event_bus = event_bus
        self._timeout = timeout

    @classmethod
    def from_stores(
        cls,
        team_roles: TeamRoleStore,
        identity: IdentityStore,
        *,
        event_bus: EventBus | None = None,
        timeout: float | None = None,
    ) -> RoleResolver:
        """Standard chain: team assignment, then legacy profile role."""
        return cls(
            [TeamAssignmentSource(team_roles), LegacyProfileSource(identity)],
            event_bus=event_bus,
            timeout=timeout,
        )

    @property
    def sources(self) -> tuple[RoleSource, ...]:
        return self._sources

    async def resolve(self, actor_id: str | None, team_id: str | None) -> Role:
        """Return the effective role of ``actor_id`` in ``team_id``."""
        if not actor_id or not team_id:
            return Role.MEMBER

        for source in self._sources:
            role = await self._lookup(source, actor_id, team_id)
            if role is not None:
                await self._emit(
                    EventType.ROLE_RESOLVED,
                    {"actor_id": actor_id, "team_id": team_id, "role": role, "source": source.name},
                )
                return role

        await self._emit(
            EventType.ROLE_RESOLVED,
            {"actor_id": actor_id, "team_id": team_id, "role": Role.MEMBER, "source": None},
        )
        return Role.MEMBER

    async def _lookup(self, source: RoleSource, actor_id: str, team_id: str) -> Role | None:
        try:
            async with asyncio.timeout(self._timeout):
                return await source.lookup(actor_id, team_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                "Role source %s failed for actor %s in team %s: %r",
                source.name,
                actor_id,
                team_id,
                e,
            )
            await self._emit(
                EventType.ROLE_SOURCE_FAILED,
                {"actor_id": actor_id, "team_id": team_id, "source": source.name, "error": repr(e)},
            )
            return None

    async def _emit(self, event_type: EventType, data: dict) -> None:
        if self._event_bus is not None:
            await self._event_bus.emit(event_type, data)


async def resolve_effective_role(
    actor_id: str | None,
    team_id: str | None,
    *,
    team_roles: TeamRoleStore,
    identity: IdentityStore,
    timeout: float | None = None,
) -> Role:
    """One-shot resolution through the standard source chain."""
    resolver = RoleResolver.from_stores(team_roles, identity, timeout=timeout)
    return await resolver.resolve(actor_id, team_id)
