"""Access decisions over a role that may still be resolving."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from teamgate.auth.permissions import has_any_role, has_capability
from teamgate.core.resolver import RoleResolver
from teamgate.events.bus import EventBus
from teamgate.events.types import EventType
from teamgate.models.role import Capability, Role
from teamgate.storage.base import IdentityStore

logger = logging.getLogger(__name__)


class ResolutionState(StrEnum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class AuthStatus(StrEnum):
    PENDING = "pending"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class Decision(StrEnum):
    ALLOW = "allow"
    DENY = "deny"
    UNKNOWN = "unknown"


class DenyReason(StrEnum):
    ROLE = "role"
    CAPABILITY = "capability"


@dataclass(frozen=True)
class Resolution:
    """Where role resolution stands for one (actor, team) pair."""

    state: ResolutionState
    actor_id: str | None = None
    team_id: str | None = None
    role: Role | None = None
    error: str | None = None

    @classmethod
    def pending(cls, actor_id: str | None = None, team_id: str | None = None) -> Resolution:
        return cls(ResolutionState.PENDING, actor_id, team_id)

    @classmethod
    def resolved(cls, actor_id: str | None, team_id: str | None, role: Role) -> Resolution:
        return cls(ResolutionState.RESOLVED, actor_id, team_id, role=role)

    @classmethod
    def failed(cls, actor_id: str | None, team_id: str | None, error: str) -> Resolution:
        return cls(ResolutionState.FAILED, actor_id, team_id, error=error)

    @property
    def is_pending(self) -> bool:
        return self.state == ResolutionState.PENDING

    @property
    def effective_role(self) -> Role | None:
        """Role to decide with. A failed resolution decides as ``member``."""
        if self.state == ResolutionState.RESOLVED:
            return self.role
        if self.state == ResolutionState.FAILED:
            return Role.MEMBER
        return None


@dataclass(frozen=True)
class AccessCheck:
    decision: Decision
    role: Role | None = None
    reason: DenyReason | None = None

    @property
    def allowed(self) -> bool:
        return self.decision == Decision.ALLOW


def evaluate(
    resolution: Resolution,
    *,
    allowed_roles: Iterable[Role] | None = None,
    required_capability: Capability | None = None,
) -> AccessCheck:
    """Run the role check, then the capability check.

    ``None`` for either option means that check is not configured. An empty
    ``allowed_roles`` collection is configured and admits nobody.
    """
    role = resolution.effective_role
    if role is None:
        return AccessCheck(Decision.UNKNOWN)

    if allowed_roles is not None and not has_any_role(role, allowed_roles):
        return AccessCheck(Decision.DENY, role, DenyReason.ROLE)

    if required_capability is not None and not has_capability(role, required_capability):
        return AccessCheck(Decision.DENY, role, DenyReason.CAPABILITY)

    return AccessCheck(Decision.ALLOW, role)


def can(resolution: Resolution, capability: Capability) -> Decision:
    return evaluate(resolution, required_capability=capability).decision


@dataclass(frozen=True)
class NavItem:
    label: str
    path: str
    required_capability: Capability | None = None


def visible_nav_items(resolution: Resolution, items: Sequence[NavItem]) -> list[NavItem]:
    """Navigation entries the actor may see. Gated entries stay hidden while pending."""
    return [
        item
        for item in items
        if item.required_capability is None
        or can(resolution, item.required_capability) == Decision.ALLOW
    ]


class AccessContext:
    """Authentication and role state for a single view or session.

    Each call to :meth:`load` supersedes the previous one. A result that
    arrives for a superseded call is dropped, so a slow lookup for an old
    team can never land on the new one.
    """

    def __init__(
        self,
        identity: IdentityStore,
        resolver: RoleResolver,
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        self._identity = identity
        self._resolver = resolver
        self._event_bus = event_bus
        self._generation = 0
        self.auth_status = AuthStatus.PENDING
        self.actor_id: str | None = None
        self.team_id: str | None = None
        self.resolution = Resolution.pending()

    @property
    def loading(self) -> bool:
        return self.auth_status == AuthStatus.PENDING or self.resolution.is_pending

    @property
    def role(self) -> Role | None:
        return self.resolution.effective_role

    async def load_active_team(self) -> Resolution:
        """Like :meth:`load`, using the team the session itself names."""
        try:
            team_id = await self._identity.get_active_team()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Could not determine active team: %r", e)
            team_id = None
        return await self.load(team_id)

    async def load(self, team_id: str | None) -> Resolution:
        """Authenticate, then resolve the actor's role in ``team_id``."""
        self._generation += 1
        generation = self._generation
        self.auth_status = AuthStatus.PENDING
        self.team_id = team_id
        self.resolution = Resolution.pending(self.actor_id, team_id)

        try:
            actor_id = await self._identity.get_current_actor()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Could not determine current actor: %r", e)
            actor_id = None

        if generation != self._generation:
            await self._discard(None, team_id)
            return self.resolution

        self.actor_id = actor_id
        if actor_id is None:
            self.auth_status = AuthStatus.UNAUTHENTICATED
            self.resolution = Resolution.resolved(None, team_id, Role.MEMBER)
            return self.resolution

        self.auth_status = AuthStatus.AUTHENTICATED
        self.resolution = Resolution.pending(actor_id, team_id)
        try:
            role = await self._resolver.resolve(actor_id, team_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Role resolution failed for actor %s in team %s", actor_id, team_id)
            outcome = Resolution.failed(actor_id, team_id, repr(e))
        else:
            outcome = Resolution.resolved(actor_id, team_id, role)

        if generation != self._generation:
            await self._discard(actor_id, team_id)
            return self.resolution

        self.resolution = outcome
        return outcome

    def check(
        self,
        *,
        allowed_roles: Iterable[Role] | None = None,
        required_capability: Capability | None = None,
    ) -> AccessCheck:
        return evaluate(
            self.resolution, allowed_roles=allowed_roles, required_capability=required_capability
        )

    def can(self, capability: Capability) -> Decision:
        return can(self.resolution, capability)

    async def _discard(self, actor_id: str | None, team_id: str | None) -> None:
        logger.debug("Discarding stale resolution for actor %s in team %s", actor_id, team_id)
        if self._event_bus is not None:
            await self._event_bus.emit(
                EventType.ROLE_RESOLUTION_DISCARDED, {"actor_id": actor_id, "team_id": team_id}
            )
