"""Abstract store interfaces consumed by role resolution."""

from __future__ import annotations

from abc import ABC, abstractmethod


class IdentityStore(ABC):
    """Who is signed in, and the legacy per-actor role field."""

    @abstractmethod
    async def get_current_actor(self) -> str | None:
        """Return the verified actor ID, or None if nobody is signed in."""

    @abstractmethod
    async def get_legacy_role(self, actor_id: str) -> str | None:
        """Return the actor's profile-level role string, if any."""

    async def get_active_team(self) -> str | None:
        """Team the session is working in, when the session carries one."""
        return None


class TeamRoleStore(ABC):
    """Explicit per-team role assignments."""

    @abstractmethod
    async def get_assignment(self, actor_id: str, team_id: str) -> str | None:
        """Return the role assigned to the actor in the team, or None."""
