"""Team membership management: who may add whom, with which role."""

import logging

from teamgate.auth.permissions import is_owner
from teamgate.core.resolver import RoleResolver
from teamgate.events.bus import EventBus
from teamgate.events.types import EventType
from teamgate.models.membership import TeamRoleAssignment
from teamgate.models.role import INVITABLE_ROLES, Role, parse_role
from teamgate.storage.metadata_store import MetadataStore

logger = logging.getLogger(__name__)


class TeamError(Exception):
    """Base error for team membership operations."""


class PermissionDeniedError(TeamError):
    """Raised when the acting user may not manage the team."""


class InvalidRoleError(TeamError):
    """Raised when a role is unknown or may not be handed out."""


class MemberNotFoundError(TeamError):
    """Raised when the target actor has no assignment in the team."""


class TeamRoster:
    """Adds, re-roles and removes team members on behalf of the team owner."""

    def __init__(self, store: MetadataStore, resolver: RoleResolver, event_bus: EventBus) -> None:
        """Initialize TeamRoster.

        Args:
            store: Store holding team-role assignments
            resolver: Resolver used to check the acting user's own role
            event_bus: Event bus for membership events
        """
        self._store = store
        self._resolver = resolver
        self._event_bus = event_bus

    async def create_team(self, owner_id: str, team_id: str) -> TeamRoleAssignment:
        """Start a team with ``owner_id`` as its owner.

        Raises:
            TeamError: If the team already has members
        """
        if await self._store.list_assignments(team_id):
            raise TeamError(f"Team {team_id} already exists")
        assignment = await self._store.assign_role(owner_id, team_id, Role.OWNER)
        await self._event_bus.emit(
            EventType.MEMBER_ADDED,
            {"team_id": team_id, "actor_id": owner_id, "role": Role.OWNER},
        )
        return assignment

    async def add_member(
        self,
        inviter_id: str,
        team_id: str,
        actor_id: str,
        role: Role | str = Role.MEMBER,
    ) -> TeamRoleAssignment:
        """Add ``actor_id`` to the team. An existing assignment is replaced.

        Raises:
            PermissionDeniedError: If the inviter is not the team owner
            InvalidRoleError: If the role is unknown, owner or admin
        """
        target_role = self._invitable(role)
        await self._require_owner(inviter_id, team_id)

        assignment = await self._store.assign_role(
            actor_id, team_id, target_role, assigned_by=inviter_id
        )
        logger.info("%s added %s to team %s as %s", inviter_id, actor_id, team_id, target_role)
        await self._event_bus.emit(
            EventType.MEMBER_ADDED,
            {"team_id": team_id, "actor_id": actor_id, "role": target_role, "by": inviter_id},
        )
        return assignment

    async def change_role(
        self, inviter_id: str, team_id: str, actor_id: str, role: Role | str
    ) -> TeamRoleAssignment:
        """Supersede an existing member's role."""
        target_role = self._invitable(role)
        await self._require_owner(inviter_id, team_id)

        previous = await self._store.get_assignment(actor_id, team_id)
        if previous is None:
            raise MemberNotFoundError(f"{actor_id} is not a member of team {team_id}")
        if is_owner(previous):
            raise PermissionDeniedError("The team owner's role cannot be changed")

        assignment = await self._store.assign_role(
            actor_id, team_id, target_role, assigned_by=inviter_id
        )
        await self._event_bus.emit(
            EventType.MEMBER_ROLE_CHANGED,
            {"team_id": team_id, "actor_id": actor_id, "from": previous, "to": target_role},
        )
        return assignment

    async def remove_member(self, inviter_id: str, team_id: str, actor_id: str) -> None:
        await self._require_owner(inviter_id, team_id)
        if actor_id == inviter_id:
            raise PermissionDeniedError("The team owner cannot remove themselves")

        removed = await self._store.remove_assignment(actor_id, team_id)
        if not removed:
            raise MemberNotFoundError(f"{actor_id} is not a member of team {team_id}")
        await self._event_bus.emit(
            EventType.MEMBER_REMOVED, {"team_id": team_id, "actor_id": actor_id}
        )

    async def members(self, team_id: str) -> list[TeamRoleAssignment]:
        rows = await self._store.list_assignments(team_id)
        members = []
        for row in rows:
            role = parse_role(row["role"])
            if role is None:
                logger.warning(
                    "Skipping member %s with unknown role %r", row["actor_id"], row["role"]
                )
                continue
            members.append(TeamRoleAssignment(**{**row, "role": role}))
        return members

    def _invitable(self, role: Role | str) -> Role:
        parsed = parse_role(role)
        if parsed is None:
            raise InvalidRoleError(f"Unknown role: {role!r}")
        if parsed not in INVITABLE_ROLES:
            raise InvalidRoleError(f"Role {parsed} cannot be assigned to team members")
        return parsed

    async def _require_owner(self, actor_id: str, team_id: str) -> None:
        role = await self._resolver.resolve(actor_id, team_id)
        if not is_owner(role):
            raise PermissionDeniedError(f"Only team owners can manage members (role: {role})")
