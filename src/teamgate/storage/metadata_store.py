"""SQLite store for actor profiles and team-role assignments."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from teamgate.models.membership import ActorProfile, TeamRoleAssignment
from teamgate.models.role import Role
from teamgate.storage.base import TeamRoleStore

logger = logging.getLogger(__name__)


class MetadataStore(TeamRoleStore):
    """SQLite-based store backing team membership and legacy roles."""

    def __init__(self, db_path: Path, *, wal_mode: bool = True) -> None:
        self.db_path = db_path
        self.wal_mode = wal_mode
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Create database and apply schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(str(self.db_path))
        self._db.row_factory = aiosqlite.Row

        if self.wal_mode:
            await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.execute("PRAGMA foreign_keys=ON")

        schema_sql = _load_sql("metadata.sql")
        await self._db.executescript(schema_sql)
        await self._db.commit()
        logger.info("Initialized metadata store at %s", self.db_path)

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        """Get database connection."""
        if self._db is None:
            raise RuntimeError("Store not initialized. Call initialize() first.")
        return self._db

    # --- Profiles ---

    async def create_profile(
        self,
        actor_id: str,
        *,
        email: str | None = None,
        full_name: str | None = None,
        legacy_role: str | None = None,
    ) -> ActorProfile:
        """Create an actor profile."""
        profile = ActorProfile(
            actor_id=actor_id, email=email, full_name=full_name, legacy_role=legacy_role
        )
        await self.db.execute(
            """INSERT INTO profiles (actor_id, email, full_name, legacy_role,
               created_at, updated_at)
               VALUES (:actor_id, :email, :full_name, :legacy_role, :created_at, :updated_at)""",
            profile.to_storage(),
        )
        await self.db.commit()
        return profile

    async def get_profile(self, actor_id: str) -> ActorProfile | None:
        """Get an actor profile by ID."""
        cursor = await self.db.execute("SELECT * FROM profiles WHERE actor_id = ?", (actor_id,))
        row = await cursor.fetchone()
        return ActorProfile(**_row_to_dict(row)) if row else None

    async def update_profile(self, actor_id: str, updates: dict[str, Any]) -> ActorProfile | None:
        """Change only the given profile fields. Returns None if no such profile."""
        existing = await self.get_profile(actor_id)
        if existing is None:
            return None

        allowed_fields = {"email", "full_name", "legacy_role"}
        filtered = {k: v for k, v in updates.items() if k in allowed_fields}
        if not filtered:
            return existing

        filtered["updated_at"] = datetime.now(UTC).isoformat()
        set_clauses = [f"{key} = ?" for key in filtered]
        values = [*filtered.values(), actor_id]
        await self.db.execute(
            f"UPDATE profiles SET {', '.join(set_clauses)} WHERE actor_id = ?",
            values,
        )
        await self.db.commit()
        return await self.get_profile(actor_id)

    async def get_legacy_role(self, actor_id: str) -> str | None:
        cursor = await self.db.execute(
            "SELECT legacy_role FROM profiles WHERE actor_id = ?", (actor_id,)
        )
        row = await cursor.fetchone()
        return row["legacy_role"] if row else None

    # --- Team-role assignments ---

    async def assign_role(
        self,
        actor_id: str,
        team_id: str,
        role: Role,
        *,
        assigned_by: str | None = None,
    ) -> TeamRoleAssignment:
        """Assign a role in a team. Replaces any previous assignment for the pair."""
        assignment = TeamRoleAssignment(
            actor_id=actor_id, team_id=team_id, role=role, assigned_by=assigned_by
        )
        await self.db.execute(
            """INSERT INTO team_roles (actor_id, team_id, role, assigned_by, assigned_at)
               VALUES (:actor_id, :team_id, :role, :assigned_by, :assigned_at)
               ON CONFLICT (actor_id, team_id) DO UPDATE SET
                   role = excluded.role,
                   assigned_by = excluded.assigned_by,
                   assigned_at = excluded.assigned_at""",
            assignment.to_storage(),
        )
        await self.db.commit()
        logger.info("Assigned role %s to %s in team %s", role, actor_id, team_id)
        return assignment

    async def get_assignment(self, actor_id: str, team_id: str) -> str | None:
        cursor = await self.db.execute(
            "SELECT role FROM team_roles WHERE actor_id = ? AND team_id = ?",
            (actor_id, team_id),
        )
        row = await cursor.fetchone()
        return row["role"] if row else None

    async def remove_assignment(self, actor_id: str, team_id: str) -> bool:
        """Remove an actor's assignment in a team. Returns True if one existed."""
        cursor = await self.db.execute(
            "DELETE FROM team_roles WHERE actor_id = ? AND team_id = ?",
            (actor_id, team_id),
        )
        await self.db.commit()
        return cursor.rowcount > 0

    async def list_assignments(self, team_id: str) -> list[dict[str, Any]]:
        """List all assignments in a team, oldest first."""
        cursor = await self.db.execute(
            "SELECT * FROM team_roles WHERE team_id = ? ORDER BY assigned_at, actor_id",
            (team_id,),
        )
        rows = await cursor.fetchall()
        return [_row_to_dict(row) for row in rows]

    async def list_teams_for_actor(self, actor_id: str) -> list[str]:
        cursor = await self.db.execute(
            "SELECT team_id FROM team_roles WHERE actor_id = ? ORDER BY team_id",
            (actor_id,),
        )
        rows = await cursor.fetchall()
        return [row["team_id"] for row in rows]


def _load_sql(filename: str) -> str:
    """Load SQL file from the schema package."""
    schema_dir = Path(__file__).parent.parent / "schema"
    return (schema_dir / filename).read_text()


def _row_to_dict(row: aiosqlite.Row) -> dict[str, Any]:
    """Convert an aiosqlite Row to a dict."""
    return dict(row)
