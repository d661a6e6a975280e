"""Team-role assignment and legacy actor profile models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from teamgate.models.role import Role


class TeamRoleAssignment(BaseModel):
    """An explicit role for one actor inside one team."""

    actor_id: str
    team_id: str
    role: Role
    assigned_by: str | None = None
    assigned_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_storage(self) -> dict:
        return self.model_dump(mode="json")


class ActorProfile(BaseModel):
    """Per-actor profile carrying the pre-team legacy role field."""

    actor_id: str
    email: str | None = None
    full_name: str | None = None
    legacy_role: str | None = None
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    updated_at: str | None = None

    def to_storage(self) -> dict:
        return self.model_dump()
