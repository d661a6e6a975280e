"""Shared test fixtures for Teamgate."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from teamgate.config import Config
from teamgate.events.bus import EventBus
from teamgate.storage.base import IdentityStore, TeamRoleStore
from teamgate.storage.metadata_store import MetadataStore


class FakeTeamRoles(TeamRoleStore):
    """In-memory assignment store that records calls and can be made to fail."""

    def __init__(self) -> None:
        self.assignments: dict[tuple[str, str], str] = {}
        self.calls: list[tuple[str, str]] = []
        self.error: Exception | None = None

    async def get_assignment(self, actor_id: str, team_id: str) -> str | None:
        self.calls.append((actor_id, team_id))
        if self.error is not None:
            raise self.error
        return self.assignments.get((actor_id, team_id))


class FakeIdentity(IdentityStore):
    def __init__(self) -> None:
        self.current_actor: str | None = None
        self.active_team: str | None = None
        self.legacy_roles: dict[str, str | None] = {}
        self.calls: list[str] = []
        self.error: Exception | None = None
        self.team_error: Exception | None = None

    async def get_current_actor(self) -> str | None:
        return self.current_actor

    async def get_active_team(self) -> str | None:
        if self.team_error is not None:
            raise self.team_error
        return self.active_team

    async def get_legacy_role(self, actor_id: str) -> str | None:
        self.calls.append(actor_id)
        if self.error is not None:
            raise self.error
        return self.legacy_roles.get(actor_id)


@pytest.fixture
def tmp_db(tmp_path: Path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
async def store(tmp_db: Path) -> AsyncGenerator[MetadataStore, None]:
    s = MetadataStore(tmp_db)
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(home_path=tmp_path)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def team_roles() -> FakeTeamRoles:
    return FakeTeamRoles()


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TEAMGATE_HOME",
        "TEAMGATE_LOG_LEVEL",
        "TEAMGATE_JWT_SECRET",
        "TEAMGATE_SIGN_IN_ROUTE",
        "TEAMGATE_RESOLVE_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
