"""CLI: init, matrix, profile, assign, revoke, resolve, members, token."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from teamgate.auth.jwt import create_token
from teamgate.auth.permissions import capabilities_for
from teamgate.config import Config
from teamgate.core.resolver import RoleResolver
from teamgate.models.role import Capability, Role, parse_role, role_label
from teamgate.storage.base import IdentityStore
from teamgate.storage.metadata_store import MetadataStore

ROLE_CHOICE = click.Choice([r.value for r in Role])


class _ProfileIdentity(IdentityStore):
    """Offline identity: there is no signed-in actor, only stored profiles."""

    def __init__(self, store: MetadataStore) -> None:
        self._store = store

    async def get_current_actor(self) -> str | None:
        return None

    async def get_legacy_role(self, actor_id: str) -> str | None:
        return await self._store.get_legacy_role(actor_id)


def _setup(config: Config) -> None:
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _display_role(raw: str) -> str:
    if parse_role(raw) is None:
        return f"{raw} (unknown)"
    return role_label(raw)


async def _open_store(config: Config) -> MetadataStore:
    store = MetadataStore(config.metadata_db_path, wal_mode=config.wal_mode)
    await store.initialize()
    return store


@click.group()
@click.version_option(package_name="teamgate")
def main() -> None:
    """Teamgate: team roles and access decisions."""


@main.command()
@click.argument("path", type=click.Path(), required=False)
def init(path: str | None) -> None:
    """Initialize a teamgate home directory (default: TEAMGATE_HOME or ~/.teamgate)."""
    config = Config.load()
    if path:
        config.home_path = Path(path).expanduser().resolve()
    home = config.home_path

    async def _init() -> None:
        store = await _open_store(config)
        await store.close()
        config.save()

    asyncio.run(_init())
    click.echo(f"Initialized teamgate at {home}")
    click.echo(f"Database: {config.metadata_db_path}")


@main.command()
def matrix() -> None:
    """Print the role/capability matrix."""
    table = Table(title="Permission Matrix")
    table.add_column("Role", style="cyan")
    for capability in Capability:
        table.add_column(capability.value, justify="center")

    for role in Role:
        granted = capabilities_for(role)
        table.add_row(
            role_label(role),
            *["[green]✓[/green]" if c in granted else "[dim]-[/dim]" for c in Capability],
        )
    Console().print(table)


@main.command()
@click.argument("actor_id")
@click.option("--email", default=None, help="Actor email")
@click.option("--name", "full_name", default=None, help="Display name")
@click.option("--legacy-role", type=ROLE_CHOICE, default=None, help="Profile-level role")
def profile(
    actor_id: str, email: str | None, full_name: str | None, legacy_role: str | None
) -> None:
    """Create or update an actor profile."""
    config = Config.load()
    _setup(config)

    async def _profile() -> None:
        store = await _open_store(config)
        try:
            existing = await store.get_profile(actor_id)
            if existing is None:
                await store.create_profile(
                    actor_id, email=email, full_name=full_name, legacy_role=legacy_role
                )
                click.echo(f"Created profile {actor_id}")
            else:
                updates = {
                    key: value
                    for key, value in (
                        ("email", email),
                        ("full_name", full_name),
                        ("legacy_role", legacy_role),
                    )
                    if value is not None
                }
                if not updates:
                    click.echo(f"Nothing to update for {actor_id}")
                    return
                await store.update_profile(actor_id, updates)
                click.echo(f"Updated {', '.join(updates)} of {actor_id}")
        except Exception as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        finally:
            await store.close()

    asyncio.run(_profile())


@main.command()
@click.argument("actor_id")
@click.argument("team_id")
@click.argument("role", type=ROLE_CHOICE)
def assign(actor_id: str, team_id: str, role: str) -> None:
    """Assign ACTOR_ID the ROLE in TEAM_ID, replacing any previous role."""
    config = Config.load()
    _setup(config)

    async def _assign() -> None:
        store = await _open_store(config)
        try:
            parsed = parse_role(role) or Role.MEMBER
            await store.assign_role(actor_id, team_id, parsed, assigned_by="cli")
            Console().print(
                Panel(
                    f"[green]✓[/green] {actor_id} is now {role_label(parsed)} in {team_id}",
                    title="Role Assigned",
                )
            )
        finally:
            await store.close()

    asyncio.run(_assign())


@main.command()
@click.argument("actor_id")
@click.argument("team_id")
def revoke(actor_id: str, team_id: str) -> None:
    """Remove ACTOR_ID's assignment in TEAM_ID."""
    config = Config.load()
    _setup(config)

    async def _revoke() -> bool:
        store = await _open_store(config)
        try:
            return await store.remove_assignment(actor_id, team_id)
        finally:
            await store.close()

    if not asyncio.run(_revoke()):
        click.echo(f"{actor_id} has no assignment in {team_id}", err=True)
        sys.exit(1)
    click.echo(f"Revoked {actor_id} from {team_id}")


@main.command()
@click.argument("actor_id")
@click.option("--team", "team_id", default=None, help="Team to resolve the role in")
def resolve(actor_id: str, team_id: str | None) -> None:
    """Show ACTOR_ID's effective role and capabilities."""
    config = Config.load()
    _setup(config)

    async def _resolve() -> Role:
        store = await _open_store(config)
        try:
            resolver = RoleResolver.from_stores(
                store, _ProfileIdentity(store), timeout=config.resolve_timeout
            )
            return await resolver.resolve(actor_id, team_id)
        finally:
            await store.close()

    role = asyncio.run(_resolve())
    granted = sorted(c.value for c in capabilities_for(role))
    Console().print(
        Panel(
            f"Actor: {actor_id}\n"
            f"Team: {team_id or '(none)'}\n"
            f"Role: [bold]{role_label(role)}[/bold]\n"
            f"Capabilities: {', '.join(granted) or '(none)'}",
            title="Effective Role",
        )
    )


@main.command()
@click.argument("team_id")
def members(team_id: str) -> None:
    """List TEAM_ID's explicit role assignments."""
    config = Config.load()
    _setup(config)

    async def _members() -> list[dict]:
        store = await _open_store(config)
        try:
            return await store.list_assignments(team_id)
        finally:
            await store.close()

    rows = asyncio.run(_members())
    table = Table(title=f"Team {team_id}")
    table.add_column("Actor", style="cyan")
    table.add_column("Role")
    table.add_column("Assigned by")
    table.add_column("Assigned at")
    for row in rows:
        table.add_row(
            row["actor_id"],
            _display_role(row["role"]),
            row["assigned_by"] or "",
            row["assigned_at"],
        )
    Console().print(table)


@main.command()
@click.argument("actor_id")
@click.option("--team", "team_id", default=None, help="Active team to embed")
@click.option("--exp-minutes", type=int, default=None, help="Token lifetime")
def token(actor_id: str, team_id: str | None, exp_minutes: int | None) -> None:
    """Issue a session token for ACTOR_ID (development use)."""
    config = Config.load()
    click.echo(
        create_token(
            actor_id,
            team_id=team_id,
            exp_minutes=exp_minutes or config.token_exp_minutes,
            secret=config.jwt_secret,
        )
    )


if __name__ == "__main__":
    main()
