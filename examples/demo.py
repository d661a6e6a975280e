"""Walkthrough of team-scoped role resolution and enforcement.

Creates a temporary store, sets up a team, signs an actor in with a session
token, and shows what a guarded page and a gated fragment render for them.
"""

import asyncio
import tempfile
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from teamgate.auth.identity import TokenIdentity
from teamgate.auth.jwt import create_token
from teamgate.config import Config
from teamgate.core.decision import AccessContext
from teamgate.core.resolver import RoleResolver
from teamgate.core.team import TeamRoster
from teamgate.enforce.content_gate import ContentGate
from teamgate.enforce.route_guard import RouteGuard
from teamgate.events.bus import EventBus
from teamgate.events.types import EventType
from teamgate.models.role import Capability, Role
from teamgate.storage.metadata_store import MetadataStore

SECRET = "demo-secret"
CONFIG = Config(sign_in_route="/login", jwt_secret=SECRET)

console = Console()


def step_header(num: int, title: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold cyan]Step {num}:[/bold cyan] [yellow]{title}[/yellow]",
            border_style="cyan",
        )
    )


async def show_actor(store: MetadataStore, bus: EventBus, actor_id: str) -> None:
    identity = TokenIdentity(store, create_token(actor_id, team_id="T1", secret=SECRET), SECRET)
    resolver = RoleResolver.from_stores(store, identity, event_bus=bus)
    context = AccessContext(identity, resolver, event_bus=bus)
    await context.load_active_team()

    page = await RouteGuard.from_config(
        context, CONFIG, allowed_roles={Role.OWNER, Role.ADMIN, Role.LENDER}, event_bus=bus
    ).enforce("Analyzer page")
    figures = ContentGate(context, required_capability=Capability.FINANCIAL).render(
        "Cash flow: $1,240/mo"
    )
    condition = ContentGate(context, required_capability=Capability.PHYSICAL).render(
        "Roof: replace within 2 years"
    )

    table = Table(title=f"{actor_id} ({context.role})")
    table.add_column("Surface")
    table.add_column("Result")
    table.add_row("Route guard", f"{page.state}: {page.view or page.redirect_to}")
    table.add_row("Financial fragment", str(figures))
    table.add_row("Physical fragment", str(condition))
    console.print(table)


async def demo() -> None:
    """Run the demo."""
    db_path = Path(tempfile.mkdtemp()) / "teamgate.db"
    console.print(f"[dim]Store: {db_path}[/dim]")

    store = MetadataStore(db_path)
    await store.initialize()
    bus = EventBus()

    step_header(1, "Create a team and add members")
    offline = TokenIdentity(store, None, SECRET)
    roster = TeamRoster(store, RoleResolver.from_stores(store, offline), bus)
    await roster.create_team("olivia", "T1")
    await roster.add_member("olivia", "T1", "lena", Role.LENDER)
    await roster.add_member("olivia", "T1", "carlos", Role.CONTRACTOR)

    step_header(2, "A legacy profile with no team assignment")
    await store.create_profile("pat", legacy_role="attorney")

    step_header(3, "What each actor sees")
    for actor_id in ("olivia", "lena", "carlos", "pat"):
        await show_actor(store, bus, actor_id)

    step_header(4, "Recorded denials")
    for event in bus.recent(EventType.ACCESS_DENIED):
        console.print(f"{event.data['actor_id']} denied ({event.data['reason']} check)")

    await store.close()
    console.print("\n[bold green]✓ Demo complete![/bold green]")


if __name__ == "__main__":
    asyncio.run(demo())
