"""Teamgate: team-scoped role resolution and access enforcement."""

from teamgate.auth.permissions import capabilities_for
from teamgate.core.resolver import RoleResolver, resolve_effective_role
from teamgate.enforce.content_gate import ContentGate
from teamgate.enforce.route_guard import RouteGuard
from teamgate.models.role import Capability, Role

__all__ = [
    "Capability",
    "ContentGate",
    "Role",
    "RoleResolver",
    "RouteGuard",
    "capabilities_for",
    "resolve_effective_role",
]
