"""RBAC permission matrix for Teamgate teams."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from teamgate.models.role import Capability, Role, parse_role

_C = Capability

_ROLE_CAPABILITIES: Mapping[Role, frozenset[Capability]] = MappingProxyType(
    {
        Role.OWNER: frozenset(
            {_C.FINANCIAL, _C.PHYSICAL, _C.DOCUMENTS, _C.TEAM, _C.SETTINGS, _C.ANALYTICS}
        ),
        Role.ADMIN: frozenset({_C.FINANCIAL, _C.PHYSICAL, _C.DOCUMENTS, _C.TEAM, _C.ANALYTICS}),
        Role.LENDER: frozenset({_C.FINANCIAL, _C.DOCUMENTS, _C.ANALYTICS}),
        Role.CONTRACTOR: frozenset({_C.PHYSICAL}),
        Role.BROKER_AGENT: frozenset({_C.FINANCIAL, _C.PHYSICAL, _C.DOCUMENTS}),
        Role.ATTORNEY: frozenset({_C.DOCUMENTS}),
        Role.INSPECTOR: frozenset({_C.PHYSICAL}),
        Role.MEMBER: frozenset(),
    }
)

_NO_CAPABILITIES: frozenset[Capability] = frozenset()


class MatrixConfigurationError(Exception):
    """Raised when the permission matrix does not cover every role."""


def check_matrix(matrix: Mapping[Role, Iterable[Capability]] = _ROLE_CAPABILITIES) -> None:
    """Verify the matrix has an entry for every role and only known capabilities."""
    missing = set(Role) - set(matrix)
    if missing:
        raise MatrixConfigurationError(
            f"Permission matrix has no entry for: {', '.join(sorted(missing))}"
        )
    for role, capabilities in matrix.items():
        unknown = [c for c in capabilities if not isinstance(c, Capability)]
        if unknown:
            raise MatrixConfigurationError(f"Unknown capabilities for {role}: {unknown}")


check_matrix()


def capabilities_for(role: Role | str | None) -> frozenset[Capability]:
    """Return the capability set for a role. Unknown roles get nothing."""
    parsed = parse_role(role)
    if parsed is None:
        return _NO_CAPABILITIES
    return _ROLE_CAPABILITIES.get(parsed, _NO_CAPABILITIES)


def permission_flags(role: Role | str | None) -> dict[str, bool]:
    """One boolean per capability, e.g. ``{"financial": True, ...}``."""
    granted = capabilities_for(role)
    return {capability.value: capability in granted for capability in Capability}


def has_capability(role: Role | str | None, capability: Capability | str) -> bool:
    """Check if a role grants a capability."""
    try:
        wanted = Capability(capability)
    except ValueError:
        return False
    return wanted in capabilities_for(role)


def has_any_role(role: Role | str | None, allowed_roles: Iterable[Role | str]) -> bool:
    """Check if a role is one of the allowed roles. False for an empty set."""
    parsed = parse_role(role)
    if parsed is None:
        return False
    return any(parse_role(allowed) == parsed for allowed in allowed_roles)


def is_owner(role: Role | str | None) -> bool:
    return parse_role(role) == Role.OWNER


def is_admin(role: Role | str | None) -> bool:
    """Owners count as admins."""
    return has_any_role(role, (Role.OWNER, Role.ADMIN))
