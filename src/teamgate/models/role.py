"""Closed role and capability sets."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    OWNER = "owner"
    ADMIN = "admin"
    LENDER = "lender"
    CONTRACTOR = "contractor"
    BROKER_AGENT = "broker_agent"
    ATTORNEY = "attorney"
    INSPECTOR = "inspector"
    MEMBER = "member"


class Capability(StrEnum):
    FINANCIAL = "financial"
    PHYSICAL = "physical"
    DOCUMENTS = "documents"
    TEAM = "team"
    SETTINGS = "settings"
    ANALYTICS = "analytics"


ROLE_LABELS: dict[Role, str] = {
    Role.OWNER: "Owner",
    Role.ADMIN: "Admin",
    Role.LENDER: "Lender",
    Role.CONTRACTOR: "Contractor",
    Role.BROKER_AGENT: "Broker Agent",
    Role.ATTORNEY: "Attorney",
    Role.INSPECTOR: "Inspector",
    Role.MEMBER: "Member",
}

# Roles an owner may hand out when adding someone to a team.
INVITABLE_ROLES = frozenset(
    {
        Role.BROKER_AGENT,
        Role.CONTRACTOR,
        Role.LENDER,
        Role.ATTORNEY,
        Role.INSPECTOR,
        Role.MEMBER,
    }
)


def parse_role(value: str | Role | None) -> Role | None:
    """Return the Role named by ``value``, or None if it is empty or unknown."""
    if value is None:
        return None
    if isinstance(value, Role):
        return value
    cleaned = value.strip().lower()
    if not cleaned:
        return None
    try:
        return Role(cleaned)
    except ValueError:
        return None


def role_label(role: Role | str) -> str:
    parsed = parse_role(role) or Role.MEMBER
    return ROLE_LABELS[parsed]
