"""Teamgate data models."""

from teamgate.models.membership import ActorProfile, TeamRoleAssignment
from teamgate.models.role import Capability, Role

__all__ = ["ActorProfile", "Capability", "Role", "TeamRoleAssignment"]
