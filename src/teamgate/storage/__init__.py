"""Teamgate storage layer."""

from teamgate.storage.base import IdentityStore, TeamRoleStore
from teamgate.storage.metadata_store import MetadataStore

__all__ = ["IdentityStore", "MetadataStore", "TeamRoleStore"]
