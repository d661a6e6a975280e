"""Event type constants for Teamgate."""

from enum import StrEnum


class EventType(StrEnum):
    ROLE_RESOLVED = "role.resolved"
    ROLE_SOURCE_FAILED = "role.source_failed"
    ROLE_RESOLUTION_DISCARDED = "role.resolution_discarded"

    ACCESS_DENIED = "access.denied"

    MEMBER_ADDED = "member.added"
    MEMBER_ROLE_CHANGED = "member.role_changed"
    MEMBER_REMOVED = "member.removed"
