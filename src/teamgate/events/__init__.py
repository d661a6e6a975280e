"""Teamgate event system."""

from teamgate.events.bus import Event, EventBus
from teamgate.events.types import EventType

__all__ = ["Event", "EventBus", "EventType"]
