"""In-process async event bus with a bounded record of recent events."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from teamgate.events.types import EventType

logger = logging.getLogger(__name__)

Listener = Callable[[EventType, dict[str, Any]], Coroutine[Any, Any, None]]
Unsubscribe = Callable[[], None]

DEFAULT_HISTORY_SIZE = 200


@dataclass(frozen=True)
class Event:
    type: EventType
    data: dict[str, Any]
    emitted_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    failed_listeners: int = 0


@dataclass(frozen=True, eq=False)
class _Subscription:
    listener: Listener
    event_types: frozenset[EventType] | None

    def matches(self, event_type: EventType) -> bool:
        return self.event_types is None or event_type in self.event_types


class EventBus:
    """Delivers events to subscribers in subscription order.

    The last ``history_size`` events are kept and can be read back with
    :meth:`recent`, which is how denials and discarded resolutions are
    inspected after the fact.
    """

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._subscriptions: list[_Subscription] = []
        self._history: deque[Event] = deque(maxlen=history_size)

    def subscribe(self, listener: Listener, *event_types: EventType) -> Unsubscribe:
        """Subscribe to the given types, or to every event when none are given."""
        subscription = _Subscription(listener, frozenset(event_types) or None)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    def on(self, event_type: EventType, listener: Listener) -> Unsubscribe:
        return self.subscribe(listener, event_type)

    def on_all(self, listener: Listener) -> Unsubscribe:
        return self.subscribe(listener)

    async def emit(self, event_type: EventType, data: dict[str, Any] | None = None) -> Event:
        """Deliver an event and record it. Listener errors are logged, not raised."""
        payload = dict(data or {})
        failed = 0
        for subscription in list(self._subscriptions):
            if not subscription.matches(event_type):
                continue
            try:
                await subscription.listener(event_type, payload)
            except asyncio.CancelledError:
                raise
            except Exception:
                failed += 1
                logger.exception("Listener %r failed on %s", subscription.listener, event_type)

        event = Event(event_type, payload, failed_listeners=failed)
        self._history.append(event)
        return event

    def recent(self, event_type: EventType | None = None, limit: int | None = None) -> list[Event]:
        """Recorded events, oldest first, optionally filtered by type."""
        events = [e for e in self._history if event_type is None or e.type == event_type]
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear(self) -> None:
        """Drop all subscriptions and recorded events."""
        self._subscriptions.clear()
        self._history.clear()
