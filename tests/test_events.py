"""Tests for the async event bus."""

from teamgate.events.bus import EventBus
from teamgate.events.types import EventType


async def test_emit_to_specific_and_global_listeners():
    bus = EventBus()
    seen = []

    async def specific(event_type, data):
        seen.append(("specific", event_type, data))

    async def everything(event_type, data):
        seen.append(("all", event_type, data))

    bus.on(EventType.ACCESS_DENIED, specific)
    bus.on_all(everything)

    await bus.emit(EventType.ACCESS_DENIED, {"actor_id": "a"})
    await bus.emit(EventType.MEMBER_ADDED)

    assert seen == [
        ("specific", EventType.ACCESS_DENIED, {"actor_id": "a"}),
        ("all", EventType.ACCESS_DENIED, {"actor_id": "a"}),
        ("all", EventType.MEMBER_ADDED, {}),
    ]


async def test_subscribe_to_several_types():
    bus = EventBus()
    seen = []

    async def membership(event_type, data):
        seen.append(event_type)

    bus.subscribe(membership, EventType.MEMBER_ADDED, EventType.MEMBER_REMOVED)

    await bus.emit(EventType.MEMBER_ADDED)
    await bus.emit(EventType.ACCESS_DENIED)
    await bus.emit(EventType.MEMBER_REMOVED)

    assert seen == [EventType.MEMBER_ADDED, EventType.MEMBER_REMOVED]


async def test_failing_listener_does_not_stop_others():
    bus = EventBus()
    seen = []

    async def broken(event_type, data):
        raise ValueError("listener bug")

    async def working(event_type, data):
        seen.append(event_type)

    bus.on(EventType.ROLE_RESOLVED, broken)
    bus.on(EventType.ROLE_RESOLVED, working)

    event = await bus.emit(EventType.ROLE_RESOLVED, {})
    assert event.failed_listeners == 1
    assert seen == [EventType.ROLE_RESOLVED]


async def test_unsubscribe_and_clear():
    bus = EventBus()
    seen = []

    async def listener(event_type, data):
        seen.append(event_type)

    unsubscribe = bus.on(EventType.MEMBER_REMOVED, listener)
    unsubscribe()
    unsubscribe()
    await bus.emit(EventType.MEMBER_REMOVED)

    bus.on_all(listener)
    bus.clear()
    await bus.emit(EventType.MEMBER_REMOVED)

    assert seen == []


async def test_recent_keeps_emitted_events_without_listeners():
    bus = EventBus()

    await bus.emit(EventType.ACCESS_DENIED, {"actor_id": "a"})
    await bus.emit(EventType.MEMBER_ADDED, {"actor_id": "b"})
    await bus.emit(EventType.ACCESS_DENIED, {"actor_id": "c"})

    assert [e.type for e in bus.recent()] == [
        EventType.ACCESS_DENIED,
        EventType.MEMBER_ADDED,
        EventType.ACCESS_DENIED,
    ]
    denied = bus.recent(EventType.ACCESS_DENIED)
    assert [e.data["actor_id"] for e in denied] == ["a", "c"]
    assert [e.data["actor_id"] for e in bus.recent(limit=1)] == ["c"]
    assert bus.recent(limit=0) == []


async def test_history_is_bounded():
    bus = EventBus(history_size=2)

    for actor in ("a", "b", "c"):
        await bus.emit(EventType.ROLE_RESOLVED, {"actor_id": actor})

    assert [e.data["actor_id"] for e in bus.recent()] == ["b", "c"]


async def test_recorded_payload_is_a_copy():
    bus = EventBus()
    data = {"actor_id": "a"}

    event = await bus.emit(EventType.MEMBER_ADDED, data)
    data["actor_id"] = "changed"

    assert event.data == {"actor_id": "a"}
    assert event.emitted_at.tzinfo is not None
