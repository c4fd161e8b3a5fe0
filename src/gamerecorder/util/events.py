"""Typed event bus — decoupled notifications from recorder and replay.

Events are emitted synchronously on the thread that calls into the
session or engine (never from the background writer).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar, Type

T = TypeVar("T")


# -- Recording events ----------------------------------------------------

@dataclass(frozen=True)
class RecordingStarted:
    """A session opened its log and started the writer."""
    path: str
    width: int
    height: int


@dataclass(frozen=True)
class KeyframeCaptured:
    """A keyframe record was queued for writing."""
    t: float
    entity_count: int


@dataclass(frozen=True)
class RecordingStopped:
    """A session stopped; ``pending_lines`` were still queued after the join timeout."""
    path: str
    pending_lines: int


# -- Replay events -------------------------------------------------------

@dataclass(frozen=True)
class ReplayLoaded:
    """A log was read and its keyframes are ready for playback."""
    path: str
    keyframe_count: int


@dataclass(frozen=True)
class EntitySpawned:
    """A replayed entity appeared."""
    entity_id: str
    name: str


@dataclass(frozen=True)
class EntityRemoved:
    """A replayed entity disappeared at a bracket boundary."""
    entity_id: str


@dataclass(frozen=True)
class PlaybackEnded:
    """Playback reached the last keyframe or was cancelled."""
    clock: float
    cancelled: bool


# -- Event Bus -----------------------------------------------------------

class EventBus:
    """Dispatches recorder and replay events to subscribers by event class.

    Handlers run synchronously, in subscription order, on the emitting
    thread.  Emission works on a snapshot of the subscriber list, so a
    handler may unsubscribe itself (or subscribe others) while running.

    Usage:
        bus = EventBus()
        bus.on(EntityRemoved, lambda e: print(e.entity_id))
        bus.emit(EntityRemoved(entity_id="Enemy_0"))
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = {}

    def on(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)

    def off(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Unsubscribe ``handler``; unknown handlers are ignored."""
        subscribers = self._subscribers.get(event_type)
        if subscribers and handler in subscribers:
            subscribers.remove(handler)
            if not subscribers:
                del self._subscribers[event_type]

    def emit(self, event: object) -> None:
        for handler in tuple(self._subscribers.get(type(event), ())):
            handler(event)

    def handler_count(self, event_type: type) -> int:
        return len(self._subscribers.get(event_type, ()))

    def clear(self) -> None:
        self._subscribers.clear()
