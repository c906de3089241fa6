"""Bounded capture of engine transitions."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from typing import Any

from virtually.api.types import RenderState
from virtually.diagnostics.event import WindowEvent

Subscriber = Callable[[WindowEvent], None]


class WindowTrace:
    """Drop-oldest event log with synchronous subscribers."""

    def __init__(self, *, capacity: int = 1000, enabled: bool = True) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self._enabled = bool(enabled)
        self._events: deque[WindowEvent] = deque(maxlen=int(capacity))
        self._subscribers: dict[int, Subscriber] = {}
        self._next_subscriber_id = 1
        self._seq = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def capacity(self) -> int:
        return self._events.maxlen or 0

    def record(self, name: str, state: RenderState, **metadata: Any) -> None:
        if not self._enabled:
            return
        self._seq += 1
        event = WindowEvent(
            seq=self._seq,
            name=name,
            range=state.range,
            offset=state.offset,
            offset_type=state.offset_type,
            metadata=metadata,
        )
        self._events.append(event)
        for callback in tuple(self._subscribers.values()):
            callback(event)

    def subscribe(self, callback: Subscriber) -> int:
        token = self._next_subscriber_id
        self._next_subscriber_id += 1
        self._subscribers[token] = callback
        return token

    def unsubscribe(self, token: int) -> None:
        self._subscribers.pop(token, None)

    def snapshot(self, *, limit: int | None = None, name: str | None = None) -> list[WindowEvent]:
        events = list(self._events)
        if name is not None:
            events = [event for event in events if event.name == name]
        if limit is None or limit >= len(events):
            return events
        if limit <= 0:
            return []
        return events[-int(limit) :]

    def clear(self) -> None:
        self._events.clear()
