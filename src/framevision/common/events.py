"""Event bus connecting the capture pipeline to its views."""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from framevision.common.logging import get_logger

# Topics published by the capture pipeline
CAPTURE_STARTED = "capture.started"
CAPTURE_COMPLETED = "capture.completed"
CAPTURE_FAILED = "capture.failed"
RESPONSE_UPDATED = "response.updated"
PAGE_CHANGED = "page.changed"


@dataclass
class Event:
    """Event message."""

    topic: str
    data: dict[str, Any]
    source: str
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)


EventHandler = Callable[[Event], Awaitable[None]]


class EventBus:
    """In-process async pub/sub.

    Views such as the phone screen subscribe here instead of being driven
    directly by the pipeline. A topic ending in ``.*`` matches every topic
    under that prefix; ``*`` alone matches everything.

    Example:
        bus = EventBus()

        @bus.subscribe("response.updated")
        async def on_update(event):
            print(event.data["lines"])
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}
        self._history: list[Event] = []
        self._history_limit = history_limit
        self.logger = get_logger("event_bus")

    async def publish(self, event: Event) -> None:
        """Publish an event to all matching subscribers."""
        self.logger.debug("publishing_event", topic=event.topic, source=event.source)

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]

        handlers = [
            handler
            for pattern, subscribed in list(self._subscribers.items())
            if self._matches(event.topic, pattern)
            for handler in subscribed
        ]

        if handlers:
            await asyncio.gather(*[self._safe_dispatch(h, event) for h in handlers])

    async def emit(self, topic: str, source: str, **data: Any) -> None:
        """Build and publish an event."""
        await self.publish(Event(topic=topic, data=data, source=source))

    async def _safe_dispatch(self, handler: EventHandler, event: Event) -> None:
        try:
            await handler(event)
        except Exception as e:
            self.logger.exception("event_handler_error", topic=event.topic, error=str(e))

    @staticmethod
    def _matches(topic: str, pattern: str) -> bool:
        if pattern == "*":
            return True
        if pattern.endswith(".*"):
            return topic.startswith(pattern[:-1])
        return topic == pattern

    def subscribe(
        self,
        topic: str,
        handler: EventHandler | None = None,
    ) -> Callable[[EventHandler], EventHandler] | Callable[[], None]:
        """Subscribe to events on a topic.

        Can be used as a decorator or called directly.

        Returns:
            Decorator (when handler is None) or unsubscribe function.
        """
        if handler is not None:
            return self._register(topic, handler)

        def decorator(fn: EventHandler) -> EventHandler:
            self._register(topic, fn)
            return fn

        return decorator

    def _register(self, topic: str, handler: EventHandler) -> Callable[[], None]:
        self._subscribers.setdefault(topic, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def get_history(self, topic: str | None = None) -> list[Event]:
        """Get published events, oldest first."""
        if topic is None:
            return list(self._history)
        return [e for e in self._history if e.topic == topic]

    def clear_history(self) -> None:
        self._history.clear()
