"""Event bus for cache diagnostics.

Publishers (the store, the cache facade) emit envelopes here without knowing
who listens; the JSONL diagnostics sink and tests subscribe.
"""

from __future__ import annotations

import traceback
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from e2estate.core.logging import get_logger

_logger = get_logger(__name__)


class EventBus:
    """Simple synchronous pub/sub.

    Example:
        bus = EventBus()
        bus.subscribe("state.write", lambda data: print(data["data"]["reason"]))
        bus.publish("state.write", envelope)
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callable[[dict[str, Any]], None]]] = defaultdict(list)
        self._all_subscribers: list[Callable[[str, dict[str, Any]], None]] = []

    def subscribe(self, event: str, callback: Callable[[dict[str, Any]], None]) -> None:
        self._subscribers[event].append(callback)

    def subscribe_all(self, callback: Callable[[str, dict[str, Any]], None]) -> None:
        """Subscribe to every event (receives event name and data)."""
        self._all_subscribers.append(callback)

    def unsubscribe_all(self, callback: Callable[[str, dict[str, Any]], None]) -> None:
        if callback in self._all_subscribers:
            self._all_subscribers.remove(callback)

    def publish(self, event: str, data: dict[str, Any] | None = None) -> None:
        """Publish an event.

        Handler failures are logged and never reach the publisher.
        """
        data = data or {}

        for cb_event in list(self._subscribers.get(event, [])):
            try:
                cb_event(data)
            except Exception as e:
                _logger.error(
                    f"Error in event handler for '{event}' (callback={cb_event}): "
                    f"{type(e).__name__}: {e}\n{traceback.format_exc()}"
                )

        for cb_all in list(self._all_subscribers):
            try:
                cb_all(event, data)
            except Exception as e:
                _logger.error(
                    f"Error in all-event handler (event='{event}', callback={cb_all}): "
                    f"{type(e).__name__}: {e}\n{traceback.format_exc()}"
                )

    def clear(self) -> None:
        self._subscribers.clear()
        self._all_subscribers.clear()


_global_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    global _global_bus
    if _global_bus is None:
        _global_bus = EventBus()
    return _global_bus
