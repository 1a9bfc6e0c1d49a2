"""
EventBus - Unified Event System

Provides a single event bus for decoupled publish/subscribe communication
between the history store and its collaborators (home panels, sync, UI).
"""
import asyncio
import inspect
from typing import Any, Callable, Dict, List, Set
from loguru import logger

from historystore.core.base_system import BaseSystem
from .constants import Events


class EventBus(BaseSystem):
    """
    Unified event bus for application-wide pub/sub.

    Usage:
        # Subscribe
        event_bus.subscribe(Events.HISTORY_CLEARED, on_history_cleared)

        # Publish
        await event_bus.publish(Events.HISTORY_CLEARED)
    """

    def __init__(self, locator, config):
        super().__init__(locator, config)
        self._subscribers: Dict[str, List[Callable]] = {}
        self._pending: Set[asyncio.Task] = set()

    async def initialize(self):
        """Initialize event bus and forward config changes as CONFIG_CHANGED."""
        self.config.on_changed.connect(self._on_config_changed)
        logger.info("EventBus initialized")
        await super().initialize()

    async def shutdown(self):
        """Shutdown event bus."""
        self.config.on_changed.disconnect(self._on_config_changed)
        self._subscribers.clear()
        await super().shutdown()

    def subscribe(self, event: str, handler: Callable) -> None:
        """
        Subscribe to an event.

        Args:
            event: Event name (e.g., "history.cleared")
            handler: Callback function (sync or async)
        """
        if event not in self._subscribers:
            self._subscribers[event] = []

        if handler not in self._subscribers[event]:
            self._subscribers[event].append(handler)
            logger.debug(f"Subscribed to {event}: {getattr(handler, '__name__', handler)}")

    def unsubscribe(self, event: str, handler: Callable) -> None:
        """
        Unsubscribe from an event.

        Args:
            event: Event name
            handler: Handler to remove
        """
        if event in self._subscribers and handler in self._subscribers[event]:
            self._subscribers[event].remove(handler)
            logger.debug(f"Unsubscribed from {event}: {getattr(handler, '__name__', handler)}")

    async def publish(self, event: str, data: Any = None) -> None:
        """
        Publish an event to all subscribers.

        A failing handler is logged and does not stop delivery to the others.

        Args:
            event: Event name
            data: Optional data to pass to handlers
        """
        handlers = list(self._subscribers.get(event, []))

        for handler in handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(data)
                else:
                    handler(data)
            except Exception as e:
                logger.error(f"Error in handler for {event}: {e}")

    def publish_sync(self, event: str, data: Any = None) -> None:
        """
        Publish from synchronous code (e.g. Signal callbacks).

        Sync handlers run immediately; async handlers are scheduled as tasks
        on the running loop.
        """
        handlers = list(self._subscribers.get(event, []))

        for handler in handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    task = asyncio.get_running_loop().create_task(self._run_async(event, handler, data))
                    self._pending.add(task)
                    task.add_done_callback(self._pending.discard)
                else:
                    handler(data)
            except Exception as e:
                logger.error(f"Error in sync handler for {event}: {e}")

    async def _run_async(self, event: str, handler: Callable, data: Any) -> None:
        try:
            await handler(data)
        except Exception as e:
            logger.error(f"Error in handler for {event}: {e}")

    def _on_config_changed(self, section, key, value):
        self.publish_sync(Events.CONFIG_CHANGED, {"section": section, "key": key, "value": value})
