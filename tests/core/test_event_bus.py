"""
EventBus - Unit Tests

Tests for the event bus covering:
- Subscription/unsubscription
- Publishing to sync and async handlers
- Handler error isolation
"""
import asyncio

import pytest
from unittest.mock import MagicMock

from historystore.core.config import ConfigManager
from historystore.core.events import EventBus, Events, Signal


@pytest.fixture
def event_bus():
    """Create a test EventBus instance."""
    return EventBus(MagicMock(), MagicMock())


class TestEventBusSubscription:

    def test_starts_empty(self, event_bus):
        assert event_bus._subscribers == {}

    def test_subscribe_duplicate_handler(self, event_bus):
        """Subscribing the same handler twice registers it once."""
        def handler(data):
            pass

        event_bus.subscribe(Events.HISTORY_CLEARED, handler)
        event_bus.subscribe(Events.HISTORY_CLEARED, handler)

        assert event_bus._subscribers[Events.HISTORY_CLEARED] == [handler]

    def test_unsubscribe_unknown_is_noop(self, event_bus):
        def handler(data):
            pass

        event_bus.unsubscribe("nonexistent.event", handler)
        event_bus.subscribe(Events.HISTORY_PRUNED, handler)
        event_bus.unsubscribe(Events.HISTORY_PRUNED, lambda data: None)

        assert handler in event_bus._subscribers[Events.HISTORY_PRUNED]

    @pytest.mark.asyncio
    async def test_lifecycle(self, event_bus):
        event_bus.subscribe(Events.HISTORY_PRUNED, lambda data: None)

        await event_bus.initialize()
        assert event_bus.is_ready is True

        await event_bus.shutdown()
        assert event_bus.is_ready is False
        assert len(event_bus._subscribers) == 0


class TestEventBusPublishing:

    @pytest.mark.asyncio
    async def test_sync_and_async_handlers(self, event_bus):
        received = []

        def sync_handler(data):
            received.append(("sync", data))

        async def async_handler(data):
            received.append(("async", data))

        event_bus.subscribe(Events.HISTORY_PRUNED, sync_handler)
        event_bus.subscribe(Events.HISTORY_PRUNED, async_handler)
        await event_bus.publish(Events.HISTORY_PRUNED, {"removed": 5000})

        assert received == [("sync", {"removed": 5000}), ("async", {"removed": 5000})]

    @pytest.mark.asyncio
    async def test_publish_without_subscribers(self, event_bus):
        await event_bus.publish("nonexistent.event", {"data": "test"})

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, event_bus):
        call_log = []

        async def failing_handler(data):
            raise RuntimeError("boom")

        def working_handler(data):
            call_log.append(data)

        event_bus.subscribe(Events.TOP_SITES_INVALIDATED, failing_handler)
        event_bus.subscribe(Events.TOP_SITES_INVALIDATED, working_handler)

        await event_bus.publish(Events.TOP_SITES_INVALIDATED)

        assert call_log == [None]

    @pytest.mark.asyncio
    async def test_unsubscribed_handler_not_called(self, event_bus):
        received = []
        event_bus.subscribe(Events.HISTORY_CLEARED, received.append)

        await event_bus.publish(Events.HISTORY_CLEARED, "first")
        event_bus.unsubscribe(Events.HISTORY_CLEARED, received.append)
        await event_bus.publish(Events.HISTORY_CLEARED, "second")

        assert received == ["first"]


class TestSignal:

    def test_emit_isolates_errors(self):
        signal = Signal("Test")
        received = []

        def failing(*args):
            raise ValueError("bad subscriber")

        signal.connect(failing)
        signal.connect(lambda *args: received.append(args))
        signal.emit("history", "max_history_row_count", 10)

        assert received == [("history", "max_history_row_count", 10)]

    def test_disconnect(self):
        signal = Signal()
        received = []
        signal.connect(received.append)
        signal.disconnect(received.append)

        signal.emit(1)

        assert received == []


class TestConfigChangedBridge:

    @pytest.fixture
    def config(self, tmp_path):
        return ConfigManager(str(tmp_path / "config.json"))

    @pytest.mark.asyncio
    async def test_config_update_published(self, config):
        bus = EventBus(MagicMock(), config)
        await bus.initialize()
        received = []
        bus.subscribe(Events.CONFIG_CHANGED, received.append)

        config.update("history", "max_history_row_count", 10)

        assert received == [{"section": "history", "key": "max_history_row_count", "value": 10}]
        await bus.shutdown()

    @pytest.mark.asyncio
    async def test_async_handler_scheduled(self, config):
        bus = EventBus(MagicMock(), config)
        await bus.initialize()
        received = []

        async def on_change(data):
            received.append(data["key"])

        bus.subscribe(Events.CONFIG_CHANGED, on_change)
        config.update("history", "top_sites_cache_size", 8)
        await asyncio.sleep(0)

        assert received == ["top_sites_cache_size"]
        await bus.shutdown()

    @pytest.mark.asyncio
    async def test_not_published_after_shutdown(self, config):
        bus = EventBus(MagicMock(), config)
        await bus.initialize()
        await bus.shutdown()
        received = []
        bus.subscribe(Events.CONFIG_CHANGED, received.append)

        config.update("history", "max_history_row_count", 10)

        assert received == []
