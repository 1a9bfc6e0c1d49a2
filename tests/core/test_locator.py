import pytest

from historystore.core.base_system import BaseSystem
from historystore.core.locator import ServiceLocator, sl

started = []
stopped = []


class Storage(BaseSystem):
    async def initialize(self):
        started.append("Storage")
        await super().initialize()

    async def shutdown(self):
        stopped.append("Storage")
        await super().shutdown()


class Consumer(BaseSystem):
    depends_on = ["Storage"]

    async def initialize(self):
        started.append("Consumer")
        await super().initialize()

    async def shutdown(self):
        stopped.append("Consumer")
        await super().shutdown()


class Orphan(BaseSystem):
    depends_on = ["Missing"]

    async def initialize(self):
        await super().initialize()

    async def shutdown(self):
        await super().shutdown()


@pytest.fixture
def locator(tmp_path):
    started.clear()
    stopped.clear()
    sl.reset()
    sl.init(str(tmp_path / "config.json"))
    yield sl
    sl.reset()


def test_singleton():
    assert ServiceLocator() is sl


def test_register_is_idempotent(locator):
    first = locator.register_system(Storage)
    assert locator.register_system(Storage) is first
    assert locator.get_system(Storage) is first
    assert first.config is locator.config


def test_get_unregistered(locator):
    with pytest.raises(KeyError):
        locator.get_system(Storage)


def test_register_before_init():
    sl.reset()
    with pytest.raises(RuntimeError):
        sl.register_system(Storage)


@pytest.mark.asyncio
async def test_dependencies_start_first_and_stop_last(locator):
    # registered in the "wrong" order on purpose
    locator.register_system(Consumer)
    locator.register_system(Storage)

    await locator.start_all()
    assert started == ["Storage", "Consumer"]
    assert locator.get_system(Consumer).is_ready

    await locator.stop_all()
    assert stopped == ["Consumer", "Storage"]
    assert not locator.get_system(Storage).is_ready


@pytest.mark.asyncio
async def test_missing_dependency(locator):
    locator.register_system(Orphan)
    with pytest.raises(RuntimeError):
        await locator.start_all()
