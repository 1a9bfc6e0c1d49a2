import pytest

from historystore import ApplicationBuilder, ConfigManager, SQLiteHistory, sl
from historystore.core.scheduling import PeriodicTaskScheduler


@pytest.fixture
def config_file(tmp_path):
    path = str(tmp_path / "config.json")
    ConfigManager(path).update("database", "path", ":memory:")
    sl.reset()
    yield path
    sl.reset()


@pytest.mark.asyncio
async def test_default_systems_started(config_file):
    locator = await ApplicationBuilder("Test Profile", config_file).build()
    try:
        history = locator.get_system(SQLiteHistory)
        assert history.is_ready
        assert locator.get_system(PeriodicTaskScheduler).is_ready

        await history.add_visit("https://example.com/", title="Example")
        await history.repopulate(invalidate_top_sites=True)

        sites = await history.get_top_sites_with_limit(5)
        assert [s.title for s in sites] == ["Example"]
    finally:
        await locator.stop_all()

    assert not history.is_ready


@pytest.mark.asyncio
async def test_without_default_systems(config_file):
    locator = await ApplicationBuilder("Bare", config_file).with_default_systems(False).build()

    with pytest.raises(KeyError):
        locator.get_system(SQLiteHistory)


@pytest.mark.asyncio
async def test_with_logging_creates_log_dir(config_file, tmp_path):
    from loguru import logger

    log_dir = tmp_path / "logs"
    ConfigManager(config_file).update("general", "log_dir", str(log_dir))

    locator = await ApplicationBuilder("Logged", config_file).with_logging().build()
    try:
        assert log_dir.is_dir()
        assert any(log_dir.iterdir())
    finally:
        await locator.stop_all()
        logger.remove()
