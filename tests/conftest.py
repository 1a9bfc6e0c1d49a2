import pytest

from historystore.core.locator import sl
from historystore.core.database import DatabaseManager
from historystore.core.events import EventBus
from historystore.history import SQLiteHistory
from historystore.history.models import now_micros

DAY = 24 * 60 * 60 * 1_000_000


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / "config.json")


@pytest.fixture
async def locator(config_path):
    """Started locator over an in-memory database."""
    sl.reset()
    sl.init(config_path)
    sl.config.update("database", "path", ":memory:")
    sl.register_system(EventBus)
    sl.register_system(DatabaseManager)
    sl.register_system(SQLiteHistory)
    await sl.start_all()
    yield sl
    await sl.stop_all()
    sl.reset()


@pytest.fixture
def db(locator):
    return locator.get_system(DatabaseManager)


@pytest.fixture
def history(locator):
    return locator.get_system(SQLiteHistory)


@pytest.fixture
def bus(locator):
    return locator.get_system(EventBus)


@pytest.fixture
def seed(db):
    """
    Bulk insert `count` entries with one visit each.

    Entry i (0-based) gets dates[i] if given, else an increasing timestamp,
    so lower ids are older.
    """
    async def _seed(count, dates=None, start_id=1):
        base = now_micros() - 365 * DAY
        if dates is None:
            dates = [base + i for i in range(count)]
        ids = range(start_id, start_id + count)
        await db.run_many(
            "INSERT INTO history (id, url, title, domain) VALUES (?, ?, ?, ?)",
            [(i, f"https://site{i}.example.com/", f"Site {i}", f"site{i}.example.com") for i in ids],
        )
        await db.run_many(
            "INSERT INTO visits (siteID, date, type) VALUES (?, ?, 1)",
            [(i, date) for i, date in zip(ids, dates)],
        )
    return _seed
