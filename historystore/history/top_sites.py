"""
History - Top Sites Cache

Materialized ranking of history entries for the home panel. The cache is
only ever rebuilt wholesale from `refresh_statements()`; nothing patches
it row by row.
"""
from typing import Callable, List, Optional

from loguru import logger

from historystore.core.database import DatabaseManager, Statement
from historystore.core.database.schema import TABLE_CACHED_TOP_SITES, TABLE_HISTORY, TABLE_VISITS
from historystore.core.events import EventBus, Events
from .models import Site, now_micros

DEFAULT_CACHE_SIZE = 32

_DAY_MICROS = 24 * 60 * 60 * 1_000_000

# (max age in days, weight); anything older gets _OLDEST_WEIGHT
_RECENCY_BUCKETS = [(4, 100), (14, 70), (31, 50), (90, 30)]
_OLDEST_WEIGHT = 10

_REFRESH_SQL = f"""
    INSERT INTO {TABLE_CACHED_TOP_SITES} (historyID, url, title, visitCount, lastVisit, frecency)
    SELECT h.id, h.url, h.title, agg.visitCount, agg.lastVisit,
           agg.visitCount * CASE
               WHEN agg.lastVisit >= ? THEN ?
               WHEN agg.lastVisit >= ? THEN ?
               WHEN agg.lastVisit >= ? THEN ?
               WHEN agg.lastVisit >= ? THEN ?
               ELSE ?
           END AS frecency
    FROM {TABLE_HISTORY} h
    JOIN (
        SELECT siteID, COUNT(*) AS visitCount, MAX(date) AS lastVisit
        FROM {TABLE_VISITS}
        GROUP BY siteID
    ) agg ON agg.siteID = h.id
    ORDER BY frecency DESC, agg.lastVisit DESC, h.id ASC
    LIMIT ?
"""


class TopSitesCache:
    """Owns the cached_top_sites table."""

    def __init__(self, db: DatabaseManager, cache_size: int = DEFAULT_CACHE_SIZE,
                 clock: Callable[[], int] = now_micros, bus: Optional[EventBus] = None):
        self.db = db
        self.cache_size = cache_size
        self._clock = clock
        self.bus = bus

    def refresh_statements(self) -> List[Statement]:
        """Empty the cache and refill it from the current history and visits."""
        now = self._clock()
        args = []
        for days, weight in _RECENCY_BUCKETS:
            args.extend([now - days * _DAY_MICROS, weight])
        args.append(_OLDEST_WEIGHT)
        args.append(self.cache_size)
        return [
            (f"DELETE FROM {TABLE_CACHED_TOP_SITES}", None),
            (_REFRESH_SQL, tuple(args)),
        ]

    def clear_statements(self) -> List[Statement]:
        return [(f"DELETE FROM {TABLE_CACHED_TOP_SITES}", None)]

    async def invalidate(self) -> None:
        await self.db.run(self.refresh_statements())
        logger.debug("Top sites cache refreshed")
        await self.publish_invalidated()

    async def publish_invalidated(self) -> None:
        if self.bus is not None:
            await self.bus.publish(Events.TOP_SITES_INVALIDATED)

    async def get_top_sites(self, limit: int) -> List[Site]:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        sql = f"""
            SELECT historyID, url, title, visitCount, lastVisit, frecency
            FROM {TABLE_CACHED_TOP_SITES}
            ORDER BY frecency DESC, lastVisit DESC, historyID ASC
            LIMIT ?
        """
        return await self.db.run_query(sql, (limit,), factory=Site.from_row)
