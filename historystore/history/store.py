"""
History - SQLite History Store

The narrow interface profile-level collaborators use: record visits, look
entries up, remove or clear history, read top sites, and repopulate the
derived caches.
"""
from typing import List, Optional
from urllib.parse import urlparse

from loguru import logger

from historystore.core.base_system import BaseSystem
from historystore.core.database import DatabaseManager
from historystore.core.database.schema import TABLE_HISTORY, TABLE_VISITS
from historystore.core.events import EventBus, Events
from .models import HistoryEntry, Site, Visit, VisitType, now_micros
from .retention import HistoryRetentionPolicy
from .top_sites import TopSitesCache

ALLOWED_SCHEMES = ("http", "https", "file", "about")


def _validate_url(url: str) -> str:
    if not isinstance(url, str) or not url.strip():
        raise ValueError("url must be a non-empty string")
    scheme = urlparse(url).scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Unsupported URL scheme: {url!r}")
    return url


class SQLiteHistory(BaseSystem):
    """
    Browsing history backed by DatabaseManager.

    Thresholds come from the `history` config section and follow config
    changes at runtime.
    """

    depends_on = ["DatabaseManager", "EventBus"]

    async def initialize(self) -> None:
        logger.info("SQLiteHistory initializing")
        self.db = self.locator.get_system(DatabaseManager)
        self.bus = self.locator.get_system(EventBus)

        settings = self.config.data.history
        self.top_sites = TopSitesCache(self.db, cache_size=settings.top_sites_cache_size, bus=self.bus)
        self.retention = HistoryRetentionPolicy(
            self.db,
            self.top_sites,
            max_rows=settings.max_history_row_count,
            prune_rows=settings.prune_history_row_count,
            bus=self.bus,
        )
        self.config.on_changed.connect(self._on_config_changed)

        await super().initialize()
        logger.info("SQLiteHistory ready")

    async def shutdown(self) -> None:
        logger.info("SQLiteHistory shutting down")
        self.config.on_changed.disconnect(self._on_config_changed)
        await super().shutdown()

    def _on_config_changed(self, section, key, value):
        if section != "history":
            return
        if key == "max_history_row_count":
            self.retention.max_rows = value
        elif key == "prune_history_row_count":
            self.retention.prune_rows = value
        elif key == "top_sites_cache_size":
            self.top_sites.cache_size = value

    # ==================== Writes ====================

    async def add_visit(self, url: str, title: Optional[str] = None, date: Optional[int] = None,
                        visit_type: VisitType = VisitType.LINK) -> None:
        """
        Record a navigation: create the entry on first visit, append a visit.

        A non-empty title replaces the stored one.
        """
        _validate_url(url)
        if date is None:
            date = now_micros()
        domain = urlparse(url).hostname or ""
        statements = [
            (
                f"""
                INSERT INTO {TABLE_HISTORY} (url, title, domain) VALUES (?, ?, ?)
                ON CONFLICT(url) DO UPDATE SET
                    title = CASE WHEN excluded.title != '' THEN excluded.title ELSE {TABLE_HISTORY}.title END
                """,
                (url, title or "", domain),
            ),
            (
                f"INSERT INTO {TABLE_VISITS} (siteID, date, type) SELECT id, ?, ? FROM {TABLE_HISTORY} WHERE url = ?",
                (date, int(visit_type), url),
            ),
        ]
        await self.db.run(statements)
        await self.bus.publish(Events.HISTORY_VISIT_RECORDED, {"url": url, "date": date})

    async def remove_history_for_url(self, url: str) -> bool:
        """Delete one entry and its visits; the top-sites cache is rebuilt in the same transaction."""
        _validate_url(url)
        statements = [(f"DELETE FROM {TABLE_HISTORY} WHERE url = ?", (url,))]
        statements.extend(self.top_sites.refresh_statements())
        rowcounts = await self.db.run(statements)
        removed = rowcounts[0] > 0
        if removed:
            await self.bus.publish(Events.HISTORY_SITE_REMOVED, {"url": url})
        await self.top_sites.publish_invalidated()
        return removed

    async def clear_history(self) -> None:
        """Delete every entry, visit and cached top site."""
        statements = [(f"DELETE FROM {TABLE_HISTORY}", None)]
        statements.extend(self.top_sites.clear_statements())
        await self.db.run(statements)
        logger.info("History cleared")
        await self.bus.publish(Events.HISTORY_CLEARED)
        await self.top_sites.publish_invalidated()

    async def repopulate(self, invalidate_top_sites: bool) -> None:
        await self.retention.repopulate(invalidate_top_sites)

    # ==================== Reads ====================

    async def count(self) -> int:
        return await self.db.run_scalar(f"SELECT COUNT(rowid) FROM {TABLE_HISTORY}")

    async def get_entry(self, url: str) -> Optional[HistoryEntry]:
        rows = await self.db.run_query(
            f"SELECT id, url, title, domain FROM {TABLE_HISTORY} WHERE url = ?",
            (url,),
            factory=HistoryEntry.from_row,
        )
        return rows[0] if rows else None

    async def get_visits(self, url: str) -> List[Visit]:
        """Visits for `url`, most recent first."""
        sql = f"""
            SELECT v.id, v.siteID, v.date, v.type
            FROM {TABLE_VISITS} v JOIN {TABLE_HISTORY} h ON h.id = v.siteID
            WHERE h.url = ?
            ORDER BY v.date DESC, v.id DESC
        """
        return await self.db.run_query(sql, (url,), factory=Visit.from_row)

    async def get_top_sites_with_limit(self, limit: int) -> List[Site]:
        return await self.top_sites.get_top_sites(limit)
