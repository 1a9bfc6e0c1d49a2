"""
History - Retention Policy

Keeps the history table under a soft row bound. Cleanup is only checked
while the top-sites cache is being invalidated anyway, so unrelated write
paths never pay for the extra table scan. One pass removes at most one
batch; repeated invalidations converge on the bound.
"""
from typing import List, Optional

from loguru import logger

from historystore.core.database import DatabaseManager, Statement
from historystore.core.database.schema import TABLE_HISTORY, TABLE_VISITS
from historystore.core.events import EventBus, Events
from .top_sites import TopSitesCache

MAX_HISTORY_ROW_COUNT = 200000
PRUNE_HISTORY_ROW_COUNT = 5000

# Entries with no visits have MAX(date) NULL, which sorts first.
# Ties on the last visit go to the lower id.
_PRUNE_SQL = f"""
    DELETE FROM {TABLE_HISTORY} WHERE id IN (
        SELECT h.id
        FROM {TABLE_HISTORY} h
        LEFT JOIN {TABLE_VISITS} v ON v.siteID = h.id
        GROUP BY h.id
        ORDER BY MAX(v.date) ASC, h.id ASC
        LIMIT ?
    )
"""


def _require_positive(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


class HistoryRetentionPolicy:
    """
    Size-triggered pruning of least-recently-visited history entries.

    Usage:
        policy = HistoryRetentionPolicy(db, top_sites)
        await policy.repopulate(invalidate_top_sites=True)
    """

    def __init__(self, db: DatabaseManager, top_sites: TopSitesCache,
                 max_rows: int = MAX_HISTORY_ROW_COUNT,
                 prune_rows: int = PRUNE_HISTORY_ROW_COUNT,
                 bus: Optional[EventBus] = None):
        _require_positive("max_rows", max_rows)
        _require_positive("prune_rows", prune_rows)
        self.db = db
        self.top_sites = top_sites
        self.max_rows = max_rows
        self.prune_rows = prune_rows
        self.bus = bus

    async def needs_cleanup(self, max_rows: int) -> bool:
        """True iff the history table holds more than `max_rows` entries."""
        _require_positive("max_rows", max_rows)
        sql = f"SELECT COUNT(rowid) > ? AS cleanup FROM {TABLE_HISTORY}"
        cleanup = await self.db.run_scalar(sql, (max_rows,))
        return bool(cleanup)

    def prune_oldest(self, batch_size: int) -> List[Statement]:
        """
        Statements deleting the `batch_size` entries whose most recent visit
        is oldest. Visits go with them through the foreign-key cascade.
        """
        _require_positive("batch_size", batch_size)
        return [(_PRUNE_SQL, (batch_size,))]

    async def repopulate(self, invalidate_top_sites: bool) -> None:
        """
        Refresh the top-sites cache, pruning old history first when the
        table is over its bound. Pruning and refresh commit together or not
        at all; StorageError propagates to the caller.
        """
        if not invalidate_top_sites:
            return

        statements: List[Statement] = []
        cleanup = await self.needs_cleanup(self.max_rows)
        if cleanup:
            logger.info(f"History exceeds {self.max_rows} rows, pruning {self.prune_rows} oldest entries")
            statements.extend(self.prune_oldest(self.prune_rows))
        statements.extend(self.top_sites.refresh_statements())

        rowcounts = await self.db.run(statements)

        if cleanup:
            removed = rowcounts[0]
            logger.info(f"Pruned {removed} history entries")
            await self._publish(Events.HISTORY_PRUNED, {"removed": removed})
        await self.top_sites.publish_invalidated()

    async def _publish(self, event: str, data=None) -> None:
        if self.bus is not None:
            await self.bus.publish(event, data)
