"""
History - persisted browsing history, its retention policy and the
derived top-sites cache.
"""
from .models import HistoryEntry, Visit, VisitType, Site, now_micros
from .top_sites import TopSitesCache
from .retention import (
    HistoryRetentionPolicy,
    MAX_HISTORY_ROW_COUNT,
    PRUNE_HISTORY_ROW_COUNT,
)
from .store import SQLiteHistory

__all__ = [
    "HistoryEntry",
    "Visit",
    "VisitType",
    "Site",
    "now_micros",
    "TopSitesCache",
    "HistoryRetentionPolicy",
    "MAX_HISTORY_ROW_COUNT",
    "PRUNE_HISTORY_ROW_COUNT",
    "SQLiteHistory",
]
