"""
historystore - Persisted browsing history

Bounded SQLite history store for a browser profile: visit recording,
least-recently-visited pruning and a derived top-sites cache.
"""

from historystore.core import (
    BaseSystem,
    ServiceLocator,
    sl,
    ConfigManager,
    AppConfig,
    DatabaseManager,
    StorageError,
    EventBus,
    Events,
    PeriodicTaskScheduler,
    setup_logging,
)
from historystore.core.bootstrap import ApplicationBuilder
from historystore.history import (
    SQLiteHistory,
    HistoryRetentionPolicy,
    TopSitesCache,
    HistoryEntry,
    Visit,
    VisitType,
    Site,
    MAX_HISTORY_ROW_COUNT,
    PRUNE_HISTORY_ROW_COUNT,
)

__version__ = "0.1.0"

__all__ = [
    "BaseSystem",
    "ServiceLocator",
    "sl",
    "ConfigManager",
    "AppConfig",
    "DatabaseManager",
    "StorageError",
    "EventBus",
    "Events",
    "PeriodicTaskScheduler",
    "setup_logging",
    "ApplicationBuilder",
    "SQLiteHistory",
    "HistoryRetentionPolicy",
    "TopSitesCache",
    "HistoryEntry",
    "Visit",
    "VisitType",
    "Site",
    "MAX_HISTORY_ROW_COUNT",
    "PRUNE_HISTORY_ROW_COUNT",
]
