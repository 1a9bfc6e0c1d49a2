"""
History store schema.

`visits.siteID` cascades on delete, so removing a history row removes its
visits in the same statement. Connections must enable foreign keys.
"""
from typing import List

from .statements import Statement

TABLE_HISTORY = "history"
TABLE_VISITS = "visits"
TABLE_CACHED_TOP_SITES = "cached_top_sites"

_CREATE_HISTORY = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_HISTORY} (
        id INTEGER PRIMARY KEY,
        url TEXT NOT NULL UNIQUE,
        title TEXT NOT NULL DEFAULT '',
        domain TEXT
    )
"""

_CREATE_VISITS = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_VISITS} (
        id INTEGER PRIMARY KEY,
        siteID INTEGER NOT NULL REFERENCES {TABLE_HISTORY}(id) ON DELETE CASCADE,
        date INTEGER NOT NULL,
        type INTEGER NOT NULL
    )
"""

_CREATE_CACHED_TOP_SITES = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_CACHED_TOP_SITES} (
        historyID INTEGER NOT NULL,
        url TEXT NOT NULL,
        title TEXT NOT NULL,
        visitCount INTEGER NOT NULL,
        lastVisit INTEGER NOT NULL,
        frecency INTEGER NOT NULL
    )
"""

_INDEXES = [
    f"CREATE INDEX IF NOT EXISTS idx_visits_siteID_date ON {TABLE_VISITS} (siteID, date)",
    f"CREATE INDEX IF NOT EXISTS idx_visits_date ON {TABLE_VISITS} (date)",
]


def create_statements() -> List[Statement]:
    """Idempotent DDL for a fresh or existing database."""
    tables = [_CREATE_HISTORY, _CREATE_VISITS, _CREATE_CACHED_TOP_SITES]
    return [(sql, None) for sql in tables + _INDEXES]
