"""
History - Row Models

Plain records read back from the history tables. Timestamps are integer
microseconds since the Unix epoch.
"""
import time
from dataclasses import dataclass
from enum import IntEnum


def now_micros() -> int:
    return int(time.time() * 1_000_000)


class VisitType(IntEnum):
    """How a navigation reached the page."""
    UNKNOWN = 0
    LINK = 1
    TYPED = 2
    BOOKMARK = 3
    EMBED = 4
    PERMANENT_REDIRECT = 5
    TEMPORARY_REDIRECT = 6
    DOWNLOAD = 7
    FRAMED_LINK = 8
    RECENTLY_CLOSED = 9


@dataclass
class HistoryEntry:
    id: int
    url: str
    title: str
    domain: str

    @classmethod
    def from_row(cls, row) -> 'HistoryEntry':
        return cls(id=row["id"], url=row["url"], title=row["title"], domain=row["domain"] or "")


@dataclass
class Visit:
    id: int
    site_id: int
    date: int
    type: VisitType

    @classmethod
    def from_row(cls, row) -> 'Visit':
        try:
            visit_type = VisitType(row["type"])
        except ValueError:
            visit_type = VisitType.UNKNOWN
        return cls(id=row["id"], site_id=row["siteID"], date=row["date"], type=visit_type)


@dataclass
class Site:
    """One row of the top-sites projection."""
    history_id: int
    url: str
    title: str
    visit_count: int
    last_visit: int
    frecency: int

    @classmethod
    def from_row(cls, row) -> 'Site':
        return cls(
            history_id=row["historyID"],
            url=row["url"],
            title=row["title"],
            visit_count=row["visitCount"],
            last_visit=row["lastVisit"],
            frecency=row["frecency"],
        )
