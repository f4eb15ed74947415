"""History pipeline domain models.

Input records are Pydantic models so collectors get validation on the way
in; the intermediate and output records produced by the pipeline are plain
dataclasses.

Classes
-------
- VisitSource          — "history" or "search"
- VisitRecord          — one page visit as supplied by a collector
- SessionizedVisit     — a VisitRecord tagged with its session
- SearchEvents         — per-session search summary
- SessionFeatureRecord — per-session title / domain scores and times
- EntityAggregate      — cross-session statistics for a domain or title
- SearchAggregate      — cross-session statistics for a search session
- RankedItem           — an entity with its blended rank (sort record)
- RankedSearch         — a ranked search session in compact form
- TopKAggregates       — the three ranked lists handed to consumers
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel


class VisitSource(str, Enum):
    """Where a visit came from."""

    HISTORY = "history"
    SEARCH = "search"


class VisitRecord(BaseModel):
    """A single page visit.

    Parameters
    ----------
    url:
        Full visited URL.
    domain:
        Host of the visited URL.
    title:
        Page title.  Empty titles are ignored by the title aggregates.
    visit_date_micros:
        Visit time in microseconds since the Unix epoch.  Non-finite values
        are tolerated here and dropped by the session builder.
    frequency_pct:
        Percentile rank of the page among visited pages, in [0, 100].
    domain_frequency_pct:
        Percentile rank of the domain among visited domains, in [0, 100].
    source:
        ``history`` for ordinary visits, ``search`` for search-result pages.
    """

    url: str = ""
    domain: str = ""
    title: str = ""
    visit_date_micros: int | float
    frequency_pct: float = 0.0
    domain_frequency_pct: float = 0.0
    source: VisitSource = VisitSource.HISTORY

    model_config = {"frozen": True}


class SessionizedVisit(VisitRecord):
    """A ``VisitRecord`` assigned to a browsing session.

    Parameters
    ----------
    visit_time_ms:
        Visit time truncated to whole milliseconds.
    session_id:
        Identifier of the session; equal to ``session_start_ms``.
    session_start_ms:
        Start time of the session in milliseconds since the epoch.
    """

    visit_time_ms: int
    session_id: int
    session_start_ms: int

    @property
    def session_start_iso(self) -> str:
        """ISO-8601 UTC rendering of the session start."""
        started = datetime.fromtimestamp(self.session_start_ms / 1000, tz=timezone.utc)
        return started.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class SearchEvents:
    """Summary of search visits within one session.

    ``last_searched`` is the raw microsecond timestamp of the latest search
    visit; conversion to seconds happens during aggregation.
    """

    session_id: int
    search_count: int
    search_titles: list[str] = field(default_factory=list)
    last_searched: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "session_id": self.session_id,
            "search_count": self.search_count,
            "search_titles": list(self.search_titles),
            "last_searched": self.last_searched,
        }


@dataclass
class SessionFeatureRecord:
    """Per-session features derived from sessionized visits.

    Parameters
    ----------
    session_id:
        Session identifier.
    title_scores:
        Title to page frequency percentile; the last visit wins on repeats.
    domain_scores:
        Domain to domain frequency percentile; the last visit wins on repeats.
    session_start_time:
        Earliest visit in the session, epoch seconds.
    session_end_time:
        Latest visit in the session, epoch seconds.
    search_events:
        Present only when the session contains search visits.
    """

    session_id: int
    title_scores: dict[str, float] = field(default_factory=dict)
    domain_scores: dict[str, float] = field(default_factory=dict)
    session_start_time: int | None = None
    session_end_time: int | None = None
    search_events: SearchEvents | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict."""
        return {
            "session_id": self.session_id,
            "title_scores": dict(self.title_scores),
            "domain_scores": dict(self.domain_scores),
            "session_start_time": self.session_start_time,
            "session_end_time": self.session_end_time,
            "search_events": self.search_events.to_dict() if self.search_events else {},
        }


@dataclass
class EntityAggregate:
    """Cross-session statistics for one domain or title.

    ``score`` holds the value from the most recently processed session that
    contained the entity.  ``session_importance`` is
    ``total_sessions / num_sessions`` rounded to two decimals, so entities
    seen in fewer sessions weigh more.
    """

    score: float = 0.0
    last_seen: float = 0.0
    num_sessions: int = 0
    session_importance: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "score": self.score,
            "last_seen": self.last_seen,
            "num_sessions": self.num_sessions,
            "session_importance": self.session_importance,
        }


@dataclass
class SearchAggregate:
    """Search statistics for one session; ``last_searched`` is in epoch seconds."""

    search_count: int = 0
    search_titles: list[str] = field(default_factory=list)
    last_searched: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "search_count": self.search_count,
            "search_titles": list(self.search_titles),
            "last_searched": self.last_searched,
        }


@dataclass(frozen=True)
class RankedItem:
    """An entity paired with its blended rank, used while sorting."""

    key: str
    rank: float
    num_sessions: int
    last_seen: float


@dataclass(frozen=True)
class RankedSearch:
    """A ranked search session.

    Attributes
    ----------
    sid:
        Session identifier.
    cnt:
        Number of search visits.
    q:
        Unique search-result titles seen in the session.
    ls:
        Last search time, epoch seconds.
    r:
        Blended rank.
    """

    sid: int | str
    cnt: int
    q: tuple[str, ...] = ()
    ls: float = 0.0
    r: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return {"sid": self.sid, "cnt": self.cnt, "q": list(self.q), "ls": self.ls, "r": self.r}


class TopKAggregates(NamedTuple):
    """Top-ranked domains, titles and searches."""

    domains: list[tuple[str, float]]
    titles: list[tuple[str, float]]
    searches: list[RankedSearch]

    def is_empty(self) -> bool:
        return not (self.domains or self.titles or self.searches)

    def to_dict(self) -> dict[str, object]:
        return {
            "domains": [[key, rank] for key, rank in self.domains],
            "titles": [[key, rank] for key, rank in self.titles],
            "searches": [item.to_dict() for item in self.searches],
        }
