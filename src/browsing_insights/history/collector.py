"""Turn raw history rows into ``VisitRecord`` objects.

The history store hands over one row per visit with raw frecency values.
This module tags search-result visits, converts frecency into percentile
ranks, and applies the time window / result cap used by a pipeline run.

Functions
---------
- is_search_visit       — True for search-engine result pages
- cume_dist_percentiles — cumulative-distribution percentile per key
- build_visit_records   — raw rows to percentile-tagged VisitRecords
- select_recent_visits  — cutoff + newest-first cap on VisitRecords
"""
from __future__ import annotations

import logging
import re
import time
from bisect import bisect_right
from collections.abc import Iterable, Mapping
from urllib.parse import urlsplit

from browsing_insights.history.records import VisitRecord, VisitSource
from browsing_insights.timeunits import MICROS_PER_SECOND, SECONDS_PER_DAY, is_finite_number

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 60
DEFAULT_MAX_RESULTS = 3000

SEARCH_ENGINE_DOMAINS: tuple[str, ...] = (
    "google",
    "bing",
    "duckduckgo",
    "search.brave",
    "yahoo",
    "startpage",
    "ecosia",
    "baidu",
    "yandex",
)

_SEARCH_ENGINE_PATTERN = re.compile(
    r"(^|\.)(" + "|".join(re.escape(name) for name in SEARCH_ENGINE_DOMAINS) + r")\.",
    re.IGNORECASE,
)
_SEARCH_PATH_PATTERN = re.compile(r"search|results|query", re.IGNORECASE)
_SEARCH_QUERY_PATTERN = re.compile(r"(^|&)(q|query|p)=", re.IGNORECASE)


def is_search_visit(url: str) -> bool:
    """Return True when ``url`` is a results page of a known search engine.

    The host must belong to a known engine and either the path mentions
    search/results/query or the query string carries ``q``, ``query`` or
    ``p``.  Unparseable URLs are not search visits.
    """
    try:
        parts = urlsplit(url)
        hostname = parts.hostname or ""
    except ValueError as exc:
        logger.warning("is_search_visit: failed to parse URL of length %d: %s", len(url), exc)
        return False
    if not _SEARCH_ENGINE_PATTERN.search(hostname):
        return False
    return bool(_SEARCH_PATH_PATTERN.search(parts.path) or _SEARCH_QUERY_PATTERN.search(parts.query))


def cume_dist_percentiles(values: Mapping[str, float]) -> dict[str, float]:
    """Return ``round(100 * CUME_DIST, 2)`` for each key.

    The cumulative distribution of a value is the fraction of keys whose
    value is less than or equal to it, so ties share the same percentile.
    """
    total = len(values)
    if total == 0:
        return {}
    ordered = sorted(values.values())
    return {
        key: round(100.0 * bisect_right(ordered, value) / total, 2)
        for key, value in values.items()
    }


def _cutoff_micros(since_micros: float | None, days: float, now: float | None) -> float:
    """Absolute visit cutoff in microseconds, never below 0."""
    if since_micros is not None:
        return max(0.0, float(since_micros))
    now_sec = time.time() if now is None else float(now)
    return max(0.0, (now_sec - days * SECONDS_PER_DAY) * MICROS_PER_SECOND)


def build_visit_records(
    rows: Iterable[Mapping[str, object]],
    *,
    since_micros: float | None = None,
    days: float = DEFAULT_DAYS,
    max_results: int = DEFAULT_MAX_RESULTS,
    now: float | None = None,
) -> list[VisitRecord]:
    """Build percentile-tagged visit records from raw history rows.

    Each row needs ``url``, ``host``, ``title``, ``visit_date_micros``,
    ``frecency`` and ``domain_frecency``.  Rows with a missing title,
    frecency or visit time are skipped, as are rows before the cutoff.
    The newest ``max_results`` remaining rows are kept and percentiles are
    computed over those alone, per URL over the maximum frecency seen for
    it.  A domain frecency of -1 (not yet computed) counts as 1.

    Parameters
    ----------
    rows:
        Raw history rows, one per visit.
    since_micros:
        Absolute cutoff in microseconds.  When given, ``days`` is ignored;
        negative values are clamped to 0.
    days:
        Look-back window from ``now`` when ``since_micros`` is not given.
    max_results:
        Cap on the number of visits kept.
    now:
        Reference time, epoch seconds.  Defaults to the current time.

    Returns
    -------
    list[VisitRecord]
        Records ordered newest first.
    """
    cutoff = _cutoff_micros(since_micros, days, now)
    kept: list[Mapping[str, object]] = []
    for row in rows:
        visit_date = row.get("visit_date_micros")
        if row.get("title") is None or not is_finite_number(row.get("frecency")):
            continue
        if not is_finite_number(visit_date) or visit_date < cutoff:  # type: ignore[operator]
            continue
        kept.append(row)
    kept.sort(key=lambda row: row["visit_date_micros"], reverse=True)  # type: ignore[arg-type, return-value]
    kept = kept[: max(0, max_results)]

    place_frecency: dict[str, float] = {}
    place_domain_frecency: dict[str, float] = {}
    for row in kept:
        url = str(row.get("url") or "")
        domain_frecency = row.get("domain_frecency")
        if not is_finite_number(domain_frecency) or domain_frecency == -1:
            domain_frecency = 1
        place_frecency[url] = max(place_frecency.get(url, float("-inf")), float(row["frecency"]))  # type: ignore[arg-type]
        place_domain_frecency[url] = max(
            place_domain_frecency.get(url, float("-inf")), float(domain_frecency)  # type: ignore[arg-type]
        )

    frecency_pct = cume_dist_percentiles(place_frecency)
    domain_pct = cume_dist_percentiles(place_domain_frecency)

    records = []
    for row in kept:
        url = str(row.get("url") or "")
        records.append(
            VisitRecord(
                url=url,
                domain=str(row.get("host") or ""),
                title=str(row.get("title")),
                visit_date_micros=row["visit_date_micros"],  # type: ignore[arg-type]
                frequency_pct=frecency_pct.get(url, 0.0),
                domain_frequency_pct=domain_pct.get(url, 0.0),
                source=VisitSource.SEARCH if is_search_visit(url) else VisitSource.HISTORY,
            )
        )
    logger.debug("build_visit_records: kept %d rows after cutoff and cap", len(records))
    return records


def select_recent_visits(
    visits: Iterable[VisitRecord],
    *,
    since_micros: float | None = None,
    days: float = DEFAULT_DAYS,
    max_results: int = DEFAULT_MAX_RESULTS,
    now: float | None = None,
) -> list[VisitRecord]:
    """Keep visits inside the run window, newest first, capped at ``max_results``.

    Parameters
    ----------
    visits:
        Candidate visit records.
    since_micros:
        Absolute cutoff in microseconds.  When given, ``days`` is ignored;
        negative values are clamped to 0.
    days:
        Look-back window from ``now`` when ``since_micros`` is not given.
    max_results:
        Cap on the number of visits (not distinct URLs) returned.
    now:
        Reference time, epoch seconds.  Defaults to the current time.
    """
    cutoff = _cutoff_micros(since_micros, days, now)
    selected = [
        visit
        for visit in visits
        if is_finite_number(visit.visit_date_micros) and visit.visit_date_micros >= cutoff
    ]
    selected.sort(key=lambda visit: visit.visit_date_micros, reverse=True)
    return selected[: max(0, max_results)]
