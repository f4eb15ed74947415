"""Per-session features and cross-session aggregation.

Two stages turn sessionized visits into entity statistics:

1. ``generate_profile_inputs`` builds one ``SessionFeatureRecord`` per
   session (title and domain percentile maps, start/end times and an
   optional search summary).
2. ``aggregate_sessions`` folds those records, in order, into three
   dictionaries keyed by domain, by title and by search session id.

Score aggregation is last-value-wins: the record processed last that
mentions an entity decides its score.  Records are therefore always
iterated as an ordered sequence.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence

from browsing_insights.history.records import (
    EntityAggregate,
    SearchAggregate,
    SearchEvents,
    SessionFeatureRecord,
    SessionizedVisit,
    VisitSource,
)
from browsing_insights.timeunits import (
    TimeUnit,
    is_finite_number,
    micros_to_epoch_seconds,
    round2,
    to_epoch_seconds,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-session features
# ---------------------------------------------------------------------------


def _group_by_session(rows: Iterable[SessionizedVisit]) -> dict[int, list[SessionizedVisit]]:
    """Group visits by session id, keeping first-appearance order."""
    groups: dict[int, list[SessionizedVisit]] = {}
    for row in rows:
        groups.setdefault(row.session_id, []).append(row)
    return groups


def _search_events(session_id: int, items: Sequence[SessionizedVisit]) -> SearchEvents | None:
    searches = [item for item in items if item.source == VisitSource.SEARCH]
    if not searches:
        return None
    titles = list(dict.fromkeys(item.title for item in searches if item.title))
    last_searched = max(
        (float(item.visit_date_micros) for item in searches if is_finite_number(item.visit_date_micros)),
        default=0.0,
    )
    return SearchEvents(
        session_id=session_id,
        search_count=len(searches),
        search_titles=titles,
        last_searched=last_searched,
    )


def generate_profile_inputs(rows: Iterable[SessionizedVisit]) -> list[SessionFeatureRecord]:
    """Build per-session feature records from sessionized visits.

    Parameters
    ----------
    rows:
        Output of ``sessionize_visits``.

    Returns
    -------
    list[SessionFeatureRecord]
        One record per distinct session id, in the order sessions first
        appear in ``rows``.
    """
    records: list[SessionFeatureRecord] = []

    for session_id, items in _group_by_session(rows).items():
        title_scores: dict[str, float] = {}
        domain_scores: dict[str, float] = {}
        for item in items:
            if item.title and is_finite_number(item.frequency_pct):
                title_scores[item.title] = item.frequency_pct
            if item.domain and is_finite_number(item.domain_frequency_pct):
                domain_scores[item.domain] = item.domain_frequency_pct

        timestamps = [
            float(item.visit_date_micros)
            for item in items
            if is_finite_number(item.visit_date_micros)
        ]
        records.append(
            SessionFeatureRecord(
                session_id=session_id,
                title_scores=title_scores,
                domain_scores=domain_scores,
                session_start_time=micros_to_epoch_seconds(min(timestamps)) if timestamps else None,
                session_end_time=micros_to_epoch_seconds(max(timestamps)) if timestamps else None,
                search_events=_search_events(session_id, items),
            )
        )

    logger.debug("generate_profile_inputs: built %d session records", len(records))
    return records


# ---------------------------------------------------------------------------
# Cross-session aggregation
# ---------------------------------------------------------------------------


def _fold_entities(
    agg: dict[str, EntityAggregate],
    members: dict[str, set[int]],
    scores: dict[str, float],
    session_id: int,
    last_seen: float,
) -> None:
    for key, value in scores.items():
        rec = agg.get(key)
        if rec is None:
            rec = agg[key] = EntityAggregate()
            members[key] = set()
        rec.score = float(value)
        rec.last_seen = max(rec.last_seen, last_seen)
        members[key].add(session_id)


def _finalize_entities(
    agg: dict[str, EntityAggregate],
    members: dict[str, set[int]],
    total_sessions: int,
) -> None:
    for key, rec in agg.items():
        count = len(members[key])
        rec.num_sessions = count
        rec.session_importance = round2(total_sessions / count) if count > 0 else 0.0


def aggregate_sessions(
    records: Sequence[SessionFeatureRecord],
    *,
    now: float | None = None,
) -> tuple[dict[str, EntityAggregate], dict[str, EntityAggregate], dict[int, SearchAggregate]]:
    """Aggregate per-session records into domain, title and search statistics.

    Parameters
    ----------
    records:
        Session feature records in processing order.
    now:
        Fallback "last seen" time (epoch seconds) for sessions without any
        timestamps.  Defaults to the current time.

    Returns
    -------
    tuple
        ``(domains, titles, searches)`` where domains and titles map the
        entity to an ``EntityAggregate`` and searches map a session id to a
        ``SearchAggregate`` (``last_searched`` in epoch seconds).
    """
    now_sec = time.time() if now is None else to_epoch_seconds(now)
    total_sessions = len(records)

    domains: dict[str, EntityAggregate] = {}
    titles: dict[str, EntityAggregate] = {}
    searches: dict[int, SearchAggregate] = {}
    domain_members: dict[str, set[int]] = {}
    title_members: dict[str, set[int]] = {}

    for record in records:
        if record.session_end_time is not None:
            last_seen = float(record.session_end_time)
        elif record.session_start_time is not None:
            last_seen = float(record.session_start_time)
        else:
            last_seen = now_sec

        _fold_entities(domains, domain_members, record.domain_scores, record.session_id, last_seen)
        _fold_entities(titles, title_members, record.title_scores, record.session_id, last_seen)

        events = record.search_events
        if events is None:
            continue
        if not (events.search_count > 0 or events.search_titles or is_finite_number(events.last_searched)):
            continue
        rec = searches.get(record.session_id)
        if rec is None:
            rec = searches[record.session_id] = SearchAggregate()
        rec.search_count += int(events.search_count or 0)
        for title in events.search_titles:
            if title not in rec.search_titles:
                rec.search_titles.append(title)
        rec.last_searched = max(
            rec.last_searched,
            to_epoch_seconds(events.last_searched, TimeUnit.MICROSECONDS),
        )

    _finalize_entities(domains, domain_members, total_sessions)
    _finalize_entities(titles, title_members, total_sessions)

    logger.debug(
        "aggregate_sessions: %d sessions -> %d domains, %d titles, %d search sessions",
        total_sessions,
        len(domains),
        len(titles),
        len(searches),
    )
    return domains, titles, searches
