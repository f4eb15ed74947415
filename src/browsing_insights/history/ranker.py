"""Top-K selection over aggregated history.

Every domain, title and search session receives a recency-weighted rank
(see ``with_recency``).  Searches use a session importance of 1.0 since
their weight comes from the search count.  Lists are sorted by descending
rank with deterministic tie-breaks and trimmed to ``k`` entries.

Classes
-------
- TopKConfig — per-category limits

Functions
---------
- topk_aggregates — rank and trim the three aggregate dictionaries
"""
from __future__ import annotations

import logging
import time
from collections.abc import Mapping

from pydantic import BaseModel, Field

from browsing_insights.history.records import (
    EntityAggregate,
    RankedItem,
    RankedSearch,
    SearchAggregate,
    TopKAggregates,
)
from browsing_insights.history.recency import RecencyConfig, with_recency_config
from browsing_insights.timeunits import TimeUnit, round2, to_epoch_seconds

logger = logging.getLogger(__name__)


class TopKConfig(BaseModel):
    """Maximum number of items returned per category."""

    k_domains: int = Field(default=30, ge=0)
    k_titles: int = Field(default=60, ge=0)
    k_searches: int = Field(default=10, ge=0)

    model_config = {"frozen": True}


def _rank_entities(
    aggregates: Mapping[str, EntityAggregate],
    recency: RecencyConfig,
    now_sec: float,
) -> list[RankedItem]:
    ranked = [
        RankedItem(
            key=key,
            rank=with_recency_config(
                info.score or 0.0,
                info.session_importance or 0.0,
                info.last_seen or 0.0,
                recency,
                now=now_sec,
                unit=TimeUnit.SECONDS,
            ),
            num_sessions=int(info.num_sessions or 0),
            last_seen=float(info.last_seen or 0.0),
        )
        for key, info in aggregates.items()
    ]
    ranked.sort(key=lambda item: (-item.rank, -item.num_sessions, -item.last_seen))
    return ranked


def _rank_searches(
    aggregates: Mapping[int | str, SearchAggregate],
    recency: RecencyConfig,
    now_sec: float,
) -> list[RankedSearch]:
    ranked = [
        RankedSearch(
            sid=sid,
            cnt=int(info.search_count or 0),
            q=tuple(info.search_titles),
            ls=float(info.last_searched or 0.0),
            r=with_recency_config(
                info.search_count or 0,
                1.0,
                info.last_searched or 0.0,
                recency,
                now=now_sec,
                unit=TimeUnit.SECONDS,
            ),
        )
        for sid, info in aggregates.items()
    ]
    ranked.sort(key=lambda item: (-item.r, -item.cnt, -item.ls))
    return ranked


def topk_aggregates(
    domains: Mapping[str, EntityAggregate],
    titles: Mapping[str, EntityAggregate],
    searches: Mapping[int | str, SearchAggregate],
    config: TopKConfig | None = None,
    *,
    now: float | None = None,
    recency: RecencyConfig | None = None,
) -> TopKAggregates:
    """Rank the aggregates and keep the top entries of each category.

    Parameters
    ----------
    domains, titles:
        Entity aggregates from ``aggregate_sessions``.
    searches:
        Search aggregates keyed by session id.
    config:
        Per-category limits.  Defaults to 30 domains, 60 titles, 10 searches.
    now:
        Reference time in seconds or milliseconds since the epoch.
        Defaults to the current time.
    recency:
        Recency blend parameters.

    Returns
    -------
    TopKAggregates
        ``(domains, titles, searches)``: ``(key, rank)`` pairs for domains
        and titles, ``RankedSearch`` entries for searches.  Each list holds
        ``min(k, candidates)`` items.
    """
    cfg = config if config is not None else TopKConfig()
    rec = recency if recency is not None else RecencyConfig()
    now_sec = time.time() if now is None else to_epoch_seconds(now)

    domain_ranked = _rank_entities(domains, rec, now_sec)
    title_ranked = _rank_entities(titles, rec, now_sec)
    search_ranked = _rank_searches(searches, rec, now_sec)

    result = TopKAggregates(
        domains=[(item.key, round2(item.rank)) for item in domain_ranked[: cfg.k_domains]],
        titles=[(item.key, round2(item.rank)) for item in title_ranked[: cfg.k_titles]],
        searches=search_ranked[: cfg.k_searches],
    )
    logger.debug(
        "topk_aggregates: kept %d/%d domains, %d/%d titles, %d/%d searches",
        len(result.domains),
        len(domain_ranked),
        len(result.titles),
        len(title_ranked),
        len(result.searches),
        len(search_ranked),
    )
    return result
