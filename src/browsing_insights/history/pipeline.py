"""End-to-end history aggregation runs.

A run takes the visits supplied by a collector and produces the ranked
domains, titles and searches handed to the memory-generation consumer,
split into batches that fit a token budget.

Two run modes exist:

- ``FULL``  — first run: a fixed look-back window and generous top-k limits.
- ``DELTA`` — later runs: only visits since the previous run, smaller limits.

Classes
-------
- RunMode             — FULL or DELTA
- HistoryWindowConfig — look-back window and per-mode visit caps
- HistoryRunResult    — everything a run produced
- HistoryInsights     — runs the sessionize / aggregate / rank pipeline
"""
from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field

from browsing_insights.history.collector import build_visit_records, select_recent_visits
from browsing_insights.history.profile import aggregate_sessions, generate_profile_inputs
from browsing_insights.history.ranker import TopKConfig, topk_aggregates
from browsing_insights.history.recency import RecencyConfig
from browsing_insights.history.records import RankedSearch, TopKAggregates, VisitRecord
from browsing_insights.history.sessionizer import SessionConfig, sessionize_visits
from browsing_insights.timeunits import MICROS_PER_MS, to_epoch_seconds

logger = logging.getLogger(__name__)

FULL_TOPK = TopKConfig(k_domains=100, k_titles=100, k_searches=10)
DELTA_TOPK = TopKConfig(k_domains=30, k_titles=60, k_searches=10)

DEFAULT_TOKEN_BUDGET = 2000
MIN_BATCH_ITEMS = 10
BATCH_SAFETY_MARGIN = 0.9
CHARS_PER_TOKEN = 4
FORMAT_OVERHEAD_CHARS = 1000


class RunMode(str, Enum):
    """Whether a run reprocesses the whole window or only new visits."""

    FULL = "full"
    DELTA = "delta"


class HistoryWindowConfig(BaseModel):
    """Which visits a run looks at.

    Parameters
    ----------
    days:
        Look-back window of a full run.
    full_max_results:
        Visit cap of a full run.
    delta_max_results:
        Visit cap of a delta run.
    """

    days: float = Field(default=60, gt=0)
    full_max_results: int = Field(default=3000, ge=0)
    delta_max_results: int = Field(default=500, ge=0)

    model_config = {"frozen": True}


@dataclass
class HistoryRunResult:
    """Outcome of ``HistoryInsights.run``."""

    mode: RunMode
    aggregates: TopKAggregates
    batches: list[TopKAggregates] = field(default_factory=list)
    visit_count: int = 0

    def has_any_history(self) -> bool:
        return has_any_history(self.aggregates)

    def to_dict(self) -> dict[str, object]:
        return {
            "mode": self.mode.value,
            "visit_count": self.visit_count,
            "aggregates": self.aggregates.to_dict(),
            "batches": [batch.to_dict() for batch in self.batches],
        }


# ---------------------------------------------------------------------------
# Token-budget batching
# ---------------------------------------------------------------------------


def has_any_history(aggregates: TopKAggregates) -> bool:
    """True when at least one ranked domain, title or search exists."""
    return not aggregates.is_empty()


def estimate_history_tokens(
    domains: Sequence[tuple[str, float]],
    titles: Sequence[tuple[str, float]],
    searches: Sequence[RankedSearch],
) -> int:
    """Rough token count of the CSV rendering of ranked history items."""
    chars = sum(len(domain) + 10 for domain, _ in domains)
    chars += sum(len(title) + 10 for title, _ in titles)
    chars += sum(len(",".join(item.q)) + 20 for item in searches)
    chars += FORMAT_OVERHEAD_CHARS
    return math.ceil(chars / CHARS_PER_TOKEN)


def create_history_batches(
    domains: Sequence[tuple[str, float]],
    titles: Sequence[tuple[str, float]],
    searches: Sequence[RankedSearch],
    token_budget: int = DEFAULT_TOKEN_BUDGET,
) -> list[TopKAggregates]:
    """Split ranked items into batches that fit ``token_budget``.

    Every batch takes a slice of each category proportional to that
    category's share of all items, so batches keep the overall mix.
    Batches hold at least ``MIN_BATCH_ITEMS`` items (budget permitting the
    estimate) and empty batches are never emitted.
    """
    total_items = len(domains) + len(titles) + len(searches)
    if total_items == 0:
        return []

    avg_tokens = estimate_history_tokens(domains, titles, searches) / total_items
    items_per_batch = max(MIN_BATCH_ITEMS, math.floor(token_budget * BATCH_SAFETY_MARGIN / avg_tokens))

    domains_per_batch = math.ceil(items_per_batch * len(domains) / total_items)
    titles_per_batch = math.ceil(items_per_batch * len(titles) / total_items)
    searches_per_batch = math.ceil(items_per_batch * len(searches) / total_items)

    batches: list[TopKAggregates] = []
    d_idx = t_idx = s_idx = 0
    while d_idx < len(domains) or t_idx < len(titles) or s_idx < len(searches):
        batch = TopKAggregates(
            domains=list(domains[d_idx : d_idx + domains_per_batch]),
            titles=list(titles[t_idx : t_idx + titles_per_batch]),
            searches=list(searches[s_idx : s_idx + searches_per_batch]),
        )
        if not batch.is_empty():
            batches.append(batch)
        d_idx += domains_per_batch
        t_idx += titles_per_batch
        s_idx += searches_per_batch

    return batches


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class HistoryInsights:
    """Run the history aggregation pipeline over collector-supplied visits.

    The object only holds configuration; every call rebuilds its
    aggregates from the visits it is given, so one instance can serve
    independent snapshots concurrently.

    Parameters
    ----------
    session_config:
        Session segmentation thresholds.
    recency:
        Recency blend parameters used for ranking.
    window:
        Look-back window and visit caps.
    full_top_k, delta_top_k:
        Top-k limits for each run mode.
    token_budget:
        Token budget per consumer batch.
    """

    def __init__(
        self,
        session_config: SessionConfig | None = None,
        recency: RecencyConfig | None = None,
        window: HistoryWindowConfig | None = None,
        full_top_k: TopKConfig | None = None,
        delta_top_k: TopKConfig | None = None,
        token_budget: int = DEFAULT_TOKEN_BUDGET,
    ) -> None:
        self.session_config = session_config or SessionConfig()
        self.recency = recency or RecencyConfig()
        self.window = window or HistoryWindowConfig()
        self.full_top_k = full_top_k or FULL_TOPK
        self.delta_top_k = delta_top_k or DELTA_TOPK
        self.token_budget = token_budget

    @staticmethod
    def resolve_mode(last_run_ms: float | None) -> RunMode:
        """DELTA when a previous run timestamp (ms) is known, FULL otherwise."""
        if last_run_ms is not None and last_run_ms > 0:
            return RunMode.DELTA
        return RunMode.FULL

    def _run_window(self, last_run_ms: float | None) -> tuple[RunMode, float | None, int]:
        """Mode, absolute cutoff (µs, None for the look-back window) and visit cap."""
        mode = self.resolve_mode(last_run_ms)
        if mode is RunMode.DELTA:
            return mode, float(last_run_ms or 0) * MICROS_PER_MS, self.window.delta_max_results
        return mode, None, self.window.full_max_results

    def collect(
        self,
        rows: Iterable[Mapping[str, object]],
        *,
        last_run_ms: float | None = None,
        now: float | None = None,
    ) -> list[VisitRecord]:
        """Turn raw history rows into visit records for the run window.

        The cutoff and visit cap are those ``run`` would use for the same
        ``last_run_ms``, so frecency percentiles only reflect visits the
        run will see.
        """
        _, since_micros, max_results = self._run_window(last_run_ms)
        now_sec = time.time() if now is None else to_epoch_seconds(now)
        return build_visit_records(
            rows,
            since_micros=since_micros,
            days=self.window.days,
            max_results=max_results,
            now=now_sec,
        )

    def aggregate(
        self,
        visits: Iterable[VisitRecord],
        *,
        top_k: TopKConfig | None = None,
        since_micros: float | None = None,
        max_results: int | None = None,
        now: float | None = None,
    ) -> TopKAggregates:
        """Window, sessionize, aggregate and rank ``visits``.

        Parameters
        ----------
        visits:
            Visit records from the collector.
        top_k:
            Limits for the ranked output.  Defaults to the delta limits.
        since_micros:
            Absolute visit cutoff; overrides the look-back window.
        max_results:
            Visit cap.  Defaults to the full-run cap.
        now:
            Reference time in seconds or milliseconds.

        Returns
        -------
        TopKAggregates
            Ranked domains, titles and searches.
        """
        now_sec = time.time() if now is None else to_epoch_seconds(now)
        selected = select_recent_visits(
            visits,
            since_micros=since_micros,
            days=self.window.days,
            max_results=self.window.full_max_results if max_results is None else max_results,
            now=now_sec,
        )
        sessionized = sessionize_visits(selected, self.session_config)
        records = generate_profile_inputs(sessionized)
        domains, titles, searches = aggregate_sessions(records, now=now_sec)
        return topk_aggregates(
            domains,
            titles,
            searches,
            top_k or self.delta_top_k,
            now=now_sec,
            recency=self.recency,
        )

    def run(
        self,
        visits: Iterable[VisitRecord],
        *,
        last_run_ms: float | None = None,
        now: float | None = None,
    ) -> HistoryRunResult:
        """Aggregate visits for a FULL or DELTA run and batch the result.

        Parameters
        ----------
        visits:
            Visit records from the collector.
        last_run_ms:
            Time of the previous run in milliseconds; ``None`` or 0 selects
            a full run.
        now:
            Reference time in seconds or milliseconds.
        """
        visit_list = list(visits)
        mode, since_micros, max_results = self._run_window(last_run_ms)
        aggregates = self.aggregate(
            visit_list,
            top_k=self.delta_top_k if mode is RunMode.DELTA else self.full_top_k,
            since_micros=since_micros,
            max_results=max_results,
            now=now,
        )

        result = HistoryRunResult(mode=mode, aggregates=aggregates, visit_count=len(visit_list))
        if not result.has_any_history():
            logger.warning("HistoryInsights.run: history aggregates are empty; nothing to batch")
            return result

        result.batches = create_history_batches(
            aggregates.domains,
            aggregates.titles,
            aggregates.searches,
            self.token_budget,
        )
        logger.debug(
            "HistoryInsights.run: %s run produced %d batches", mode.value, len(result.batches)
        )
        return result
