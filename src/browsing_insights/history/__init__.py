"""History aggregation subpackage.

Turns a stream of page visits into sessions, per-session features,
cross-session aggregates and finally recency-weighted top-k lists of
domains, titles and searches.

Public surface
--------------
- VisitRecord / SessionizedVisit — input and sessionized visit models
- sessionize_visits              — gap / max-duration session segmentation
- generate_profile_inputs        — per-session feature records
- aggregate_sessions             — cross-session domain/title/search stats
- with_recency                   — recency-weighted rank of one item
- topk_aggregates                — ranked and trimmed aggregates
- build_visit_records            — raw rows to percentile-tagged visits
- HistoryInsights                — FULL / DELTA pipeline runs with batching
"""
from __future__ import annotations

from browsing_insights.history.collector import (
    build_visit_records,
    cume_dist_percentiles,
    is_search_visit,
    select_recent_visits,
)
from browsing_insights.history.pipeline import (
    HistoryInsights,
    HistoryRunResult,
    HistoryWindowConfig,
    RunMode,
    create_history_batches,
    estimate_history_tokens,
    has_any_history,
)
from browsing_insights.history.profile import aggregate_sessions, generate_profile_inputs
from browsing_insights.history.ranker import TopKConfig, topk_aggregates
from browsing_insights.history.recency import RecencyConfig, with_recency
from browsing_insights.history.records import (
    EntityAggregate,
    RankedSearch,
    SearchAggregate,
    SearchEvents,
    SessionFeatureRecord,
    SessionizedVisit,
    TopKAggregates,
    VisitRecord,
    VisitSource,
)
from browsing_insights.history.sessionizer import SessionConfig, sessionize_visits

__all__ = [
    "EntityAggregate",
    "HistoryInsights",
    "HistoryRunResult",
    "HistoryWindowConfig",
    "RankedSearch",
    "RecencyConfig",
    "RunMode",
    "SearchAggregate",
    "SearchEvents",
    "SessionConfig",
    "SessionFeatureRecord",
    "SessionizedVisit",
    "TopKAggregates",
    "TopKConfig",
    "VisitRecord",
    "VisitSource",
    "aggregate_sessions",
    "build_visit_records",
    "create_history_batches",
    "has_any_history",
    "cume_dist_percentiles",
    "estimate_history_tokens",
    "generate_profile_inputs",
    "is_search_visit",
    "select_recent_visits",
    "sessionize_visits",
    "topk_aggregates",
    "with_recency",
]
