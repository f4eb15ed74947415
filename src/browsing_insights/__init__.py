"""browsing-insights — session aggregation and ranking over browsing activity.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import browsing_insights
>>> browsing_insights.__version__
'0.1.0'
"""
from __future__ import annotations

# Time handling and shared numerics
from browsing_insights.timeunits import TimeUnit, round2, to_epoch_seconds
from browsing_insights.decay import HalfLifeDecay
from browsing_insights.numeric import NormState, norm_update

# History aggregation
from browsing_insights.history.records import (
    EntityAggregate,
    RankedSearch,
    SearchAggregate,
    SessionFeatureRecord,
    SessionizedVisit,
    TopKAggregates,
    VisitRecord,
    VisitSource,
)
from browsing_insights.history.sessionizer import SessionConfig, sessionize_visits
from browsing_insights.history.profile import aggregate_sessions, generate_profile_inputs
from browsing_insights.history.recency import RecencyConfig, with_recency
from browsing_insights.history.ranker import TopKConfig, topk_aggregates
from browsing_insights.history.collector import build_visit_records, is_search_visit
from browsing_insights.history.pipeline import (
    HistoryInsights,
    HistoryRunResult,
    RunMode,
    create_history_batches,
)

# Chat freshness
from browsing_insights.chat.freshness import ChatMessage, compute_freshness_score, score_recent_chats

# Shortcut ranking
from browsing_insights.shortcuts.scoring import (
    ShortcutCandidate,
    ShortcutConfig,
    ShortcutScoringInput,
    weighted_sample_top_sites,
)
from browsing_insights.shortcuts.learning import clamp_weights, update_weights
from browsing_insights.shortcuts.sticky import apply_sticky_clicks
from browsing_insights.shortcuts.ranker import ShortcutRanker

# State and configuration
from browsing_insights.state import ModelState, ModelStateSerializer, SchemaVersionError
from browsing_insights.config import ConfigError, InsightsConfig, load_config

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Time / numerics
    "HalfLifeDecay",
    "NormState",
    "TimeUnit",
    "norm_update",
    "round2",
    "to_epoch_seconds",
    # History
    "EntityAggregate",
    "HistoryInsights",
    "HistoryRunResult",
    "RankedSearch",
    "RecencyConfig",
    "RunMode",
    "SearchAggregate",
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
    "generate_profile_inputs",
    "is_search_visit",
    "sessionize_visits",
    "topk_aggregates",
    "with_recency",
    # Chat
    "ChatMessage",
    "compute_freshness_score",
    "score_recent_chats",
    # Shortcuts
    "ShortcutCandidate",
    "ShortcutConfig",
    "ShortcutRanker",
    "ShortcutScoringInput",
    "apply_sticky_clicks",
    "clamp_weights",
    "update_weights",
    "weighted_sample_top_sites",
    # State / config
    "ConfigError",
    "InsightsConfig",
    "ModelState",
    "ModelStateSerializer",
    "SchemaVersionError",
    "load_config",
]
