"""Smart shortcut ranking subpackage.

Public surface
--------------
- ShortcutRanker            — facade over scoring, learning and reordering
- weighted_sample_top_sites — normalised features and linear final scores
- update_weights            — online logistic-regression weight step
- clamp_weights             — bound the weight vector's L2 norm
- apply_sticky_clicks       — keep clicked shortcuts in place
- build_frecency_features   — split frecency into frequency / recency parts
- process_seasonality       — hour / day seasonality weights
- thompson_sample_sort      — Beta posterior sampling
"""
from __future__ import annotations

from browsing_insights.shortcuts.frecency import (
    TYPE_SCORE,
    FrecencyFeatures,
    PlaceVisit,
    VisitType,
    build_frecency_features,
)
from browsing_insights.shortcuts.learning import FeedbackCounts, clamp_weights, update_weights
from browsing_insights.shortcuts.ranker import ShortcutRanker
from browsing_insights.shortcuts.scoring import (
    ALL_FEATURES,
    ScoringResult,
    ShortcutCandidate,
    ShortcutConfig,
    ShortcutScoringInput,
    weighted_sample_top_sites,
)
from browsing_insights.shortcuts.seasonality import (
    SeasonalityInput,
    day_of_week,
    hour_of_day,
    process_seasonality,
)
from browsing_insights.shortcuts.sticky import apply_sticky_clicks, place_guids_by_positions
from browsing_insights.shortcuts.thompson import thompson_sample_sort

__all__ = [
    "ALL_FEATURES",
    "FeedbackCounts",
    "FrecencyFeatures",
    "PlaceVisit",
    "ScoringResult",
    "SeasonalityInput",
    "ShortcutCandidate",
    "ShortcutConfig",
    "ShortcutRanker",
    "ShortcutScoringInput",
    "TYPE_SCORE",
    "VisitType",
    "apply_sticky_clicks",
    "build_frecency_features",
    "clamp_weights",
    "day_of_week",
    "hour_of_day",
    "place_guids_by_positions",
    "process_seasonality",
    "thompson_sample_sort",
    "update_weights",
    "weighted_sample_top_sites",
]
