"""Shortcut ranking facade.

``ShortcutRanker`` bundles a ``ShortcutConfig`` and a random source with the
scoring, learning, sticky-reordering and frecency-feature operations, and
threads a ``ModelState`` through them.
"""
from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from datetime import datetime

from browsing_insights.shortcuts.frecency import FrecencyFeatures, PlaceVisit, build_frecency_features
from browsing_insights.shortcuts.learning import FeedbackCounts, update_weights
from browsing_insights.shortcuts.scoring import (
    ScoringResult,
    ShortcutCandidate,
    ShortcutConfig,
    ShortcutScoringInput,
    weighted_sample_top_sites,
)
from browsing_insights.shortcuts.sticky import apply_sticky_clicks
from browsing_insights.state import ModelState

logger = logging.getLogger(__name__)


class ShortcutRanker:
    """Score, learn and reorder shortcuts.

    Parameters
    ----------
    config:
        Model hyper-parameters.  Defaults to ``ShortcutConfig()``.
    rng:
        Random source for Thompson sampling.  Pass a seeded
        ``random.Random`` for reproducible rankings.
    """

    def __init__(
        self,
        config: ShortcutConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or ShortcutConfig()
        self.rng = rng

    def score(
        self,
        inputs: ShortcutScoringInput,
        state: ModelState,
        *,
        now: datetime | None = None,
    ) -> ScoringResult:
        """Score candidates with the weights and norms held in ``state``."""
        return weighted_sample_top_sites(
            inputs,
            state.weights,
            state.norms,
            self.config,
            rng=self.rng,
            now=now,
        )

    def rank(
        self,
        inputs: ShortcutScoringInput,
        state: ModelState,
        *,
        now: datetime | None = None,
    ) -> tuple[list[ShortcutCandidate], ModelState]:
        """Score candidates and return them best first with the updated state."""
        result = self.score(inputs, state, now=now)
        return result.ranked(), state.updated(norms=result.norms)

    def learn(
        self,
        feedback: Mapping[str, FeedbackCounts],
        scores: Mapping[str, Mapping[str, float]],
        state: ModelState,
    ) -> ModelState:
        """Apply one weight update from observed feedback."""
        weights = update_weights(
            self.config.features,
            feedback,
            scores,
            state.weights,
            self.config.eta,
            click_bonus=self.config.click_bonus,
            max_norm=self.config.max_weight_norm,
        )
        logger.debug("ShortcutRanker.learn: updated weights from %d guids", len(feedback))
        return state.updated(weights=weights)

    @staticmethod
    def reorder(
        positions: Sequence[int | None],
        guids: Sequence[str],
        num_sponsored: int = 0,
    ) -> list[str]:
        """Keep clicked shortcuts at their last-click positions."""
        return apply_sticky_clicks(positions, guids, num_sponsored)

    def frecency_features(
        self,
        visits_by_guid: Mapping[str, Sequence[PlaceVisit]],
        visit_counts: Mapping[str, int] | None = None,
        *,
        now: float | None = None,
    ) -> FrecencyFeatures:
        """Build frecency decomposition features with the configured half-life."""
        return build_frecency_features(
            visits_by_guid,
            visit_counts,
            half_life_days=self.config.frecency_half_life_days,
            now=now,
        )

    def with_frecency_features(
        self,
        inputs: ShortcutScoringInput,
        features: FrecencyFeatures,
    ) -> ShortcutScoringInput:
        """Copy ``inputs`` with the rece / freq / refre / unid scores replaced."""
        return inputs.model_copy(
            update={
                "rece_scores": dict(features.rece),
                "freq_scores": dict(features.freq),
                "refre_scores": dict(features.refre),
                "unid_scores": dict(features.unid),
            }
        )
