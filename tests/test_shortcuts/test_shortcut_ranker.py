"""Tests for the ShortcutRanker facade."""
from __future__ import annotations

import random
from datetime import datetime

import pytest

from browsing_insights.shortcuts.frecency import PlaceVisit
from browsing_insights.shortcuts.learning import FeedbackCounts
from browsing_insights.shortcuts.ranker import ShortcutRanker
from browsing_insights.shortcuts.scoring import ShortcutConfig, ShortcutScoringInput
from browsing_insights.state import ModelState

T = 1_700_000_000
NOON = datetime(2024, 1, 1, 12, 0)


@pytest.fixture()
def ranker() -> ShortcutRanker:
    return ShortcutRanker(ShortcutConfig(features=["bmark", "bias"]), rng=random.Random(0))


@pytest.fixture()
def inputs() -> ShortcutScoringInput:
    return ShortcutScoringInput(guids=["a", "b"], bmark_scores={"b": 5.0})


class TestShortcutRanker:
    def test_rank_orders_and_updates_norms(self, ranker: ShortcutRanker, inputs: ShortcutScoringInput) -> None:
        state = ModelState(weights={"bmark": 1.0})
        ranked, new_state = ranker.rank(inputs, state, now=NOON)
        assert [c.guid for c in ranked] == ["b", "a"]
        assert "bmark" in new_state.norms
        assert new_state.weights == {"bmark": 1.0}
        assert state.norms == {}

    def test_learn_rewards_clicked_features(
        self, ranker: ShortcutRanker, inputs: ShortcutScoringInput
    ) -> None:
        state = ModelState(weights={"bmark": 1.0, "bias": 0.0})
        result = ranker.score(inputs, state, now=NOON)
        learned = ranker.learn({"b": FeedbackCounts(clicks=1)}, result.score_map, state)
        assert learned.weights["bmark"] > 1.0
        assert learned.weights["bias"] > 0.0
        assert state.weights == {"bmark": 1.0, "bias": 0.0}

    def test_reorder(self) -> None:
        assert ShortcutRanker.reorder([None, 0], ["a", "b"]) == ["b", "a"]

    def test_frecency_features_use_configured_half_life(self) -> None:
        ranker = ShortcutRanker(ShortcutConfig(frecency_half_life_days=7))
        visit = PlaceVisit(visit_date_us=(T - 7 * 86_400) * 1_000_000)
        features = ranker.frecency_features({"a": [visit]}, {"a": 1}, now=T)
        assert features.rece["a"] == pytest.approx(0.5)

    def test_with_frecency_features(self, inputs: ShortcutScoringInput) -> None:
        ranker = ShortcutRanker()
        visit = PlaceVisit(visit_date_us=T * 1_000_000)
        features = ranker.frecency_features({"a": [visit]}, {"a": 1}, now=T)
        merged = ranker.with_frecency_features(inputs, features)
        assert merged.rece_scores["a"] == pytest.approx(1.0)
        assert merged.bmark_scores == {"b": 5.0}
        assert inputs.rece_scores == {}
