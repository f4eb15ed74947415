"""Tests for the online weight update and weight clamping."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from browsing_insights.shortcuts.learning import FeedbackCounts, clamp_weights, update_weights

SCORES = {"a": {"x": 2.0, "final": 0.0}}


class TestClampWeights:
    def test_scales_down(self) -> None:
        assert clamp_weights({"a": 3.0, "b": 4.0}, 1.0) == pytest.approx({"a": 0.6, "b": 0.8})

    def test_within_limit_unchanged(self) -> None:
        weights = {"a": 3.0, "b": 4.0}
        clamped = clamp_weights(weights, 5.0)
        assert clamped == weights
        assert clamped is not weights

    def test_empty(self) -> None:
        assert clamp_weights({}) == {}


class TestUpdateWeights:
    def test_click_raises_weight(self) -> None:
        updated = update_weights(["x"], {"a": FeedbackCounts(clicks=1)}, SCORES, {"x": 1.0}, eta=0.1)
        assert updated["x"] == pytest.approx(1.1)

    def test_impression_lowers_weight(self) -> None:
        updated = update_weights(["x"], {"a": FeedbackCounts(impressions=1)}, SCORES, {"x": 1.0}, eta=0.1)
        assert updated["x"] == pytest.approx(0.9)

    def test_click_bonus_counts_toward_total(self) -> None:
        scores = {"a": {"x": 2.0, "final": 0.0}, "b": {"x": 2.0, "final": 0.0}}
        data = {"a": FeedbackCounts(clicks=1), "b": FeedbackCounts(impressions=1)}
        updated = update_weights(["x"], data, scores, {"x": 1.0}, eta=0.1, click_bonus=3.0)
        assert updated["x"] == pytest.approx(1.05)

    def test_new_feature_starts_at_zero(self) -> None:
        updated = update_weights(["x"], {"a": FeedbackCounts(clicks=1)}, SCORES, {}, eta=0.1)
        assert updated["x"] == pytest.approx(0.1)

    def test_no_feedback_returns_copy(self) -> None:
        weights = {"x": 1.0}
        updated = update_weights(["x"], {"a": FeedbackCounts()}, SCORES, weights, eta=0.1)
        assert updated == weights
        assert updated is not weights

    def test_no_mass_skips_clamp(self) -> None:
        updated = update_weights(["x"], {}, SCORES, {"x": 500.0}, eta=0.1, max_norm=1.0)
        assert updated == {"x": 500.0}

    def test_guid_without_final_skipped(self) -> None:
        scores = {"a": {"x": 2.0}}
        updated = update_weights(["x"], {"a": FeedbackCounts(clicks=1)}, scores, {"x": 1.0}, eta=0.1)
        assert updated == {"x": 1.0}

    def test_boolean_final_skipped(self) -> None:
        scores = {"a": {"x": 2.0, "final": True}}
        updated = update_weights(["x"], {"a": FeedbackCounts(clicks=1)}, scores, {"x": 1.0}, eta=0.1)
        assert updated == {"x": 1.0}

    def test_unknown_guid_skipped(self) -> None:
        updated = update_weights(["x"], {"zz": FeedbackCounts(clicks=4)}, SCORES, {"x": 1.0}, eta=0.1)
        assert updated == {"x": 1.0}

    def test_clamped(self) -> None:
        updated = update_weights(["x"], {"a": FeedbackCounts(clicks=1)}, SCORES, {"x": 1.0}, eta=0.1, max_norm=1.0)
        assert updated["x"] == pytest.approx(1.0)

    def test_clamp_disabled(self) -> None:
        updated = update_weights(
            ["x"], {"a": FeedbackCounts(clicks=1)}, SCORES, {"x": 1.0}, eta=0.1, do_clamp=False, max_norm=1.0
        )
        assert updated["x"] == pytest.approx(1.1)

    def test_input_weights_not_mutated(self) -> None:
        weights = {"x": 1.0}
        update_weights(["x"], {"a": FeedbackCounts(clicks=1)}, SCORES, weights, eta=0.1)
        assert weights == {"x": 1.0}


class TestFeedbackCounts:
    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FeedbackCounts(clicks=-1)
