"""Tests for the histogram, normalisation and scoring primitives."""
from __future__ import annotations

import math

import pytest

from browsing_insights.numeric import (
    MIN_VARIANCE,
    NormState,
    bayes_hist,
    compute_linear_score,
    interpolate_wrapped_histogram,
    norm_hist_dict,
    norm_update,
    sigmoid,
    sum_norm,
)


class TestInterpolateWrappedHistogram:
    def test_midpoint(self) -> None:
        assert interpolate_wrapped_histogram([1, 2, 3, 4], 1.5) == pytest.approx(2.5)

    def test_wraps_last_to_first(self) -> None:
        assert interpolate_wrapped_histogram([1, 2, 3, 4], 3.5) == pytest.approx(2.5)

    def test_integer_position_past_end_wraps(self) -> None:
        assert interpolate_wrapped_histogram([1, 2, 3, 4], 4) == pytest.approx(1.0)

    def test_empty_histogram(self) -> None:
        assert interpolate_wrapped_histogram([], 3.0) == 0.0


class TestBayesHist:
    def test_blends_toward_prior(self) -> None:
        result = bayes_hist([1, 3], [0.5, 0.5], 2)
        assert result == pytest.approx([1 / 3, 2 / 3])

    def test_missing_prior_returns_input(self) -> None:
        assert bayes_hist([1, 2], None, 5) == [1, 2]

    def test_length_mismatch_returns_input(self) -> None:
        assert bayes_hist([1, 2], [1.0], 5) == [1, 2]

    def test_zero_mass_returns_input(self) -> None:
        assert bayes_hist([0, 0], [0.5, 0.5], 0) == [0, 0]


class TestSumNorm:
    def test_normalises(self) -> None:
        assert sum_norm([1, 3]) == pytest.approx([0.25, 0.75])

    def test_zero_sum_unchanged(self) -> None:
        assert sum_norm([0, 0]) == [0, 0]

    def test_empty(self) -> None:
        assert sum_norm([]) == []


class TestNormHistDict:
    def test_column_normalisation_of_squares(self) -> None:
        result = norm_hist_dict({"a": [1, 0], "b": [1, 1]})
        assert result["a"] == pytest.approx([0.5, 0.0])
        assert result["b"] == pytest.approx([0.5, 1.0])

    def test_empty_column_is_zero(self) -> None:
        assert norm_hist_dict({"a": [0, 0]}) == {"a": [0.0, 0.0]}

    def test_empty_dict(self) -> None:
        assert norm_hist_dict({}) == {}


class TestNormUpdate:
    def test_fresh_state_starts_at_first_value(self) -> None:
        vals, state = norm_update([5.0], None)
        assert vals == pytest.approx([0.0])
        assert state.mean == pytest.approx(5.0)
        assert state.beta == pytest.approx(1e-3)

    def test_update_formula(self) -> None:
        prior = NormState(beta=0.5, mean=0.0, var=1.0)
        vals, state = norm_update([2.0], prior)
        assert state.mean == pytest.approx(1.0)
        assert state.var == pytest.approx(2.5)
        assert vals == pytest.approx([1.0 / math.sqrt(2.5)])

    def test_input_state_not_mutated(self) -> None:
        prior = NormState(beta=0.5, mean=0.0, var=1.0)
        norm_update([2.0, 4.0], prior)
        assert prior.mean == 0.0
        assert prior.var == 1.0

    def test_non_finite_state_restarts(self) -> None:
        _, state = norm_update([7.0], NormState(mean=math.nan))
        assert state.mean == pytest.approx(7.0)

    def test_variance_floor(self) -> None:
        vals, state = norm_update([3.0, 3.0], NormState(beta=1.0, mean=3.0, var=1.0))
        assert state.var == MIN_VARIANCE
        assert vals == pytest.approx([0.0, 0.0])

    def test_empty_values_pass_state_through(self) -> None:
        prior = NormState(mean=2.0)
        vals, state = norm_update([], prior)
        assert vals == []
        assert state is prior


class TestLinearScoreAndSigmoid:
    def test_missing_features_count_as_zero(self) -> None:
        assert compute_linear_score({"a": 2.0}, {"a": 3.0, "b": 5.0}) == pytest.approx(6.0)

    def test_sigmoid_midpoint(self) -> None:
        assert sigmoid(0.0) == pytest.approx(0.5)

    def test_sigmoid_extremes_do_not_overflow(self) -> None:
        assert sigmoid(1000.0) == pytest.approx(1.0)
        assert sigmoid(-1000.0) == pytest.approx(0.0)
