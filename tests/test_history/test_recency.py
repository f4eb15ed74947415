"""Tests for recency-weighted ranking scores."""
from __future__ import annotations

import pytest

from browsing_insights.history.recency import RecencyConfig, with_recency, with_recency_config
from browsing_insights.timeunits import TimeUnit

NOW = 1_700_000_000
DAY = 86_400


class TestWithRecency:
    def test_fresh_item_keeps_full_score(self) -> None:
        assert with_recency(10, 2, NOW, now=NOW) == pytest.approx(20.0)

    def test_one_half_life(self) -> None:
        assert with_recency(10, 2, NOW - 14 * DAY, now=NOW) == pytest.approx(15.0)

    def test_old_items_keep_floor(self) -> None:
        assert with_recency(10, 2, NOW - 10_000 * DAY, now=NOW) == pytest.approx(10.0)

    def test_zero_floor(self) -> None:
        rank = with_recency(10, 1, NOW - 14 * DAY, floor=0.0, now=NOW)
        assert rank == pytest.approx(5.0)

    def test_future_last_seen_is_age_zero(self) -> None:
        assert with_recency(10, 2, NOW + 5 * DAY, now=NOW) == pytest.approx(20.0)

    def test_session_weight(self) -> None:
        assert with_recency(10, 1, NOW, session_weight=3.0, now=NOW) == pytest.approx(30.0)

    def test_millisecond_inputs(self) -> None:
        now_ms = NOW * 1000
        rank = with_recency(10, 1, now_ms - 14 * DAY * 1000, now=now_ms)
        assert rank == pytest.approx(7.5)

    def test_explicit_unit(self) -> None:
        rank = with_recency(10, 1, 0, now=14 * DAY, unit=TimeUnit.SECONDS)
        assert rank == pytest.approx(7.5)

    def test_result_rounded_to_two_decimals(self) -> None:
        rank = with_recency(1, 1 / 3, NOW, now=NOW)
        assert rank == pytest.approx(0.33)


class TestRecencyMonotonicity:
    def test_non_increasing_with_age(self) -> None:
        ranks = [with_recency(50, 1.5, NOW - age * DAY, now=NOW) for age in (0, 1, 3, 10, 30, 90, 365)]
        assert ranks == sorted(ranks, reverse=True)

    def test_increasing_in_score(self) -> None:
        ranks = [with_recency(score, 1.0, NOW - 5 * DAY, now=NOW) for score in (1, 5, 20, 80)]
        assert ranks == sorted(ranks)

    def test_increasing_in_importance(self) -> None:
        ranks = [with_recency(10, imp, NOW - 5 * DAY, now=NOW) for imp in (0.5, 1, 2, 4)]
        assert ranks == sorted(ranks)


class TestRecencyConfig:
    def test_config_wrapper_matches(self) -> None:
        config = RecencyConfig(half_life_days=7, floor=0.2, session_weight=2)
        expected = with_recency(10, 1, NOW - 7 * DAY, half_life_days=7, floor=0.2, session_weight=2, now=NOW)
        assert with_recency_config(10, 1, NOW - 7 * DAY, config, now=NOW) == expected

    def test_invalid_half_life_rejected(self) -> None:
        with pytest.raises(ValueError):
            RecencyConfig(half_life_days=0)

    def test_floor_bounded(self) -> None:
        with pytest.raises(ValueError):
            RecencyConfig(floor=1.5)
