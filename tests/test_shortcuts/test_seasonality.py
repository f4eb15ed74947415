"""Tests for hour / day seasonality weights."""
from __future__ import annotations

from datetime import datetime

import pytest

from browsing_insights.shortcuts.seasonality import (
    SeasonalityInput,
    day_of_week,
    hour_of_day,
    process_seasonality,
)


def _two_sites() -> SeasonalityInput:
    return SeasonalityInput(hists={"a": [1.0, 0.0], "b": [0.0, 1.0]})


class TestClocks:
    def test_fractional_hour(self) -> None:
        assert hour_of_day(datetime(2024, 1, 1, 13, 30)) == pytest.approx(13.5)

    def test_sunday_is_zero(self) -> None:
        assert day_of_week(datetime(2024, 1, 7)) == 0
        assert day_of_week(datetime(2024, 1, 1)) == 1
        assert day_of_week(datetime(2024, 1, 6)) == 6


class TestProcessSeasonality:
    def test_peak_bin(self) -> None:
        assert process_seasonality(["a", "b"], _two_sites(), tau=0, curtime=0) == pytest.approx([1.0, 0.0])

    def test_interpolates_between_bins(self) -> None:
        assert process_seasonality(["a", "b"], _two_sites(), tau=0, curtime=0.5) == pytest.approx([0.5, 0.5])

    def test_wraps_around(self) -> None:
        assert process_seasonality(["a", "b"], _two_sites(), tau=0, curtime=1.75) == pytest.approx([0.75, 0.25])

    def test_missing_guid_weighs_zero(self) -> None:
        assert process_seasonality(["c", "a"], _two_sites(), tau=0, curtime=0) == pytest.approx([0.0, 1.0])

    def test_output_follows_guid_order(self) -> None:
        assert process_seasonality(["b", "a"], _two_sites(), tau=0, curtime=0) == pytest.approx([0.0, 1.0])

    def test_prior_smoothing_softens_peaks(self) -> None:
        data = SeasonalityInput(hists={"a": [1.0, 0.0], "b": [0.0, 1.0]}, pvec=[0.5, 0.5])
        weights = process_seasonality(["a", "b"], data, tau=2, curtime=0)
        assert 0.5 < weights[0] < 1.0
        assert sum(weights) == pytest.approx(1.0)

    def test_no_histograms(self) -> None:
        assert process_seasonality(["a"], SeasonalityInput(), tau=1, curtime=3) == [0.0]
