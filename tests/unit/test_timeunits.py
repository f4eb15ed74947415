"""Tests for epoch timestamp conversion and rounding helpers."""
from __future__ import annotations

import math

import pytest

from browsing_insights.timeunits import (
    TimeUnit,
    guess_unit,
    is_finite_number,
    micros_to_epoch_seconds,
    micros_to_ms,
    round2,
    to_epoch_seconds,
)

T = 1_700_000_000


class TestIsFiniteNumber:
    def test_int_and_float(self) -> None:
        assert is_finite_number(3)
        assert is_finite_number(3.5)

    def test_non_finite(self) -> None:
        assert not is_finite_number(math.nan)
        assert not is_finite_number(math.inf)

    def test_bool_and_none_rejected(self) -> None:
        assert not is_finite_number(True)
        assert not is_finite_number(None)
        assert not is_finite_number("12")


class TestGuessUnit:
    def test_seconds(self) -> None:
        assert guess_unit(T) == TimeUnit.SECONDS

    def test_milliseconds(self) -> None:
        assert guess_unit(T * 1000) == TimeUnit.MILLISECONDS

    def test_microseconds(self) -> None:
        assert guess_unit(T * 1_000_000) == TimeUnit.MICROSECONDS


class TestToEpochSeconds:
    def test_heuristic_all_units_agree(self) -> None:
        assert to_epoch_seconds(T) == pytest.approx(T)
        assert to_epoch_seconds(T * 1000) == pytest.approx(T)
        assert to_epoch_seconds(T * 1_000_000) == pytest.approx(T)

    def test_explicit_unit_overrides_heuristic(self) -> None:
        # 5 seconds worth of microseconds is far below every threshold.
        assert to_epoch_seconds(5_000_000, TimeUnit.MICROSECONDS) == pytest.approx(5.0)
        assert to_epoch_seconds(5_000, TimeUnit.MILLISECONDS) == pytest.approx(5.0)

    def test_non_finite_is_zero(self) -> None:
        assert to_epoch_seconds(math.nan) == 0.0
        assert to_epoch_seconds(None) == 0.0


class TestMicrosConversions:
    def test_micros_to_epoch_seconds_floors(self) -> None:
        assert micros_to_epoch_seconds(1_999_999) == 1

    def test_micros_to_epoch_seconds_non_finite(self) -> None:
        assert micros_to_epoch_seconds(math.inf) is None

    def test_micros_to_ms(self) -> None:
        assert micros_to_ms(1_234_567) == 1234


class TestRound2:
    def test_plain(self) -> None:
        assert round2(1 / 3) == pytest.approx(0.33)

    def test_half_rounds_up(self) -> None:
        assert round2(0.125) == pytest.approx(0.13)

    def test_negative_half_rounds_toward_positive(self) -> None:
        assert round2(-0.125) == pytest.approx(-0.12)

    def test_integer_unchanged(self) -> None:
        assert round2(2.0) == 2.0
