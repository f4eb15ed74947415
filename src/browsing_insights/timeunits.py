"""Epoch timestamp conversion helpers.

Visit records carry microsecond timestamps, chat messages carry
milliseconds, and aggregates are expressed in seconds.  Callers that know
the unit of a value should pass it explicitly; the magnitude heuristic is
only a fallback for loosely-typed inputs such as a caller-supplied ``now``.

Functions
---------
- to_epoch_seconds        — convert an epoch value to float seconds
- micros_to_epoch_seconds — floor a microsecond timestamp to whole seconds
- round2                  — round to two decimals, half toward +infinity
"""
from __future__ import annotations

import math
from enum import Enum

MICROS_PER_SECOND = 1_000_000
MICROS_PER_MS = 1_000
MS_PER_SECOND = 1_000
SECONDS_PER_DAY = 86_400
MS_PER_DAY = 86_400_000

# Values above these magnitudes are read as microseconds / milliseconds.
MICROS_THRESHOLD = 1e13
MILLIS_THRESHOLD = 1e12


class TimeUnit(str, Enum):
    """Unit tag for an epoch timestamp."""

    SECONDS = "s"
    MILLISECONDS = "ms"
    MICROSECONDS = "us"


_DIVISORS: dict[TimeUnit, float] = {
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MILLISECONDS: float(MS_PER_SECOND),
    TimeUnit.MICROSECONDS: float(MICROS_PER_SECOND),
}


def is_finite_number(value: object) -> bool:
    """Return True for real, finite ``int``/``float`` values (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def guess_unit(value: float) -> TimeUnit:
    """Infer the unit of an epoch timestamp from its magnitude."""
    if value > MICROS_THRESHOLD:
        return TimeUnit.MICROSECONDS
    if value > MILLIS_THRESHOLD:
        return TimeUnit.MILLISECONDS
    return TimeUnit.SECONDS


def to_epoch_seconds(value: float | int | None, unit: TimeUnit | None = None) -> float:
    """Convert an epoch timestamp to seconds.

    Parameters
    ----------
    value:
        Epoch timestamp.  Non-finite or missing values convert to 0.0.
    unit:
        Unit of ``value``.  When omitted, the unit is inferred from the
        magnitude (see ``guess_unit``).

    Returns
    -------
    float
        Seconds since the Unix epoch.
    """
    if not is_finite_number(value):
        return 0.0
    resolved = unit if unit is not None else guess_unit(float(value))  # type: ignore[arg-type]
    return float(value) / _DIVISORS[resolved]  # type: ignore[arg-type]


def micros_to_epoch_seconds(micros: float | int | None) -> int | None:
    """Floor a microsecond timestamp to integer seconds, or None if not finite."""
    if not is_finite_number(micros):
        return None
    return math.floor(float(micros) / MICROS_PER_SECOND)  # type: ignore[arg-type]


def micros_to_ms(micros: float | int) -> int:
    """Floor a microsecond timestamp to integer milliseconds."""
    return math.floor(float(micros) / MICROS_PER_MS)


def round2(value: float) -> float:
    """Round to two decimals with halves rounded toward +infinity."""
    return math.floor(float(value) * 100 + 0.5) / 100
