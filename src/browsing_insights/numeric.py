"""Numeric primitives shared by the shortcut scoring engine.

Histogram smoothing and interpolation, sum / column normalisation, running
mean-variance z-scoring, and linear scoring.  Everything here is a pure
function over plain lists and dicts; the only carried state is the
``NormState`` value object, which callers pass in and receive back.
"""
from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

from pydantic import BaseModel

DEFAULT_NORM_BETA = 1e-3
MIN_VARIANCE = 1e-8


class NormState(BaseModel):
    """Running mean / variance statistics for one feature.

    Parameters
    ----------
    beta:
        Exponential update rate.  Small values adapt slowly.
    mean:
        Current running mean.
    var:
        Current running variance.
    """

    beta: float = DEFAULT_NORM_BETA
    mean: float = 0.0
    var: float = 1.0

    model_config = {"frozen": False}

    def is_usable(self) -> bool:
        """True when the mean and variance are finite numbers."""
        return math.isfinite(self.mean) and math.isfinite(self.var)


def interpolate_wrapped_histogram(hist: Sequence[float], t: float) -> float:
    """Linearly interpolate ``hist`` at position ``t`` with circular wraparound.

    Position ``n - 0.5`` on an ``n``-bin histogram blends the last and the
    first bin.  An empty histogram interpolates to 0.0.
    """
    n = len(hist)
    if n == 0:
        return 0.0
    base = math.floor(t)
    frac = t - base
    lo = base % n
    hi = (lo + 1) % n
    return (1 - frac) * hist[lo] + frac * hist[hi]


def bayes_hist(vec: Sequence[float], pvec: Sequence[float] | None, tau: float) -> list[float]:
    """Smooth observed counts ``vec`` toward the prior distribution ``pvec``.

    Each bin becomes ``(v + tau * p) / (sum(vec) + tau)``.  When the prior is
    missing or its length differs, ``vec`` is returned unchanged.
    """
    if not pvec or not vec or len(vec) != len(pvec):
        return list(vec)
    total = sum(vec)
    if total + tau == 0:
        return list(vec)
    return [(v + tau * p) / (total + tau) for v, p in zip(vec, pvec)]


def sum_norm(vec: Sequence[float]) -> list[float]:
    """Divide every value by the sum of ``vec``; a zero sum leaves it as is."""
    if not vec:
        return []
    total = sum(vec)
    if total == 0:
        return list(vec)
    return [v / total for v in vec]


def norm_hist_dict(hists: Mapping[str, Sequence[float]]) -> dict[str, list[float]]:
    """Turn per-key ``P(t | key)`` histograms into ``P(key | t)``.

    Values are squared to emphasise differences, then each column ``t`` is
    divided by the column sum across keys.  Empty columns become 0.
    """
    if not hists:
        return {}
    width = len(next(iter(hists.values())))
    squared = {key: [v * v for v in hist] for key, hist in hists.items()}

    col_sums = [0.0] * width
    for row in squared.values():
        for j in range(width):
            col_sums[j] += row[j] if j < len(row) else 0.0

    return {
        key: [
            (row[j] / col_sums[j]) if j < len(row) and col_sums[j] else 0.0
            for j in range(width)
        ]
        for key, row in squared.items()
    }


def norm_update(
    vals: Sequence[float],
    state: NormState | None,
) -> tuple[list[float], NormState]:
    """Z-score ``vals`` against running statistics, updating them first.

    For every value ``x`` in order::

        delta = x - mean
        mean += beta * delta
        var = (1 - beta) * var + beta * delta ** 2

    The variance is floored at ``1e-8`` and each value is returned as
    ``(x - mean) / sqrt(var)`` using the final statistics.  A missing or
    non-finite ``state`` restarts from ``mean = vals[0]``, ``var = 1``.

    Returns
    -------
    tuple[list[float], NormState]
        Normalised values and a new state object (the input is not mutated).
    """
    if not vals:
        return [], state if state is not None else NormState()

    if state is None or not state.is_usable():
        current = NormState(mean=float(vals[0]), var=1.0)
    else:
        current = state.model_copy()

    for value in vals:
        delta = value - current.mean
        current.mean += current.beta * delta
        current.var = (1 - current.beta) * current.var + current.beta * delta * delta

    if current.var <= MIN_VARIANCE:
        current.var = MIN_VARIANCE

    std = math.sqrt(current.var)
    return [(value - current.mean) / std for value in vals], current


def compute_linear_score(scores: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Return ``sum(weights[f] * scores[f])``; features missing from ``scores`` count as 0."""
    return sum(scores.get(feature, 0.0) * weight for feature, weight in weights.items())


def sigmoid(z: float) -> float:
    """Numerically stable logistic function."""
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    ez = math.exp(z)
    return ez / (1.0 + ez)
