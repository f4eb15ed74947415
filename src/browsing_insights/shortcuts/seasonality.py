"""Hour-of-day and day-of-week seasonality features.

Each shortcut carries a histogram of when it was visited.  Sparse
histograms are first pulled toward a global prior, then converted from
``P(time | site)`` to ``P(site | time)`` and read off at the current time.
"""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, Field

from browsing_insights.numeric import (
    bayes_hist,
    interpolate_wrapped_histogram,
    norm_hist_dict,
    sum_norm,
)


class SeasonalityInput(BaseModel):
    """Visit-time histograms per guid plus the global prior histogram."""

    hists: dict[str, list[float]] = Field(default_factory=dict)
    pvec: list[float] | None = None


def hour_of_day(moment: datetime) -> float:
    """Fractional local hour, e.g. 13.5 for 13:30."""
    return moment.hour + moment.minute / 60 + moment.second / 3600


def day_of_week(moment: datetime) -> int:
    """Day of week with Sunday as 0."""
    return (moment.weekday() + 1) % 7


def process_seasonality(
    guids: Sequence[str],
    seasonality: SeasonalityInput,
    tau: float,
    curtime: float,
) -> list[float]:
    """Return the seasonality weight of every guid at time ``curtime``.

    Parameters
    ----------
    guids:
        Candidates, in output order.
    seasonality:
        Raw histograms per guid and the prior they are smoothed toward.
    tau:
        Prior strength used by ``bayes_hist``.
    curtime:
        Position on the histogram axis, e.g. the fractional hour.

    Returns
    -------
    list[float]
        One weight per guid, sum-normalised.  Guids without a histogram
        weigh 0.
    """
    smoothed = {
        guid: bayes_hist(hist, seasonality.pvec, tau)
        for guid, hist in seasonality.hists.items()
    }
    time_given_site = {guid: sum_norm(hist) for guid, hist in smoothed.items()}
    site_given_time = norm_hist_dict(time_given_site)
    weights = {
        guid: interpolate_wrapped_histogram(hist, curtime)
        for guid, hist in site_given_time.items()
    }
    return sum_norm([weights.get(guid, 0.0) for guid in guids])
