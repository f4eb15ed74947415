"""Frecency decomposition features.

Frecency mixes how often, how recently and how a site was visited into one
number.  For ranking shortcuts those parts are split apart:

- ``freq``  — lifetime-weighted frequency: ``log(count + 1) * sum(type bonus)``
- ``rece``  — pure recency: sum of ``exp(-age_days / tau)`` over visits
- ``refre`` — re-frecency: ``log(count + 1) * sum(decay * type bonus)``
- ``unid``  — number of distinct days (by age) on which the site was visited

``tau`` is ``half_life_days / ln 2``; a 28 day half-life reproduces the
browser's frecency decay.
"""
from __future__ import annotations

import logging
import math
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

from pydantic import BaseModel

from browsing_insights.timeunits import SECONDS_PER_DAY, TimeUnit, to_epoch_seconds

logger = logging.getLogger(__name__)

DEFAULT_FRECENCY_HALF_LIFE_DAYS = 28.0


class VisitType(IntEnum):
    """Transition type codes stored with each history visit."""

    LINK = 1
    TYPED = 2
    BOOKMARK = 3
    EMBED = 4
    REDIRECT_PERMANENT = 5
    REDIRECT_TEMPORARY = 6
    DOWNLOAD = 7
    FRAMED_LINK = 8
    RELOAD = 9


TYPE_SCORE: dict[int, float] = {
    VisitType.TYPED: 200,
    VisitType.LINK: 100,
    VisitType.BOOKMARK: 75,
    VisitType.RELOAD: 0,
    VisitType.REDIRECT_PERMANENT: 0,
    VisitType.REDIRECT_TEMPORARY: 0,
    VisitType.EMBED: 0,
    VisitType.FRAMED_LINK: 0,
    VisitType.DOWNLOAD: 0,
}


class PlaceVisit(BaseModel):
    """One visit to a shortcut's site.

    Parameters
    ----------
    visit_date_us:
        Visit time in microseconds since the epoch.
    visit_type:
        Transition type code; unknown codes earn no type bonus.
    """

    visit_date_us: float
    visit_type: int = VisitType.LINK

    model_config = {"frozen": True}


@dataclass
class FrecencyFeatures:
    """Per-feature maps of guid to raw (unnormalised) value."""

    refre: dict[str, float] = field(default_factory=dict)
    rece: dict[str, float] = field(default_factory=dict)
    freq: dict[str, float] = field(default_factory=dict)
    unid: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {
            "refre": dict(self.refre),
            "rece": dict(self.rece),
            "freq": dict(self.freq),
            "unid": dict(self.unid),
        }


def build_frecency_features(
    visits_by_guid: Mapping[str, Sequence[PlaceVisit]],
    visit_counts: Mapping[str, int] | None = None,
    half_life_days: float = DEFAULT_FRECENCY_HALF_LIFE_DAYS,
    now: float | None = None,
) -> FrecencyFeatures:
    """Split each guid's visit list into frequency / recency features.

    Parameters
    ----------
    visits_by_guid:
        Recent visits per shortcut guid.
    visit_counts:
        Lifetime visit totals per guid; missing guids count as 0.
    half_life_days:
        Half-life of the recency decay.
    now:
        Reference time in seconds or milliseconds.  Defaults to the
        current time.

    Returns
    -------
    FrecencyFeatures
    """
    counts = visit_counts or {}
    now_sec = time.time() if now is None else to_epoch_seconds(now)
    tau_days = half_life_days / math.log(2)
    features = FrecencyFeatures()

    for guid, visits in visits_by_guid.items():
        total = math.log(counts.get(guid, 0) + 1)
        decays: list[float] = []
        bonuses: list[float] = []
        days_visited: set[int] = set()

        for visit in visits:
            visit_sec = to_epoch_seconds(visit.visit_date_us, TimeUnit.MICROSECONDS)
            age_days = (now_sec - visit_sec) / SECONDS_PER_DAY
            days_visited.add(math.floor(age_days))
            decays.append(math.exp(-age_days / tau_days))
            bonuses.append(TYPE_SCORE.get(visit.visit_type, 0))

        features.refre[guid] = total * sum(d * b for d, b in zip(decays, bonuses))
        features.rece[guid] = sum(decays)
        features.freq[guid] = total * sum(bonuses)
        features.unid[guid] = len(days_visited)

    logger.debug("build_frecency_features: built features for %d guids", len(visits_by_guid))
    return features
