"""Recency-weighted ranking score.

    rank = round2(score * session_importance * session_weight
                  * (floor + (1 - floor) * 0.5 ** (age_days / half_life_days)))

The decay term stays within ``[floor, 1]``, so ``rank`` never increases as
an item ages and old items keep at least ``floor`` of their weighted score.
"""
from __future__ import annotations

import time

from pydantic import BaseModel, Field

from browsing_insights.decay import HalfLifeDecay
from browsing_insights.timeunits import SECONDS_PER_DAY, TimeUnit, round2, to_epoch_seconds

DEFAULT_HALF_LIFE_DAYS = 14.0
DEFAULT_RECENCY_FLOOR = 0.5
DEFAULT_SESSION_WEIGHT = 1.0


class RecencyConfig(BaseModel):
    """Parameters of the recency blend.

    Parameters
    ----------
    half_life_days:
        Half-life of the decaying part; smaller means recency matters more.
    floor:
        Minimum recency factor kept by arbitrarily old items.
    session_weight:
        Extra multiplier on session importance.
    """

    half_life_days: float = Field(default=DEFAULT_HALF_LIFE_DAYS, gt=0)
    floor: float = Field(default=DEFAULT_RECENCY_FLOOR, ge=0.0, le=1.0)
    session_weight: float = DEFAULT_SESSION_WEIGHT

    model_config = {"frozen": True}


def with_recency(
    score: float,
    session_importance: float,
    last_seen: float,
    *,
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
    floor: float = DEFAULT_RECENCY_FLOOR,
    session_weight: float = DEFAULT_SESSION_WEIGHT,
    now: float | None = None,
    unit: TimeUnit | None = None,
) -> float:
    """Blend a base score with session importance and time decay.

    Parameters
    ----------
    score:
        Base score, e.g. a frequency percentile or a search count.
    session_importance:
        Cross-session rarity weight of the item.
    last_seen:
        When the item was last seen.
    half_life_days, floor, session_weight:
        See ``RecencyConfig``.
    now:
        Reference time.  Defaults to the current time.
    unit:
        Unit of ``last_seen`` and ``now``.  When omitted the unit is
        inferred from magnitude.

    Returns
    -------
    float
        Rank rounded to two decimals.
    """
    now_sec = time.time() if now is None else to_epoch_seconds(now, unit)
    last_sec = to_epoch_seconds(last_seen, unit)

    age_days = max(0.0, (now_sec - last_sec) / SECONDS_PER_DAY)
    factor = HalfLifeDecay(half_life_days=half_life_days, floor=floor).factor(age_days)
    importance_score = float(score) * float(session_importance) * float(session_weight)
    return round2(importance_score * factor)


def with_recency_config(
    score: float,
    session_importance: float,
    last_seen: float,
    config: RecencyConfig,
    *,
    now: float | None = None,
    unit: TimeUnit | None = None,
) -> float:
    """``with_recency`` taking its parameters from a ``RecencyConfig``."""
    return with_recency(
        score,
        session_importance,
        last_seen,
        half_life_days=config.half_life_days,
        floor=config.floor,
        session_weight=config.session_weight,
        now=now,
        unit=unit,
    )
