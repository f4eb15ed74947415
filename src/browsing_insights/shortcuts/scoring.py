"""Shortcut feature scoring engine.

Every enabled feature is turned into one value per candidate and z-scored
against running statistics (see ``norm_update``); the final score of a
candidate is the dot product of its feature values with the model weights.

Features
--------
- ``bmark``, ``open``, ``rece``, ``freq``, ``refre``, ``unid`` — per-guid raw
  scores supplied by the caller
- ``ctr``   — Laplace-smoothed click-through rate ``(clicks + 1) / (imps + 1)``
- ``thom``  — one Thompson sample from each candidate's Beta posterior
- ``frec``  — raw frecency, aligned with the candidate list
- ``hour``  — hour-of-day seasonality at the current time
- ``daily`` — day-of-week seasonality at the current time
- ``bias``  — constant 1, not normalised
"""
from __future__ import annotations

import logging
import random
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field

from browsing_insights.numeric import NormState, compute_linear_score, norm_update
from browsing_insights.shortcuts.seasonality import (
    SeasonalityInput,
    day_of_week,
    hour_of_day,
    process_seasonality,
)
from browsing_insights.shortcuts.thompson import thompson_sample_sort

logger = logging.getLogger(__name__)

DICT_FEATURES: tuple[str, ...] = ("bmark", "open", "rece", "freq", "refre", "unid")
ALL_FEATURES: tuple[str, ...] = DICT_FEATURES + ("ctr", "thom", "frec", "hour", "daily", "bias")
FINAL_KEY = "final"


class ShortcutConfig(BaseModel):
    """Model hyper-parameters shared by scoring and learning.

    Parameters
    ----------
    features:
        Enabled feature names, a subset of ``ALL_FEATURES``.
    tau:
        Strength of the prior in seasonality smoothing.
    alpha, beta:
        Thompson sampling prior pseudo-counts for clicks and non-clicks.
    eta:
        Learning rate of the online weight update.
    click_bonus:
        Weight of a click relative to an impression during learning.
    max_weight_norm:
        Upper bound on the L2 norm of the weight vector.
    frecency_half_life_days:
        Half-life used when building frecency features.
    """

    features: list[str] = Field(default_factory=lambda: list(ALL_FEATURES))
    tau: float = Field(default=1.0, ge=0)
    alpha: float = Field(default=1.0, gt=0)
    beta: float = Field(default=1.0, gt=0)
    eta: float = Field(default=0.1, ge=0)
    click_bonus: float = Field(default=1.0, ge=0)
    max_weight_norm: float = Field(default=100.0, gt=0)
    frecency_half_life_days: float = Field(default=28.0, gt=0)

    model_config = {"frozen": False}


class ShortcutScoringInput(BaseModel):
    """Raw per-candidate feature data for one scoring call.

    Dict-valued scores are keyed by guid; list-valued inputs are aligned
    with ``guids``.  Missing entries count as 0.
    """

    guids: list[str]
    bmark_scores: dict[str, float] = Field(default_factory=dict)
    open_scores: dict[str, float] = Field(default_factory=dict)
    rece_scores: dict[str, float] = Field(default_factory=dict)
    freq_scores: dict[str, float] = Field(default_factory=dict)
    refre_scores: dict[str, float] = Field(default_factory=dict)
    unid_scores: dict[str, float] = Field(default_factory=dict)
    clicks: list[float] = Field(default_factory=list)
    impressions: list[float] = Field(default_factory=list)
    frecency: list[float] = Field(default_factory=list)
    hourly_seasonality: SeasonalityInput = Field(default_factory=SeasonalityInput)
    daily_seasonality: SeasonalityInput = Field(default_factory=SeasonalityInput)

    def dict_scores(self, feature: str) -> dict[str, float]:
        return getattr(self, f"{feature}_scores")


@dataclass
class ShortcutCandidate:
    """A candidate with its normalised features and final score."""

    guid: str
    features: dict[str, float] = field(default_factory=dict)
    final_score: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return {"guid": self.guid, "features": dict(self.features), "final_score": self.final_score}


@dataclass
class ScoringResult:
    """Per-guid feature values (plus ``final``) and the updated norm state."""

    score_map: dict[str, dict[str, float]] = field(default_factory=dict)
    norms: dict[str, NormState] = field(default_factory=dict)

    def ranked(self) -> list[ShortcutCandidate]:
        """Candidates by descending final score; ties keep input order."""
        candidates = [
            ShortcutCandidate(
                guid=guid,
                features={k: v for k, v in scores.items() if k != FINAL_KEY},
                final_score=scores.get(FINAL_KEY, 0.0),
            )
            for guid, scores in self.score_map.items()
        ]
        candidates.sort(key=lambda candidate: candidate.final_score, reverse=True)
        return candidates

    def to_dict(self) -> dict[str, object]:
        return {
            "score_map": {guid: dict(scores) for guid, scores in self.score_map.items()},
            "norms": {name: state.model_dump() for name, state in self.norms.items()},
        }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _aligned(values: Sequence[float], size: int) -> list[float]:
    """Pad or trim ``values`` to ``size`` entries, filling with 0."""
    return [float(values[i]) if i < len(values) else 0.0 for i in range(size)]


def _apply_vector_feature(
    name: str,
    raw: Sequence[float],
    norms: Mapping[str, NormState],
    score_map: dict[str, dict[str, float]],
    guids: Sequence[str],
    updated_norms: dict[str, NormState],
) -> None:
    vals, state = norm_update(raw, norms.get(name))
    updated_norms[name] = state
    for guid, value in zip(guids, vals):
        score_map[guid][name] = value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def weighted_sample_top_sites(
    inputs: ShortcutScoringInput,
    weights: Mapping[str, float],
    norms: Mapping[str, NormState] | None = None,
    config: ShortcutConfig | None = None,
    *,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> ScoringResult:
    """Score every candidate in ``inputs``.

    Parameters
    ----------
    inputs:
        Raw feature data.
    weights:
        Current model weights keyed by feature name.
    norms:
        Running normalisation state keyed by feature name.  Missing
        entries start fresh.  The mapping is not mutated.
    config:
        Enabled features and sampling / smoothing parameters.
    rng:
        Random source for the Thompson feature.
    now:
        Local time used by the seasonality features.  Defaults to now.

    Returns
    -------
    ScoringResult
        ``score_map[guid]`` holds every enabled feature (0 when the feature
        could not be computed) and ``final``; ``norms`` holds the updated
        state of each normalised feature.
    """
    cfg = config if config is not None else ShortcutConfig()
    prior_norms = norms or {}
    enabled = set(cfg.features)
    guids = list(inputs.guids)
    size = len(guids)
    moment = now if now is not None else datetime.now()

    score_map: dict[str, dict[str, float]] = {
        guid: {feature: 0.0 for feature in cfg.features} for guid in guids
    }
    updated_norms: dict[str, NormState] = {}
    clicks = _aligned(inputs.clicks, size)
    impressions = _aligned(inputs.impressions, size)

    for name in DICT_FEATURES:
        if name in enabled:
            scores = inputs.dict_scores(name)
            raw = [float(scores.get(guid, 0.0)) for guid in guids]
            _apply_vector_feature(name, raw, prior_norms, score_map, guids, updated_norms)

    if "ctr" in enabled:
        raw_ctr = [(c + 1) / (imp + 1) for c, imp in zip(clicks, impressions)]
        _apply_vector_feature("ctr", raw_ctr, prior_norms, score_map, guids, updated_norms)

    if "thom" in enabled:
        _, thetas = thompson_sample_sort(
            guids,
            obs_positive=clicks,
            obs_negative=[max(0.0, imp - c) for c, imp in zip(clicks, impressions)],
            prior_positive=[cfg.alpha] * size,
            prior_negative=[cfg.beta] * size,
            do_sort=False,
            rng=rng,
        )
        _apply_vector_feature("thom", thetas, prior_norms, score_map, guids, updated_norms)

    if "frec" in enabled:
        raw_frec = _aligned(inputs.frecency, size)
        _apply_vector_feature("frec", raw_frec, prior_norms, score_map, guids, updated_norms)

    seasonal: list[tuple[str, SeasonalityInput, Callable[[datetime], float]]] = [
        ("hour", inputs.hourly_seasonality, hour_of_day),
        ("daily", inputs.daily_seasonality, day_of_week),
    ]
    for name, seasonality, clock in seasonal:
        if name in enabled:
            raw = process_seasonality(guids, seasonality, cfg.tau, clock(moment))
            _apply_vector_feature(name, raw, prior_norms, score_map, guids, updated_norms)

    if "bias" in enabled:
        for guid in guids:
            score_map[guid]["bias"] = 1.0

    for guid in guids:
        score_map[guid][FINAL_KEY] = compute_linear_score(score_map[guid], weights)

    logger.debug(
        "weighted_sample_top_sites: scored %d candidates on %d features", size, len(enabled)
    )
    return ScoringResult(score_map=score_map, norms=updated_norms)
