"""Online logistic-regression update of shortcut weights.

After shortcuts were shown, the observed clicks and impressions per
candidate nudge the weights by one gradient step of the logistic loss::

    p      = sigmoid(final)
    factor = clicks * click_bonus * (p - 1) + impressions * p
    grad[f] += factor * value[f]
    w[f]   -= eta / total * grad[f]

where ``total`` is the bonus-weighted click count plus impressions over all
candidates.  The weight vector may then be clamped to a maximum L2 norm.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field

from browsing_insights.numeric import sigmoid
from browsing_insights.shortcuts.scoring import FINAL_KEY

logger = logging.getLogger(__name__)

DEFAULT_MAX_WEIGHT_NORM = 100.0


class FeedbackCounts(BaseModel):
    """Clicks and impressions observed for one candidate."""

    clicks: int = Field(default=0, ge=0)
    impressions: int = Field(default=0, ge=0)


def clamp_weights(
    weights: Mapping[str, float],
    max_norm: float = DEFAULT_MAX_WEIGHT_NORM,
) -> dict[str, float]:
    """Scale ``weights`` down so their L2 norm is at most ``max_norm``."""
    norm = math.hypot(*weights.values())
    if norm > max_norm:
        scale = max_norm / norm
        return {key: value * scale for key, value in weights.items()}
    return dict(weights)


def update_weights(
    features: Sequence[str],
    data: Mapping[str, FeedbackCounts],
    scores: Mapping[str, Mapping[str, float]],
    weights: Mapping[str, float],
    eta: float,
    click_bonus: float = 1.0,
    do_clamp: bool = True,
    max_norm: float = DEFAULT_MAX_WEIGHT_NORM,
) -> dict[str, float]:
    """Return weights after one gradient step on the observed feedback.

    Parameters
    ----------
    features:
        Feature names to update.
    data:
        Feedback per guid.
    scores:
        ``score_map`` from the scoring call that produced the shown
        ranking; guids without a numeric ``final`` are skipped.
    weights:
        Current weights.  Not mutated.
    eta:
        Learning rate.
    click_bonus:
        Multiplier on clicks, so deliberate clicks teach more than
        impressions.
    do_clamp:
        Clamp the updated weights to ``max_norm``.
    max_norm:
        Maximum L2 norm of the weight vector.

    Returns
    -------
    dict[str, float]
        New weights.  With no click or impression mass at all the input
        weights are returned unchanged.
    """
    grads = {feature: 0.0 for feature in features}
    total = 0.0

    for guid, counts in data.items():
        guid_scores = scores.get(guid)
        if guid_scores is None:
            continue
        final = guid_scores.get(FINAL_KEY)
        if isinstance(final, bool) or not isinstance(final, (int, float)):
            continue

        clicks = counts.clicks * click_bonus
        impressions = counts.impressions
        if clicks == 0 and impressions == 0:
            continue

        p = sigmoid(final)
        factor = clicks * (p - 1) + impressions * p
        for feature in features:
            grads[feature] += factor * guid_scores.get(feature, 0.0)
        total += clicks + impressions

    if total <= 0:
        logger.debug("update_weights: no feedback; weights unchanged")
        return dict(weights)

    updated = dict(weights)
    scale = eta / total
    for feature in features:
        updated[feature] = updated.get(feature, 0.0) - scale * grads[feature]

    if do_clamp:
        updated = clamp_weights(updated, max_norm)
    logger.debug("update_weights: stepped %d features over %.1f events", len(features), total)
    return updated
