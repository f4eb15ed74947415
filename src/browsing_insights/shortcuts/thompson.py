"""Thompson sampling over Beta click-through posteriors.

Each key's click-through rate is modelled as
``Beta(obs_positive + prior_positive, obs_negative + prior_negative)``.
One value per key is drawn from its posterior; drawing is the only source
of randomness in shortcut scoring, so callers that need reproducible
results pass a seeded ``random.Random``.
"""
from __future__ import annotations

import random
from collections.abc import Sequence

# Beta parameters must be strictly positive.
MIN_BETA_PARAM = 1e-6


def thompson_sample_sort(
    keys: Sequence[str],
    obs_positive: Sequence[float],
    obs_negative: Sequence[float],
    prior_positive: Sequence[float],
    prior_negative: Sequence[float],
    do_sort: bool = False,
    rng: random.Random | None = None,
) -> tuple[list[str], list[float]]:
    """Draw one posterior sample per key.

    Parameters
    ----------
    keys:
        Item identifiers.
    obs_positive, obs_negative:
        Observed successes and failures per key.
    prior_positive, prior_negative:
        Prior pseudo-counts per key.
    do_sort:
        When True, return keys and samples ordered by descending sample.
        Otherwise both follow the input order.
    rng:
        Random source.  Defaults to the module-level generator.

    Returns
    -------
    tuple[list[str], list[float]]
        ``(keys, thetas)``.
    """
    source = rng if rng is not None else random
    thetas = [
        source.betavariate(
            max(MIN_BETA_PARAM, float(obs_positive[i]) + float(prior_positive[i])),
            max(MIN_BETA_PARAM, float(obs_negative[i]) + float(prior_negative[i])),
        )
        for i in range(len(keys))
    ]
    if not do_sort:
        return list(keys), thetas

    order = sorted(range(len(keys)), key=lambda i: thetas[i], reverse=True)
    return [keys[i] for i in order], [thetas[i] for i in order]
