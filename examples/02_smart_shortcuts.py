#!/usr/bin/env python3
"""Example: Smart shortcuts — browsing-insights

Score shortcut candidates, learn from a click, keep the clicked tile in
place, and persist the model state.

Usage:
    python examples/02_smart_shortcuts.py

Requirements:
    pip install browsing-insights
"""
from __future__ import annotations

import random
import time

from browsing_insights import ModelState, ModelStateSerializer, ShortcutRanker, ShortcutScoringInput
from browsing_insights.shortcuts import FeedbackCounts, PlaceVisit, VisitType


def main() -> None:
    now = time.time()
    ranker = ShortcutRanker(rng=random.Random(7))
    state = ModelState(weights={"freq": 1.0, "rece": 0.5, "ctr": 0.5, "bias": 0.1})

    # Step 1: Frecency features from recent visits
    day_us = 86_400 * 1_000_000
    visits = {
        "news": [PlaceVisit(visit_date_us=now * 1_000_000 - i * day_us) for i in range(5)],
        "mail": [PlaceVisit(visit_date_us=now * 1_000_000 - day_us, visit_type=VisitType.TYPED)],
        "wiki": [PlaceVisit(visit_date_us=now * 1_000_000 - 40 * day_us)],
    }
    features = ranker.frecency_features(visits, {"news": 50, "mail": 10, "wiki": 3}, now=now)

    # Step 2: Score and rank
    inputs = ranker.with_frecency_features(
        ShortcutScoringInput(guids=["news", "mail", "wiki"], clicks=[4, 1, 0], impressions=[10, 10, 10]),
        features,
    )
    result = ranker.score(inputs, state)
    ranked, state = result.ranked(), state.updated(norms=result.norms)
    print("Ranking:", [c.guid for c in ranked])

    # Step 3: Learn from a click on the last tile
    state = ranker.learn({ranked[-1].guid: FeedbackCounts(clicks=1, impressions=1)}, result.score_map, state)
    print("Weights:", {k: round(v, 3) for k, v in sorted(state.weights.items())})

    # Step 4: Keep a previously clicked tile in slot 0 behind one sponsored tile
    guids = [c.guid for c in ranked]
    positions = [None, None, 1]
    print("Sticky order:", ranker.reorder(positions, guids, num_sponsored=1))

    # Step 5: Persist
    print("\n" + ModelStateSerializer().to_yaml(state)[:200])


if __name__ == "__main__":
    main()
