"""Benchmark: Shortcut scoring latency — per-call p50/p99.

Measures the latency of one score + learn cycle of ShortcutRanker over a
typical number of shortcut candidates.
"""
from __future__ import annotations

import json
import random
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from browsing_insights.shortcuts.learning import FeedbackCounts
from browsing_insights.shortcuts.ranker import ShortcutRanker
from browsing_insights.shortcuts.scoring import ShortcutScoringInput
from browsing_insights.shortcuts.seasonality import SeasonalityInput
from browsing_insights.state import ModelState

_CANDIDATES: int = 16
_WARMUP: int = 100
_ITERATIONS: int = 2_000


def _inputs(rng: random.Random) -> ShortcutScoringInput:
    guids = [f"guid-{i}" for i in range(_CANDIDATES)]
    return ShortcutScoringInput(
        guids=guids,
        bmark_scores={g: float(rng.random() < 0.3) for g in guids},
        open_scores={g: float(rng.random() < 0.2) for g in guids},
        freq_scores={g: rng.uniform(0, 500) for g in guids},
        rece_scores={g: rng.uniform(0, 5) for g in guids},
        clicks=[rng.randrange(5) for _ in guids],
        impressions=[rng.randrange(5, 50) for _ in guids],
        frecency=[rng.uniform(0, 2_000) for _ in guids],
        hourly_seasonality=SeasonalityInput(
            hists={g: [rng.random() for _ in range(24)] for g in guids},
            pvec=[1 / 24] * 24,
        ),
    )


def bench_shortcut_cycle_latency() -> dict[str, object]:
    """Benchmark ShortcutRanker.rank() + learn() per-cycle latency.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    rng = random.Random(3)
    ranker = ShortcutRanker(rng=random.Random(5))
    inputs = _inputs(rng)
    state = ModelState(weights={"freq": 1.0, "ctr": 1.0, "bias": 0.1})

    def cycle(current: ModelState) -> ModelState:
        result = ranker.score(inputs, current)
        clicked = result.ranked()[0].guid
        current = current.updated(norms=result.norms)
        return ranker.learn({clicked: FeedbackCounts(clicks=1, impressions=1)}, result.score_map, current)

    for _ in range(_WARMUP):
        state = cycle(state)

    latencies_ms: list[float] = []
    for _ in range(_ITERATIONS):
        t0 = time.perf_counter()
        state = cycle(state)
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "shortcut_cycle_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_shortcut_latency] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_shortcut_cycle_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "shortcut_latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
