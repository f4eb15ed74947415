"""Benchmark: History pipeline throughput — full runs per second.

Measures how many full sessionize / aggregate / rank / batch runs can be
completed per second over a synthetic 60-day visit log.
"""
from __future__ import annotations

import json
import random
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from browsing_insights.history.pipeline import HistoryInsights
from browsing_insights.history.records import VisitRecord, VisitSource

_VISITS: int = 3_000
_ITERATIONS: int = 50
_NOW: float = 1_700_000_000.0


def _synthetic_visits(count: int, seed: int = 13) -> list[VisitRecord]:
    rng = random.Random(seed)
    domains = [f"site{i}.example" for i in range(200)]
    visits = []
    t = _NOW - 60 * 86_400
    for _ in range(count):
        t += rng.expovariate(1 / 1_500)
        domain = rng.choice(domains)
        visits.append(
            VisitRecord(
                url=f"https://{domain}/{rng.randrange(20)}",
                domain=domain,
                title=f"{domain} page {rng.randrange(20)}",
                visit_date_micros=int(t * 1_000_000),
                frequency_pct=rng.uniform(0, 100),
                domain_frequency_pct=rng.uniform(0, 100),
                source=VisitSource.SEARCH if rng.random() < 0.05 else VisitSource.HISTORY,
            )
        )
    return visits


def bench_history_run_throughput() -> dict[str, object]:
    """Benchmark HistoryInsights.run() over a full window.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    insights = HistoryInsights()
    visits = _synthetic_visits(_VISITS)

    latencies_ms: list[float] = []
    for _ in range(_ITERATIONS):
        t0 = time.perf_counter()
        insights.run(visits, now=_NOW)
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    total = sum(latencies_ms) / 1000
    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)

    result: dict[str, object] = {
        "operation": "history_run_throughput",
        "iterations": _ITERATIONS,
        "visits_per_run": _VISITS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_history_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.1f} runs/sec  "
        f"avg {result['avg_latency_ms']:.2f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_history_run_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "history_throughput_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
