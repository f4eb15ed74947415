#!/usr/bin/env python3
"""Example: Quickstart — browsing-insights

Minimal working example: sessionize a handful of visits, rank the
domains, titles and searches, and split them into consumer batches.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install browsing-insights
"""
from __future__ import annotations

import time

import browsing_insights
from browsing_insights import (
    HistoryInsights,
    VisitRecord,
    VisitSource,
    sessionize_visits,
)


def main() -> None:
    print(f"browsing-insights version: {browsing_insights.__version__}")
    now = time.time()

    # Step 1: Describe some visits (times are microseconds since the epoch)
    def visit(minutes_ago: float, domain: str, title: str, pct: float, source: VisitSource = VisitSource.HISTORY) -> VisitRecord:
        return VisitRecord(
            url=f"https://{domain}/",
            domain=domain,
            title=title,
            visit_date_micros=int((now - minutes_ago * 60) * 1_000_000),
            frequency_pct=pct,
            domain_frequency_pct=pct,
            source=source,
        )

    visits = [
        visit(300, "docs.python.org", "asyncio — Asynchronous I/O", 95),
        visit(295, "stackoverflow.com", "How to cancel a task", 80),
        visit(60, "www.google.com", "pydantic validators", 40, VisitSource.SEARCH),
        visit(58, "docs.pydantic.dev", "Validators - Pydantic", 70),
    ]

    # Step 2: See how the visits split into sessions
    sessionized = sessionize_visits(visits)
    session_ids = sorted({v.session_id for v in sessionized})
    print(f"{len(sessionized)} visits in {len(session_ids)} sessions")

    # Step 3: Run the full pipeline
    result = HistoryInsights().run(visits, now=now)
    print(f"\n{result.mode.value} run:")
    for domain, rank in result.aggregates.domains:
        print(f"  domain {domain:<22} {rank:6.2f}")
    for title, rank in result.aggregates.titles:
        print(f"  title  {title:<30} {rank:6.2f}")
    for search in result.aggregates.searches:
        print(f"  search session {search.sid}: {', '.join(search.q)} (x{search.cnt})")

    # Step 4: Batches handed to the memory generator
    print(f"\n{len(result.batches)} batch(es) within the token budget")


if __name__ == "__main__":
    main()
