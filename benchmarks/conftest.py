"""Shared bootstrap for browsing-insights benchmarks."""
from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).parent.parent
_SRC = _REPO_ROOT / "src"
_BENCHMARKS = _REPO_ROOT / "benchmarks"

for _path in [str(_SRC), str(_BENCHMARKS)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from browsing_insights.history.pipeline import HistoryInsights
from browsing_insights.history.records import VisitRecord
from browsing_insights.shortcuts.ranker import ShortcutRanker
from browsing_insights.state import ModelState

__all__ = ["HistoryInsights", "VisitRecord", "ShortcutRanker", "ModelState"]
