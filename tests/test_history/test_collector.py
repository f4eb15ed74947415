"""Tests for raw-row conversion, search detection and windowing."""
from __future__ import annotations

import pytest

from browsing_insights.history.collector import (
    build_visit_records,
    cume_dist_percentiles,
    is_search_visit,
    select_recent_visits,
)
from browsing_insights.history.records import VisitRecord, VisitSource

T = 1_700_000_000
DAY = 86_400


class TestIsSearchVisit:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.google.com/search?q=python",
            "https://duckduckgo.com/?q=rust",
            "https://search.brave.com/search?q=x",
            "https://www.bing.com/results",
            "https://news.google.com/?p=1",
        ],
    )
    def test_search_pages(self, url: str) -> None:
        assert is_search_visit(url)

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.google.com/maps",
            "https://example.com/search?q=python",
            "https://mail.yahoo.com/",
            "not a url",
        ],
    )
    def test_non_search_pages(self, url: str) -> None:
        assert not is_search_visit(url)

    def test_unparseable_url(self) -> None:
        assert not is_search_visit("http://[::1/search?q=x")


class TestCumeDistPercentiles:
    def test_ties_share_percentile(self) -> None:
        result = cume_dist_percentiles({"a": 1, "b": 2, "c": 2, "d": 4})
        assert result == {"a": 25.0, "b": 75.0, "c": 75.0, "d": 100.0}

    def test_rounded_to_two_decimals(self) -> None:
        result = cume_dist_percentiles({"a": 1, "b": 2, "c": 3})
        assert result["a"] == pytest.approx(33.33)

    def test_empty(self) -> None:
        assert cume_dist_percentiles({}) == {}


class TestBuildVisitRecords:
    def _rows(self) -> list[dict[str, object]]:
        return [
            {
                "url": "https://a.com/1",
                "host": "a.com",
                "title": "A1",
                "visit_date_micros": T * 1_000_000,
                "frecency": 100,
                "domain_frecency": 500,
            },
            {
                "url": "https://www.google.com/search?q=x",
                "host": "www.google.com",
                "title": "x - Google Search",
                "visit_date_micros": (T + 60) * 1_000_000,
                "frecency": 50,
                "domain_frecency": -1,
            },
            {
                "url": "https://a.com/1",
                "host": "a.com",
                "title": "A1",
                "visit_date_micros": (T - 60) * 1_000_000,
                "frecency": 300,
                "domain_frecency": 500,
            },
            {
                "url": "https://untitled.com",
                "host": "untitled.com",
                "title": None,
                "visit_date_micros": T * 1_000_000,
                "frecency": 10,
                "domain_frecency": 10,
            },
        ]

    def test_rows_with_null_title_dropped(self) -> None:
        records = build_visit_records(self._rows(), now=T)
        assert len(records) == 3
        assert all(record.title for record in records)

    def test_newest_first(self) -> None:
        records = build_visit_records(self._rows(), now=T)
        times = [record.visit_date_micros for record in records]
        assert times == sorted(times, reverse=True)

    def test_source_tagging(self) -> None:
        records = build_visit_records(self._rows(), now=T)
        assert records[0].source == VisitSource.SEARCH
        assert records[1].source == VisitSource.HISTORY

    def test_percentiles_use_max_per_url(self) -> None:
        records = build_visit_records(self._rows(), now=T)
        a_records = [r for r in records if r.url == "https://a.com/1"]
        assert {r.frequency_pct for r in a_records} == {100.0}
        search = records[0]
        assert search.frequency_pct == pytest.approx(50.0)
        assert search.domain_frequency_pct == pytest.approx(50.0)

    def test_empty(self) -> None:
        assert build_visit_records([]) == []

    def test_empty_title_kept(self) -> None:
        row = {"url": "https://e.com", "host": "e.com", "title": "", "visit_date_micros": T * 1_000_000,
               "frecency": 5, "domain_frecency": 5}
        [record] = build_visit_records([row], now=T)
        assert record.title == ""
        assert record.domain == "e.com"

    def test_missing_visit_time_skipped(self) -> None:
        row = {"url": "https://e.com", "host": "e.com", "title": "E", "frecency": 5, "domain_frecency": 5}
        assert build_visit_records([row], now=T) == []


class TestBuildVisitRecordsWindow:
    def _row(self, name: str, age_days: float, frecency: float) -> dict[str, object]:
        return {
            "url": f"https://{name}.com/",
            "host": f"{name}.com",
            "title": name,
            "visit_date_micros": int((T - age_days * DAY) * 1_000_000),
            "frecency": frecency,
            "domain_frecency": frecency,
        }

    def test_percentiles_ignore_rows_outside_window(self) -> None:
        rows = [self._row("a", 1, 10), self._row("b", 2, 20), self._row("old1", 100, 30), self._row("old2", 120, 40)]
        records = build_visit_records(rows, days=60, now=T)
        assert {r.title: r.frequency_pct for r in records} == {"a": 50.0, "b": 100.0}
        assert {r.title: r.domain_frequency_pct for r in records} == {"a": 50.0, "b": 100.0}

    def test_cap_applied_before_percentiles(self) -> None:
        rows = [self._row("c", 3, 30), self._row("a", 1, 10), self._row("b", 2, 20)]
        records = build_visit_records(rows, max_results=2, now=T)
        assert [r.title for r in records] == ["a", "b"]
        assert [r.frequency_pct for r in records] == [50.0, 100.0]

    def test_since_micros_overrides_days(self) -> None:
        rows = [self._row("a", 1, 10), self._row("b", 2, 20)]
        records = build_visit_records(rows, since_micros=(T - 1.5 * DAY) * 1_000_000, days=60, now=T)
        assert [(r.title, r.frequency_pct) for r in records] == [("a", 100.0)]


class TestSelectRecentVisits:
    def _visits(self) -> list[VisitRecord]:
        return [
            VisitRecord(url="old", visit_date_micros=(T - 2 * DAY) * 1_000_000),
            VisitRecord(url="new", visit_date_micros=(T - 100) * 1_000_000),
            VisitRecord(url="newest", visit_date_micros=(T - 10) * 1_000_000),
        ]

    def test_day_window(self) -> None:
        result = select_recent_visits(self._visits(), days=1, now=T)
        assert [v.url for v in result] == ["newest", "new"]

    def test_since_overrides_window(self) -> None:
        result = select_recent_visits(self._visits(), since_micros=(T - 50) * 1_000_000, days=30, now=T)
        assert [v.url for v in result] == ["newest"]

    def test_negative_since_clamped(self) -> None:
        result = select_recent_visits(self._visits(), since_micros=-5, now=T)
        assert len(result) == 3

    def test_max_results(self) -> None:
        result = select_recent_visits(self._visits(), days=30, max_results=2, now=T)
        assert [v.url for v in result] == ["newest", "new"]
