"""Tests for the query pipeline: search, filter and sort into a view."""

from __future__ import annotations

import copy
from datetime import datetime

import pytest

from ledgerlens.query import (
    DateFilter,
    FilterSpec,
    RangeFilter,
    SortSpec,
    build_predicate,
    normalize_filter,
    normalize_sort,
    run_query,
)

LEADS = [
    {"id": 1, "name": "Alpha", "status": "New"},
    {"id": 2, "name": "Beta", "status": "Closed"},
]

EXPENSES = [
    {"id": 1, "title": "Rent", "category": "Office", "amount": 45000, "date": "2024-03-01"},
    {"id": 2, "title": "Tea supplies", "category": "Pantry", "amount": 850, "date": "2024-03-02T09:15:00"},
    {"id": 3, "title": "Laptop", "category": "Hardware", "amount": 72000, "date": "2024-02-20"},
    {"id": 4, "title": "Printer ink", "category": "Office", "amount": 2400, "date": "2024-03-15"},
    {"id": 5, "title": "Courier", "category": "Logistics", "amount": "1,200", "date": None},
    {"id": 6, "title": "Snacks", "category": "Pantry", "amount": 850, "date": "2023-12-30"},
]


def ids(records):
    return [r["id"] for r in records]


class TestScenarios:
    def test_search(self):
        spec = FilterSpec(search="alp", search_fields=("name",))
        assert run_query(LEADS, spec) == [LEADS[0]]

    def test_discrete_sentinel_keeps_everything_in_order(self):
        spec = FilterSpec(discrete={"status": "all"})
        assert run_query(LEADS, spec) == LEADS

    def test_date_day(self):
        records = [{"id": 1, "date": "2024-03-01"}, {"id": 2, "date": "2024-03-02"}]
        spec = FilterSpec(date=DateFilter("date", mode="day", day=datetime(2024, 3, 1)))
        assert ids(run_query(records, spec)) == [1]


class TestClauses:
    def test_clauses_combine_with_and(self):
        spec = FilterSpec(
            search="o",
            search_fields=("title", "category"),
            discrete={"category": "office"},
            range=RangeFilter("amount", bucket="1000_5000"),
        )
        assert ids(run_query(EXPENSES, spec)) == [4]

    def test_multi_select(self):
        spec = FilterSpec(discrete={"category": ("Pantry", "Logistics")})
        assert ids(run_query(EXPENSES, spec)) == [2, 5, 6]

    def test_search_without_fields_searches_all_values(self):
        assert ids(run_query(EXPENSES, FilterSpec(search="rent"))) == [1]
        assert ids(run_query(EXPENSES, FilterSpec(search="pantry"))) == [2, 6]

    def test_text_selection_on_numeric_field(self):
        assert ids(run_query(EXPENSES, FilterSpec(discrete={"amount": "850"}))) == [2, 6]
        assert ids(run_query(EXPENSES, FilterSpec(discrete={"id": ("1", "4")}))) == [1, 4]

    def test_range_bounds(self):
        spec = FilterSpec(range=RangeFilter("amount", minimum=850, maximum=1200))
        assert ids(run_query(EXPENSES, spec)) == [2, 5, 6]

    def test_date_month(self):
        spec = normalize_filter({"date": {"field": "date", "mode": "month", "month": "2024-03"}})
        assert ids(run_query(EXPENSES, spec)) == [1, 2, 4]

    def test_date_year(self):
        spec = normalize_filter({"date": {"field": "date", "mode": "year", "year": 2023}})
        assert ids(run_query(EXPENSES, spec)) == [6]

    def test_date_range_inclusive(self):
        spec = normalize_filter({"date": {"field": "date", "mode": "range", "start": "2024-02-20", "end": "2024-03-02"}})
        assert ids(run_query(EXPENSES, spec)) == [1, 2, 3]

    def test_date_mode_without_target_is_noop(self):
        spec = FilterSpec(date=DateFilter("date", mode="day"))
        assert ids(run_query(EXPENSES, spec)) == ids(EXPENSES)

    def test_preset_resolved_against_now(self):
        spec = normalize_filter({"date": {"field": "date", "mode": "preset", "preset": "this_month"}})
        assert ids(run_query(EXPENSES, spec, now=datetime(2024, 3, 20, 12))) == [1, 2, 4]

    def test_preset_last_30_days(self):
        spec = normalize_filter({"date": {"field": "date", "mode": "preset", "preset": "last_30_days"}})
        assert ids(run_query(EXPENSES, spec, now=datetime(2024, 3, 20, 12))) == [1, 2, 3, 4]

    def test_preset_this_week_uses_week_start(self):
        spec = normalize_filter({"date": {"field": "date", "mode": "preset", "preset": "this_week"}})
        # 2024-03-03 is a Sunday
        now = datetime(2024, 3, 3, 12)
        assert ids(run_query(EXPENSES, spec, now=now)) == [1, 2]
        assert ids(run_query(EXPENSES, spec, now=now, week_start_on=6)) == []

    def test_preset_without_now_is_skipped(self):
        spec = normalize_filter({"date": {"field": "date", "mode": "preset", "preset": "today"}})
        assert ids(run_query(EXPENSES, spec)) == ids(EXPENSES)

    def test_unknown_preset_is_skipped(self):
        spec = FilterSpec(date=DateFilter("date", mode="preset", preset="next_decade"))
        assert ids(run_query(EXPENSES, spec, now=datetime(2024, 3, 20))) == ids(EXPENSES)

    def test_neutral_spec_has_no_predicate(self):
        assert build_predicate(FilterSpec(discrete={"status": "all"})) is None


class TestSorting:
    def test_sort_then_tie_breaker(self):
        sort = normalize_sort(["category"])
        view = run_query(EXPENSES, sort_spec=sort, tie_breaker=lambda a, b: b["id"] - a["id"])
        assert ids(view) == [3, 5, 4, 1, 6, 2]

    def test_tie_breaker_by_field_name(self):
        records = [{"id": "b", "g": 1}, {"id": "a", "g": 1}]
        view = run_query(records, sort_spec=SortSpec.by("g", type="number"), tie_breaker="id")
        assert ids(view) == ["a", "b"]

    def test_sort_by_amount_desc_missing_last(self):
        records = EXPENSES + [{"id": 7, "amount": None}]
        view = run_query(records, sort_spec=SortSpec.by("amount", "desc", "number"))
        assert ids(view) == [3, 1, 4, 5, 2, 6, 7]

    def test_sort_by_date(self):
        view = run_query(EXPENSES, sort_spec=SortSpec.by("date", "asc", "date"))
        assert ids(view) == [6, 3, 1, 2, 4, 5]


class TestProperties:
    @pytest.mark.parametrize(
        "sort",
        [SortSpec(), SortSpec.by("amount", "desc", "number"), normalize_sort(["category", "-date:date"])],
    )
    def test_neutral_filter_identity(self, sort):
        neutral = FilterSpec(search=" ", discrete={"category": "all"}, range=RangeFilter("amount", bucket="none"))
        assert run_query(EXPENSES, neutral, sort) == run_query(EXPENSES, None, sort)
        assert sorted(ids(run_query(EXPENSES, neutral, sort))) == ids(EXPENSES)

    @pytest.mark.parametrize(
        "payload",
        [
            {"search": "o", "search_fields": ["title"]},
            {"discrete": {"category": ["Office", "Pantry"]}},
            {"range": {"field": "amount", "bucket": "under_1000"}},
            {"date": {"field": "date", "mode": "month", "month": "2024-03"}},
        ],
    )
    def test_idempotent_reapplication(self, payload):
        spec = normalize_filter(payload)
        sort = normalize_sort(["-amount:number", "title"])
        once = run_query(EXPENSES, spec, sort)
        assert run_query(once, spec, sort) == once

    def test_source_never_mutated(self):
        snapshot = copy.deepcopy(EXPENSES)
        view = run_query(EXPENSES, FilterSpec(discrete={"category": "Office"}), SortSpec.by("amount", "desc", "number"))
        view.clear()
        assert EXPENSES == snapshot

    def test_returns_new_list(self):
        assert run_query(EXPENSES) is not EXPENSES

    def test_empty_input(self):
        assert run_query([], FilterSpec(search="x", search_fields=("title",))) == []

    def test_accepts_iterables(self):
        assert ids(run_query(iter(LEADS))) == [1, 2]
