"""Tests for time-windowed rollups over independently dated collections."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone

import pytest

from ledgerlens.rollups import Collection, compute_rollup, compute_rollups, net_metric

NOW = datetime(2024, 3, 15, 18, 30)

INVOICES = [
    {"issued": "2024-03-15T09:00:00", "total": 100},
    {"issued": "2024-03-02", "total": "2,500"},
    {"issued": "2024-01-10", "total": 400},
    {"issued": "2023-12-31T23:59:59", "total": 1000},
    {"issued": None, "total": 75},
]

EXPENSES = [
    {"date": date(2024, 3, 15), "amount": 40},
    {"date": "2024-03-20", "amount": 60},
    {"date": "2023-06-01", "amount": 500},
    {"date": "2024-02-29", "amount": None},
]


def ledger(invoices=INVOICES, expenses=EXPENSES):
    return [
        Collection("revenue", invoices, "issued", "total"),
        Collection("expense", expenses, "date", "amount"),
    ]


NET = {"net": net_metric("revenue", "expense")}


class TestScenario:
    def test_revenue_minus_expense_today(self):
        revenue = Collection("revenue", [{"at": NOW, "value": 100}], "at", "value")
        expense = Collection("expense", [{"at": NOW, "value": 40}], "at", "value")

        day, month = compute_rollups([revenue, expense], NOW, ["day", "month"], derived=NET)

        assert day.derived["net"] == 60
        assert month.derived["net"] == 60

    def test_prior_year_sums_are_zero(self):
        revenue = Collection("revenue", [{"at": NOW, "value": 100}], "at", "value")
        expense = Collection("expense", [{"at": NOW, "value": 40}], "at", "value")

        (year,) = compute_rollups([revenue, expense], datetime(2023, 6, 1), ["year"], derived=NET)

        assert year.per_collection == {"revenue": 0.0, "expense": 0.0}
        assert year.derived["net"] == 0.0


class TestWindows:
    def test_all_windows(self):
        results = compute_rollups(ledger(), NOW, ["day", "week", "month", "year", "lifetime"], derived=NET)
        by_window = {r.window: r for r in results}

        assert [r.window for r in results] == ["day", "week", "month", "year", "lifetime"]
        assert by_window["day"].per_collection == {"revenue": 100.0, "expense": 40.0}
        # 2024-03-15 is a Friday; week Mar 11-17
        assert by_window["week"].per_collection == {"revenue": 100.0, "expense": 40.0}
        assert by_window["month"].per_collection == {"revenue": 2600.0, "expense": 100.0}
        assert by_window["year"].per_collection == {"revenue": 3000.0, "expense": 100.0}
        assert by_window["lifetime"].per_collection == {"revenue": 4075.0, "expense": 600.0}
        assert by_window["month"].derived == {"net": 2500.0}

    def test_counts(self):
        (month, lifetime) = compute_rollups(ledger(), NOW, ["month", "lifetime"])

        assert month.counts == {"revenue": 2, "expense": 2}
        assert lifetime.counts == {"revenue": 5, "expense": 4}

    def test_lifetime_includes_undated_records(self):
        (lifetime,) = compute_rollups(ledger(), NOW, ["lifetime"])

        assert lifetime.bounds is None
        assert lifetime.per_collection["revenue"] == sum([100, 2500, 400, 1000, 75])

    def test_lifetime_equals_all_time_sum(self):
        records = [{"d": f"20{y:02d}-01-01", "v": y} for y in range(0, 30)]
        (lifetime,) = compute_rollups([Collection("c", records, "d", "v")], NOW, ["lifetime"])

        assert lifetime.per_collection["c"] == sum(range(30))

    def test_window_timezone(self):
        # 20:00 UTC on Mar 15 is Mar 16 in India
        records = [{"at": datetime(2024, 3, 15, 20, 0, tzinfo=timezone.utc), "v": 7}]
        now = datetime(2024, 3, 16, 9, 0, tzinfo=timezone.utc)

        (day_ist,) = compute_rollups([Collection("c", records, "at", "v")], now, ["day"], tz="Asia/Kolkata")
        (day_utc,) = compute_rollups([Collection("c", records, "at", "v")], now, ["day"], tz="UTC")

        assert day_ist.per_collection["c"] == 7.0
        assert day_utc.per_collection["c"] == 0.0

    def test_week_start(self):
        sunday = [{"at": "2024-03-10", "v": 5}]
        (monday_week,) = compute_rollups([Collection("c", sunday, "at", "v")], NOW, ["week"])
        (sunday_week,) = compute_rollups([Collection("c", sunday, "at", "v")], NOW, ["week"], week_start_on=6)

        assert monday_week.per_collection["c"] == 0.0
        assert sunday_week.per_collection["c"] == 5.0

    def test_unknown_window(self):
        with pytest.raises(ValueError, match="Unknown window type"):
            compute_rollups(ledger(), NOW, ["quarter"])

    def test_no_windows(self):
        assert compute_rollups(ledger(), NOW, []) == []


class TestEdgeCases:
    def test_empty_collections(self):
        results = compute_rollups(ledger([], []), NOW, derived=NET)

        assert [r.window for r in results] == ["day", "month", "year", "lifetime"]
        for result in results:
            assert result.per_collection == {"revenue": 0.0, "expense": 0.0}
            assert result.derived == {"net": 0.0}

    def test_no_collections(self):
        (day,) = compute_rollups([], NOW, ["day"], derived=NET)

        assert day.per_collection == {}
        assert day.derived == {"net": 0.0}

    def test_accessor_callables(self):
        @dataclass
        class Payment:
            paid_on: date
            cents: int

        payments = [Payment(date(2024, 3, 15), 1250), Payment(date(2024, 3, 1), 99)]
        collection = Collection("payments", payments, lambda p: p.paid_on, lambda p: p.cents / 100)

        (day,) = compute_rollups([collection], NOW, ["day"])

        assert day.per_collection["payments"] == 12.5

    def test_derived_uses_same_window_sums(self):
        seen = []

        def spy(sums):
            seen.append(dict(sums))
            return 0.0

        compute_rollups(ledger(), NOW, ["day", "lifetime"], derived={"spy": spy})

        assert seen == [
            {"revenue": 100.0, "expense": 40.0},
            {"revenue": 4075.0, "expense": 600.0},
        ]

    def test_source_not_mutated(self):
        invoices = [dict(r) for r in INVOICES]
        compute_rollups(ledger(invoices=invoices), NOW)
        assert invoices == INVOICES


class TestAdditivity:
    @pytest.mark.parametrize("window", ["day", "week", "month", "year", "lifetime"])
    def test_split_sums_add_up(self, window):
        whole = compute_rollup([Collection("r", INVOICES, "issued", "total")], NOW, window)

        for cut in range(len(INVOICES) + 1):
            left = compute_rollup([Collection("r", INVOICES[:cut], "issued", "total")], NOW, window)
            right = compute_rollup([Collection("r", INVOICES[cut:], "issued", "total")], NOW, window)

            assert left.per_collection["r"] + right.per_collection["r"] == whole.per_collection["r"]


class TestResultShape:
    def test_to_dict(self):
        result = compute_rollup(ledger(), NOW, "day", derived=NET, tz="UTC")
        data = result.to_dict()

        assert data["window"] == "day"
        assert data["bounds"]["start"] == "2024-03-15T00:00:00"
        assert data["bounds"]["end_utc"] == "2024-03-16T00:00:00+00:00"
        assert data["per_collection"] == {"revenue": 100.0, "expense": 40.0}
        assert data["counts"] == {"revenue": 1, "expense": 1}
        assert data["derived"] == {"net": 60.0}

    def test_lifetime_to_dict(self):
        assert compute_rollup(ledger(), NOW, "lifetime").to_dict()["bounds"] is None

    def test_repr(self):
        assert "window='day'" in repr(compute_rollup(ledger(), NOW, "day"))
