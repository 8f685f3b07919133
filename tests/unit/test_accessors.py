"""Tests for field access and lenient number parsing."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from ledgerlens.core.accessors import get_field, make_accessor
from ledgerlens.core.numbers import parse_number


@dataclass
class Member:
    name: str
    plan: dict | None = None


class TestGetField:
    def test_mapping_key(self):
        assert get_field({"name": "Asha"}, "name") == "Asha"

    def test_object_attribute(self):
        assert get_field(Member("Ravi"), "name") == "Ravi"

    def test_missing_is_none(self):
        assert get_field({"name": "Asha"}, "email") is None
        assert get_field(Member("Ravi"), "email") is None

    def test_dotted_path(self):
        record = Member("Ravi", plan={"tier": {"label": "Gold"}})
        assert get_field(record, "plan.tier.label") == "Gold"

    def test_dotted_path_through_missing(self):
        assert get_field(Member("Ravi"), "plan.tier.label") is None

    def test_literal_dotted_key_wins(self):
        assert get_field({"a.b": 1, "a": {"b": 2}}, "a.b") == 1

    def test_none_record(self):
        assert get_field(None, "name") is None


class TestMakeAccessor:
    def test_name(self):
        accessor = make_accessor("amount")
        assert accessor({"amount": 5}) == 5

    def test_callable(self):
        accessor = make_accessor(lambda r: r["amount"] * 2)
        assert accessor({"amount": 5}) == 10

    def test_callable_errors_read_as_missing(self):
        accessor = make_accessor(lambda r: r["missing"])
        assert accessor({}) is None

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            make_accessor(42)


class TestParseNumber:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (5, 5.0),
            (2.5, 2.5),
            ("1000", 1000.0),
            (" 1,250.50 ", 1250.5),
            ("-3", -3.0),
        ],
    )
    def test_parses(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "12abc", float("nan"), True, [], {}])
    def test_rejects(self, value):
        assert parse_number(value) is None
