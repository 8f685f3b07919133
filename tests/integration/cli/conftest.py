"""Fixtures: small expense and ledger files on disk."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

EXPENSES = [
    {"id": 1, "title": "Rent", "category": "Office", "amount": 45000, "date": "2024-03-01"},
    {"id": 2, "title": "Tea supplies", "category": "Pantry", "amount": 850, "date": "2024-03-02T09:15:00"},
    {"id": 3, "title": "Laptop", "category": "Hardware", "amount": 72000, "date": "2024-02-20"},
    {"id": 4, "title": "Printer ink", "category": "Office", "amount": 2400, "date": "2024-03-15"},
    {"id": 5, "title": "Courier", "category": "Logistics", "amount": "1,200", "date": None},
]

LEDGER_YAML = """\
revenue:
  - {date: 2024-03-15, amount: 100}
  - {date: 2024-03-02, amount: 2500}
  - {date: 2023-11-30, amount: 1000}
expense:
  - {date: 2024-03-15, amount: 40}
  - {date: 2024-01-05, amount: 60}
"""


@pytest.fixture
def expenses_file(tmp_path: Path) -> Path:
    path = tmp_path / "expenses.json"
    path.write_text(json.dumps(EXPENSES))
    return path


@pytest.fixture
def ledger_file(tmp_path: Path) -> Path:
    path = tmp_path / "ledger.yaml"
    path.write_text(LEDGER_YAML)
    return path
