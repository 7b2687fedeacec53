"""Tests for layout comparison."""

from __future__ import annotations

from layout_analyzer.comparison import compare_field_lists
from layout_analyzer.models import FieldRecord


def _records(*names: str) -> list:
    return [FieldRecord(api_name=name, label=name) for name in names]


def test_compare_splits_by_api_name() -> None:
    comparison = compare_field_lists(
        _records("Name", "Industry", "Phone", "Name"),
        _records("Rating", "Name", "Phone"),
        "Sales",
        "Support",
    )

    assert comparison.first == "Sales"
    assert comparison.second == "Support"
    assert [r.api_name for r in comparison.only_in_first] == ["Industry"]
    assert [r.api_name for r in comparison.only_in_second] == ["Rating"]
    assert [r.api_name for r in comparison.in_both] == ["Name", "Phone"]


def test_compare_identical_layouts() -> None:
    comparison = compare_field_lists(_records("Name"), _records("Name"))

    assert comparison.only_in_first == []
    assert comparison.only_in_second == []
    assert comparison.first == "Layout 1"
