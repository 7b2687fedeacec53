"""Tests for mockup projection."""

from __future__ import annotations

import logging
from typing import Any, Dict

import pytest

from layout_analyzer.mockup import MockupProjector, collect_picklist_fields
from layout_analyzer.models import MockupItem, MockupRow, MockupSection, ObjectDescribe


def test_dynamic_sections_pad_the_shorter_column(
    describe: ObjectDescribe, flexi_page_metadata: Dict[str, Any]
) -> None:
    view = MockupProjector().project_dynamic_page(flexi_page_metadata, describe)

    section = view.sections[0]
    assert section.heading == "Account Information"
    assert section.columns == 2
    assert len(section.rows) == 3
    assert [item.field_name for item in section.rows[0].items] == ["Name", "Rating"]
    for row in section.rows[1:]:
        right = row.items[1]
        assert right.is_blank is True
        assert right.field_name is None
    assert view.layout_type == "FlexiPage"


def test_dynamic_single_column_section(describe: ObjectDescribe) -> None:
    page = {
        "flexiPageRegions": [
            {
                "name": "main",
                "itemInstances": [
                    {
                        "componentInstance": {
                            "componentName": "flexipage:fieldSection",
                            "componentInstanceProperties": [
                                {"name": "columns", "value": "Facet-cols"},
                                {"name": "label", "value": "Summary"},
                            ],
                        }
                    },
                    {
                        "componentInstance": {
                            "componentName": "flexipage:fieldSection",
                            "componentInstanceProperties": [
                                {"name": "columns", "value": "Facet-empty"},
                                {"name": "label", "value": "Nothing"},
                            ],
                        }
                    },
                ],
            },
            {
                "name": "Facet-cols",
                "itemInstances": [
                    {
                        "componentInstance": {
                            "componentName": "flexipage:column",
                            "componentInstanceProperties": [{"name": "body", "value": "Facet-body"}],
                        }
                    }
                ],
            },
            {
                "name": "Facet-body",
                "itemInstances": [
                    {"fieldInstance": {"fieldItem": "Record.Name"}},
                    {"fieldInstance": {"fieldItem": "Record.AnnualRevenue"}},
                ],
            },
            {"name": "Facet-empty", "itemInstances": []},
        ]
    }

    view = MockupProjector().project_dynamic_page(page, describe)

    assert [section.heading for section in view.sections] == ["Summary"]
    section = view.sections[0]
    assert section.columns == 1
    assert [len(row.items) for row in section.rows] == [1, 1]
    assert section.rows[1].items[0].type == "currency (18,2)"


def test_classic_columns_follow_the_first_row(
    describe: ObjectDescribe, classic_layout_payload: Dict[str, Any]
) -> None:
    view = MockupProjector().project_classic_layout(classic_layout_payload, describe)

    assert [(section.heading, section.columns) for section in view.sections] == [
        ("Account Information", 2),
        ("Additional Information", 1),
        ("Empty Section", 2),
    ]
    first = view.sections[0]
    assert first.rows[1].items[1].is_blank is True
    assert first.rows[0].items[0].required is True
    assert view.sections[1].rows[0].items[0].type == "lookup(Account)"
    assert view.sections[2].rows == []


def test_classic_rows_holding_only_blanks_are_dropped(describe: ObjectDescribe) -> None:
    layout = {
        "detailLayoutSections": [
            {
                "heading": "Spacing",
                "layoutRows": [
                    {"layoutItems": [{"layoutComponents": []}, {"layoutComponents": []}]},
                    {"layoutItems": [{"field": "Name"}, {"layoutComponents": []}]},
                ],
            }
        ]
    }

    view = MockupProjector().project_classic_layout(layout, describe)

    assert len(view.sections[0].rows) == 1


def test_classic_position_with_several_fields_logs_the_omitted_ones(
    describe: ObjectDescribe, caplog: pytest.LogCaptureFixture
) -> None:
    layout = {
        "detailLayoutSections": [
            {
                "heading": "Ratings",
                "layoutRows": [
                    {
                        "layoutItems": [
                            {
                                "layoutComponents": [
                                    {"type": "Field", "value": "Rating"},
                                    {"type": "Field", "value": "Status"},
                                ]
                            }
                        ]
                    }
                ],
            }
        ]
    }

    with caplog.at_level(logging.INFO, logger="layout_analyzer.mockup"):
        view = MockupProjector().project_classic_layout(layout, describe)

    assert [item.field_name for item in view.sections[0].rows[0].items] == ["Rating"]
    assert "omits Status" in caplog.text


def test_picklist_panel_is_deduplicated_and_sorted(
    describe: ObjectDescribe, flexi_page_metadata: Dict[str, Any]
) -> None:
    view = MockupProjector().project_dynamic_page(
        flexi_page_metadata, describe, {"Industry": ["Banking"]}
    )

    assert [(entry.field_name, entry.values) for entry in view.picklist_fields] == [
        ("Industry", ["Banking"]),
        ("Rating", ["Hot", "Warm", "Cold"]),
        ("Status", ["Open", "Closed"]),
    ]


def test_related_lists_pass_through(
    describe: ObjectDescribe, classic_layout_payload: Dict[str, Any]
) -> None:
    view = MockupProjector().project_classic_layout(classic_layout_payload, describe)

    assert [related.name for related in view.related_lists] == ["Contacts"]
    assert all(entry.field_name != "Contacts" for entry in view.picklist_fields)


def test_collect_picklist_fields_skips_blanks() -> None:
    sections = [
        MockupSection(
            heading="A",
            rows=[
                MockupRow(
                    items=[
                        MockupItem(field_name="Stage", label="stage", picklist_values=["New"]),
                        MockupItem.blank(column=1),
                    ]
                ),
            ],
        ),
        MockupSection(
            heading="B",
            rows=[
                MockupRow(
                    items=[
                        MockupItem(field_name="Stage", label="stage", picklist_values=["Other"]),
                        MockupItem(field_name="Account", label="Account", picklist_values=["X"]),
                        MockupItem(field_name="Name", label="Name"),
                    ]
                )
            ],
        ),
    ]

    entries = collect_picklist_fields(sections)

    assert [(entry.field_name, entry.values) for entry in entries] == [
        ("Account", ["X"]),
        ("Stage", ["New"]),
    ]
