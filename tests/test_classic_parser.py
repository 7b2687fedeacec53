"""Tests for classic page-layout parsing."""

from __future__ import annotations

import json
from typing import Any, Dict

import pytest

from layout_analyzer.classic_parser import (
    ClassicLayoutParser,
    normalize_classic_layout,
    normalize_related_lists,
)
from layout_analyzer.models import ObjectDescribe


def test_parse_emits_one_record_per_position(
    describe: ObjectDescribe, classic_layout_payload: Dict[str, Any]
) -> None:
    records = ClassicLayoutParser().parse(classic_layout_payload, describe)

    assert [record.api_name for record in records] == [
        "Name",
        "Industry",
        "Rating",
        "ParentId",
        "Name",
    ]
    assert [record.section for record in records] == [
        "Account Information",
        "Account Information",
        "Account Information",
        "Additional Information",
        "Additional Information",
    ]


def test_parse_required_flag_is_literal_boolean(
    describe: ObjectDescribe, classic_layout_payload: Dict[str, Any]
) -> None:
    records = ClassicLayoutParser().parse(classic_layout_payload, describe)
    by_position = {(record.section, record.api_name): record for record in records}

    name = by_position[("Account Information", "Name")]
    rating = by_position[("Account Information", "Rating")]
    repeated_name = by_position[("Additional Information", "Name")]

    assert name.required is True and name.layout_required is True
    assert rating.layout_required is False
    assert rating.required is False
    assert repeated_name.field_required is True
    assert repeated_name.required is False


def test_parse_applies_record_type_picklists(
    describe: ObjectDescribe, classic_layout_payload: Dict[str, Any]
) -> None:
    records = ClassicLayoutParser().parse(
        classic_layout_payload, describe, {"Rating": ["Hot"]}
    )
    rating = next(record for record in records if record.api_name == "Rating")
    industry = next(record for record in records if record.api_name == "Industry")

    assert rating.picklist_values == ["Hot"]
    assert industry.picklist_values == ["Agriculture", "Banking"]


def test_parse_reports_unknown_fields(describe: ObjectDescribe) -> None:
    layout = {
        "layoutSections": [
            {
                "heading": "Legacy",
                "layoutRows": [
                    {"layoutItems": [{"required": True, "field": "Removed__c"}]}
                ],
            }
        ]
    }

    records = ClassicLayoutParser().parse(layout, describe)

    assert len(records) == 1
    assert records[0].type == "Unknown"
    assert records[0].required is True


def test_section_heading_fallbacks(describe: ObjectDescribe) -> None:
    layout = {
        "detailLayoutSections": [
            {"label": "From Label", "layoutRows": [{"layoutItems": [{"field": "Name"}]}]},
            {"layoutRows": [{"layoutItems": [{"field": "Industry"}]}]},
        ]
    }

    records = ClassicLayoutParser().parse(layout, describe)

    assert [record.section for record in records] == ["From Label", "Unnamed Section"]


def test_tooling_layout_columns_are_zipped_into_rows(
    describe: ObjectDescribe, tooling_layout_record: Dict[str, Any]
) -> None:
    layout = normalize_classic_layout(tooling_layout_record)

    section = layout.sections[0]
    assert section.heading == "Details"
    assert section.columns == 2
    assert [[item.field_names for item in row.items] for row in section.rows] == [
        [["Name"], ["Rating"]],
        [["Industry"], []],
    ]

    records = ClassicLayoutParser().parse(tooling_layout_record, describe)
    assert [record.api_name for record in records] == ["Name", "Rating", "Industry"]
    assert records[0].layout_required is True
    assert records[1].layout_required is False


def test_metadata_as_json_string_is_decoded(
    describe: ObjectDescribe, tooling_layout_record: Dict[str, Any]
) -> None:
    record = dict(tooling_layout_record, Metadata=json.dumps(tooling_layout_record["Metadata"]))

    records = ClassicLayoutParser().parse(record, describe)

    assert len(records) == 3


@pytest.mark.parametrize(
    "payload",
    [
        {},
        None,
        "not json",
        {"detailLayoutSections": None},
        {"detailLayoutSections": [{"layoutRows": None}]},
        {"detailLayoutSections": [{"layoutRows": [{"layoutItems": [None, 3, {}]}]}]},
        {"layoutSections": [{"layoutColumns": [{}, {"layoutItems": "bad"}]}]},
        {"Metadata": "{broken"},
        {"Metadata": '{"layoutSections": [], "x": ' + "[" * 100000 + "]" * 100000 + "}"},
    ],
)
def test_parse_never_raises(describe: ObjectDescribe, payload: Any) -> None:
    assert ClassicLayoutParser().parse(payload, describe) == []


def test_related_lists_from_describe_shape(classic_layout_payload: Dict[str, Any]) -> None:
    related_lists = ClassicLayoutParser().related_lists(classic_layout_payload)

    assert len(related_lists) == 1
    assert related_lists[0].name == "Contacts"
    assert [(c.field, c.label) for c in related_lists[0].columns] == [
        ("Contact.Name", "Contact Name"),
        ("Contact.Email", "Email"),
    ]


def test_related_lists_from_tooling_shape(tooling_layout_record: Dict[str, Any]) -> None:
    related_lists = ClassicLayoutParser().related_lists(tooling_layout_record)

    assert related_lists[0].name == "Opportunities__r"
    assert related_lists[0].label == "Opportunities"
    assert [column.field for column in related_lists[0].columns] == ["NAME", "STAGE_NAME"]


def test_related_lists_are_deduplicated_by_name() -> None:
    related_lists = normalize_related_lists(
        [
            {"relatedList": "Cases", "label": "Cases", "columns": []},
            {"sobject": "Cases", "label": "Cases again", "columns": []},
            {"relatedList": "Custom_Items__r", "fields": []},
        ]
    )

    assert [related.name for related in related_lists] == ["Cases", "Custom_Items__r"]
    assert related_lists[1].label == "Custom Items"
