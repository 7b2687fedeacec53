"""Parsing of classic page-layout metadata (sections, rows, items)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .field_resolver import FieldDetailResolver, RecordTypePicklists
from .models import FieldRecord, ObjectDescribe, RelatedList, RelatedListColumn
from .payloads import as_dict, as_list, as_text, decode_metadata

LOGGER = logging.getLogger(__name__)

UNNAMED_SECTION = "Unnamed Section"
LINKS_SECTION_STYLE = "CustomLinks"


@dataclass
class ClassicItem:
    """A layout position holding zero or more field references."""

    required: bool = False
    field_names: List[str] = field(default_factory=list)

    @property
    def is_blank(self) -> bool:
        return not self.field_names


@dataclass
class ClassicRow:
    items: List[ClassicItem] = field(default_factory=list)


@dataclass
class ClassicSection:
    heading: str
    style: Optional[str] = None
    use_heading: bool = True
    columns: Optional[int] = None
    rows: List[ClassicRow] = field(default_factory=list)

    @property
    def is_links_only(self) -> bool:
        return self.style == LINKS_SECTION_STYLE


@dataclass
class ClassicLayout:
    """Canonical classic layout shape every retrieval path is normalized to."""

    sections: List[ClassicSection] = field(default_factory=list)
    related_lists: List[RelatedList] = field(default_factory=list)


def normalize_classic_layout(payload: Any) -> ClassicLayout:
    """Normalize any supported classic layout payload.

    Accepts the describe shape (``detailLayoutSections`` with ``layoutRows``)
    and the Tooling shape (``layoutSections`` with ``layoutColumns``), as well
    as a Tooling record wrapping either under ``Metadata``.
    """
    metadata = decode_metadata(payload)
    if metadata is None:
        return ClassicLayout()

    raw_sections = metadata.get("detailLayoutSections")
    if not isinstance(raw_sections, list):
        raw_sections = as_list(metadata.get("layoutSections"))

    sections = [
        _normalize_section(raw_section)
        for raw_section in raw_sections
        if isinstance(raw_section, dict)
    ]
    return ClassicLayout(
        sections=sections,
        related_lists=normalize_related_lists(metadata.get("relatedLists")),
    )


def _normalize_section(raw: Dict[str, Any]) -> ClassicSection:
    heading = as_text(raw.get("heading")) or as_text(raw.get("label")) or UNNAMED_SECTION
    section = ClassicSection(
        heading=heading,
        style=as_text(raw.get("style")),
        use_heading=raw.get("useHeading") is not False,
    )

    declared_columns = raw.get("columns")
    if isinstance(declared_columns, int) and not isinstance(declared_columns, bool):
        section.columns = declared_columns

    if isinstance(raw.get("layoutRows"), list):
        for raw_row in raw["layoutRows"]:
            items = [
                _normalize_item(raw_item, required=raw_item.get("required") is True)
                for raw_item in as_list(as_dict(raw_row).get("layoutItems"))
                if isinstance(raw_item, dict)
            ]
            section.rows.append(ClassicRow(items=items))
    elif isinstance(raw.get("layoutColumns"), list):
        section.rows = _rows_from_columns(raw["layoutColumns"])
        section.columns = len(raw["layoutColumns"]) or None

    return section


def _rows_from_columns(raw_columns: List[Any]) -> List[ClassicRow]:
    columns = [
        [item for item in as_list(as_dict(column).get("layoutItems")) if isinstance(item, dict)]
        for column in raw_columns
    ]
    depth = max((len(column) for column in columns), default=0)

    rows: List[ClassicRow] = []
    for index in range(depth):
        items = [
            _normalize_item(column[index], required=column[index].get("behavior") == "Required")
            if index < len(column)
            else ClassicItem()
            for column in columns
        ]
        rows.append(ClassicRow(items=items))
    return rows


def _normalize_item(raw: Dict[str, Any], required: bool) -> ClassicItem:
    names: List[str] = []
    direct = as_text(raw.get("field"))
    if direct:
        names.append(direct)
    for component in as_list(raw.get("layoutComponents")):
        component = as_dict(component)
        value = as_text(component.get("value"))
        if component.get("type") == "Field" and value and value not in names:
            names.append(value)
    return ClassicItem(required=required, field_names=names)


def normalize_related_lists(raw_lists: Any) -> List[RelatedList]:
    """Normalize describe-shaped or Tooling-shaped related lists."""
    related_lists: List[RelatedList] = []
    seen = set()
    for raw in as_list(raw_lists):
        raw = as_dict(raw)
        name = (
            as_text(raw.get("relatedList"))
            or as_text(raw.get("name"))
            or as_text(raw.get("sobject"))
        )
        if not name or name in seen:
            continue
        seen.add(name)

        columns: List[RelatedListColumn] = []
        if isinstance(raw.get("columns"), list):
            for raw_column in raw["columns"]:
                raw_column = as_dict(raw_column)
                column_field = as_text(raw_column.get("field")) or as_text(raw_column.get("name"))
                if column_field:
                    label = as_text(raw_column.get("label")) or column_field
                    columns.append(RelatedListColumn(field=column_field, label=label))
            label = as_text(raw.get("label")) or name
        else:
            for column_field in as_list(raw.get("fields")):
                if isinstance(column_field, str) and column_field:
                    columns.append(RelatedListColumn(field=column_field, label=column_field))
            label = as_text(raw.get("label")) or _relationship_label(name)

        related_lists.append(RelatedList(name=name, label=label, columns=columns))
    return related_lists


def _relationship_label(name: str) -> str:
    if name.endswith("__r"):
        name = name[:-3]
    return name.replace("_", " ")


class ClassicLayoutParser:
    """Extract field records from classic page-layout metadata."""

    def __init__(
        self,
        resolver: Optional[FieldDetailResolver] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.resolver = resolver or FieldDetailResolver()
        self.logger = logger or LOGGER

    def parse(
        self,
        layout_metadata: Any,
        describe: ObjectDescribe,
        record_type_picklists: Optional[RecordTypePicklists] = None,
    ) -> List[FieldRecord]:
        """Return one field record per field position on the layout.

        Fields referenced more than once yield one record per position. The
        layout-level required flag is only set by a literal boolean ``true``.

        Args:
            layout_metadata: Classic layout payload in any supported shape.
            describe: Object describe metadata.
            record_type_picklists: Optional record-type picklist values.

        Returns:
            Field records in layout order.
        """
        layout = normalize_classic_layout(layout_metadata)
        field_index = describe.field_index()
        records: List[FieldRecord] = []

        for section in layout.sections:
            if section.is_links_only:
                continue
            for row in section.rows:
                for item in row.items:
                    for field_name in item.field_names:
                        records.append(
                            self.resolver.resolve(
                                field_name,
                                describe,
                                layout_required=item.required,
                                record_type_picklists=record_type_picklists,
                                section=section.heading,
                                field_index=field_index,
                            )
                        )

        self.logger.info(
            "Parsed %s fields from %s layout sections, %s required.",
            len(records),
            len(layout.sections),
            sum(1 for record in records if record.required),
        )
        return records

    def related_lists(self, layout_metadata: Any) -> List[RelatedList]:
        """Return the related lists declared on the layout."""
        return normalize_related_lists(as_dict(decode_metadata(layout_metadata)).get("relatedLists"))
