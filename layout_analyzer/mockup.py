"""Spreadsheet-oriented mockups of layouts."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from .classic_parser import ClassicSection, normalize_classic_layout
from .dynamic_parser import DynamicPageParser, FieldPlacement, PageSection
from .field_resolver import FieldDetailResolver, RecordTypePicklists, format_field_type
from .models import (
    FieldDescribe,
    MockupItem,
    MockupRow,
    MockupSection,
    MockupView,
    ObjectDescribe,
    PicklistField,
    RelatedList,
)

LOGGER = logging.getLogger(__name__)

MAX_COLUMNS = 2


class MockupProjector:
    """Project parsed layouts into column-paired, section-grouped mockups."""

    def __init__(
        self,
        resolver: Optional[FieldDetailResolver] = None,
        dynamic_parser: Optional[DynamicPageParser] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.resolver = resolver or FieldDetailResolver()
        self.dynamic_parser = dynamic_parser or DynamicPageParser(resolver=self.resolver)
        self.logger = logger or LOGGER

    def project_classic_layout(
        self,
        layout_metadata: Any,
        describe: ObjectDescribe,
        record_type_picklists: Optional[RecordTypePicklists] = None,
    ) -> MockupView:
        """Build a mockup from classic page-layout metadata.

        The column count of each section comes from the first row. Empty
        sections are kept so the mockup shows every section of the layout;
        rows holding only blanks are dropped.
        """
        layout = normalize_classic_layout(layout_metadata)
        field_index = describe.field_index()
        sections = [
            self._classic_section(section, describe, record_type_picklists, field_index)
            for section in layout.sections
            if not section.is_links_only
        ]
        self.logger.info("Projected %s sections from page layout.", len(sections))
        return self.project(
            sections,
            layout.related_lists,
            object_name=describe.name,
            layout_type="Layout",
        )

    def project_dynamic_page(
        self,
        page_metadata: Any,
        describe: ObjectDescribe,
        record_type_picklists: Optional[RecordTypePicklists] = None,
    ) -> MockupView:
        """Build a mockup from Lightning page metadata.

        Source columns fold into at most two logical columns. The shorter
        column is padded with blanks so every row has the same width.
        Sections without fields are dropped.
        """
        extraction = self.dynamic_parser.extract(page_metadata)
        field_index = describe.field_index()
        sections: List[MockupSection] = []
        for page_section in extraction.sections:
            section = self._dynamic_section(
                page_section, describe, record_type_picklists, field_index
            )
            if section.rows:
                sections.append(section)
        self.logger.info("Projected %s sections from Lightning page.", len(sections))
        return self.project(
            sections,
            extraction.related_lists,
            object_name=describe.name,
            layout_type="FlexiPage",
        )

    def project(
        self,
        sections: Sequence[MockupSection],
        related_lists: Sequence[RelatedList],
        object_name: str = "",
        layout_id: str = "",
        layout_type: str = "Layout",
    ) -> MockupView:
        """Assemble a mockup view and its picklist side panel.

        Every non-blank item carrying picklist values contributes one entry,
        deduplicated by field name and sorted by label. Related lists pass
        through untouched.
        """
        return MockupView(
            object_name=object_name,
            layout_id=layout_id,
            layout_type=layout_type,
            sections=list(sections),
            related_lists=list(related_lists),
            picklist_fields=collect_picklist_fields(sections),
        )

    def _classic_section(
        self,
        section: ClassicSection,
        describe: ObjectDescribe,
        record_type_picklists: Optional[RecordTypePicklists],
        field_index: Dict[str, FieldDescribe],
    ) -> MockupSection:
        if section.rows and section.rows[0].items:
            columns = len(section.rows[0].items)
        else:
            columns = section.columns or MAX_COLUMNS

        mockup = MockupSection(
            heading=section.heading,
            use_heading=section.use_heading,
            columns=max(1, min(columns, MAX_COLUMNS)),
        )
        for row in section.rows:
            items: List[MockupItem] = []
            for column, item in enumerate(row.items):
                if item.is_blank:
                    items.append(MockupItem.blank(column=column))
                else:
                    if len(item.field_names) > 1:
                        self.logger.info(
                            "Layout position in section '%s' holds %s fields; "
                            "mockup shows %s, omits %s.",
                            section.heading,
                            len(item.field_names),
                            item.field_names[0],
                            ", ".join(item.field_names[1:]),
                        )
                    items.append(
                        self._item(
                            item.field_names[0],
                            describe,
                            item.required,
                            record_type_picklists,
                            field_index,
                            column=column,
                        )
                    )
            if any(not item.is_blank for item in items):
                mockup.rows.append(MockupRow(items=items))
        return mockup

    def _dynamic_section(
        self,
        section: PageSection,
        describe: ObjectDescribe,
        record_type_picklists: Optional[RecordTypePicklists],
        field_index: Dict[str, FieldDescribe],
    ) -> MockupSection:
        logical: List[List[FieldPlacement]] = [[] for _ in range(MAX_COLUMNS)]
        for position, column in enumerate(section.columns):
            logical[position % MAX_COLUMNS].extend(column)

        columns = MAX_COLUMNS if logical[1] else 1
        mockup = MockupSection(heading=section.label, columns=columns)
        depth = max(len(column) for column in logical)
        for index in range(depth):
            items: List[MockupItem] = []
            for position, column in enumerate(logical[:columns]):
                if index < len(column):
                    placement = column[index]
                    items.append(
                        self._item(
                            placement.api_name,
                            describe,
                            placement.layout_required,
                            record_type_picklists,
                            field_index,
                            column=position,
                        )
                    )
                else:
                    items.append(MockupItem.blank(column=position))
            mockup.rows.append(MockupRow(items=items))
        return mockup

    def _item(
        self,
        field_name: str,
        describe: ObjectDescribe,
        layout_required: Optional[bool],
        record_type_picklists: Optional[RecordTypePicklists],
        field_index: Dict[str, FieldDescribe],
        column: Optional[int] = None,
    ) -> MockupItem:
        record = self.resolver.resolve(
            field_name,
            describe,
            layout_required=layout_required,
            record_type_picklists=record_type_picklists,
            field_index=field_index,
        )
        field = field_index.get(field_name)
        return MockupItem(
            column=column,
            field_name=field_name,
            label=record.label or field_name,
            type=format_field_type(field),
            required=record.required,
            picklist_values=record.picklist_values,
        )


def collect_picklist_fields(sections: Sequence[MockupSection]) -> List[PicklistField]:
    """Aggregate picklist fields across sections, deduplicated and label-sorted."""
    picklist_fields: List[PicklistField] = []
    seen = set()
    for section in sections:
        for row in section.rows:
            for item in row.items:
                if item.is_blank or not item.picklist_values or not item.field_name:
                    continue
                if item.field_name in seen:
                    continue
                seen.add(item.field_name)
                picklist_fields.append(
                    PicklistField(
                        field_name=item.field_name,
                        label=item.label,
                        values=list(item.picklist_values),
                    )
                )
    picklist_fields.sort(key=lambda entry: entry.label.casefold())
    return picklist_fields
