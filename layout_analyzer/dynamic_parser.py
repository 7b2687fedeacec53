"""Parsing of Lightning record page (FlexiPage) metadata.

A Lightning page is a flat list of named regions. Components reference other
regions by name through facet properties, so the page is walked as a graph:

    fieldSection --columns--> region of column components
    column --body--> region of field instances
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set

from .field_resolver import FieldDetailResolver, RecordTypePicklists
from .models import FieldRecord, ObjectDescribe, RelatedList, RelatedListColumn
from .payloads import as_dict, as_list, as_text, decode_metadata

LOGGER = logging.getLogger(__name__)

FIELD_SECTION_COMPONENT = "flexipage:fieldSection"
COLUMN_COMPONENT = "flexipage:column"
RECORD_DETAIL_COMPONENTS = {"flexipage:recordDetail", "force:recordDetail"}
RELATED_LIST_COMPONENTS = {
    "lst:dynamicRelatedList",
    "force:relatedListSingleContainer",
    "force:relatedListSingle",
}

RECORD_PREFIX = "Record."
SECTION_LABEL_MARKERS = ("@@@SFDC", "SFDC@@@")
UNNAMED_SECTION = "Unnamed Section"
DIRECT_FIELDS_SECTION = "Fields"
FACET_REGION_PREFIX = "Facet-"

UI_BEHAVIOR_REQUIRED = "required"
UI_BEHAVIOR_READONLY = "readonly"


@dataclass
class PropertyEntry:
    """A ``{name, value}`` entry of a component or field property bag."""

    name: str
    value: Any = None
    value_list: List[str] = field(default_factory=list)


@dataclass
class FieldNode:
    """A field instance placed on the page."""

    field_item: Optional[str] = None
    properties: List[PropertyEntry] = field(default_factory=list)
    behavior_properties: List[PropertyEntry] = field(default_factory=list)
    required: Any = None

    @property
    def api_name(self) -> Optional[str]:
        if not self.field_item:
            return None
        name = self.field_item
        if name.startswith(RECORD_PREFIX):
            name = name[len(RECORD_PREFIX):]
        return name or None


@dataclass
class ComponentNode:
    """A component instance such as a field section or a column."""

    name: str
    properties: List[PropertyEntry] = field(default_factory=list)


@dataclass
class ItemNode:
    """An item of a region; holds a component, a field, or neither."""

    component: Optional[ComponentNode] = None
    field: Optional[FieldNode] = None


@dataclass
class PageRegion:
    name: str
    type: Optional[str] = None
    items: List[ItemNode] = field(default_factory=list)


@dataclass
class FieldPlacement:
    api_name: str
    layout_required: Optional[bool] = None


@dataclass
class PageSection:
    """A section of the page with its fields grouped by column."""

    label: str
    columns: List[List[FieldPlacement]] = field(default_factory=list)

    def placements(self) -> List[FieldPlacement]:
        return [placement for column in self.columns for placement in column]


@dataclass
class PageExtraction:
    """Everything the parser pulls out of one Lightning page."""

    sections: List[PageSection] = field(default_factory=list)
    related_lists: List[RelatedList] = field(default_factory=list)
    uses_record_detail: bool = False

    @property
    def field_count(self) -> int:
        return sum(len(section.placements()) for section in self.sections)


def get_property(bag: Sequence[PropertyEntry], name: str) -> Any:
    """Return the value of the first property called ``name``, or None."""
    for entry in bag:
        if entry.name == name:
            return entry.value
    return None


def _find_property(bag: Sequence[PropertyEntry], name: str) -> Optional[PropertyEntry]:
    for entry in bag:
        if entry.name == name:
            return entry
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return None


def resolve_layout_required(field_node: FieldNode) -> Optional[bool]:
    """Return the layout-level required signal of a field instance.

    Checked in order, first definitive answer wins:

    1. ``uiBehavior`` property: ``required`` is True, ``readonly`` is False.
       Any other value is not an answer.
    2. An explicit ``required`` property (boolean or ``"true"``/``"false"``),
       in the property bag or directly on the field instance.
    3. A ``required`` entry in ``behaviorProperties``.

    Returns None when no signal is present, leaving the decision to the
    field-level required flag.
    """
    behavior = get_property(field_node.properties, "uiBehavior")
    if isinstance(behavior, str):
        if behavior.lower() == UI_BEHAVIOR_REQUIRED:
            return True
        if behavior.lower() == UI_BEHAVIOR_READONLY:
            return False

    explicit = _as_bool(get_property(field_node.properties, "required"))
    if explicit is None:
        explicit = _as_bool(field_node.required)
    if explicit is not None:
        return explicit

    return _as_bool(get_property(field_node.behavior_properties, "required"))


def clean_section_label(value: Any) -> str:
    """Strip internal markers and underscores from a section label."""
    label = as_text(value) or UNNAMED_SECTION
    for marker in SECTION_LABEL_MARKERS:
        label = label.replace(marker, "")
    label = label.replace("_", " ").strip()
    return label or UNNAMED_SECTION


def iter_components(node: Any) -> Iterator[Dict[str, Any]]:
    """Yield every object with a ``componentName`` anywhere in the tree.

    Depth-first in document order. Uses an explicit stack so nesting depth
    is unbounded.
    """
    stack: List[Any] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            if isinstance(current.get("componentName"), str):
                yield current
            stack.extend(reversed(list(current.values())))
        elif isinstance(current, list):
            stack.extend(reversed(current))


def _build_properties(raw_entries: Any) -> List[PropertyEntry]:
    entries: List[PropertyEntry] = []
    for raw in as_list(raw_entries):
        raw = as_dict(raw)
        name = as_text(raw.get("name"))
        if not name:
            continue
        value_items = as_list(as_dict(raw.get("valueList")).get("valueListItems"))
        value_list = [
            text for text in (as_text(as_dict(item).get("value")) for item in value_items) if text
        ]
        entries.append(PropertyEntry(name=name, value=raw.get("value"), value_list=value_list))
    return entries


def _build_component(raw: Dict[str, Any]) -> ComponentNode:
    return ComponentNode(
        name=as_text(raw.get("componentName")) or "",
        properties=_build_properties(raw.get("componentInstanceProperties")),
    )


def _build_field(raw: Dict[str, Any]) -> FieldNode:
    return FieldNode(
        field_item=as_text(raw.get("fieldItem")),
        properties=_build_properties(raw.get("fieldInstanceProperties")),
        behavior_properties=_build_properties(raw.get("behaviorProperties")),
        required=raw.get("required"),
    )


def _build_region(raw: Dict[str, Any]) -> PageRegion:
    items: List[ItemNode] = []
    for raw_item in as_list(raw.get("itemInstances")):
        raw_item = as_dict(raw_item)
        component = raw_item.get("componentInstance")
        field_instance = raw_item.get("fieldInstance")
        items.append(
            ItemNode(
                component=_build_component(component) if isinstance(component, dict) else None,
                field=_build_field(field_instance) if isinstance(field_instance, dict) else None,
            )
        )
    return PageRegion(
        name=as_text(raw.get("name")) or "",
        type=as_text(raw.get("type")),
        items=items,
    )


def _related_list_label(name: str) -> str:
    label = name
    if label.lower().startswith("related_"):
        label = label[len("related_"):]
    for suffix in ("__r", "__c"):
        if label.lower().endswith(suffix):
            label = label[: -len(suffix)]
    return " ".join(word.capitalize() for word in label.replace("_", " ").split(" "))


class DynamicPageParser:
    """Extract field records from Lightning record page metadata."""

    def __init__(
        self,
        resolver: Optional[FieldDetailResolver] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.resolver = resolver or FieldDetailResolver()
        self.logger = logger or LOGGER

    def parse(
        self,
        page_metadata: Any,
        describe: ObjectDescribe,
        record_type_picklists: Optional[RecordTypePicklists] = None,
    ) -> List[FieldRecord]:
        """Return one field record per distinct field on the page.

        A field referenced in several regions is reported once, under the
        first section it appears in. Undecodable metadata yields an empty
        list. A page that defers to the page layout through a record-detail
        component, and has no fields of its own, yields a single ``Info``
        record.

        Args:
            page_metadata: FlexiPage record (``Metadata`` as object or JSON
                string), bare metadata, or a JSON string of either.
            describe: Object describe metadata.
            record_type_picklists: Optional record-type picklist values.

        Returns:
            Field records in page order.
        """
        extraction = self.extract(page_metadata)
        field_index = describe.field_index()
        records: List[FieldRecord] = []

        for section in extraction.sections:
            for placement in section.placements():
                records.append(
                    self.resolver.resolve(
                        placement.api_name,
                        describe,
                        layout_required=placement.layout_required,
                        record_type_picklists=record_type_picklists,
                        section=section.label,
                        field_index=field_index,
                    )
                )

        if extraction.uses_record_detail and not records:
            records.append(record_detail_notice())

        self.logger.info(
            "Extracted %s fields from Lightning page, %s required.",
            len(records),
            sum(1 for record in records if record.required),
        )
        return records

    def extract(self, page_metadata: Any) -> PageExtraction:
        """Walk the page graph into sections, related lists and flags."""
        metadata = decode_metadata(page_metadata)
        if metadata is None:
            self.logger.warning("Lightning page has no decodable metadata.")
            return PageExtraction()

        regions = [
            _build_region(raw)
            for raw in as_list(metadata.get("flexiPageRegions"))
            if isinstance(raw, dict)
        ]
        region_index = {region.name: region for region in regions if region.name}
        components = [_build_component(raw) for raw in iter_components(metadata)]

        seen: Set[str] = set()
        field_sections = [c for c in components if c.name == FIELD_SECTION_COMPONENT]
        self.logger.debug("Found %s field section components.", len(field_sections))
        sections = [
            self._extract_field_section(component, region_index, seen)
            for component in field_sections
        ]

        if not any(section.placements() for section in sections):
            sections = self._extract_direct_fields(regions, seen)

        return PageExtraction(
            sections=sections,
            related_lists=self._extract_related_lists(components),
            uses_record_detail=any(c.name in RECORD_DETAIL_COMPONENTS for c in components),
        )

    def _extract_field_section(
        self,
        component: ComponentNode,
        region_index: Dict[str, PageRegion],
        seen: Set[str],
    ) -> PageSection:
        section = PageSection(label=clean_section_label(get_property(component.properties, "label")))

        columns_region = self._resolve_facet(component, "columns", region_index)
        if columns_region is None:
            return section

        for item in columns_region.items:
            column = item.component
            if column is None or column.name != COLUMN_COMPONENT:
                continue
            body_region = self._resolve_facet(column, "body", region_index)
            placements: List[FieldPlacement] = []
            if body_region is not None:
                for body_item in body_region.items:
                    if body_item.field is not None:
                        self._place(body_item.field, placements, seen)
            section.columns.append(placements)
        return section

    def _extract_direct_fields(
        self, regions: List[PageRegion], seen: Set[str]
    ) -> List[PageSection]:
        sections: Dict[str, PageSection] = {}
        counts: Dict[str, int] = {}
        for region in regions:
            if region.name and not region.name.startswith(FACET_REGION_PREFIX):
                label = region.name
            else:
                label = DIRECT_FIELDS_SECTION
            for item in region.items:
                if item.field is None:
                    continue
                placements: List[FieldPlacement] = []
                self._place(item.field, placements, seen)
                if not placements:
                    continue
                section = sections.setdefault(label, PageSection(label=label, columns=[[], []]))
                position = counts.get(label, 0)
                section.columns[position % 2].extend(placements)
                counts[label] = position + 1
        return list(sections.values())

    def _place(
        self, field_node: FieldNode, placements: List[FieldPlacement], seen: Set[str]
    ) -> None:
        api_name = field_node.api_name
        if not api_name or api_name in seen:
            return
        seen.add(api_name)
        placements.append(
            FieldPlacement(api_name=api_name, layout_required=resolve_layout_required(field_node))
        )

    def _resolve_facet(
        self,
        component: ComponentNode,
        property_name: str,
        region_index: Dict[str, PageRegion],
    ) -> Optional[PageRegion]:
        facet_name = as_text(get_property(component.properties, property_name))
        if facet_name is None:
            return None
        region = region_index.get(facet_name)
        if region is None:
            self.logger.debug("Facet %s of %s does not resolve.", facet_name, component.name)
        return region

    def _extract_related_lists(self, components: List[ComponentNode]) -> List[RelatedList]:
        related_lists: List[RelatedList] = []
        seen: Set[str] = set()
        for component in components:
            if (
                component.name not in RELATED_LIST_COMPONENTS
                and "relatedlist" not in component.name.lower()
            ):
                continue
            api_name = as_text(get_property(component.properties, "relatedListApiName"))
            if not api_name or api_name in seen:
                continue
            seen.add(api_name)

            label = (
                as_text(get_property(component.properties, "relatedListLabel"))
                or as_text(get_property(component.properties, "label"))
                or as_text(get_property(component.properties, "title"))
                or _related_list_label(api_name)
            )
            columns: List[RelatedListColumn] = []
            aliases = _find_property(component.properties, "relatedListFieldAliases")
            if aliases is not None:
                for value in aliases.value_list:
                    column_label = value[:-3] if value.endswith("__c") else value
                    columns.append(
                        RelatedListColumn(field=value, label=column_label.replace("_", " "))
                    )
            related_lists.append(RelatedList(name=api_name, label=label, columns=columns))
        return related_lists


def record_detail_notice() -> FieldRecord:
    """Return the informational record for pages that defer to the page layout."""
    return FieldRecord(
        section="Note",
        api_name="(Uses Page Layout)",
        label="This Lightning Page uses the Page Layout for field display",
        type="Info",
        required=False,
        read_only=True,
        help_text="Select the corresponding Page Layout to see field details",
    )
