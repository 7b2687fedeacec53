"""Pydantic models describing org metadata and the normalized field model."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MetadataModel(BaseModel):
    """Base model accepting camelCase payloads and ignoring unknown keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PicklistEntry(MetadataModel):
    """A single picklist value from object describe metadata."""

    value: str
    label: Optional[str] = None
    active: bool = True
    default_value: bool = Field(default=False, alias="defaultValue")


class FieldDescribe(MetadataModel):
    """Describe metadata for one field of an object."""

    api_name: str = Field(alias="name")
    label: Optional[str] = None
    type: str = ""
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    nillable: bool = True
    updateable: bool = True
    inline_help_text: Optional[str] = Field(default=None, alias="inlineHelpText")
    reference_to: List[str] = Field(default_factory=list, alias="referenceTo")
    picklist_values: List[PicklistEntry] = Field(default_factory=list, alias="picklistValues")
    default_value: Optional[Any] = Field(default=None, alias="defaultValue")
    relationship_order: Optional[int] = Field(default=None, alias="relationshipOrder")


class RecordTypeInfo(MetadataModel):
    """Record type entry from object describe metadata."""

    record_type_id: str = Field(alias="recordTypeId")
    name: str
    developer_name: Optional[str] = Field(default=None, alias="developerName")
    available: bool = True


class ObjectDescribe(MetadataModel):
    """Object-level schema independent of any layout."""

    name: str = ""
    label: Optional[str] = None
    fields: List[FieldDescribe] = Field(default_factory=list)
    record_type_infos: List[RecordTypeInfo] = Field(
        default_factory=list, alias="recordTypeInfos"
    )

    def field_index(self) -> Dict[str, FieldDescribe]:
        """Return describe fields keyed by exact API name."""
        return {field.api_name: field for field in self.fields}


class FieldRecord(MetadataModel):
    """Canonical field record produced by both layout parsers."""

    section: str = ""
    api_name: str = Field(alias="apiName")
    label: str = ""
    type: str = ""
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    required: bool = False
    layout_required: bool = Field(default=False, alias="layoutRequired")
    field_required: bool = Field(default=False, alias="fieldRequired")
    read_only: bool = Field(default=False, alias="readOnly")
    picklist_values: List[str] = Field(default_factory=list, alias="picklistValues")
    help_text: str = Field(default="", alias="helpText")
    reference_to: str = Field(default="", alias="referenceTo")
    default_value: Optional[Any] = Field(default=None, alias="defaultValue")

    @property
    def picklist_display(self) -> str:
        """Picklist values as a flat ``"; "``-joined string."""
        return "; ".join(self.picklist_values)


class LayoutSummary(MetadataModel):
    """A page layout or Lightning record page available for an object."""

    id: str
    label: str
    api_name: str = Field(alias="apiName")
    type: str
    record_type_name: Optional[str] = Field(default=None, alias="recordTypeName")


class LayoutCatalog(MetadataModel):
    """All layouts known for an object."""

    page_layouts: List[LayoutSummary] = Field(default_factory=list, alias="pageLayouts")
    flexi_pages: List[LayoutSummary] = Field(default_factory=list, alias="flexiPages")


class ObjectSummary(MetadataModel):
    """Entry of the org's object list."""

    name: str
    label: str = ""
    label_plural: Optional[str] = Field(default=None, alias="labelPlural")


class RelatedListColumn(MetadataModel):
    """A column shown in a related list."""

    field: str
    label: str


class RelatedList(MetadataModel):
    """Related list carried through opaquely into mockups."""

    name: str
    label: str
    columns: List[RelatedListColumn] = Field(default_factory=list)


class MockupItem(MetadataModel):
    """One cell of a mockup row: a field projection or a blank placeholder."""

    column: Optional[int] = None
    field_name: Optional[str] = Field(default=None, alias="fieldName")
    label: str = ""
    type: str = ""
    required: bool = False
    picklist_values: List[str] = Field(default_factory=list, alias="picklistValues")
    is_blank: bool = Field(default=False, alias="isBlank")

    @classmethod
    def blank(cls, column: Optional[int] = None) -> "MockupItem":
        """Return the structural placeholder used to pad a row."""
        return cls(column=column, is_blank=True)


class MockupRow(MetadataModel):
    """A row of mockup items, one per layout column."""

    items: List[MockupItem] = Field(default_factory=list)


class MockupSection(MetadataModel):
    """A section of the mockup with its column arrangement."""

    heading: str
    use_heading: bool = Field(default=True, alias="useHeading")
    columns: int = 2
    rows: List[MockupRow] = Field(default_factory=list)


class PicklistField(MetadataModel):
    """Picklist side-panel entry aggregated across all sections."""

    field_name: str = Field(alias="fieldName")
    label: str
    values: List[str] = Field(default_factory=list)


class MockupView(MetadataModel):
    """Spreadsheet-oriented projection of a layout."""

    object_name: str = Field(default="", alias="objectName")
    layout_id: str = Field(default="", alias="layoutId")
    layout_type: str = Field(default="Layout", alias="layoutType")
    sections: List[MockupSection] = Field(default_factory=list)
    related_lists: List[RelatedList] = Field(default_factory=list, alias="relatedLists")
    picklist_fields: List[PicklistField] = Field(default_factory=list, alias="picklistFields")


class LayoutComparison(MetadataModel):
    """Field-level difference between two layouts of one object."""

    first: str
    second: str
    only_in_first: List[FieldRecord] = Field(default_factory=list, alias="onlyInFirst")
    only_in_second: List[FieldRecord] = Field(default_factory=list, alias="onlyInSecond")
    in_both: List[FieldRecord] = Field(default_factory=list, alias="inBoth")
