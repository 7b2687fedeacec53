"""High-level orchestration for the Layout Analyzer."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .classic_parser import ClassicLayoutParser
from .comparison import compare_field_lists
from .config import Settings
from .dynamic_parser import DynamicPageParser
from .exceptions import ExportError, LayoutTypeError, SalesforceClientError
from .exporters import FieldExporter, MockupExporter
from .field_resolver import RecordTypePicklists
from .mockup import MockupProjector
from .models import FieldRecord, LayoutComparison, MockupView, ObjectDescribe, RelatedList
from .payloads import as_dict, as_list
from .salesforce_client import SalesforceClient

LOGGER = logging.getLogger(__name__)

CLASSIC_LAYOUT = "Layout"
DYNAMIC_PAGE = "FlexiPage"
LAYOUT_TYPES = (CLASSIC_LAYOUT, DYNAMIC_PAGE)

FIELD_FORMATS = {
    "csv-vertical": "csv",
    "csv-horizontal": "csv",
    "json": "json",
    "xml": "xml",
    "xlsx": "xlsx",
}
MOCKUP_FORMATS = {"xlsx": "xlsx", "text": "tsv", "json": "json"}


class LayoutAnalysisService:
    """Coordinate metadata retrieval, parsing, projection and export."""

    def __init__(
        self,
        settings: Settings,
        salesforce_client: SalesforceClient,
        classic_parser: Optional[ClassicLayoutParser] = None,
        dynamic_parser: Optional[DynamicPageParser] = None,
        projector: Optional[MockupProjector] = None,
        field_exporter: Optional[FieldExporter] = None,
        mockup_exporter: Optional[MockupExporter] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Create a new analysis service."""
        self.settings = settings
        self.salesforce_client = salesforce_client
        self.classic_parser = classic_parser or ClassicLayoutParser()
        self.dynamic_parser = dynamic_parser or DynamicPageParser()
        self.projector = projector or MockupProjector(dynamic_parser=self.dynamic_parser)
        self.field_exporter = field_exporter or FieldExporter()
        self.mockup_exporter = mockup_exporter or MockupExporter()
        self.logger = logger or LOGGER

    def extract_fields(
        self,
        object_name: str,
        layout_id: str,
        layout_type: str = CLASSIC_LAYOUT,
        record_type_id: Optional[str] = None,
    ) -> List[FieldRecord]:
        """Return the field records of one layout.

        Args:
            object_name: API name of the object, e.g. ``Account``.
            layout_id: Layout or FlexiPage identifier.
            layout_type: ``Layout`` for page layouts, ``FlexiPage`` for Lightning pages.
            record_type_id: Optional record type whose picklist values take priority.

        Returns:
            Field records in layout order.

        Raises:
            LayoutTypeError: If ``layout_type`` is not supported.
        """
        self._check_layout_type(layout_type)
        describe = self._describe(object_name)
        picklists = self._record_type_picklists(object_name, record_type_id)

        if layout_type == DYNAMIC_PAGE:
            metadata = self.salesforce_client.get_flexi_page_metadata(layout_id)
            return self.dynamic_parser.parse(metadata, describe, picklists)

        metadata = self.salesforce_client.get_layout_metadata(object_name, layout_id)
        return self.classic_parser.parse(metadata, describe, picklists)

    def build_mockup(
        self,
        object_name: str,
        layout_id: str,
        layout_type: str = CLASSIC_LAYOUT,
        record_type_id: Optional[str] = None,
    ) -> MockupView:
        """Return the spreadsheet mockup of one layout.

        A Lightning page without related-list components borrows the related
        lists of the page layout assigned to ``record_type_id``.
        """
        self._check_layout_type(layout_type)
        describe = self._describe(object_name)
        picklists = self._record_type_picklists(object_name, record_type_id)

        if layout_type == CLASSIC_LAYOUT:
            metadata = self.salesforce_client.get_layout_metadata(object_name, layout_id)
            view = self.projector.project_classic_layout(metadata, describe, picklists)
        else:
            metadata = self.salesforce_client.get_flexi_page_metadata(layout_id)
            view = self.projector.project_dynamic_page(metadata, describe, picklists)
            if not view.related_lists and record_type_id:
                view.related_lists = self._record_type_related_lists(object_name, record_type_id)

        view.layout_id = layout_id
        return view

    def compare_layouts(
        self,
        object_name: str,
        first_layout_id: str,
        second_layout_id: str,
        first_type: str = CLASSIC_LAYOUT,
        second_type: str = CLASSIC_LAYOUT,
    ) -> LayoutComparison:
        """Compare the fields placed on two layouts of the same object."""
        first = self.extract_fields(object_name, first_layout_id, first_type)
        second = self.extract_fields(object_name, second_layout_id, second_type)
        comparison = compare_field_lists(first, second, first_layout_id, second_layout_id)
        self.logger.info(
            "Compared %s and %s: %s only in first, %s only in second, %s shared.",
            first_layout_id,
            second_layout_id,
            len(comparison.only_in_first),
            len(comparison.only_in_second),
            len(comparison.in_both),
        )
        return comparison

    def export_fields(
        self,
        object_name: str,
        layout_id: str,
        export_format: str = "csv-vertical",
        layout_type: str = CLASSIC_LAYOUT,
        record_type_id: Optional[str] = None,
        output_path: Optional[Path] = None,
        layout_label: Optional[str] = None,
    ) -> Path:
        """Extract the fields of a layout and write them in ``export_format``.

        Returns:
            Path of the written file.

        Raises:
            ExportError: If the format is unknown or the file cannot be written.
        """
        if export_format not in FIELD_FORMATS:
            raise ExportError(f"Unsupported field export format '{export_format}'.")
        records = self.extract_fields(object_name, layout_id, layout_type, record_type_id)
        label = layout_label or layout_id
        if output_path is None:
            output_path = self._generate_export_path(object_name, label, FIELD_FORMATS[export_format])

        if export_format == "xlsx":
            return self.field_exporter.write_workbook(
                records,
                output_path,
                object_name=object_name,
                layout_label=label,
                layout_type=layout_type,
            )

        if export_format == "csv-vertical":
            content = self.field_exporter.vertical_csv(records)
        elif export_format == "csv-horizontal":
            content = self.field_exporter.horizontal_csv(records)
        elif export_format == "json":
            content = self.field_exporter.to_json(records)
        else:
            content = self.field_exporter.to_xml(records, object_name=object_name)
        return self._write_text(output_path, content)

    def export_mockup(
        self,
        object_name: str,
        layout_id: str,
        export_format: str = "xlsx",
        layout_type: str = CLASSIC_LAYOUT,
        record_type_id: Optional[str] = None,
        output_path: Optional[Path] = None,
        layout_label: Optional[str] = None,
    ) -> Path:
        """Build the mockup of a layout and write it in ``export_format``."""
        if export_format not in MOCKUP_FORMATS:
            raise ExportError(f"Unsupported mockup export format '{export_format}'.")
        view = self.build_mockup(object_name, layout_id, layout_type, record_type_id)
        if output_path is None:
            output_path = self._generate_export_path(
                object_name, f"{layout_label or layout_id}_mockup", MOCKUP_FORMATS[export_format]
            )

        if export_format == "xlsx":
            return self.mockup_exporter.write_workbook(view, output_path)
        if export_format == "text":
            return self._write_text(output_path, self.mockup_exporter.clipboard_text(view))
        return self._write_text(output_path, self.mockup_exporter.to_json(view))

    def _generate_export_path(self, object_name: str, layout_label: str, extension: str) -> Path:
        """Generate a timestamped filename inside the export directory.

        Args:
            object_name: The object API name.
            layout_label: Layout label or identifier.
            extension: File extension without the dot.

        Returns:
            Path object for the export file.
        """
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        stem = f"{object_name}_{layout_label}"
        safe_stem = "".join(c if c.isalnum() or c in ("-", "_") else "_" for c in stem)
        return Path(self.settings.export_dir) / f"{safe_stem}_{timestamp}.{extension}"

    def _write_text(self, output_path: Path, content: str) -> Path:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ExportError(f"Failed to write export to {output_path}.") from exc
        self.logger.info("Export written to %s", output_path)
        return output_path

    def _describe(self, object_name: str) -> ObjectDescribe:
        self.logger.info("Fetching describe metadata for %s", object_name)
        return self.salesforce_client.describe_object(object_name)

    def _record_type_picklists(
        self, object_name: str, record_type_id: Optional[str]
    ) -> Optional[RecordTypePicklists]:
        if not record_type_id:
            return None
        self.logger.info("Fetching picklist values for record type %s", record_type_id)
        return self.salesforce_client.get_picklist_values_for_record_type(
            object_name, record_type_id
        )

    def _record_type_related_lists(
        self, object_name: str, record_type_id: str
    ) -> List[RelatedList]:
        try:
            described = self.salesforce_client.get_layouts_for_object(object_name)
        except SalesforceClientError as exc:
            self.logger.warning("Could not load layout assignments for %s: %s", object_name, exc)
            return []

        mapping = _find_mapping(described, record_type_id)
        layout_id = mapping.get("layoutId")
        if not layout_id:
            self.logger.debug("No page layout assigned to record type %s.", record_type_id)
            return []

        try:
            layout_metadata = self.salesforce_client.get_layout_metadata(object_name, layout_id)
        except SalesforceClientError as exc:
            self.logger.warning("Could not load page layout %s: %s", layout_id, exc)
            layout_metadata = {}

        related_lists = self.classic_parser.related_lists(layout_metadata)
        if not related_lists:
            related_lists = self.salesforce_client.get_layout_related_lists(layout_id)
        self.logger.info(
            "Borrowed %s related lists from page layout %s.", len(related_lists), layout_id
        )
        return related_lists

    @staticmethod
    def _check_layout_type(layout_type: str) -> None:
        if layout_type not in LAYOUT_TYPES:
            raise LayoutTypeError(
                f"Unsupported layout type '{layout_type}'. Expected one of {', '.join(LAYOUT_TYPES)}."
            )


def _find_mapping(described: Dict[str, Any], record_type_id: str) -> Dict[str, Any]:
    for mapping in as_list(described.get("recordTypeMappings")):
        mapping = as_dict(mapping)
        if mapping.get("recordTypeId") == record_type_id:
            return mapping
    return {}
