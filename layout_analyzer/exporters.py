"""Export writers for field lists and mockups."""

from __future__ import annotations

import csv
import io
import json
import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font

from .exceptions import ExportError
from .models import FieldRecord, MockupSection, MockupView

LOGGER = logging.getLogger(__name__)

# Attribute order shared by every field export; vertical and horizontal
# layouts are transposes of each other over this list.
FIELD_ATTRIBUTES: List[Tuple[str, str]] = [
    ("section", "Section"),
    ("label", "Field Label"),
    ("api_name", "API Name"),
    ("type", "Type"),
    ("length", "Length"),
    ("required", "Required"),
    ("layout_required", "Layout Required"),
    ("field_required", "Field Required"),
    ("read_only", "Read Only"),
    ("picklist_values", "Picklist Values"),
    ("reference_to", "Reference To"),
    ("help_text", "Help Text"),
]

ORIENTATIONS = ("vertical", "horizontal")

CellMatrix = Dict[Tuple[str, int], str]


def format_value(value: Any) -> str:
    """Render one attribute value as export text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return "; ".join(str(item) for item in value)
    return str(value)


def _record_values(record: FieldRecord) -> List[str]:
    return [format_value(getattr(record, key)) for key, _ in FIELD_ATTRIBUTES]


def _to_csv(rows: Sequence[Sequence[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def _autosize(worksheet: Any, rows: Sequence[Sequence[Any]], cap: int = 50) -> None:
    widths: Dict[int, int] = {}
    for row in rows:
        for index, value in enumerate(row, start=1):
            widths[index] = max(widths.get(index, 0), len(str(value or "")))
    for index, width in widths.items():
        letter = worksheet.cell(row=1, column=index).column_letter
        worksheet.column_dimensions[letter].width = min(width + 2, cap)


def _append_text_row(worksheet: Any, row: Sequence[Any]) -> None:
    """Append ``row`` keeping strings that start with ``=`` as text, not formulas."""
    worksheet.append(row)
    row_index = worksheet.max_row
    for column, value in enumerate(row, start=1):
        if isinstance(value, str) and value.startswith("="):
            worksheet.cell(row=row_index, column=column).data_type = "s"


class FieldExporter:
    """Render field records as CSV, JSON, XML and Excel."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or LOGGER

    def horizontal_rows(self, records: Sequence[FieldRecord]) -> List[List[str]]:
        """Header row followed by one row per field."""
        rows = [[label for _, label in FIELD_ATTRIBUTES]]
        rows.extend(_record_values(record) for record in records)
        return rows

    def vertical_rows(self, records: Sequence[FieldRecord]) -> List[List[str]]:
        """``Attribute, Field 1..n`` header followed by one row per attribute."""
        columns = [_record_values(record) for record in records]
        rows = [["Attribute"] + [f"Field {index}" for index in range(1, len(records) + 1)]]
        for position, (_, label) in enumerate(FIELD_ATTRIBUTES):
            rows.append([label] + [values[position] for values in columns])
        return rows

    def rows(self, records: Sequence[FieldRecord], orientation: str) -> List[List[str]]:
        if orientation not in ORIENTATIONS:
            raise ExportError(f"Unknown orientation '{orientation}'.")
        if orientation == "vertical":
            return self.vertical_rows(records)
        return self.horizontal_rows(records)

    def horizontal_csv(self, records: Sequence[FieldRecord]) -> str:
        return _to_csv(self.horizontal_rows(records))

    def vertical_csv(self, records: Sequence[FieldRecord]) -> str:
        return _to_csv(self.vertical_rows(records))

    def to_json(self, records: Sequence[FieldRecord]) -> str:
        payload = [record.model_dump(mode="json", by_alias=True) for record in records]
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def to_xml(self, records: Sequence[FieldRecord], object_name: str = "") -> str:
        """Render records as ``<layoutFields><field>...</field></layoutFields>``."""
        root = ET.Element("layoutFields")
        if object_name:
            root.set("object", object_name)
        for record in records:
            element = ET.SubElement(root, "field")
            dumped = record.model_dump(by_alias=True)
            for key, _ in FIELD_ATTRIBUTES:
                alias = FieldRecord.model_fields[key].alias or key
                child = ET.SubElement(element, alias)
                value = dumped[alias]
                if isinstance(value, list):
                    for item in value:
                        ET.SubElement(child, "value").text = str(item)
                else:
                    child.text = format_value(value)
        _indent(root)
        body = ET.tostring(root, encoding="unicode")
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"

    def write_workbook(
        self,
        records: Sequence[FieldRecord],
        output_path: Path,
        orientation: str = "vertical",
        object_name: str = "",
        layout_label: str = "",
        layout_type: str = "",
    ) -> Path:
        """Write the field list and an info sheet to an Excel workbook."""
        try:
            rows = self.rows(records, orientation)
            workbook = Workbook()
            sheet = workbook.active
            sheet.title = "Layout Fields"
            for row in rows:
                _append_text_row(sheet, row)
            for cell in sheet[1]:
                cell.font = Font(bold=True)
            _autosize(sheet, rows)

            info = workbook.create_sheet("Info")
            info_rows = [
                ["Layout Export Report"],
                [""],
                ["Object", object_name],
                ["Layout", layout_label],
                ["Layout Type", layout_type],
                ["Total Fields", len(records)],
                ["Required Fields", sum(1 for r in records if r.required)],
                ["Layout Required", sum(1 for r in records if r.layout_required)],
                ["Field Required", sum(1 for r in records if r.field_required)],
                ["Exported At", datetime.now().strftime("%Y-%m-%d %H:%M:%S")],
            ]
            for row in info_rows:
                _append_text_row(info, row)
            info.column_dimensions["A"].width = 15
            info.column_dimensions["B"].width = 40

            output_path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(output_path)
        except ExportError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ExportError("Failed to write field workbook.") from exc

        self.logger.info("Field workbook written to %s", output_path)
        return output_path


def read_horizontal_csv(text: str) -> CellMatrix:
    """Read a horizontal CSV into an ``(attribute, field index) -> value`` matrix."""
    rows = list(csv.reader(io.StringIO(text)))
    if not rows:
        return {}
    header = rows[0]
    matrix: CellMatrix = {}
    for field_index, row in enumerate(rows[1:]):
        for attribute, value in zip(header, row):
            matrix[(attribute, field_index)] = value
    return matrix


def read_vertical_csv(text: str) -> CellMatrix:
    """Read a vertical CSV into an ``(attribute, field index) -> value`` matrix."""
    rows = list(csv.reader(io.StringIO(text)))
    matrix: CellMatrix = {}
    for row in rows[1:]:
        if not row:
            continue
        attribute = row[0]
        for field_index, value in enumerate(row[1:]):
            matrix[(attribute, field_index)] = value
    return matrix


def _indent(element: ET.Element, level: int = 0) -> None:
    padding = "\n" + "  " * level
    if len(element):
        if not element.text or not element.text.strip():
            element.text = padding + "  "
        for child in element:
            _indent(child, level + 1)
        if not child.tail or not child.tail.strip():
            child.tail = padding
    if level and (not element.tail or not element.tail.strip()):
        element.tail = padding


class MockupExporter:
    """Render mockups as clipboard text, JSON and Excel."""

    LEFT_WIDTH = 7
    HEADER_ONE_COLUMN = ["Field Name", "API Name", "Type"]
    HEADER_TWO_COLUMNS = ["Field Name", "API Name", "Type", "", "Field Name", "API Name", "Type"]
    RELATED_LISTS_HEADING = "Related Lists - NOT ADJUSTABLE"

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or LOGGER

    def layout_rows(self, view: MockupView) -> List[List[str]]:
        """Section blocks followed by the related lists."""
        rows: List[List[str]] = []
        for section in view.sections:
            rows.append([section.heading])
            if section.columns == 1:
                rows.append(list(self.HEADER_ONE_COLUMN))
            else:
                rows.append(list(self.HEADER_TWO_COLUMNS))
            rows.extend(self._section_cells(section))
            rows.append([])

        if view.related_lists:
            rows.append([self.RELATED_LISTS_HEADING])
            rows.append([])
            for related_list in view.related_lists:
                rows.append([related_list.label])
                if related_list.columns:
                    rows.append([column.label for column in related_list.columns])
                rows.append([])
        return rows

    def picklist_rows(self, view: MockupView) -> List[List[str]]:
        rows: List[List[str]] = []
        if not view.picklist_fields:
            return rows
        rows.append(["Picklist Values"])
        rows.append([""])
        for picklist in view.picklist_fields:
            rows.append([picklist.label])
            rows.extend([value] for value in picklist.values)
            rows.append([""])
        return rows

    def clipboard_text(self, view: MockupView) -> str:
        """Tab-separated mockup: layout on the left, picklists on the right."""
        left = [self._pad(row, self.LEFT_WIDTH) for row in self.layout_rows(view)]
        right = self.picklist_rows(view)
        merged: List[List[str]] = []
        for index in range(max(len(left), len(right))):
            left_part = left[index] if index < len(left) else [""] * self.LEFT_WIDTH
            right_part = right[index] if index < len(right) else [""]
            merged.append(left_part + [""] + right_part)
        return "\n".join("\t".join(row) for row in merged)

    def to_json(self, view: MockupView) -> str:
        return json.dumps(view.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)

    def write_workbook(self, view: MockupView, output_path: Path) -> Path:
        """Write the mockup, picklist values and related lists to a workbook."""
        try:
            workbook = Workbook()
            layout_sheet = workbook.active
            layout_sheet.title = "Layout Mockup"
            for row in self.layout_rows(view):
                _append_text_row(layout_sheet, row)
            for letter, width in zip("ABCDEFG", (30, 30, 20, 3, 30, 30, 20)):
                layout_sheet.column_dimensions[letter].width = width

            if view.picklist_fields:
                picklist_sheet = workbook.create_sheet("Picklist Values")
                _append_text_row(picklist_sheet, ["Picklist Field", "Available Values"])
                for picklist in view.picklist_fields:
                    _append_text_row(picklist_sheet, [picklist.label, ""])
                    for value in picklist.values:
                        _append_text_row(picklist_sheet, ["", value])
                    _append_text_row(picklist_sheet, ["", ""])
                picklist_sheet.column_dimensions["A"].width = 35
                picklist_sheet.column_dimensions["B"].width = 40

            if view.related_lists:
                related_sheet = workbook.create_sheet("Related Lists")
                _append_text_row(related_sheet, ["Related List", "Columns"])
                for related_list in view.related_lists:
                    _append_text_row(
                        related_sheet,
                        [related_list.label, ", ".join(c.label for c in related_list.columns)],
                    )
                related_sheet.column_dimensions["A"].width = 35
                related_sheet.column_dimensions["B"].width = 60

            output_path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(output_path)
        except Exception as exc:  # noqa: BLE001
            raise ExportError("Failed to write mockup workbook.") from exc

        self.logger.info("Mockup workbook written to %s", output_path)
        return output_path

    def _section_cells(self, section: MockupSection) -> List[List[str]]:
        rows: List[List[str]] = []
        for row in section.rows:
            cells: List[str] = []
            for index, item in enumerate(row.items):
                if index == 1:
                    cells.append("")
                if item.is_blank:
                    cells.extend(["", "", ""])
                else:
                    cells.extend([item.label, item.field_name or "", item.type])
            rows.append(cells)
        return rows

    @staticmethod
    def _pad(row: List[str], width: int) -> List[str]:
        return list(row) + [""] * (width - len(row))
