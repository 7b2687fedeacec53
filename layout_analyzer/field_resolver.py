"""Resolve a field reference against describe metadata."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .models import FieldDescribe, FieldRecord, ObjectDescribe

LOGGER = logging.getLogger(__name__)

RecordTypePicklists = Mapping[str, Sequence[str]]

UNKNOWN_TYPE = "Unknown"
_UNSIZED_TYPES = {"boolean", "date", "datetime"}


class FieldDetailResolver:
    """Build canonical field records from describe metadata.

    Lookups are by exact API name. A field that is not present in the describe
    (deleted or renamed but still referenced by a stale layout) produces a
    degraded ``Unknown`` record instead of an error.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or LOGGER

    def resolve(
        self,
        field_name: str,
        describe: ObjectDescribe,
        layout_required: Optional[bool] = None,
        record_type_picklists: Optional[RecordTypePicklists] = None,
        section: str = "",
        field_index: Optional[Dict[str, FieldDescribe]] = None,
    ) -> FieldRecord:
        """Resolve one field reference into a ``FieldRecord``.

        Args:
            field_name: Bare API name of the field.
            describe: Object describe metadata.
            layout_required: Layout-level required signal, or None when the
                layout says nothing about the field.
            record_type_picklists: Optional record-type picklist values keyed
                by field API name.
            section: Section heading the field is placed under.
            field_index: Precomputed ``describe.field_index()`` for callers
                resolving many fields against the same describe.

        Returns:
            The resolved field record.
        """
        index = field_index if field_index is not None else describe.field_index()
        field = index.get(field_name)

        if field is None:
            self.logger.debug("Field %s not found in describe metadata.", field_name)
            return FieldRecord(
                section=section,
                api_name=field_name,
                label="",
                type=UNKNOWN_TYPE,
                required=bool(layout_required),
                layout_required=bool(layout_required),
                field_required=False,
                read_only=False,
            )

        field_required = not field.nillable
        required = layout_required if layout_required is not None else field_required

        return FieldRecord(
            section=section,
            api_name=field.api_name,
            label=field.label or "",
            type=field.type,
            length=field.length or None,
            precision=field.precision or None,
            scale=field.scale or None,
            required=required,
            layout_required=bool(layout_required),
            field_required=field_required,
            read_only=not field.updateable,
            picklist_values=resolve_picklist_values(field_name, field, record_type_picklists),
            help_text=field.inline_help_text or "",
            reference_to=", ".join(field.reference_to),
            default_value=field.default_value,
        )


def resolve_picklist_values(
    field_name: str,
    field: Optional[FieldDescribe],
    record_type_picklists: Optional[RecordTypePicklists] = None,
) -> List[str]:
    """Return picklist values, preferring record-type values over the describe."""
    if record_type_picklists:
        record_type_values = record_type_picklists.get(field_name)
        if record_type_values:
            return [str(value) for value in record_type_values]
    if field is not None and field.picklist_values:
        return [entry.value for entry in field.picklist_values]
    return []


def format_field_type(field: Optional[FieldDescribe]) -> str:
    """Render a field type the way mockups display it.

    Examples: ``lookup(Account)``, ``master-detail(Account)``,
    ``string (80)``, ``currency (18,2)``.
    """
    if field is None:
        return UNKNOWN_TYPE
    field_type = field.type or UNKNOWN_TYPE

    if field.type == "reference" and field.reference_to:
        related = ", ".join(field.reference_to)
        if field.relationship_order is not None:
            return f"master-detail({related})"
        return f"lookup({related})"

    if field.precision and field.scale is not None:
        return f"{field.type} ({field.precision},{field.scale})"
    if field.length and field.type not in _UNSIZED_TYPES:
        return f"{field.type} ({field.length})"
    return field_type
