"""Field-level comparison of two layouts."""

from __future__ import annotations

from typing import List, Sequence

from .models import FieldRecord, LayoutComparison


def compare_field_lists(
    first: Sequence[FieldRecord],
    second: Sequence[FieldRecord],
    first_label: str = "Layout 1",
    second_label: str = "Layout 2",
) -> LayoutComparison:
    """Split two field lists by API name.

    Records keep the order of their first appearance; a field placed twice on
    one layout is reported once.
    """
    first_names = {record.api_name for record in first}
    second_names = {record.api_name for record in second}

    return LayoutComparison(
        first=first_label,
        second=second_label,
        only_in_first=_unique(record for record in first if record.api_name not in second_names),
        only_in_second=_unique(record for record in second if record.api_name not in first_names),
        in_both=_unique(record for record in first if record.api_name in second_names),
    )


def _unique(records) -> List[FieldRecord]:
    seen = set()
    unique: List[FieldRecord] = []
    for record in records:
        if record.api_name in seen:
            continue
        seen.add(record.api_name)
        unique.append(record)
    return unique
