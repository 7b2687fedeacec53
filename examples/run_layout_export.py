"""Export every layout of an object from a real org."""

from __future__ import annotations

import logging
import sys

from layout_analyzer.config import get_settings
from layout_analyzer.logging_config import configure_logging
from layout_analyzer.salesforce_client import SalesforceClient
from layout_analyzer.service import LayoutAnalysisService


def main(object_name: str = "Account") -> None:
    """Write a field workbook and a mockup for each layout of ``object_name``."""
    configure_logging(logging.INFO)
    settings = get_settings()

    client = SalesforceClient(
        instance_url=settings.instance_url,
        session_id=settings.get_session_id(),
        api_version=settings.api_version,
        timeout_seconds=settings.request_timeout_seconds,
        max_retries=settings.max_retry_attempts,
        initial_backoff_seconds=settings.initial_backoff_seconds,
    )
    service = LayoutAnalysisService(settings=settings, salesforce_client=client)

    catalog = client.get_layouts(object_name)
    for summary in catalog.page_layouts + catalog.flexi_pages:
        fields_path = service.export_fields(
            object_name,
            summary.id,
            export_format="xlsx",
            layout_type=summary.type,
            layout_label=summary.label,
        )
        mockup_path = service.export_mockup(
            object_name,
            summary.id,
            layout_type=summary.type,
            layout_label=summary.label,
        )
        print(f"{summary.label}: {fields_path}, {mockup_path}")


if __name__ == "__main__":
    main(*sys.argv[1:2])
