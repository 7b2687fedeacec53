"""Command-line interface for the Layout Analyzer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import Settings, get_settings
from .logging_config import configure_logging
from .salesforce_client import SalesforceClient
from .service import LayoutAnalysisService

app = typer.Typer(help="Inspect, compare and export Salesforce page layouts.")


@app.callback()
def main_options(  # pragma: no cover - CLI glue
    ctx: typer.Context,
    instance_url: Optional[str] = typer.Option(
        None, "--instance-url", help="Override the Salesforce instance URL."
    ),
    api_version: Optional[str] = typer.Option(
        None, "--api-version", help="Override the REST API version, e.g. v60.0."
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
) -> None:
    """Configure logging and settings before any command runs."""
    configure_logging(logging.DEBUG if verbose else logging.INFO)
    ctx.obj = _resolve_settings(instance_url=instance_url, api_version=api_version)


@app.command()
def objects(  # pragma: no cover - CLI glue
    ctx: typer.Context,
    search: Optional[str] = typer.Option(
        None, "--search", "-s", help="Only list objects whose name or label contains this text."
    ),
) -> None:
    """List the objects of the org."""
    client = _build_client(ctx.obj)
    needle = (search or "").lower()
    for summary in client.get_objects():
        if needle and needle not in summary.name.lower() and needle not in summary.label.lower():
            continue
        typer.echo(f"{summary.name}\t{summary.label}")


@app.command()
def layouts(  # pragma: no cover - CLI glue
    ctx: typer.Context,
    object_name: str = typer.Argument(..., help="Object API name, e.g. Account."),
) -> None:
    """List the page layouts and Lightning record pages of an object."""
    catalog = _build_client(ctx.obj).get_layouts(object_name)
    for summary in catalog.page_layouts + catalog.flexi_pages:
        record_type = f"\t{summary.record_type_name}" if summary.record_type_name else ""
        typer.echo(f"{summary.type}\t{summary.id}\t{summary.label}{record_type}")


@app.command("record-types")
def record_types(  # pragma: no cover - CLI glue
    ctx: typer.Context,
    object_name: str = typer.Argument(..., help="Object API name, e.g. Account."),
) -> None:
    """List the available record types of an object."""
    for info in _build_client(ctx.obj).get_record_types(object_name):
        typer.echo(f"{info.record_type_id}\t{info.name}\t{info.developer_name or ''}")


@app.command()
def fields(  # pragma: no cover - CLI glue
    ctx: typer.Context,
    object_name: str = typer.Argument(..., help="Object API name, e.g. Account."),
    layout_id: str = typer.Argument(..., help="Layout or FlexiPage identifier."),
    layout_type: str = typer.Option("Layout", "--type", "-t", help="Layout or FlexiPage."),
    export_format: str = typer.Option(
        "csv-vertical",
        "--format",
        "-f",
        help="csv-vertical, csv-horizontal, json, xml or xlsx.",
    ),
    record_type: Optional[str] = typer.Option(
        None, "--record-type", "-r", help="Record type id for picklist values."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Optional path of the export file."
    ),
) -> None:
    """Export the fields of a layout."""
    service = _build_service(ctx.obj)
    saved_path = service.export_fields(
        object_name,
        layout_id,
        export_format=export_format,
        layout_type=layout_type,
        record_type_id=record_type,
        output_path=output,
    )
    typer.echo(f"Fields exported to: {saved_path}")


@app.command()
def mockup(  # pragma: no cover - CLI glue
    ctx: typer.Context,
    object_name: str = typer.Argument(..., help="Object API name, e.g. Account."),
    layout_id: str = typer.Argument(..., help="Layout or FlexiPage identifier."),
    layout_type: str = typer.Option("Layout", "--type", "-t", help="Layout or FlexiPage."),
    export_format: str = typer.Option("xlsx", "--format", "-f", help="xlsx, text or json."),
    record_type: Optional[str] = typer.Option(
        None, "--record-type", "-r", help="Record type id for picklist values and related lists."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Optional path of the export file."
    ),
) -> None:
    """Export a spreadsheet mockup of a layout."""
    service = _build_service(ctx.obj)
    saved_path = service.export_mockup(
        object_name,
        layout_id,
        export_format=export_format,
        layout_type=layout_type,
        record_type_id=record_type,
        output_path=output,
    )
    typer.echo(f"Mockup exported to: {saved_path}")


@app.command()
def compare(  # pragma: no cover - CLI glue
    ctx: typer.Context,
    object_name: str = typer.Argument(..., help="Object API name, e.g. Account."),
    first_layout: str = typer.Argument(..., help="First layout identifier."),
    second_layout: str = typer.Argument(..., help="Second layout identifier."),
    first_type: str = typer.Option("Layout", "--first-type", help="Layout or FlexiPage."),
    second_type: str = typer.Option("Layout", "--second-type", help="Layout or FlexiPage."),
) -> None:
    """Compare the fields of two layouts of one object."""
    service = _build_service(ctx.obj)
    comparison = service.compare_layouts(
        object_name, first_layout, second_layout, first_type, second_type
    )

    typer.echo(f"Only in {comparison.first} ({len(comparison.only_in_first)}):")
    for record in comparison.only_in_first:
        typer.echo(f"  {record.api_name}\t{record.label}")
    typer.echo(f"Only in {comparison.second} ({len(comparison.only_in_second)}):")
    for record in comparison.only_in_second:
        typer.echo(f"  {record.api_name}\t{record.label}")
    typer.echo(f"In both: {len(comparison.in_both)}")


def _resolve_settings(
    instance_url: Optional[str], api_version: Optional[str]
) -> Settings:  # pragma: no cover - simple helper
    settings = get_settings()
    overrides = {}
    if instance_url:
        overrides["instance_url"] = instance_url
    if api_version:
        overrides["api_version"] = api_version
    if overrides:
        return settings.model_copy(update=overrides)
    return settings


def _build_client(settings: Settings) -> SalesforceClient:  # pragma: no cover - simple helper
    return SalesforceClient(
        instance_url=settings.instance_url,
        session_id=settings.get_session_id(),
        api_version=settings.api_version,
        timeout_seconds=settings.request_timeout_seconds,
        max_retries=settings.max_retry_attempts,
        initial_backoff_seconds=settings.initial_backoff_seconds,
    )


def _build_service(settings: Settings) -> LayoutAnalysisService:  # pragma: no cover - simple helper
    return LayoutAnalysisService(settings=settings, salesforce_client=_build_client(settings))


def main() -> None:  # pragma: no cover - CLI entrypoint
    app()


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
