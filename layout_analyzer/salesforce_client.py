"""Wrapper around the Salesforce REST, Tooling and UI APIs."""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict, List, Optional

import requests
from requests import Response, Session

from .classic_parser import normalize_related_lists
from .exceptions import (
    SalesforceAuthenticationError,
    SalesforceClientError,
    SalesforceNotFoundError,
    SalesforceRateLimitError,
)
from .models import (
    LayoutCatalog,
    LayoutSummary,
    ObjectDescribe,
    ObjectSummary,
    RecordTypeInfo,
    RelatedList,
)
from .payloads import as_dict, as_list, decode_metadata

LOGGER = logging.getLogger(__name__)

API_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
INDEXED_LAYOUT_PREFIX = "layout-"


class SalesforceClient:
    """Client responsible for retrieving object and layout metadata."""

    def __init__(
        self,
        instance_url: str,
        session_id: str,
        api_version: str = "v59.0",
        timeout_seconds: int = 30,
        max_retries: int = 3,
        initial_backoff_seconds: float = 0.5,
        session: Optional[Session] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the client with authentication and retry configuration."""
        self.instance_url = instance_url.rstrip("/")
        self.base_url = f"{self.instance_url}/services/data/{api_version}"
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {session_id}",
                "Content-Type": "application/json",
            }
        )
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.initial_backoff_seconds = initial_backoff_seconds
        self.logger = logger or LOGGER

    def get_objects(self) -> List[ObjectSummary]:
        """Return every sObject of the org with its labels."""
        payload = self._get_json("/sobjects")
        return [
            ObjectSummary.model_validate(raw)
            for raw in as_list(payload.get("sobjects"))
            if isinstance(raw, dict)
        ]

    def describe_object(self, object_name: str) -> ObjectDescribe:
        """Return the describe metadata of an object.

        Raises:
            SalesforceNotFoundError: If the object does not exist.
        """
        self._check_api_name(object_name)
        payload = self._get_json(f"/sobjects/{object_name}/describe")
        describe = ObjectDescribe.model_validate(payload)
        self.logger.debug("Described %s with %s fields.", object_name, len(describe.fields))
        return describe

    def get_record_types(self, object_name: str) -> List[RecordTypeInfo]:
        """Return the record types available to the current user."""
        describe = self.describe_object(object_name)
        return [info for info in describe.record_type_infos if info.available]

    def get_layouts(self, object_name: str) -> LayoutCatalog:
        """List the page layouts and Lightning record pages of an object.

        Page layouts come from a Tooling query on ``Layout``. When that query
        fails or returns nothing, the record-type mappings of
        ``describe/layouts`` are used instead. A failing lookup on either kind
        leaves that part of the catalog empty.
        """
        self._check_api_name(object_name)
        catalog = LayoutCatalog()

        try:
            records = self._tooling_query(
                "SELECT Id, Name FROM Layout "
                f"WHERE EntityDefinition.QualifiedApiName = '{object_name}'"
            )
            catalog.page_layouts = [
                LayoutSummary(id=record["Id"], label=record["Name"], api_name=record["Name"], type="Layout")
                for record in records
                if record.get("Id") and record.get("Name")
            ]
        except SalesforceClientError as exc:
            self.logger.warning("Layout query failed for %s: %s", object_name, exc)

        if not catalog.page_layouts:
            try:
                catalog.page_layouts = self._layouts_from_mappings(
                    self.get_layouts_for_object(object_name)
                )
            except SalesforceClientError as exc:
                self.logger.warning("describe/layouts failed for %s: %s", object_name, exc)

        try:
            records = self._tooling_query(
                "SELECT Id, DeveloperName, MasterLabel FROM FlexiPage "
                f"WHERE EntityDefinition.QualifiedApiName = '{object_name}' "
                "AND Type = 'RecordPage'"
            )
            catalog.flexi_pages = [
                LayoutSummary(
                    id=record["Id"],
                    label=record.get("MasterLabel") or record.get("DeveloperName") or record["Id"],
                    api_name=record.get("DeveloperName") or record["Id"],
                    type="FlexiPage",
                )
                for record in records
                if record.get("Id")
            ]
        except SalesforceClientError as exc:
            self.logger.warning("FlexiPage query failed for %s: %s", object_name, exc)

        self.logger.info(
            "Found %s page layouts and %s Lightning pages for %s.",
            len(catalog.page_layouts),
            len(catalog.flexi_pages),
            object_name,
        )
        return catalog

    def get_layouts_for_object(self, object_name: str) -> Dict[str, Any]:
        """Return the raw ``describe/layouts`` payload, record-type mappings included."""
        self._check_api_name(object_name)
        return self._get_json(f"/sobjects/{object_name}/describe/layouts")

    def get_layout_metadata(self, object_name: str, layout_id: str) -> Dict[str, Any]:
        """Return classic layout metadata in describe or Tooling shape.

        Lookup order: an indexed reference such as ``layout-0``, the layout
        matching ``layout_id`` in the record-type mappings, the Tooling
        ``Layout`` record, then the first described layout.

        Raises:
            SalesforceNotFoundError: If no layout metadata could be found.
        """
        described = self.get_layouts_for_object(object_name)
        layouts = as_list(described.get("layouts"))

        if layout_id.startswith(INDEXED_LAYOUT_PREFIX):
            suffix = layout_id[len(INDEXED_LAYOUT_PREFIX):]
            if suffix.isdigit() and int(suffix) < len(layouts):
                return as_dict(layouts[int(suffix)])

        for index, mapping in enumerate(as_list(described.get("recordTypeMappings"))):
            if as_dict(mapping).get("layoutId") == layout_id and index < len(layouts):
                return as_dict(layouts[index])

        try:
            tooling_layout = self._get_json(f"/tooling/sobjects/Layout/{layout_id}")
            if decode_metadata(tooling_layout) is not None:
                return tooling_layout
        except SalesforceClientError as exc:
            self.logger.warning("Tooling layout fetch failed for %s: %s", layout_id, exc)

        if layouts:
            self.logger.warning(
                "Layout %s not found for %s; using the first described layout.",
                layout_id,
                object_name,
            )
            return as_dict(layouts[0])

        raise SalesforceNotFoundError(f"Layout {layout_id} not found for object {object_name}.")

    def get_flexi_page_metadata(self, flexi_page_id: str) -> Dict[str, Any]:
        """Return the Tooling ``FlexiPage`` record, ``Metadata`` included."""
        return self._get_json(f"/tooling/sobjects/FlexiPage/{flexi_page_id}")

    def get_picklist_values_for_record_type(
        self, object_name: str, record_type_id: str
    ) -> Dict[str, List[str]]:
        """Return record-type specific picklist values keyed by field API name.

        Fields without values are omitted. Failures degrade to an empty map so
        callers fall back to the describe values.
        """
        self._check_api_name(object_name)
        try:
            payload = self._get_json(
                f"/ui-api/object-info/{object_name}/picklist-values/{record_type_id}"
            )
        except SalesforceClientError as exc:
            self.logger.warning(
                "Could not load picklist values for record type %s: %s", record_type_id, exc
            )
            return {}

        values: Dict[str, List[str]] = {}
        for field_name, field_data in as_dict(payload.get("picklistFieldValues")).items():
            entries = [
                entry["value"]
                for entry in as_list(as_dict(field_data).get("values"))
                if isinstance(entry, dict) and isinstance(entry.get("value"), str)
            ]
            if entries:
                values[field_name] = entries
        return values

    def get_layout_related_lists(self, layout_id: str) -> List[RelatedList]:
        """Return the related lists of a layout read from its Tooling metadata."""
        try:
            tooling_layout = self._get_json(f"/tooling/sobjects/Layout/{layout_id}")
        except SalesforceClientError as exc:
            self.logger.warning("Could not load related lists of layout %s: %s", layout_id, exc)
            return []
        metadata = decode_metadata(tooling_layout)
        if metadata is None:
            return []
        return normalize_related_lists(metadata.get("relatedLists"))

    def _layouts_from_mappings(self, described: Dict[str, Any]) -> List[LayoutSummary]:
        layouts = as_list(described.get("layouts"))
        summaries: List[LayoutSummary] = []
        seen = set()
        for index, mapping in enumerate(as_list(described.get("recordTypeMappings"))):
            mapping = as_dict(mapping)
            layout_id = mapping.get("layoutId")
            if not layout_id or layout_id in seen:
                continue
            seen.add(layout_id)

            label = (
                mapping.get("layoutName")
                or mapping.get("name")
                or f"Layout for {mapping.get('recordTypeName') or 'Master'}"
            )
            described_id = as_dict(layouts[index]).get("id") if index < len(layouts) else None
            if isinstance(described_id, str) and described_id:
                label = described_id.split("-")[-1] or label

            summaries.append(
                LayoutSummary(
                    id=layout_id,
                    label=label,
                    api_name=layout_id,
                    type="Layout",
                    record_type_name=mapping.get("recordTypeName"),
                )
            )
        return summaries

    def _tooling_query(self, soql: str) -> List[Dict[str, Any]]:
        payload = self._get_json("/tooling/query", params={"q": soql})
        records = payload.get("records", [])
        if not isinstance(records, list):
            raise SalesforceClientError("Unexpected response format: 'records' is not a list.")
        return [record for record in records if isinstance(record, dict)]

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = self._request("GET", path, params=params)
        payload = self._parse_json(response)
        if not isinstance(payload, dict):
            raise SalesforceClientError("Unexpected response format: expected a JSON object.")
        return payload

    def _request(
        self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None
    ) -> Response:
        url = f"{self.base_url}{path}"
        attempt = 0

        while True:
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    params=params,
                    timeout=self.timeout_seconds,
                )
            except requests.Timeout as exc:
                self._log_debug("Request timeout encountered.", attempt, exc)
                if attempt >= self.max_retries:
                    raise SalesforceClientError("Salesforce API request timed out.") from exc
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            if response.status_code == 429:
                self._log_debug("Rate limit response received.", attempt, None)
                if attempt >= self.max_retries:
                    raise SalesforceRateLimitError(
                        "Exceeded Salesforce request limit despite retries."
                    )
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            if response.status_code in {500, 502, 503, 504}:
                self._log_debug("Server error received.", attempt, None)
                if attempt >= self.max_retries:
                    raise SalesforceClientError(
                        f"Salesforce server error ({response.status_code})."
                    )
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            if response.status_code in {401, 403}:
                raise SalesforceAuthenticationError(
                    "Salesforce authentication failed. Verify the session id and instance URL."
                )

            if response.status_code == 404:
                raise SalesforceNotFoundError(f"Salesforce resource not found: {path}")

            if response.status_code >= 400:
                raise SalesforceClientError(
                    f"Salesforce API error ({response.status_code}): {response.text}"
                )

            return response

    def _parse_json(self, response: Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise SalesforceClientError("Failed to parse Salesforce response as JSON.") from exc

    def _sleep_backoff(self, attempt: int) -> None:
        backoff = self.initial_backoff_seconds * (2 ** attempt)
        time.sleep(backoff)

    def _log_debug(
        self, message: str, attempt: int, exception: Optional[Exception]
    ) -> None:
        if exception:
            self.logger.debug("%s Attempt %s. Error: %s", message, attempt + 1, exception)
        else:
            self.logger.debug("%s Attempt %s.", message, attempt + 1)

    @staticmethod
    def _check_api_name(name: str) -> None:
        if not API_NAME_PATTERN.match(name or ""):
            raise SalesforceClientError(f"Invalid object API name '{name}'.")
