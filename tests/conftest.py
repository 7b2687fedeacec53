"""Shared pytest fixtures."""

from __future__ import annotations

import json
from typing import Any, Dict

import pytest

from layout_analyzer.config import Settings
from layout_analyzer.models import ObjectDescribe


def _field_instance(name: str, ui_behavior: str = "none") -> Dict[str, Any]:
    return {
        "fieldInstance": {
            "fieldItem": f"Record.{name}",
            "fieldInstanceProperties": [{"name": "uiBehavior", "value": ui_behavior}],
        }
    }


@pytest.fixture
def describe_payload() -> Dict[str, Any]:
    """Return a representative Account describe payload."""
    return {
        "name": "Account",
        "label": "Account",
        "fields": [
            {
                "name": "Name",
                "label": "Account Name",
                "type": "string",
                "length": 255,
                "nillable": False,
                "updateable": True,
            },
            {
                "name": "Industry",
                "label": "Industry",
                "type": "picklist",
                "length": 255,
                "nillable": True,
                "updateable": True,
                "inlineHelpText": "Primary industry",
                "picklistValues": [
                    {"value": "Agriculture", "label": "Agriculture", "active": True},
                    {"value": "Banking", "label": "Banking", "active": True},
                ],
            },
            {
                "name": "Rating",
                "label": "Rating",
                "type": "picklist",
                "length": 255,
                "nillable": True,
                "updateable": True,
                "picklistValues": [
                    {"value": "Hot"},
                    {"value": "Warm"},
                    {"value": "Cold"},
                ],
            },
            {
                "name": "Status",
                "label": "Status",
                "type": "picklist",
                "length": 40,
                "nillable": True,
                "updateable": True,
                "picklistValues": [{"value": "Open"}, {"value": "Closed"}],
            },
            {
                "name": "ParentId",
                "label": "Parent Account",
                "type": "reference",
                "length": 18,
                "nillable": True,
                "updateable": True,
                "referenceTo": ["Account"],
            },
            {
                "name": "AnnualRevenue",
                "label": "Annual Revenue",
                "type": "currency",
                "length": 0,
                "precision": 18,
                "scale": 2,
                "nillable": True,
                "updateable": True,
            },
            {
                "name": "CreatedDate",
                "label": "Created Date",
                "type": "datetime",
                "length": 0,
                "nillable": False,
                "updateable": False,
            },
        ],
        "recordTypeInfos": [
            {
                "recordTypeId": "012000000000000AAA",
                "name": "Master",
                "developerName": "Master",
                "available": True,
            },
            {
                "recordTypeId": "012000000000001AAA",
                "name": "Partner",
                "developerName": "Partner",
                "available": True,
            },
            {
                "recordTypeId": "012000000000002AAA",
                "name": "Legacy",
                "developerName": "Legacy",
                "available": False,
            },
        ],
    }


@pytest.fixture
def describe(describe_payload: Dict[str, Any]) -> ObjectDescribe:
    """Return the validated Account describe."""
    return ObjectDescribe.model_validate(describe_payload)


@pytest.fixture
def classic_layout_payload() -> Dict[str, Any]:
    """Return a describe-shaped classic page layout."""
    return {
        "detailLayoutSections": [
            {
                "heading": "Account Information",
                "columns": 2,
                "useHeading": True,
                "layoutRows": [
                    {
                        "layoutItems": [
                            {
                                "required": True,
                                "layoutComponents": [{"type": "Field", "value": "Name"}],
                            },
                            {
                                "required": False,
                                "layoutComponents": [{"type": "Field", "value": "Industry"}],
                            },
                        ]
                    },
                    {
                        "layoutItems": [
                            {
                                "required": "true",
                                "layoutComponents": [{"type": "Field", "value": "Rating"}],
                            },
                            {"required": False, "layoutComponents": []},
                        ]
                    },
                ],
            },
            {
                "heading": "Additional Information",
                "columns": 1,
                "layoutRows": [
                    {
                        "layoutItems": [
                            {
                                "required": False,
                                "layoutComponents": [{"type": "Field", "value": "ParentId"}],
                            }
                        ]
                    },
                    {"layoutItems": [{"required": False, "field": "Name"}]},
                ],
            },
            {
                "heading": "Custom Links",
                "style": "CustomLinks",
                "layoutRows": [
                    {
                        "layoutItems": [
                            {"layoutComponents": [{"type": "CustomLink", "value": "Search"}]}
                        ]
                    }
                ],
            },
            {"heading": "Empty Section", "columns": 2, "layoutRows": []},
        ],
        "relatedLists": [
            {
                "name": "Contacts",
                "label": "Contacts",
                "columns": [
                    {"field": "Contact.Name", "label": "Contact Name"},
                    {"name": "Contact.Email", "label": "Email"},
                ],
            }
        ],
    }


@pytest.fixture
def tooling_layout_record() -> Dict[str, Any]:
    """Return a Tooling API ``Layout`` record with column-shaped sections."""
    return {
        "Id": "00h000000000001AAA",
        "Metadata": {
            "layoutSections": [
                {
                    "label": "Details",
                    "style": "TwoColumnsTopToBottom",
                    "layoutColumns": [
                        {
                            "layoutItems": [
                                {"field": "Name", "behavior": "Required"},
                                {"field": "Industry", "behavior": "Edit"},
                            ]
                        },
                        {"layoutItems": [{"field": "Rating", "behavior": "Edit"}]},
                    ],
                }
            ],
            "relatedLists": [
                {"relatedList": "Opportunities__r", "fields": ["NAME", "STAGE_NAME"]}
            ],
        },
    }


@pytest.fixture
def flexi_page_metadata() -> Dict[str, Any]:
    """Return Lightning record page metadata with facet-referenced columns."""
    return {
        "flexiPageRegions": [
            {
                "name": "main",
                "type": "Region",
                "itemInstances": [
                    {
                        "componentInstance": {
                            "componentName": "flexipage:fieldSection",
                            "componentInstanceProperties": [
                                {"name": "columns", "value": "Facet-cols"},
                                {"name": "horizontalAlignment", "value": False},
                                {"name": "label", "value": "@@@SFDCAccount_InformationSFDC@@@"},
                            ],
                        }
                    },
                    {
                        "componentInstance": {
                            "componentName": "lst:dynamicRelatedList",
                            "componentInstanceProperties": [
                                {"name": "relatedListApiName", "value": "Contacts"},
                                {
                                    "name": "relatedListFieldAliases",
                                    "valueList": {
                                        "valueListItems": [
                                            {"value": "NAME"},
                                            {"value": "Job_Title__c"},
                                        ]
                                    },
                                },
                            ],
                        }
                    },
                    {
                        "componentInstance": {
                            "componentName": "force:relatedListSingleContainer",
                            "componentInstanceProperties": [
                                {"name": "relatedListApiName", "value": "Related_Cases__r"}
                            ],
                        }
                    },
                ],
            },
            {
                "name": "Facet-cols",
                "type": "Facet",
                "itemInstances": [
                    {
                        "componentInstance": {
                            "componentName": "flexipage:column",
                            "componentInstanceProperties": [
                                {"name": "body", "value": "Facet-left"}
                            ],
                        }
                    },
                    {
                        "componentInstance": {
                            "componentName": "flexipage:column",
                            "componentInstanceProperties": [
                                {"name": "body", "value": "Facet-right"}
                            ],
                        }
                    },
                ],
            },
            {
                "name": "Facet-left",
                "type": "Facet",
                "itemInstances": [
                    _field_instance("Name", "required"),
                    _field_instance("Industry"),
                    _field_instance("Status"),
                ],
            },
            {
                "name": "Facet-right",
                "type": "Facet",
                "itemInstances": [
                    _field_instance("Rating", "readonly"),
                    _field_instance("Name"),
                ],
            },
        ]
    }


@pytest.fixture
def flexi_page_record(flexi_page_metadata: Dict[str, Any]) -> Dict[str, Any]:
    """Return a Tooling ``FlexiPage`` record carrying its metadata as a JSON string."""
    return {
        "Id": "0M0000000000001AAA",
        "DeveloperName": "Account_Record_Page",
        "Metadata": json.dumps(flexi_page_metadata),
    }


@pytest.fixture
def record_detail_page() -> Dict[str, Any]:
    """Return a Lightning page that defers to the page layout."""
    return {
        "flexiPageRegions": [
            {
                "name": "main",
                "itemInstances": [
                    {
                        "componentInstance": {
                            "componentName": "force:recordDetail",
                            "componentInstanceProperties": [],
                        }
                    }
                ],
            }
        ]
    }


@pytest.fixture
def layouts_describe_payload(classic_layout_payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return a ``describe/layouts`` payload with record-type mappings."""
    return {
        "layouts": [dict(classic_layout_payload, id="00h000000000000AAA-Account Layout")],
        "recordTypeMappings": [
            {
                "recordTypeId": "012000000000000AAA",
                "recordTypeName": "Master",
                "layoutId": "00h000000000000AAA",
            }
        ],
    }


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Return settings that write exports below the test directory."""
    return Settings(
        SF_INSTANCE_URL="https://example.my.salesforce.com",
        SF_SESSION_ID="session-id",
        EXPORT_DIR=str(tmp_path / "exports"),
    )
