"""Demonstrate field extraction and mockups using mocked metadata."""

from __future__ import annotations

import logging

from layout_analyzer.classic_parser import ClassicLayoutParser
from layout_analyzer.exporters import FieldExporter, MockupExporter
from layout_analyzer.mockup import MockupProjector
from layout_analyzer.models import ObjectDescribe

SAMPLE_DESCRIBE = {
    "name": "Opportunity",
    "label": "Opportunity",
    "fields": [
        {"name": "Name", "label": "Opportunity Name", "type": "string", "length": 120, "nillable": False},
        {
            "name": "StageName",
            "label": "Stage",
            "type": "picklist",
            "length": 255,
            "nillable": False,
            "picklistValues": [
                {"value": "Prospecting"},
                {"value": "Negotiation"},
                {"value": "Closed Won"},
            ],
        },
        {"name": "Amount", "label": "Amount", "type": "currency", "precision": 18, "scale": 2},
        {"name": "AccountId", "label": "Account Name", "type": "reference", "referenceTo": ["Account"]},
        {"name": "CloseDate", "label": "Close Date", "type": "date", "nillable": False},
    ],
}

SAMPLE_LAYOUT = {
    "detailLayoutSections": [
        {
            "heading": "Opportunity Information",
            "layoutRows": [
                {
                    "layoutItems": [
                        {"required": True, "layoutComponents": [{"type": "Field", "value": "Name"}]},
                        {"required": True, "layoutComponents": [{"type": "Field", "value": "CloseDate"}]},
                    ]
                },
                {
                    "layoutItems": [
                        {"layoutComponents": [{"type": "Field", "value": "AccountId"}]},
                        {"required": True, "layoutComponents": [{"type": "Field", "value": "StageName"}]},
                    ]
                },
                {
                    "layoutItems": [
                        {"layoutComponents": [{"type": "Field", "value": "Amount"}]},
                        {"layoutComponents": []},
                    ]
                },
            ],
        }
    ],
    "relatedLists": [
        {
            "name": "OpportunityLineItems",
            "label": "Products",
            "columns": [{"field": "Product2.Name", "label": "Product"}],
        }
    ],
}


def main() -> None:
    """Print a vertical CSV and the clipboard mockup without calling Salesforce."""
    logging.basicConfig(level=logging.INFO)
    describe = ObjectDescribe.model_validate(SAMPLE_DESCRIBE)

    records = ClassicLayoutParser().parse(SAMPLE_LAYOUT, describe)
    print(FieldExporter().vertical_csv(records))

    view = MockupProjector().project_classic_layout(SAMPLE_LAYOUT, describe)
    print(MockupExporter().clipboard_text(view))


if __name__ == "__main__":
    main()
