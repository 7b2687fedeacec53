"""Custom exceptions for the Layout Analyzer application."""


class SalesforceClientError(Exception):
    """Base exception for Salesforce client failures."""


class SalesforceAuthenticationError(SalesforceClientError):
    """Raised when Salesforce rejects the session."""


class SalesforceRateLimitError(SalesforceClientError):
    """Raised when Salesforce keeps throttling requests despite retries."""


class SalesforceNotFoundError(SalesforceClientError):
    """Raised when a requested Salesforce resource could not be found."""


class LayoutTypeError(ValueError):
    """Raised for a layout type other than ``Layout`` or ``FlexiPage``."""


class ExportError(Exception):
    """Raised when an export file cannot be rendered."""
