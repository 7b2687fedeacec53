"""Salesforce page layout and Lightning page analyzer."""

from importlib import metadata


def get_version() -> str:
    """Return the installed package version."""
    try:
        return metadata.version("sf-layout-analyzer")
    except metadata.PackageNotFoundError:
        return "0.1.0"


__all__ = ["get_version"]
