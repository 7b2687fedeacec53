"""Helpers for reading loosely-shaped metadata payloads."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

LOGGER = logging.getLogger(__name__)


def as_list(value: Any) -> List[Any]:
    """Return ``value`` if it is a list, otherwise an empty list."""
    return value if isinstance(value, list) else []


def as_dict(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a dict, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def as_text(value: Any) -> Optional[str]:
    """Return ``value`` if it is a non-empty string, otherwise None."""
    if isinstance(value, str) and value:
        return value
    return None


def decode_metadata(payload: Any, key: str = "Metadata") -> Optional[Dict[str, Any]]:
    """Unwrap and decode a metadata payload.

    Tooling API records carry their metadata under ``key`` either as an object
    or as a JSON-encoded string. Payloads without ``key`` are treated as the
    metadata itself. Returns None when nothing decodable is found.
    """
    if isinstance(payload, str):
        payload = _loads(payload)
    if not isinstance(payload, dict):
        return None

    if key in payload:
        inner = payload[key]
        if isinstance(inner, str):
            inner = _loads(inner)
        return inner if isinstance(inner, dict) else None
    return payload


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as exc:
        LOGGER.warning("Metadata payload is not valid JSON: %s", exc)
        return None
    except RecursionError:
        LOGGER.warning("Metadata payload is nested too deeply to decode.")
        return None
