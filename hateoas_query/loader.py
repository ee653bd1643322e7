"""YAML loading for root nodes and transport fixtures.

JSON is a subset of YAML, so both formats go through ``yaml.safe_load``.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import yaml

__all__ = ["load_document", "load_fixtures"]


def load_document(text: str) -> Any:
    """Parse a YAML or JSON document; empty input yields an empty mapping."""
    data = yaml.safe_load(text)
    return {} if data is None else data


def load_fixtures(text: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Parse a fixture file for ``fixture_transport``.

    Expected shape::

        responses:
          /accounts: {items: [...]}
        actions:
          cancel: {status: cancelled}

    Returns:
        Tuple of ``(responses, actions)`` with string keys.

    Raises:
        ValueError: If the document or a section is not a mapping.
    """
    data = load_document(text)
    if not isinstance(data, dict):
        raise ValueError("Fixture file must map to a dictionary at top-level.")

    unknown = set(data) - {"responses", "actions"}
    if unknown:
        raise ValueError(f"Unknown fixture sections: {sorted(map(str, unknown))}")

    sections = []
    for section in ("responses", "actions"):
        entries = data.get(section) or {}
        if not isinstance(entries, dict):
            raise ValueError(f"'{section}' must be a mapping")
        sections.append(_string_keys(entries))
    return sections[0], sections[1]


def _string_keys(data: Dict[Any, Any]) -> Dict[str, Any]:
    """Coerce keys to strings.

    YAML 1.1 reads bare ``on``/``yes``/``off``/``no`` keys as booleans; they
    come out as ``"True"``/``"False"``. Quote such keys in fixture files.
    """
    return {str(key): value for key, value in data.items()}
