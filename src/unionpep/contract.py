"""Document contract loading and validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .models import DocumentContract
from .path_mapping import bundled_contract_path

_STRING_FIELDS = (
    "proposal_section",
    "debate_section",
    "references_section",
)
_STRING_LIST_FIELDS = (
    "leading_sections",
    "section_order",
    "labeled_propositions",
    "inline_propositions",
    "expected_footnotes",
)


def load_contract(contract_path: Path | None = None) -> DocumentContract:
    """Load a contract file, or the bundled one when no path is given."""
    path = contract_path if contract_path is not None else bundled_contract_path()
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read contract: {path}") from exc

    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid contract JSON: {path}: {exc}") from exc

    return contract_from_dict(payload)


def contract_from_dict(payload: Any) -> DocumentContract:
    validate_contract(payload)
    return DocumentContract(
        leading_sections=list(payload["leading_sections"]),
        section_order=list(payload["section_order"]),
        proposal_section=payload["proposal_section"],
        labeled_propositions=list(payload["labeled_propositions"]),
        inline_propositions=list(payload["inline_propositions"]),
        debate_section=payload["debate_section"],
        references_section=payload["references_section"],
        expected_footnotes=[str(label) for label in payload["expected_footnotes"]],
    )


def validate_contract(payload: Any) -> None:
    """Validate contract structure.

    Raises:
        ConfigError: If a field is missing, has the wrong type, or the
            leading sections do not open the full section order.
    """
    if not isinstance(payload, dict):
        raise ConfigError("Contract must be a JSON object")

    for field_name in _STRING_FIELDS:
        _require_string_field(payload, field_name)
    for field_name in _STRING_LIST_FIELDS:
        _require_string_list_field(payload, field_name)

    unknown = sorted(set(payload) - set(_STRING_FIELDS) - set(_STRING_LIST_FIELDS))
    if unknown:
        raise ConfigError(f"Unknown contract fields: {', '.join(unknown)}")

    leading = payload["leading_sections"]
    order = payload["section_order"]
    if order and order[: len(leading)] != leading:
        raise ConfigError("leading_sections must be a prefix of section_order")
    if len(set(order)) != len(order):
        raise ConfigError("section_order must not repeat a title")

    for field_name in ("proposal_section", "debate_section", "references_section"):
        if order and payload[field_name] not in order:
            raise ConfigError(f"{field_name} must appear in section_order")

    for label in payload["expected_footnotes"]:
        if not label.isdigit():
            raise ConfigError(f"expected_footnotes entries must be numeric: {label!r}")


def _require_string_field(payload: dict[str, Any], field_name: str) -> str:
    value = payload.get(field_name)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{field_name} must be a non-empty string")
    return value


def _require_string_list_field(payload: dict[str, Any], field_name: str) -> list[str]:
    value = payload.get(field_name)
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list")
    if not all(isinstance(item, str) and item for item in value):
        raise ConfigError(f"{field_name} must be a list of non-empty strings")
    return value
