"""Re-serialization of a parsed document."""

from __future__ import annotations

from pathlib import Path

from .errors import DocumentWriteError
from .models import ParsedDocument, Section


def serialize(document: ParsedDocument) -> str:
    """Re-emit the document text in document order."""
    parts: list[str] = []
    parts.extend(document.preamble.raw_lines)
    parts.extend(document.front_lines)
    for section in document.sections:
        _emit_section(section, parts)
    return "".join(parts)


def is_round_trip_stable(document: ParsedDocument) -> bool:
    return serialize(document) == document.source_text


def write_document(document: ParsedDocument, output_path: Path) -> None:
    """Write the serialized document as UTF-8 without newline translation."""
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(serialize(document).encode("utf-8"))
    except OSError as exc:
        raise DocumentWriteError(f"Failed to write document: {output_path}") from exc


def _emit_section(section: Section, parts: list[str]) -> None:
    parts.extend(section.heading.raw_lines)
    parts.extend(section.body_lines)
    for child in section.children:
        _emit_section(child, parts)
