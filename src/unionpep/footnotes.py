"""Footnote and hyperlink reference resolution."""

from __future__ import annotations

import re

from .literal_blocks import literal_line_numbers
from .models import (
    FootnoteMarker,
    FootnoteResolution,
    FootnoteTarget,
    HyperlinkReference,
    HyperlinkTarget,
    ParsedDocument,
)

_MARKER_RE = re.compile(r"\[(\d+)\]_")
_TARGET_RE = re.compile(r"^\.\.\s+\[(\d+)\]\s*(.*)$")
_LINK_TARGET_RE = re.compile(r"^\.\.\s+_([^:]+|`[^`]+`):\s*(\S*)\s*$")
_LINK_REFERENCE_RE = re.compile(r"(?<![`\w])`([^`<>]+)`_(?!_)")
_INLINE_LITERAL_RE = re.compile(r"``.+?``")


def collect_markers(document: ParsedDocument) -> list[FootnoteMarker]:
    markers: list[FootnoteMarker] = []
    for section_path, line_number, text in _iter_prose_lines(document):
        if _TARGET_RE.match(text.lstrip()):
            continue
        for match in _MARKER_RE.finditer(_strip_inline_literals(text)):
            markers.append(
                FootnoteMarker(
                    label=match.group(1), line=line_number, section_path=section_path
                )
            )
    return markers


def collect_targets(document: ParsedDocument) -> list[FootnoteTarget]:
    targets: list[FootnoteTarget] = []
    for section_path, first_line, raw_lines in document.regions():
        texts = [line.rstrip("\r\n") for line in raw_lines]
        index = 0
        while index < len(texts):
            match = _TARGET_RE.match(texts[index])
            if match is None:
                index += 1
                continue

            citation_parts = [match.group(2).strip()]
            line_number = first_line + index
            index += 1
            while index < len(texts) and texts[index][:1] in (" ", "\t"):
                citation_parts.append(texts[index].strip())
                index += 1
            targets.append(
                FootnoteTarget(
                    label=match.group(1),
                    citation=" ".join(part for part in citation_parts if part),
                    line=line_number,
                    section_path=section_path,
                )
            )
    return targets


def collect_hyperlinks(
    document: ParsedDocument,
) -> tuple[list[HyperlinkTarget], list[HyperlinkReference]]:
    targets: list[HyperlinkTarget] = []
    references: list[HyperlinkReference] = []
    for section_path, line_number, text in _iter_prose_lines(document):
        target = _LINK_TARGET_RE.match(text)
        if target is not None:
            targets.append(
                HyperlinkTarget(
                    name=_normalize_link_name(target.group(1).strip("`")),
                    url=target.group(2),
                    line=line_number,
                )
            )
            continue
        for match in _LINK_REFERENCE_RE.finditer(_strip_inline_literals(text)):
            references.append(
                HyperlinkReference(
                    name=_normalize_link_name(match.group(1)),
                    line=line_number,
                    section_path=section_path,
                )
            )
    return targets, references


def unresolved_hyperlinks(document: ParsedDocument) -> list[HyperlinkReference]:
    targets, references = collect_hyperlinks(document)
    known = {target.name for target in targets}
    return [reference for reference in references if reference.name not in known]


def resolve_footnotes(
    document: ParsedDocument, references_title: str
) -> FootnoteResolution:
    markers = collect_markers(document)
    targets = collect_targets(document)

    by_label: dict[str, FootnoteTarget] = {}
    duplicates: list[FootnoteTarget] = []
    for target in targets:
        if target.label in by_label:
            duplicates.append(target)
        else:
            by_label[target.label] = target

    in_references = {
        label: target
        for label, target in by_label.items()
        if target.section_path and target.section_path[-1] == references_title
    }
    misplaced = [target for target in by_label.values() if target.label not in in_references]

    # A marker resolves only to an entry inside the references section.
    resolved: list[tuple[FootnoteMarker, FootnoteTarget]] = []
    unresolved: list[FootnoteMarker] = []
    for marker in markers:
        target = in_references.get(marker.label)
        if target is None:
            unresolved.append(marker)
        else:
            resolved.append((marker, target))

    used_labels = {marker.label for marker in markers}
    unused = [target for target in by_label.values() if target.label not in used_labels]

    return FootnoteResolution(
        resolved=resolved,
        unresolved=unresolved,
        unused=unused,
        duplicates=duplicates,
        misplaced=misplaced,
    )


def _iter_prose_lines(document: ParsedDocument):
    literal_lines = literal_line_numbers(document)
    for section_path, first_line, raw_lines in document.regions():
        for offset, raw_line in enumerate(raw_lines):
            line_number = first_line + offset
            if line_number in literal_lines:
                continue
            yield section_path, line_number, raw_line.rstrip("\r\n")


def _strip_inline_literals(text: str) -> str:
    return _INLINE_LITERAL_RE.sub("", text)


def _normalize_link_name(name: str) -> str:
    return " ".join(name.split()).lower()
