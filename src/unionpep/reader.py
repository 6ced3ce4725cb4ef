"""reStructuredText reading: preamble, headings and the section tree."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .constants import ADORNMENT_CHARS
from .errors import DocumentReadError, DocumentStructureError
from .logging_utils import log_event
from .models import Heading, ParsedDocument, Preamble, Section

_FIELD_RE = re.compile(r"^([A-Za-z][A-Za-z0-9-]*):(?:[ \t]+(.*?))?[ \t]*$")


@dataclass(frozen=True)
class _HeadingSpan:
    title: str
    style: tuple[str, bool]
    title_line: int
    first_index: int
    end_index: int


def load_document(path: Path) -> ParsedDocument:
    """Read and parse a document from disk, keeping its bytes intact."""
    try:
        raw_bytes = path.read_bytes()
    except OSError as exc:
        raise DocumentReadError(f"Failed to read document: {path}") from exc

    try:
        text = raw_bytes.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentReadError(f"Document is not valid UTF-8: {path}") from exc

    document = parse_document(text)
    document.source_path = path
    log_event(
        "document_loaded",
        document_file=str(path),
        line_count=len(text.splitlines()),
        section_count=sum(1 for _ in document.walk()),
    )
    return document


def parse_document(text: str) -> ParsedDocument:
    lines = text.splitlines(keepends=True)
    preamble = _parse_preamble(lines)
    start = len(preamble.raw_lines)

    spans = _find_headings(lines, start)
    if not spans:
        return ParsedDocument(
            source_text=text,
            preamble=preamble,
            sections=[],
            front_lines=lines[start:],
        )

    levels = _assign_levels(spans)
    sections = _build_tree(lines, spans, levels)
    return ParsedDocument(
        source_text=text,
        preamble=preamble,
        sections=sections,
        front_lines=lines[start : spans[0].first_index],
    )


def is_adornment_line(line: str) -> bool:
    stripped = line.rstrip("\r\n").rstrip(" \t")
    if not stripped or stripped[0] not in ADORNMENT_CHARS:
        return False
    return stripped == stripped[0] * len(stripped)


def _parse_preamble(lines: list[str]) -> Preamble:
    fields: list[tuple[str, str]] = []
    index = 0
    while index < len(lines):
        text = lines[index].rstrip("\r\n")
        if text.strip() == "":
            if not fields:
                break
            return Preamble(fields=fields, raw_lines=lines[: index + 1])

        match = _FIELD_RE.match(text)
        if match is not None:
            fields.append((match.group(1), match.group(2) or ""))
        elif fields and text[:1] in (" ", "\t"):
            name, value = fields[-1]
            fields[-1] = (name, f"{value} {text.strip()}".strip())
        else:
            break
        index += 1

    if fields and index == len(lines):
        return Preamble(fields=fields, raw_lines=list(lines))
    return Preamble(fields=[], raw_lines=[])


def _find_headings(lines: list[str], start: int) -> list[_HeadingSpan]:
    spans: list[_HeadingSpan] = []
    index = start
    while index < len(lines):
        if not _follows_blank(lines, index, start):
            index += 1
            continue

        overlined = _match_overline_heading(lines, index)
        if overlined is not None:
            spans.append(overlined)
            index = overlined.end_index
            continue

        underlined = _match_underline_heading(lines, index)
        if underlined is not None:
            spans.append(underlined)
            index = underlined.end_index
            continue

        index += 1
    return spans


def _follows_blank(lines: list[str], index: int, start: int) -> bool:
    if index == start:
        return True
    return lines[index - 1].strip() == ""


def _match_overline_heading(lines: list[str], index: int) -> _HeadingSpan | None:
    if index + 2 >= len(lines):
        return None
    overline = lines[index].rstrip("\r\n").rstrip()
    underline = lines[index + 2].rstrip("\r\n").rstrip()
    if not is_adornment_line(overline) or overline != underline:
        return None

    title = lines[index + 1].strip()
    if is_adornment_line(title):
        return None
    if len(title) > len(overline):
        return None
    return _HeadingSpan(
        title=title,
        style=(overline[0], True),
        title_line=index + 2,
        first_index=index,
        end_index=index + 3,
    )


def _match_underline_heading(lines: list[str], index: int) -> _HeadingSpan | None:
    if index + 1 >= len(lines):
        return None
    title_raw = lines[index].rstrip("\r\n")
    if title_raw.strip() == "" or title_raw[:1] in (" ", "\t"):
        return None
    if is_adornment_line(title_raw):
        return None

    underline = lines[index + 1].rstrip("\r\n").rstrip()
    if not is_adornment_line(underline):
        return None

    title = title_raw.strip()
    if len(underline) < len(title):
        return None
    return _HeadingSpan(
        title=title,
        style=(underline[0], False),
        title_line=index + 1,
        first_index=index,
        end_index=index + 2,
    )


def _assign_levels(spans: list[_HeadingSpan]) -> list[int]:
    styles: list[tuple[str, bool]] = []
    levels: list[int] = []
    for span in spans:
        if span.style not in styles:
            styles.append(span.style)
        levels.append(styles.index(span.style) + 1)
    return levels


def _build_tree(
    lines: list[str], spans: list[_HeadingSpan], levels: list[int]
) -> list[Section]:
    roots: list[Section] = []
    stack: list[Section] = []

    for position, (span, level) in enumerate(zip(spans, levels)):
        if level > len(stack) + 1:
            raise DocumentStructureError(
                f"Heading '{span.title}' at line {span.title_line} jumps to level "
                f"{level} under level {len(stack)}."
            )
        del stack[level - 1 :]

        body_end = (
            spans[position + 1].first_index if position + 1 < len(spans) else len(lines)
        )
        heading = Heading(
            title=span.title,
            char=span.style[0],
            overline=span.style[1],
            level=level,
            line=span.title_line,
            raw_lines=lines[span.first_index : span.end_index],
        )
        siblings = stack[-1].children if stack else roots
        parent_path = stack[-1].path if stack else ()
        section = Section(
            heading=heading,
            body_lines=lines[span.end_index : body_end],
            body_start_line=span.end_index + 1,
            ordinal=len(siblings),
            path=parent_path + (span.title,),
        )
        siblings.append(section)
        stack.append(section)

    return roots
