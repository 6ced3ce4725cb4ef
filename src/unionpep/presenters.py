"""User-facing text rendering."""

from __future__ import annotations

from typing import Any

from .constants import ERROR_PREFIX, OUTLINE_INDENT, WARNING_PREFIX
from .models import (
    CheckReport,
    CodeExample,
    DebateEntry,
    DebateTopic,
    ExampleResult,
    Finding,
    FootnoteResolution,
    GrammarRule,
    ParsedDocument,
    Section,
    Severity,
)

_LIST_SEPARATOR = " | "
_STANCE_LABELS = {
    "PRO": "PRO",
    "CON": "CON",
    "REBUTTAL": "->",
    "NOTE": "--",
}


def render_error(message: str) -> str:
    return f"{ERROR_PREFIX} {message}"


def render_warning(message: str) -> str:
    return f"{WARNING_PREFIX} {message}"


def render_document_banner(document: ParsedDocument) -> list[str]:
    number = document.preamble.get("PEP")
    title = document.preamble.get("Title")
    if number and title:
        return [f"PEP {number}: {title}"]
    if title:
        return [title]
    return ["(untitled document)"]


def render_outline(document: ParsedDocument) -> list[str]:
    rows: list[str] = []
    for number, section in enumerate(document.sections, start=1):
        _append_outline_rows(section, str(number), 0, rows)
    return rows


def outline_to_dict(document: ParsedDocument) -> dict[str, Any]:
    return {
        "preamble": dict(document.preamble.fields),
        "sections": [_section_to_dict(section) for section in document.sections],
    }


def render_section(section: Section) -> list[str]:
    lines = [line.rstrip("\r\n") for line in section.heading.raw_lines]
    lines.extend(_section_text_lines(section))
    while lines and lines[-1].strip() == "":
        lines.pop()
    return lines


def render_references(resolution: FootnoteResolution) -> list[str]:
    citations: dict[str, tuple[str, list[int]]] = {}
    for marker, target in resolution.resolved:
        entry = citations.setdefault(target.label, (target.citation, []))
        entry[1].append(marker.line)
    for target in resolution.unused:
        citations.setdefault(target.label, (target.citation, []))

    rows: list[str] = []
    for label in sorted(citations, key=int):
        citation, lines = citations[label]
        cited_at = ", ".join(str(line) for line in lines) if lines else "never cited"
        rows.append(_LIST_SEPARATOR.join((f"[{label}]", citation, f"lines {cited_at}")))

    for marker in resolution.unresolved:
        rows.append(render_error(f"[{marker.label}] at line {marker.line} is unresolved."))
    return rows


def render_grammar(rules: list[GrammarRule]) -> list[str]:
    if not rules:
        return ["(no grammar rules)"]
    width = max(len(rule.name) for rule in rules)
    return [f"{rule.name:<{width}} : {rule.rhs}" for rule in rules]


def render_examples(examples: list[CodeExample]) -> list[str]:
    rows: list[str] = []
    for example in examples:
        flags = example.block.kind.value
        if example.has_assertions:
            flags += ", assertions"
        location = " > ".join(example.section_path) or "(front matter)"
        rows.append(_LIST_SEPARATOR.join((f"line {example.line}", location, flags)))
    return rows


def render_example_results(results: list[ExampleResult]) -> list[str]:
    rows: list[str] = []
    for result in results:
        row = _LIST_SEPARATOR.join((f"line {result.example.line}", result.outcome.value))
        if result.detail:
            row = _LIST_SEPARATOR.join((row, result.detail))
        rows.append(row)
    return rows


def render_debate(topics: list[DebateTopic]) -> list[str]:
    lines: list[str] = []
    for topic in topics:
        if lines:
            lines.append("")
        lines.append(topic.title)
        for entry in topic.entries:
            _append_debate_rows(entry, 1, lines)
    return lines


def render_findings(findings: list[Finding]) -> list[str]:
    rows: list[str] = []
    for finding in findings:
        location = f"line {finding.line}: " if finding.line is not None else ""
        message = f"[{finding.check}] {location}{finding.message}"
        if finding.severity is Severity.ERROR:
            rows.append(render_error(message))
        else:
            rows.append(render_warning(message))
    return rows


def render_check_report(report: CheckReport) -> list[str]:
    rows = render_findings(report.findings)
    status = "OK" if report.ok else "FAILED"
    rows.append(
        f"{status}: {len(report.checks_run)} checks, "
        f"{report.error_count} errors, {report.warning_count} warnings"
    )
    return rows


def _append_outline_rows(
    section: Section, number: str, depth: int, rows: list[str]
) -> None:
    rows.append(f"{OUTLINE_INDENT * depth}{number}. {section.title}")
    for index, child in enumerate(section.children, start=1):
        _append_outline_rows(child, f"{number}.{index}", depth + 1, rows)


def _section_to_dict(section: Section) -> dict[str, Any]:
    return {
        "title": section.title,
        "level": section.level,
        "line": section.heading.line,
        "children": [_section_to_dict(child) for child in section.children],
    }


def _section_text_lines(section: Section) -> list[str]:
    lines = [line.rstrip("\r\n") for line in section.body_lines]
    for child in section.children:
        lines.extend(line.rstrip("\r\n") for line in child.heading.raw_lines)
        lines.extend(_section_text_lines(child))
    return lines


def _append_debate_rows(entry: DebateEntry, depth: int, lines: list[str]) -> None:
    label = _STANCE_LABELS[entry.stance.value]
    lines.append(f"{OUTLINE_INDENT * depth}{label} {entry.text}")
    for child in entry.children:
        _append_debate_rows(child, depth + 1, lines)
