"""Structural checks over a parsed document."""

from __future__ import annotations

import logging
import re
from typing import Callable

from . import debate, grammar
from .errors import GrammarSyntaxError
from .examples_runner import run_examples
from .footnotes import resolve_footnotes, unresolved_hyperlinks
from .literal_blocks import find_literal_blocks, grammar_blocks
from .logging_utils import log_event
from .models import (
    BlockKind,
    CheckReport,
    DocumentContract,
    ExampleOutcome,
    Finding,
    ParsedDocument,
    Section,
    Severity,
)
from .writer import is_round_trip_stable

CheckFunction = Callable[[ParsedDocument, DocumentContract], list[Finding]]


def _error(check: str, message: str, line: int | None = None) -> Finding:
    return Finding(check=check, severity=Severity.ERROR, message=message, line=line)


def _warning(check: str, message: str, line: int | None = None) -> Finding:
    return Finding(check=check, severity=Severity.WARNING, message=message, line=line)


def check_headings(document: ParsedDocument, contract: DocumentContract) -> list[Finding]:
    return [
        _error("heading-nonempty", "Section heading is empty.", section.heading.line)
        for section in document.walk()
        if not section.title.strip()
    ]


def check_section_order(
    document: ParsedDocument, contract: DocumentContract
) -> list[Finding]:
    findings: list[Finding] = []
    titles = document.top_level_titles()

    for title in sorted(set(titles)):
        count = titles.count(title)
        if count > 1:
            findings.append(
                _error("section-order", f"Top-level section '{title}' appears {count} times.")
            )

    leading = contract.leading_sections
    if titles[: len(leading)] != leading:
        findings.append(
            _error(
                "section-order",
                "Document must open with "
                f"{_quote_list(leading)}; found {_quote_list(titles[: len(leading)])}.",
            )
        )

    expected = contract.section_order
    if expected and titles != expected:
        missing = [title for title in expected if title not in titles]
        unexpected = [title for title in titles if title not in expected]
        if missing:
            findings.append(
                _error("section-order", f"Missing top-level sections: {_quote_list(missing)}.")
            )
        if unexpected:
            findings.append(
                _error(
                    "section-order",
                    f"Unexpected top-level sections: {_quote_list(unexpected)}.",
                )
            )
        if not missing and not unexpected:
            findings.append(
                _error(
                    "section-order",
                    f"Top-level sections are out of order: {_quote_list(titles)}.",
                )
            )
    return findings


def check_propositions(
    document: ParsedDocument, contract: DocumentContract
) -> list[Finding]:
    proposal = _top_level(document, contract.proposal_section)
    if proposal is None:
        return [
            _error("propositions", f"Section '{contract.proposal_section}' is missing.")
        ]

    findings: list[Finding] = []
    labeled = [child.title for child in proposal.children]
    if labeled != contract.labeled_propositions:
        findings.append(
            _error(
                "propositions",
                f"'{proposal.title}' must hold exactly "
                f"{_quote_list(contract.labeled_propositions)}; found {_quote_list(labeled)}.",
                proposal.heading.line,
            )
        )

    for title in contract.inline_propositions:
        if find_inline_proposition(proposal, title) is None:
            findings.append(
                _error(
                    "propositions",
                    f"Inline proposition '{title}' is missing from '{proposal.title}'.",
                    proposal.heading.line,
                )
            )
    return findings


def find_inline_proposition(proposal: Section, title: str) -> int | None:
    """Line number of the paragraph that opens with ``title``, if any."""
    opener = re.compile(re.escape(title) + r"(?!\w)")
    for section in proposal.walk():
        previous_blank = True
        for line_number, text in section.iter_body_lines():
            if previous_blank and text[:1] not in (" ", "\t") and opener.match(text):
                return line_number
            previous_blank = text.strip() == ""
    return None


def check_footnotes(document: ParsedDocument, contract: DocumentContract) -> list[Finding]:
    references = contract.references_section
    resolution = resolve_footnotes(document, references)
    findings: list[Finding] = []

    for marker in resolution.unresolved:
        findings.append(
            _error(
                "footnotes",
                f"Footnote [{marker.label}] has no entry in '{references}'.",
                marker.line,
            )
        )
    for target in resolution.duplicates:
        findings.append(
            _error("footnotes", f"Reference [{target.label}] is defined twice.", target.line)
        )
    for target in resolution.unused:
        findings.append(
            _warning("footnotes", f"Reference [{target.label}] is never cited.", target.line)
        )
    for target in resolution.misplaced:
        findings.append(
            _error(
                "footnotes",
                f"Reference [{target.label}] is outside '{references}'.",
                target.line,
            )
        )

    resolved_labels = resolution.resolved_labels
    for label in contract.expected_footnotes:
        if label not in resolved_labels:
            findings.append(
                _error("footnotes", f"Expected footnote [{label}] is not cited and resolved.")
            )
    return findings


def check_hyperlinks(document: ParsedDocument, contract: DocumentContract) -> list[Finding]:
    return [
        _error("hyperlinks", f"Hyperlink '{reference.name}' has no target.", reference.line)
        for reference in unresolved_hyperlinks(document)
    ]


def check_literal_syntax(
    document: ParsedDocument, contract: DocumentContract
) -> list[Finding]:
    return [
        _error(
            "literal-syntax",
            "Literal block has unbalanced brackets or quotes.",
            block.start_line,
        )
        for block in find_literal_blocks(document)
        if block.kind is BlockKind.MALFORMED
    ]


def check_grammar(document: ParsedDocument, contract: DocumentContract) -> list[Finding]:
    blocks = grammar_blocks(document)
    if not blocks:
        return [_warning(grammar.CHECK_ID, "Document has no grammar listing.")]

    findings: list[Finding] = []
    for block in blocks:
        try:
            rules = grammar.parse_grammar(block)
        except GrammarSyntaxError as exc:
            findings.append(_error(grammar.CHECK_ID, str(exc), block.start_line))
            continue
        findings.extend(grammar.check_grammar(rules))
    return findings


def check_debate(document: ParsedDocument, contract: DocumentContract) -> list[Finding]:
    section = _top_level(document, contract.debate_section)
    if section is None:
        return [_error(debate.CHECK_ID, f"Section '{contract.debate_section}' is missing.")]

    topics = debate.parse_debate(section)
    if not topics:
        return [
            _warning(
                debate.CHECK_ID,
                f"'{section.title}' has no alternative proposals.",
                section.heading.line,
            )
        ]
    return debate.debate_findings(topics)


def check_examples(document: ParsedDocument, contract: DocumentContract) -> list[Finding]:
    return [
        _error("examples", f"Example does not evaluate: {result.detail}", result.example.line)
        for result in run_examples(document)
        if result.outcome is ExampleOutcome.FAILED
    ]


def check_round_trip(document: ParsedDocument, contract: DocumentContract) -> list[Finding]:
    if is_round_trip_stable(document):
        return []
    return [_error("round-trip", "Re-serialized text differs from the source.")]


CHECKS: list[tuple[str, CheckFunction]] = [
    ("heading-nonempty", check_headings),
    ("section-order", check_section_order),
    ("propositions", check_propositions),
    ("footnotes", check_footnotes),
    ("hyperlinks", check_hyperlinks),
    ("literal-syntax", check_literal_syntax),
    ("grammar", check_grammar),
    ("debate", check_debate),
    ("examples", check_examples),
    ("round-trip", check_round_trip),
]


def run_checks(document: ParsedDocument, contract: DocumentContract) -> CheckReport:
    report = CheckReport()
    for check_id, check in CHECKS:
        findings = check(document, contract)
        report.findings.extend(findings)
        report.checks_run.append(check_id)
        log_event(
            "check_completed",
            check=check_id,
            errors=sum(1 for f in findings if f.severity is Severity.ERROR),
            warnings=sum(1 for f in findings if f.severity is Severity.WARNING),
        )

    log_event(
        "checks_finished",
        level=logging.INFO if report.ok else logging.WARNING,
        ok=report.ok,
        errors=report.error_count,
        warnings=report.warning_count,
        checks=len(report.checks_run),
    )
    return report


def _top_level(document: ParsedDocument, title: str) -> Section | None:
    for section in document.sections:
        if section.title == title:
            return section
    return None


def _quote_list(titles: list[str]) -> str:
    if not titles:
        return "(none)"
    return ", ".join(f"'{title}'" for title in titles)
