"""Tests for checks module."""

import logging

import pytest

from unionpep.checks import (
    CHECKS,
    check_debate,
    check_footnotes,
    check_grammar,
    check_headings,
    check_hyperlinks,
    check_literal_syntax,
    check_propositions,
    check_round_trip,
    check_section_order,
    find_inline_proposition,
    run_checks,
)
from unionpep.models import Severity
from unionpep.reader import parse_document


def _messages(findings):
    return [finding.message for finding in findings]


def test_check_ids_are_unique_and_ordered():
    assert [check_id for check_id, _ in CHECKS] == [
        "heading-nonempty",
        "section-order",
        "propositions",
        "footnotes",
        "hyperlinks",
        "literal-syntax",
        "grammar",
        "debate",
        "examples",
        "round-trip",
    ]


def test_bundled_document_has_no_findings(bundled_document, contract):
    report = run_checks(bundled_document, contract)

    assert report.findings == []
    assert report.ok
    assert len(report.checks_run) == 10


def test_minimal_document_has_no_findings(minimal_rst, minimal_contract):
    report = run_checks(parse_document(minimal_rst), minimal_contract)

    assert report.findings == []


def test_run_checks_logs_each_check(bundled_document, contract, caplog):
    caplog.set_level(logging.INFO, logger="unionpep")

    run_checks(bundled_document, contract)

    messages = [record.getMessage() for record in caplog.records]
    assert sum('"event":"check_completed"' in message for message in messages) == 10
    assert any('"event":"checks_finished"' in message for message in messages)


class TestSectionOrder:
    """Top-level section order against the contract."""

    def test_swapped_leading_sections(self, minimal_rst, minimal_contract):
        text = minimal_rst.replace("Motivation\n==========", "Placeholder\n===========")
        text = text.replace("Proposal\n========", "Motivation\n==========", 1)
        text = text.replace("Placeholder\n===========", "Proposal\n========")
        findings = check_section_order(parse_document(text), minimal_contract)

        assert _messages(findings) == [
            "Document must open with 'Motivation', 'Proposal'; found 'Proposal', 'Motivation'.",
            "Top-level sections are out of order: 'Proposal', 'Motivation', 'Examples', "
            "'Incompatible changes', 'Dissenting Opinion', 'Reference Implementation', "
            "'References', 'Copyright'.",
        ]

    def test_missing_and_unexpected_sections(self, minimal_rst, minimal_contract):
        text = minimal_rst.replace("Copyright\n=========", "License\n=======")
        findings = check_section_order(parse_document(text), minimal_contract)

        assert _messages(findings) == [
            "Missing top-level sections: 'Copyright'.",
            "Unexpected top-level sections: 'License'.",
        ]

    def test_duplicate_section(self, minimal_rst, minimal_contract):
        text = minimal_rst + "\nCopyright\n=========\n\nAgain.\n"
        findings = check_section_order(parse_document(text), minimal_contract)

        assert "Top-level section 'Copyright' appears 2 times." in _messages(findings)


class TestPropositions:
    """Labeled and inline propositions of the proposal."""

    def test_bundled_inline_proposition_line(self, bundled_document):
        proposal = bundled_document.find_section("Proposal")

        assert find_inline_proposition(proposal, "Optional proposition 2") == 83

    def test_missing_inline_proposition(self, minimal_rst, minimal_contract):
        text = minimal_rst.replace("Optional proposition 2: use a tilde.", "Use a tilde.")
        findings = check_propositions(parse_document(text), minimal_contract)

        assert _messages(findings) == [
            "Inline proposition 'Optional proposition 2' is missing from 'Proposal'."
        ]

    def test_inline_proposition_title_must_end_at_a_word_boundary(
        self, minimal_rst, minimal_contract
    ):
        text = minimal_rst.replace(
            "Optional proposition 2: use a tilde.", "Optional proposition 20: use a tilde."
        )
        findings = check_propositions(parse_document(text), minimal_contract)

        assert _messages(findings) == [
            "Inline proposition 'Optional proposition 2' is missing from 'Proposal'."
        ]

    def test_extra_labeled_proposition(self, minimal_rst, minimal_contract):
        text = minimal_rst.replace(
            "Examples\n========",
            "Optional proposition 3\n----------------------\n\nMore.\n\nExamples\n========",
        )
        findings = check_propositions(parse_document(text), minimal_contract)

        assert len(findings) == 1
        assert "found 'Strong proposition', 'Optional proposition 1', 'Optional proposition 3'" in (
            findings[0].message
        )

    def test_missing_proposal_section(self, make_document, minimal_contract):
        document = make_document(
            """
            Motivation
            ==========
            """
        )

        assert _messages(check_propositions(document, minimal_contract)) == [
            "Section 'Proposal' is missing."
        ]


def test_empty_heading_is_reported(make_document, minimal_contract):
    document = make_document(
        """
        Motivation
        ==========

        ==========

        ==========
        """
    )

    findings = check_headings(document, minimal_contract)

    assert _messages(findings) == ["Section heading is empty."]


def test_footnote_problems(minimal_rst, minimal_contract):
    text = minimal_rst.replace("Unions are verbose [1]_.", "Unions are verbose [2]_.")
    findings = check_footnotes(parse_document(text), minimal_contract)

    assert [(finding.severity, finding.message) for finding in findings] == [
        (Severity.ERROR, "Footnote [2] has no entry in 'References'."),
        (Severity.WARNING, "Reference [1] is never cited."),
        (Severity.ERROR, "Expected footnote [1] is not cited and resolved."),
    ]


def test_cited_footnote_outside_references_is_an_error(minimal_rst, minimal_contract):
    text = minimal_rst.replace("\n.. [1] A reference.\n", "\n").replace(
        "None yet.\n", "None yet.\n\n.. [1] A reference.\n"
    )
    findings = check_footnotes(parse_document(text), minimal_contract)

    assert [(finding.severity, finding.message) for finding in findings] == [
        (Severity.ERROR, "Footnote [1] has no entry in 'References'."),
        (Severity.ERROR, "Reference [1] is outside 'References'."),
        (Severity.ERROR, "Expected footnote [1] is not cited and resolved."),
    ]
    assert findings[0].line == 7


def test_unresolved_hyperlink(minimal_rst, minimal_contract):
    text = minimal_rst.replace("Unions are verbose", "See `PEP 484`_. Unions are verbose")
    findings = check_hyperlinks(parse_document(text), minimal_contract)

    assert _messages(findings) == ["Hyperlink 'pep 484' has no target."]
    assert findings[0].line == 7


def test_malformed_literal_block(minimal_rst, minimal_contract):
    text = minimal_rst.replace("    x: int?", "    x: List[int?")
    findings = check_literal_syntax(parse_document(text), minimal_contract)

    assert [(finding.check, finding.line) for finding in findings] == [("literal-syntax", 24)]


@pytest.mark.parametrize(
    ("replacement", "message"),
    [
        ("    type_expr: NAME ('|' atom)*", "Rule 'type_expr' references undefined 'atom'."),
        ("    type_expr NAME", "Line 17 is not a grammar production: type_expr NAME"),
    ],
)
def test_grammar_problems(minimal_rst, minimal_contract, replacement, message):
    text = minimal_rst.replace("    type_expr: NAME ('|' NAME)*", replacement)
    findings = check_grammar(parse_document(text), minimal_contract)

    assert _messages(findings) == [message]


def test_missing_grammar_is_a_warning(minimal_rst, minimal_contract):
    text = minimal_rst.replace("The grammar is::", "The syntax is::")
    findings = check_grammar(parse_document(text), minimal_contract)

    assert [(finding.severity, finding.message) for finding in findings] == [
        (Severity.WARNING, "Document has no grammar listing.")
    ]


def test_debate_without_topics(minimal_rst, minimal_contract):
    text = minimal_rst.replace("Keep it\n-------\n", "")
    text = text.replace("* PRO: Works today.\n\n  * *Verbose.*\n", "Nothing yet.\n")
    findings = check_debate(parse_document(text), minimal_contract)

    assert _messages(findings) == ["'Dissenting Opinion' has no alternative proposals."]


def test_failing_example_fails_the_report(minimal_rst, minimal_contract):
    text = minimal_rst.replace("assert int | str == int | str", "assert int | str == int")
    report = run_checks(parse_document(text), minimal_contract)

    assert not report.ok
    assert [finding.check for finding in report.findings] == ["examples"]
    assert report.findings[0].line == 33


def test_round_trip_check(bundled_document, contract):
    assert check_round_trip(bundled_document, contract) == []

    bundled_document.sections[-1].body_lines.pop()

    assert _messages(check_round_trip(bundled_document, contract)) == [
        "Re-serialized text differs from the source."
    ]
