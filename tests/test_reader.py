"""Tests for reader module."""

from pathlib import Path

import pytest

from unionpep.errors import DocumentReadError, DocumentStructureError
from unionpep.reader import is_adornment_line, load_document, parse_document


class TestPreamble:
    """Test PEP preamble parsing."""

    def test_preamble_fields_are_read_in_order(self, make_document):
        document = make_document(
            """
            PEP: 604
            Title: Complementary syntax
            Author: Someone
              <someone@example.org>

            Motivation
            ==========
            """
        )

        assert document.preamble.fields == [
            ("PEP", "604"),
            ("Title", "Complementary syntax"),
            ("Author", "Someone <someone@example.org>"),
        ]
        assert document.preamble.get("title") == "Complementary syntax"
        assert document.preamble.raw_lines[-1] == "\n"

    def test_document_without_preamble(self, make_document):
        document = make_document(
            """
            Motivation
            ==========

            Text.
            """
        )

        assert document.preamble.fields == []
        assert document.preamble.raw_lines == []
        assert document.top_level_titles() == ["Motivation"]

    def test_unterminated_field_run_is_not_a_preamble(self):
        document = parse_document("Note: this is prose\nthat continues\n")

        assert document.preamble.fields == []
        assert document.sections == []
        assert document.front_lines == ["Note: this is prose\n", "that continues\n"]


class TestHeadings:
    """Test heading detection and hierarchy."""

    def test_levels_follow_first_appearance_of_styles(self, make_document):
        document = make_document(
            """
            Top
            ###

            Sub
            ***

            Subsub
            ~~~~~~

            Second top
            ##########
            """
        )

        top, second = document.sections
        assert top.level == 1
        assert top.children[0].level == 2
        assert top.children[0].children[0].title == "Subsub"
        assert top.children[0].children[0].level == 3
        assert second.title == "Second top"
        assert second.ordinal == 1

    def test_overline_heading_is_distinct_style(self, make_document):
        document = make_document(
            """
            =====
            Title
            =====

            Section
            =======
            """
        )

        assert document.sections[0].heading.overline is True
        assert document.sections[0].children[0].title == "Section"
        assert document.sections[0].children[0].heading.overline is False

    def test_short_underline_is_not_a_heading(self, make_document):
        document = make_document(
            """
            Motivation
            ===

            Text.
            """
        )

        assert document.sections == []

    def test_indented_adornment_is_literal_text(self, make_document):
        document = make_document(
            """
            Section
            =======

            Example::

                Fake
                ====
            """
        )

        assert len(document.sections) == 1
        assert document.sections[0].children == []

    def test_skipped_level_raises(self, make_document):
        with pytest.raises(DocumentStructureError, match="jumps to level"):
            make_document(
                """
                One
                ===

                Two
                ---

                Back
                ====

                Three
                ~~~~~

                Four
                ----
                """
            )

    def test_section_paths_and_line_numbers(self, bundled_document):
        strong = bundled_document.find_section("Strong proposition")

        assert strong is not None
        assert strong.path == ("Proposal", "Strong proposition")
        assert strong.heading.line == 38
        assert strong.body_start_line == 40


def test_is_adornment_line():
    assert is_adornment_line("=====\n")
    assert is_adornment_line("~~~")
    assert not is_adornment_line("=-=-")
    assert not is_adornment_line("    ====")
    assert not is_adornment_line("")


def test_load_document_keeps_crlf_line_endings(tmp_path: Path):
    path = tmp_path / "doc.rst"
    path.write_bytes(b"Motivation\r\n==========\r\n\r\nText.\r\n")

    document = load_document(path)

    assert document.source_path == path
    assert document.sections[0].title == "Motivation"
    assert document.sections[0].body_lines == ["\r\n", "Text.\r\n"]


def test_load_document_missing_file(tmp_path: Path):
    with pytest.raises(DocumentReadError, match="Failed to read document"):
        load_document(tmp_path / "missing.rst")


def test_load_document_rejects_invalid_utf8(tmp_path: Path):
    path = tmp_path / "doc.rst"
    path.write_bytes(b"\xff\xfe\xfa")

    with pytest.raises(DocumentReadError, match="not valid UTF-8"):
        load_document(path)
