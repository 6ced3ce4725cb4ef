"""Pytest configuration and fixtures for unionpep tests."""

import logging
import textwrap

import pytest

from unionpep.contract import load_contract
from unionpep.path_mapping import bundled_document_path
from unionpep.reader import load_document, parse_document


@pytest.fixture(autouse=True)
def _reset_logging():
    """setup_logging() reconfigures the root logger and may disable logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging.disable(logging.NOTSET)


@pytest.fixture
def bundled_document():
    """The proposal shipped with the package."""
    return load_document(bundled_document_path())


@pytest.fixture
def contract():
    """The bundled document contract."""
    return load_contract()


@pytest.fixture
def make_document():
    """Parse dedented reStructuredText."""

    def _make(text: str):
        return parse_document(textwrap.dedent(text).lstrip("\n"))

    return _make


@pytest.fixture
def minimal_rst():
    """A small, fully valid document following the bundled contract."""
    return textwrap.dedent(
        """\
        PEP: 9999
        Title: Tiny proposal

        Motivation
        ==========

        Unions are verbose [1]_.

        Proposal
        ========

        Strong proposition
        ------------------

        The grammar is::

            type_expr: NAME ('|' NAME)*

        Optional proposition 1
        ----------------------

        Use a question mark::

            x: int?

        Optional proposition 2: use a tilde.

        Examples
        ========

        Assertions::

            assert int | str == int | str

        Incompatible changes
        ====================

        None.

        Dissenting Opinion
        ==================

        Keep it
        -------

        * PRO: Works today.

          * *Verbose.*

        Reference Implementation
        ========================

        None yet.

        References
        ==========

        .. [1] A reference.

        Copyright
        =========

        Public domain.
        """
    )


@pytest.fixture
def minimal_contract():
    """Bundled contract, but expecting only footnote [1]."""
    from unionpep.contract import contract_from_dict

    return contract_from_dict(
        {
            "leading_sections": ["Motivation", "Proposal"],
            "section_order": [
                "Motivation",
                "Proposal",
                "Examples",
                "Incompatible changes",
                "Dissenting Opinion",
                "Reference Implementation",
                "References",
                "Copyright",
            ],
            "proposal_section": "Proposal",
            "labeled_propositions": ["Strong proposition", "Optional proposition 1"],
            "inline_propositions": ["Optional proposition 2"],
            "debate_section": "Dissenting Opinion",
            "references_section": "References",
            "expected_footnotes": ["1"],
        }
    )
