"""Tests for browser module."""

import pytest

from unionpep.browser import (
    COMMAND_REGISTRY,
    BrowseState,
    execute_browse_command,
    parse_browse_line,
    render_help_text,
    resolve_section,
    run_browser,
)
from unionpep.errors import UsageError


@pytest.fixture
def state(bundled_document, contract):
    return BrowseState(document=bundled_document, contract=contract)


def _scripted(lines):
    inputs = iter(lines)

    def read_line(prompt):
        try:
            return next(inputs)
        except StopIteration:
            raise EOFError from None

    return read_line


class TestParseBrowseLine:
    """Test browse line tokenizing."""

    def test_command_is_lowercased(self):
        assert parse_browse_line("SHOW 2.1") == ("show", ["2.1"])

    def test_quoted_arguments(self):
        assert parse_browse_line('show "Optional proposition 1"') == (
            "show",
            ["Optional proposition 1"],
        )

    def test_hash_is_not_a_comment(self):
        assert parse_browse_line("show #1") == ("show", ["#1"])

    def test_blank_line(self):
        assert parse_browse_line("   ") == ("", [])

    def test_unbalanced_quotes(self):
        with pytest.raises(UsageError, match="Invalid command syntax"):
            parse_browse_line('show "open')


class TestResolveSection:
    """Test section lookup by number and title."""

    def test_by_number(self, bundled_document):
        assert resolve_section(bundled_document, "2.1").title == "Strong proposition"
        assert resolve_section(bundled_document, "5.4.").title == (
            "Use ``~`` for optional types"
        )

    def test_by_title(self, bundled_document):
        assert resolve_section(bundled_document, "  references ").title == "References"

    @pytest.mark.parametrize("selector", ["0", "2.9", "..", "Nowhere"])
    def test_no_match(self, bundled_document, selector):
        with pytest.raises(UsageError, match="No section matches"):
            resolve_section(bundled_document, selector)


class TestExecuteBrowseCommand:
    """Test command dispatch."""

    def test_ls(self, state):
        result = execute_browse_command("ls", state)

        assert result.lines[0] == "1. Motivation"
        assert result.exit is False

    def test_show(self, state):
        result = execute_browse_command("show 7", state)

        assert result.lines[:2] == ["References", "=========="]

    def test_refs(self, state):
        assert len(execute_browse_command("refs", state).lines) == 6

    def test_grammar(self, state):
        lines = execute_browse_command("grammar", state).lines

        assert lines[-1].startswith("subscript_type    : NAME '['")

    def test_examples(self, state):
        assert len(execute_browse_command("examples", state).lines) == 9

    def test_debate(self, state):
        assert execute_browse_command("debate", state).lines[0] == "Keep ``Union[]`` only"

    def test_check(self, state):
        assert execute_browse_command("check", state).lines == [
            "OK: 10 checks, 0 errors, 0 warnings"
        ]

    def test_exit_and_quit(self, state):
        for command in ("exit", "QUIT"):
            result = execute_browse_command(command, state)
            assert result.lines == ["Exiting."]
            assert result.exit is True

    def test_empty_line(self, state):
        assert execute_browse_command("", state).lines == []

    def test_unknown_command(self, state):
        with pytest.raises(UsageError, match="Unknown command: frobnicate"):
            execute_browse_command("frobnicate", state)

    @pytest.mark.parametrize("line", ["ls extra", "refs x", "check now", "show"])
    def test_usage_errors(self, state, line):
        with pytest.raises(UsageError, match="Usage:"):
            execute_browse_command(line, state)

    def test_debate_section_missing(self, state, make_document):
        missing = BrowseState(
            document=make_document("Motivation\n==========\n"),
            contract=state.contract,
        )

        with pytest.raises(UsageError, match="'Dissenting Opinion' is missing"):
            execute_browse_command("debate", missing)


def test_help_lists_every_command():
    lines = render_help_text()

    assert lines[0] == "Available commands:"
    for handler in COMMAND_REGISTRY.values():
        assert any(handler.summary in line for line in lines)
    assert lines[-1].strip().startswith("exit / quit")


def test_run_browser_until_exit(state, capsys):
    exit_code = run_browser(state, read_line=_scripted(["ls", "bogus", "exit", "ls"]))

    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.startswith("PEP 604: Complementary syntax for Union[]\n")
    assert "ERROR: Unknown command: bogus. Type 'help' for commands." in out
    assert out.count("1. Motivation") == 1
    assert out.rstrip().endswith("Exiting.")


def test_run_browser_ends_on_eof(state, capsys):
    assert run_browser(state, read_line=_scripted([])) == 0


def test_run_browser_survives_keyboard_interrupt(state, capsys):
    calls = iter([KeyboardInterrupt, "ls", EOFError])

    def read_line(prompt):
        item = next(calls)
        if isinstance(item, type) and issubclass(item, BaseException):
            raise item
        return item

    assert run_browser(state, read_line=read_line) == 0
    assert "1. Motivation" in capsys.readouterr().out
