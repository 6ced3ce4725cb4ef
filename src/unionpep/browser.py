"""Interactive section browser."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Callable

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from . import presenters
from .checks import run_checks
from .debate import parse_debate
from .errors import UnionPepError, UsageError
from .footnotes import resolve_footnotes
from .grammar import parse_grammar
from .literal_blocks import extract_code_examples, grammar_blocks
from .logging_utils import log_event, summarize_text
from .models import DocumentContract, ParsedDocument, Section

_PROMPT = "unionpep> "
_EXIT_COMMANDS = frozenset(("exit", "quit"))


@dataclass
class BrowseState:
    document: ParsedDocument
    contract: DocumentContract


@dataclass(frozen=True)
class BrowseResult:
    lines: list[str]
    exit: bool = False


@dataclass(frozen=True)
class BrowseCommand:
    executor: Callable[[list[str], BrowseState], list[str]]
    usage: str
    summary: str


def parse_browse_line(line: str) -> tuple[str, list[str]]:
    try:
        lexer = shlex.shlex(line, posix=True)
        lexer.whitespace_split = True
        lexer.commenters = ""
        parts = list(lexer)
    except ValueError as exc:
        raise UsageError(f"Invalid command syntax: {exc}") from exc

    if not parts:
        return "", []
    return parts[0].lower(), parts[1:]


def execute_browse_command(line: str, state: BrowseState) -> BrowseResult:
    command, args = parse_browse_line(line)
    if not command:
        return BrowseResult(lines=[])

    log_event("browse_command", command=command, args=summarize_text(" ".join(args)))
    if command in _EXIT_COMMANDS:
        return BrowseResult(lines=["Exiting."], exit=True)

    handler = COMMAND_REGISTRY.get(command)
    if handler is None:
        raise UsageError(f"Unknown command: {command}. Type 'help' for commands.")
    return BrowseResult(lines=handler.executor(args, state))


def resolve_section(document: ParsedDocument, selector: str) -> Section:
    """Find a section by outline number ("2.1") or case-insensitive title."""
    if selector.replace(".", "").isdigit():
        section = _section_by_number(document, selector)
        if section is not None:
            return section

    wanted = selector.strip().lower()
    for section in document.walk():
        if section.title.lower() == wanted:
            return section
    raise UsageError(f"No section matches '{selector}'.")


def render_help_text() -> list[str]:
    width = max(len(handler.usage) for handler in COMMAND_REGISTRY.values())
    lines = ["Available commands:"]
    for handler in COMMAND_REGISTRY.values():
        lines.append(f"  {handler.usage.ljust(width)} - {handler.summary}")
    lines.append(f"  {'exit / quit'.ljust(width)} - Leave the browser (Ctrl-D also works)")
    return lines


def create_prompt_session(document: ParsedDocument) -> PromptSession:
    words = list(COMMAND_REGISTRY) + sorted(_EXIT_COMMANDS)
    words.extend(section.title for section in document.walk())
    return PromptSession(
        history=InMemoryHistory(),
        completer=WordCompleter(words, ignore_case=True, sentence=True),
    )


def run_browser(
    state: BrowseState, read_line: Callable[[str], str] | None = None
) -> int:
    """Run the browse loop until exit or EOF."""
    if read_line is None:
        read_line = create_prompt_session(state.document).prompt

    for line in presenters.render_document_banner(state.document):
        print(line)
    print("Type 'help' for commands, 'exit' or Ctrl-D to quit.")

    while True:
        print()
        try:
            raw_line = read_line(_PROMPT)
            result = execute_browse_command(raw_line, state)
        except EOFError:
            print()
            return 0
        except KeyboardInterrupt:
            print()
            continue
        except UnionPepError as exc:
            print(presenters.render_error(str(exc)))
            continue

        for output_line in result.lines:
            print(output_line)
        if result.exit:
            return 0


def _exec_ls(args: list[str], state: BrowseState) -> list[str]:
    if args:
        raise UsageError("Usage: ls")
    return presenters.render_outline(state.document)


def _exec_show(args: list[str], state: BrowseState) -> list[str]:
    if not args:
        raise UsageError("Usage: show <number|title>")
    section = resolve_section(state.document, " ".join(args))
    return presenters.render_section(section)


def _exec_refs(args: list[str], state: BrowseState) -> list[str]:
    if args:
        raise UsageError("Usage: refs")
    resolution = resolve_footnotes(state.document, state.contract.references_section)
    return presenters.render_references(resolution)


def _exec_grammar(args: list[str], state: BrowseState) -> list[str]:
    if args:
        raise UsageError("Usage: grammar")
    lines: list[str] = []
    for block in grammar_blocks(state.document):
        lines.extend(presenters.render_grammar(parse_grammar(block)))
    return lines or ["(no grammar listing)"]


def _exec_examples(args: list[str], state: BrowseState) -> list[str]:
    if args:
        raise UsageError("Usage: examples")
    return presenters.render_examples(extract_code_examples(state.document))


def _exec_debate(args: list[str], state: BrowseState) -> list[str]:
    if args:
        raise UsageError("Usage: debate")
    section = state.document.find_section(state.contract.debate_section)
    if section is None:
        raise UsageError(f"Section '{state.contract.debate_section}' is missing.")
    return presenters.render_debate(parse_debate(section))


def _exec_check(args: list[str], state: BrowseState) -> list[str]:
    if args:
        raise UsageError("Usage: check")
    return presenters.render_check_report(run_checks(state.document, state.contract))


def _exec_help(args: list[str], state: BrowseState) -> list[str]:
    return render_help_text()


def _section_by_number(document: ParsedDocument, selector: str) -> Section | None:
    siblings = document.sections
    section: Section | None = None
    for part in selector.strip(".").split("."):
        if not part.isdigit():
            return None
        index = int(part) - 1
        if index < 0 or index >= len(siblings):
            return None
        section = siblings[index]
        siblings = section.children
    return section


COMMAND_REGISTRY: dict[str, BrowseCommand] = {
    "ls": BrowseCommand(_exec_ls, "ls", "Show the section outline"),
    "show": BrowseCommand(_exec_show, "show <number|title>", "Print one section"),
    "refs": BrowseCommand(_exec_refs, "refs", "List references and where they are cited"),
    "grammar": BrowseCommand(_exec_grammar, "grammar", "List the grammar rules"),
    "examples": BrowseCommand(_exec_examples, "examples", "List code examples"),
    "debate": BrowseCommand(_exec_debate, "debate", "Show the PRO/CON debate tree"),
    "check": BrowseCommand(_exec_check, "check", "Run all structural checks"),
    "help": BrowseCommand(_exec_help, "help", "Show this help"),
}
