"""Dataclasses shared across unionpep layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator


class BlockKind(str, Enum):
    """Classification of a literal block."""

    GRAMMAR = "grammar"
    PYTHON = "python"
    DOCTEST = "doctest"
    PROPOSED = "proposed"
    MALFORMED = "malformed"


class DebateStance(str, Enum):
    """Role of one entry in a debate tree."""

    PRO = "PRO"
    CON = "CON"
    REBUTTAL = "REBUTTAL"
    NOTE = "NOTE"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ExampleOutcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Preamble:
    fields: list[tuple[str, str]]
    raw_lines: list[str]

    def get(self, name: str) -> str | None:
        for field_name, value in self.fields:
            if field_name.lower() == name.lower():
                return value
        return None


@dataclass(frozen=True)
class Heading:
    title: str
    char: str
    overline: bool
    level: int
    line: int
    raw_lines: list[str]

    @property
    def style(self) -> tuple[str, bool]:
        return self.char, self.overline


@dataclass
class Section:
    """One titled block of the document plus its nested sections."""

    heading: Heading
    body_lines: list[str]
    body_start_line: int
    children: list[Section] = field(default_factory=list)
    ordinal: int = 0
    path: tuple[str, ...] = ()

    @property
    def title(self) -> str:
        return self.heading.title

    @property
    def level(self) -> int:
        return self.heading.level

    def find(self, title: str) -> Section | None:
        """Return the direct child with the given title, if any."""
        for child in self.children:
            if child.title == title:
                return child
        return None

    def walk(self) -> Iterator[Section]:
        yield self
        for child in self.children:
            yield from child.walk()

    def iter_body_lines(self) -> Iterator[tuple[int, str]]:
        """Yield (line number, text) pairs for the section's own body."""
        for offset, raw_line in enumerate(self.body_lines):
            yield self.body_start_line + offset, raw_line.rstrip("\r\n")

    def body_text(self) -> str:
        return "".join(self.body_lines)


@dataclass
class ParsedDocument:
    source_text: str
    preamble: Preamble
    sections: list[Section]
    # Text between the preamble and the first heading.
    front_lines: list[str] = field(default_factory=list)
    source_path: Path | None = None

    def walk(self) -> Iterator[Section]:
        for section in self.sections:
            yield from section.walk()

    def regions(self) -> Iterator[tuple[tuple[str, ...], int, list[str]]]:
        """Yield (section path, first line number, raw lines) per body region."""
        if self.front_lines:
            yield (), len(self.preamble.raw_lines) + 1, self.front_lines
        for section in self.walk():
            yield section.path, section.body_start_line, section.body_lines

    def top_level_titles(self) -> list[str]:
        return [section.title for section in self.sections]

    def find_section(self, title: str) -> Section | None:
        """Find a section by title, preferring top-level sections."""
        for section in self.sections:
            if section.title == title:
                return section
        for section in self.walk():
            if section.title == title:
                return section
        return None

    def find_section_path(self, path: tuple[str, ...]) -> Section | None:
        for section in self.walk():
            if section.path == path:
                return section
        return None


@dataclass(frozen=True)
class LiteralBlock:
    start_line: int
    lead_in: str
    lines: list[str]
    source: str
    language: str | None
    kind: BlockKind
    section_path: tuple[str, ...]

    @property
    def end_line(self) -> int:
        return self.start_line + len(self.lines) - 1


@dataclass(frozen=True)
class CodeExample:
    block: LiteralBlock
    has_assertions: bool

    @property
    def section_path(self) -> tuple[str, ...]:
        return self.block.section_path

    @property
    def line(self) -> int:
        return self.block.start_line


@dataclass(frozen=True)
class GrammarRule:
    name: str
    rhs: str
    nonterminals: tuple[str, ...]
    terminals: tuple[str, ...]
    line: int


@dataclass
class DebateEntry:
    stance: DebateStance
    text: str
    italic: bool
    line: int
    children: list[DebateEntry] = field(default_factory=list)

    def walk(self) -> Iterator[DebateEntry]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class DebateTopic:
    title: str
    line: int
    entries: list[DebateEntry] = field(default_factory=list)

    @property
    def claims(self) -> list[DebateEntry]:
        return [
            entry
            for entry in self.entries
            if entry.stance in (DebateStance.PRO, DebateStance.CON)
        ]


@dataclass(frozen=True)
class FootnoteMarker:
    label: str
    line: int
    section_path: tuple[str, ...]


@dataclass(frozen=True)
class FootnoteTarget:
    label: str
    citation: str
    line: int
    section_path: tuple[str, ...]


@dataclass(frozen=True)
class HyperlinkTarget:
    name: str
    url: str
    line: int


@dataclass(frozen=True)
class HyperlinkReference:
    name: str
    line: int
    section_path: tuple[str, ...]


@dataclass(frozen=True)
class FootnoteResolution:
    resolved: list[tuple[FootnoteMarker, FootnoteTarget]]
    unresolved: list[FootnoteMarker]
    unused: list[FootnoteTarget]
    duplicates: list[FootnoteTarget]
    misplaced: list[FootnoteTarget]

    @property
    def resolved_labels(self) -> set[str]:
        return {marker.label for marker, _ in self.resolved}


@dataclass(frozen=True)
class ExampleResult:
    example: CodeExample
    outcome: ExampleOutcome
    detail: str = ""


@dataclass(frozen=True)
class Finding:
    check: str
    severity: Severity
    message: str
    line: int | None = None


@dataclass
class CheckReport:
    findings: list[Finding] = field(default_factory=list)
    checks_run: list[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for finding in self.findings if finding.severity is Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(
            1 for finding in self.findings if finding.severity is Severity.WARNING
        )

    @property
    def ok(self) -> bool:
        return self.error_count == 0

    def for_check(self, check: str) -> list[Finding]:
        return [finding for finding in self.findings if finding.check == check]


@dataclass(frozen=True)
class DocumentContract:
    leading_sections: list[str]
    section_order: list[str]
    proposal_section: str
    labeled_propositions: list[str]
    inline_propositions: list[str]
    debate_section: str
    references_section: str
    expected_footnotes: list[str]
