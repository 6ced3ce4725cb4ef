"""PRO/CON debate trees of the dissenting opinion section."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .models import DebateEntry, DebateStance, DebateTopic, Finding, Section, Severity

_BULLET_RE = re.compile(r"^(\s*)[-*+]\s+(.*)$")
_TAG_RE = re.compile(r"^(PRO|CON)\s*:\s*(.*)$", re.IGNORECASE)

CHECK_ID = "debate"


@dataclass
class _RawItem:
    indent: int
    line: int
    parts: list[str]
    children: list[_RawItem] = field(default_factory=list)


def parse_debate(section: Section) -> list[DebateTopic]:
    """One topic per subsection, each holding its bullet tree."""
    topics: list[DebateTopic] = []
    for child in section.children:
        raw_items = _collect_items(child)
        topics.append(
            DebateTopic(
                title=child.title,
                line=child.heading.line,
                entries=[_to_entry(item, depth=0) for item in raw_items],
            )
        )
    return topics


def debate_findings(topics: list[DebateTopic]) -> list[Finding]:
    findings: list[Finding] = []
    for topic in topics:
        if not topic.claims:
            findings.append(
                Finding(
                    check=CHECK_ID,
                    severity=Severity.WARNING,
                    message=f"Topic '{topic.title}' has no PRO or CON claim.",
                    line=topic.line,
                )
            )
        for entry in topic.entries:
            if entry.stance is DebateStance.NOTE:
                findings.append(
                    Finding(
                        check=CHECK_ID,
                        severity=Severity.WARNING,
                        message=f"Item in '{topic.title}' is not tagged PRO or CON.",
                        line=entry.line,
                    )
                )
            for nested in _descendants(entry):
                if not nested.italic:
                    findings.append(
                        Finding(
                            check=CHECK_ID,
                            severity=Severity.WARNING,
                            message=f"Rebuttal in '{topic.title}' is not italic.",
                            line=nested.line,
                        )
                    )
    return findings


def count_stances(topics: list[DebateTopic]) -> dict[DebateStance, int]:
    counts = {stance: 0 for stance in DebateStance}
    for topic in topics:
        for entry in topic.entries:
            for node in entry.walk():
                counts[node.stance] += 1
    return counts


def _descendants(entry: DebateEntry):
    for child in entry.children:
        yield from child.walk()


def _collect_items(section: Section) -> list[_RawItem]:
    roots: list[_RawItem] = []
    stack: list[_RawItem] = []

    for line_number, text in section.iter_body_lines():
        if text.strip() == "":
            continue

        bullet = _BULLET_RE.match(text)
        if bullet is not None:
            indent = len(bullet.group(1))
            while stack and stack[-1].indent >= indent:
                stack.pop()
            item = _RawItem(indent=indent, line=line_number, parts=[bullet.group(2).strip()])
            (stack[-1].children if stack else roots).append(item)
            stack.append(item)
            continue

        indent = len(text) - len(text.lstrip())
        while stack and stack[-1].indent >= indent:
            stack.pop()
        if stack:
            stack[-1].parts.append(text.strip())

    return roots


def _to_entry(item: _RawItem, depth: int) -> DebateEntry:
    text = " ".join(item.parts)
    italic = _is_italic(text)

    tag = _TAG_RE.match(text)
    if tag is not None:
        stance = DebateStance(tag.group(1).upper())
        text = tag.group(2)
    elif depth > 0 and italic:
        stance = DebateStance.REBUTTAL
        text = text[1:-1].strip()
    else:
        stance = DebateStance.NOTE

    return DebateEntry(
        stance=stance,
        text=text,
        italic=italic,
        line=item.line,
        children=[_to_entry(child, depth + 1) for child in item.children],
    )


def _is_italic(text: str) -> bool:
    return (
        len(text) > 2
        and text.startswith("*")
        and text.endswith("*")
        and not text.startswith("**")
        and not text.endswith("**")
    )
