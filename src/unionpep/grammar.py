"""Grammar listing parsing and self-consistency checks.

A listing is a sequence of productions ``name: rhs``. Indented lines continue
the previous production. Quoted strings and ALL-CAPS names are terminals;
lowercase names are non-terminals and must be defined in the same listing.
"""

from __future__ import annotations

import re

from .errors import GrammarSyntaxError
from .models import Finding, GrammarRule, LiteralBlock, Severity

_PRODUCTION_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*(?:::=|:)\s*(.*)$")
_TOKEN_RE = re.compile(r"'[^']*'|\"[^\"]*\"|[A-Za-z_][A-Za-z0-9_]*|\S")

CHECK_ID = "grammar"


def parse_grammar(block: LiteralBlock) -> list[GrammarRule]:
    pending: list[tuple[str, list[str], int]] = []

    for offset, line in enumerate(block.source.splitlines()):
        line_number = block.start_line + offset
        if line.strip() == "" or line.lstrip().startswith("#"):
            continue

        if line[:1] in (" ", "\t"):
            if not pending:
                raise GrammarSyntaxError(
                    f"Line {line_number} continues a production that was never started."
                )
            pending[-1][1].append(line.strip())
            continue

        match = _PRODUCTION_RE.match(line)
        if match is None:
            raise GrammarSyntaxError(
                f"Line {line_number} is not a grammar production: {line.strip()}"
            )
        pending.append((match.group(1), [match.group(2).strip()], line_number))

    return [_build_rule(name, parts, line_number) for name, parts, line_number in pending]


def check_grammar(rules: list[GrammarRule]) -> list[Finding]:
    findings: list[Finding] = []
    defined: dict[str, GrammarRule] = {}

    for rule in rules:
        if rule.name in defined:
            findings.append(
                Finding(
                    check=CHECK_ID,
                    severity=Severity.ERROR,
                    message=(
                        f"Rule '{rule.name}' is defined more than once "
                        f"(first at line {defined[rule.name].line})."
                    ),
                    line=rule.line,
                )
            )
            continue
        defined[rule.name] = rule

    for rule in rules:
        for reference in rule.nonterminals:
            if reference not in defined:
                findings.append(
                    Finding(
                        check=CHECK_ID,
                        severity=Severity.ERROR,
                        message=f"Rule '{rule.name}' references undefined '{reference}'.",
                        line=rule.line,
                    )
                )
    return findings


def _build_rule(name: str, parts: list[str], line_number: int) -> GrammarRule:
    rhs = " ".join(part for part in parts if part)
    if not rhs:
        raise GrammarSyntaxError(f"Rule '{name}' at line {line_number} has no right-hand side.")

    nonterminals: list[str] = []
    terminals: list[str] = []
    for token in _TOKEN_RE.findall(rhs):
        if token[0] in "'\"":
            _append_unique(terminals, token[1:-1])
        elif token[0].isalpha() or token[0] == "_":
            if token.isupper():
                _append_unique(terminals, token)
            else:
                _append_unique(nonterminals, token)

    return GrammarRule(
        name=name,
        rhs=rhs,
        nonterminals=tuple(nonterminals),
        terminals=tuple(terminals),
        line=line_number,
    )


def _append_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)
