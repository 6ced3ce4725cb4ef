"""Literal block extraction and classification."""

from __future__ import annotations

import ast
import re
import textwrap

from .constants import CODE_DIRECTIVES, GRAMMAR_LANGUAGES
from .models import BlockKind, CodeExample, LiteralBlock, ParsedDocument

_DIRECTIVE_RE = re.compile(r"^(\s*)\.\.\s+([A-Za-z-]+)::\s*(\S*)\s*$")
_BULLET_RE = re.compile(r"^(\s*[-*+]\s+)")
_PROMPT_RE = re.compile(r"^(>>>|\.\.\.)(?: |$)")
_CLOSERS = {")": "(", "]": "[", "}": "{"}


def find_literal_blocks(document: ParsedDocument) -> list[LiteralBlock]:
    blocks: list[LiteralBlock] = []
    for section_path, first_line, raw_lines in document.regions():
        blocks.extend(_scan_region(raw_lines, first_line, section_path))
    return blocks


def literal_line_numbers(document: ParsedDocument) -> set[int]:
    """Line numbers covered by literal block content."""
    covered: set[int] = set()
    for block in find_literal_blocks(document):
        covered.update(range(block.start_line, block.end_line + 1))
    return covered


def grammar_blocks(document: ParsedDocument) -> list[LiteralBlock]:
    return [
        block for block in find_literal_blocks(document) if block.kind is BlockKind.GRAMMAR
    ]


def extract_code_examples(document: ParsedDocument) -> list[CodeExample]:
    examples: list[CodeExample] = []
    for block in find_literal_blocks(document):
        if block.kind is BlockKind.GRAMMAR:
            continue
        examples.append(CodeExample(block=block, has_assertions=_has_assertions(block)))
    return examples


def classify_block(source: str, *, language: str | None, lead_in: str) -> BlockKind:
    if language is not None and language.lower() in GRAMMAR_LANGUAGES:
        return BlockKind.GRAMMAR
    if "grammar" in _last_sentence(lead_in).lower():
        return BlockKind.GRAMMAR

    doctest = is_doctest(source)
    if doctest:
        source = doctest_source(source)
    try:
        ast.parse(source)
    except (SyntaxError, ValueError):
        return BlockKind.PROPOSED if is_balanced(source) else BlockKind.MALFORMED
    return BlockKind.DOCTEST if doctest else BlockKind.PYTHON


def is_doctest(source: str) -> bool:
    first = next((line for line in source.splitlines() if line.strip()), "")
    return first.lstrip().startswith(">>>")


def is_balanced(source: str) -> bool:
    """Check brackets and string quotes, ignoring comments."""
    stack: list[str] = []
    index = 0
    length = len(source)
    while index < length:
        ch = source[index]
        if ch == "#":
            newline = source.find("\n", index)
            index = length if newline == -1 else newline
            continue
        if ch in "'\"":
            end = _skip_string(source, index)
            if end == -1:
                return False
            index = end
            continue
        if ch in "([{":
            stack.append(ch)
        elif ch in _CLOSERS:
            if not stack or stack.pop() != _CLOSERS[ch]:
                return False
        index += 1
    return not stack


def doctest_source(source: str) -> str:
    """Keep the prompt lines of a doctest block, prompts stripped."""
    source_lines: list[str] = []
    for line in textwrap.dedent(source).splitlines():
        match = _PROMPT_RE.match(line)
        if match is not None:
            source_lines.append(line[match.end():])
    return "\n".join(source_lines) + "\n"


def _skip_string(source: str, start: int) -> int:
    quote = source[start : start + 3]
    if quote not in ('"""', "'''"):
        quote = source[start]
    index = start + len(quote)
    while index < len(source):
        if source[index] == "\\":
            index += 2
            continue
        if source.startswith(quote, index):
            return index + len(quote)
        if len(quote) == 1 and source[index] == "\n":
            return -1
        index += 1
    return -1


def _scan_region(
    raw_lines: list[str], first_line: int, section_path: tuple[str, ...]
) -> list[LiteralBlock]:
    texts = [line.rstrip("\r\n") for line in raw_lines]
    blocks: list[LiteralBlock] = []
    index = 0
    while index < len(texts):
        text = texts[index]
        opener = _block_opener(text)
        if opener is None:
            index += 1
            continue

        base_indent, language = opener
        content_start, content_end = _indented_run(texts, index + 1, base_indent, language)
        if content_start == content_end:
            index += 1
            continue

        content = raw_lines[content_start:content_end]
        lead_in = _lead_in(texts, index) if language is None else ""
        source = _block_source(content)
        kind = classify_block(source, language=language, lead_in=lead_in)
        if kind is not BlockKind.GRAMMAR and is_doctest(source):
            source = doctest_source(source)
        blocks.append(
            LiteralBlock(
                start_line=first_line + content_start,
                lead_in=lead_in,
                lines=content,
                source=source,
                language=language,
                kind=kind,
                section_path=section_path,
            )
        )
        index = content_end
    return blocks


def _block_opener(text: str) -> tuple[int, str | None] | None:
    directive = _DIRECTIVE_RE.match(text)
    if directive is not None:
        if directive.group(2).lower() not in CODE_DIRECTIVES:
            return None
        return len(directive.group(1)), directive.group(3) or "python"

    stripped = text.rstrip()
    if not stripped.endswith("::") or stripped.lstrip().startswith(".."):
        return None
    bullet = _BULLET_RE.match(stripped)
    if bullet is not None:
        return len(bullet.group(1)), None
    return len(stripped) - len(stripped.lstrip()), None


def _indented_run(
    texts: list[str], start: int, base_indent: int, language: str | None
) -> tuple[int, int]:
    index = start
    # Directive options such as ":linenos:" sit directly under the directive.
    if language is not None:
        while index < len(texts) and texts[index].strip().startswith(":"):
            index += 1
    while index < len(texts) and texts[index].strip() == "":
        index += 1

    content_start = index
    last_content = index
    while index < len(texts):
        text = texts[index]
        if text.strip() == "":
            index += 1
            continue
        if _indent_of(text) <= base_indent:
            break
        index += 1
        last_content = index
    return content_start, max(content_start, last_content)


def _lead_in(texts: list[str], index: int) -> str:
    start = index
    while start > 0 and texts[start - 1].strip() != "":
        start -= 1
    return " ".join(line.strip() for line in texts[start : index + 1])


def _last_sentence(paragraph: str) -> str:
    parts = re.split(r"(?<=[.;])\s+", paragraph.strip())
    return parts[-1] if parts else ""


def _block_source(content: list[str]) -> str:
    text = "".join(line.rstrip("\r\n") + "\n" for line in content)
    return textwrap.dedent(text)


def _indent_of(text: str) -> int:
    return len(text) - len(text.lstrip())


def _has_assertions(block: LiteralBlock) -> bool:
    if block.kind not in (BlockKind.PYTHON, BlockKind.DOCTEST):
        return False
    try:
        tree = ast.parse(block.source)
    except (SyntaxError, ValueError):
        return False
    return any(isinstance(node, ast.Assert) for node in ast.walk(tree))
