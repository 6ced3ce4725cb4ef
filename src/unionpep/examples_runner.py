"""Evaluation of the assertion examples embedded in the document."""

from __future__ import annotations

import logging

from .constants import EXAMPLE_MODULE_NAME
from .literal_blocks import extract_code_examples
from .logging_utils import log_event, summarize_text
from .models import BlockKind, CodeExample, ExampleOutcome, ExampleResult, ParsedDocument

_RUNNABLE_KINDS = (BlockKind.PYTHON, BlockKind.DOCTEST)


def run_example(example: CodeExample) -> ExampleResult:
    """Execute one example in a fresh namespace and record the outcome."""
    block = example.block
    if block.kind not in _RUNNABLE_KINDS:
        return _finish(
            example, ExampleOutcome.SKIPPED, f"{block.kind.value} block is not executable"
        )
    if not example.has_assertions:
        return _finish(example, ExampleOutcome.SKIPPED, "no assertions")

    namespace: dict[str, object] = {"__name__": EXAMPLE_MODULE_NAME}
    try:
        code = compile(block.source, f"<example line {block.start_line}>", "exec")
    except (SyntaxError, ValueError) as exc:
        return _finish(example, ExampleOutcome.FAILED, _compile_failure_text(exc))
    try:
        exec(code, namespace)
    except AssertionError as exc:
        detail = str(exc) or _failed_assertion_text(exc)
        return _finish(example, ExampleOutcome.FAILED, f"AssertionError: {detail}")
    except Exception as exc:
        return _finish(example, ExampleOutcome.FAILED, f"{type(exc).__name__}: {exc}")
    return _finish(example, ExampleOutcome.PASSED)


def run_examples(document: ParsedDocument) -> list[ExampleResult]:
    return [run_example(example) for example in extract_code_examples(document)]


def _compile_failure_text(exc: SyntaxError | ValueError) -> str:
    if isinstance(exc, SyntaxError) and exc.lineno is not None:
        return f"{type(exc).__name__}: {exc.msg} at example line {exc.lineno}"
    return f"{type(exc).__name__}: {exc}"


def _failed_assertion_text(exc: AssertionError) -> str:
    traceback = exc.__traceback__
    while traceback is not None and traceback.tb_next is not None:
        traceback = traceback.tb_next
    if traceback is None:
        return "assertion failed"
    return f"assertion failed at example line {traceback.tb_lineno}"


def _finish(
    example: CodeExample, outcome: ExampleOutcome, detail: str = ""
) -> ExampleResult:
    log_event(
        "example_evaluated",
        level=logging.WARNING if outcome is ExampleOutcome.FAILED else logging.INFO,
        line=example.line,
        outcome=outcome.value,
        detail=summarize_text(detail),
    )
    return ExampleResult(example=example, outcome=outcome, detail=detail)
