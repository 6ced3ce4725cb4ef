"""CLI entry and startup wiring."""

from __future__ import annotations

import argparse
import json
from typing import Callable

from . import __version__, presenters
from .browser import BrowseState, resolve_section, run_browser
from .checks import run_checks
from .contract import load_contract
from .debate import parse_debate
from .errors import UnionPepError, UsageError
from .examples_runner import run_examples
from .footnotes import resolve_footnotes
from .grammar import parse_grammar
from .literal_blocks import extract_code_examples, grammar_blocks
from .logging_utils import log_event, setup_logging
from .models import DocumentContract, ExampleOutcome, ParsedDocument
from .path_mapping import (
    app_root,
    bundled_contract_path,
    bundled_document_path,
    map_path_argument,
    resolve_existing_file,
)
from .reader import load_document
from .writer import is_round_trip_stable, write_document

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CHECK_FAILED = 2

CommandRunner = Callable[[argparse.Namespace, ParsedDocument, DocumentContract], int]


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        log_file = (
            str(
                map_path_argument(
                    raw_path=args.log_file,
                    app_root_abs=app_root(),
                    argument_name="--log-file",
                )
            )
            if args.log_file is not None
            else None
        )
        setup_logging(log_file)

        document_path = resolve_existing_file(
            raw_path=args.doc,
            default=bundled_document_path(),
            argument_name="--doc",
        )
        contract_path = resolve_existing_file(
            raw_path=args.contract,
            default=bundled_contract_path(),
            argument_name="--contract",
        )
        log_event(
            "app_start",
            command=args.command,
            document_file=str(document_path),
            contract_file=str(contract_path),
            log_file=log_file,
        )

        document = load_document(document_path)
        contract = load_contract(contract_path)
        return args.handler(args, document, contract)
    except UnionPepError as exc:
        print(presenters.render_error(str(exc)))
        return EXIT_ERROR


def _run_outline(
    args: argparse.Namespace, document: ParsedDocument, contract: DocumentContract
) -> int:
    if args.json:
        print(json.dumps(presenters.outline_to_dict(document), ensure_ascii=False, indent=2))
        return EXIT_OK

    _print_lines(presenters.render_document_banner(document))
    print()
    _print_lines(presenters.render_outline(document))
    return EXIT_OK


def _run_show(
    args: argparse.Namespace, document: ParsedDocument, contract: DocumentContract
) -> int:
    section = resolve_section(document, " ".join(args.title))
    _print_lines(presenters.render_section(section))
    return EXIT_OK


def _run_refs(
    args: argparse.Namespace, document: ParsedDocument, contract: DocumentContract
) -> int:
    resolution = resolve_footnotes(document, contract.references_section)
    _print_lines(presenters.render_references(resolution))
    return EXIT_CHECK_FAILED if resolution.unresolved else EXIT_OK


def _run_grammar(
    args: argparse.Namespace, document: ParsedDocument, contract: DocumentContract
) -> int:
    blocks = grammar_blocks(document)
    if not blocks:
        print(presenters.render_warning("Document has no grammar listing."))
        return EXIT_OK
    for block in blocks:
        _print_lines(presenters.render_grammar(parse_grammar(block)))
    return EXIT_OK


def _run_examples(
    args: argparse.Namespace, document: ParsedDocument, contract: DocumentContract
) -> int:
    if not args.run:
        _print_lines(presenters.render_examples(extract_code_examples(document)))
        return EXIT_OK

    results = run_examples(document)
    _print_lines(presenters.render_example_results(results))
    if any(result.outcome is ExampleOutcome.FAILED for result in results):
        return EXIT_CHECK_FAILED
    return EXIT_OK


def _run_debate(
    args: argparse.Namespace, document: ParsedDocument, contract: DocumentContract
) -> int:
    section = document.find_section(contract.debate_section)
    if section is None:
        raise UsageError(f"Section '{contract.debate_section}' is missing.")
    _print_lines(presenters.render_debate(parse_debate(section)))
    return EXIT_OK


def _run_check(
    args: argparse.Namespace, document: ParsedDocument, contract: DocumentContract
) -> int:
    report = run_checks(document, contract)
    _print_lines(presenters.render_check_report(report))
    return EXIT_OK if report.ok else EXIT_CHECK_FAILED


def _run_roundtrip(
    args: argparse.Namespace, document: ParsedDocument, contract: DocumentContract
) -> int:
    identical = is_round_trip_stable(document)
    if args.output is not None:
        output_path = map_path_argument(
            raw_path=args.output,
            app_root_abs=app_root(),
            argument_name="--output",
        )
        write_document(document, output_path)
        log_event("roundtrip_written", output_file=str(output_path), identical=identical)
        print(f"Wrote: {output_path}")

    if identical:
        print("Round trip: identical")
        return EXIT_OK
    print(presenters.render_error("Round trip: re-serialized text differs from the source."))
    return EXIT_CHECK_FAILED


def _run_browse(
    args: argparse.Namespace, document: ParsedDocument, contract: DocumentContract
) -> int:
    return run_browser(BrowseState(document=document, contract=contract))


def _print_lines(lines: list[str]) -> None:
    for line in lines:
        print(line)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unionpep",
        description="Read and check the union-syntax proposal document.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--doc",
        required=False,
        help="Document to read (absolute, relative, or mapped with ~ / @). "
        "Defaults to the bundled proposal.",
    )
    parser.add_argument(
        "--contract",
        required=False,
        help="Optional JSON contract describing the expected structure.",
    )
    parser.add_argument(
        "--log-file",
        required=False,
        help="Optional path for structured logs. Logging is off without it.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    outline = subparsers.add_parser("outline", help="Print the section outline.")
    outline.add_argument("--json", action="store_true", help="Emit the outline as JSON.")
    outline.set_defaults(handler=_run_outline)

    show = subparsers.add_parser("show", help="Print one section by number or title.")
    show.add_argument("title", nargs="+", help="Outline number (e.g. 2.1) or title.")
    show.set_defaults(handler=_run_show)

    refs = subparsers.add_parser("refs", help="List footnote references.")
    refs.set_defaults(handler=_run_refs)

    grammar = subparsers.add_parser("grammar", help="List the grammar rules.")
    grammar.set_defaults(handler=_run_grammar)

    examples = subparsers.add_parser("examples", help="List or run code examples.")
    examples.add_argument(
        "--run", action="store_true", help="Evaluate the assertion examples."
    )
    examples.set_defaults(handler=_run_examples)

    debate = subparsers.add_parser("debate", help="Print the PRO/CON debate tree.")
    debate.set_defaults(handler=_run_debate)

    check = subparsers.add_parser("check", help="Run all structural checks.")
    check.set_defaults(handler=_run_check)

    roundtrip = subparsers.add_parser(
        "roundtrip", help="Verify that re-serialization is byte-identical."
    )
    roundtrip.add_argument("--output", required=False, help="Also write the result here.")
    roundtrip.set_defaults(handler=_run_roundtrip)

    browse = subparsers.add_parser("browse", help="Browse the document interactively.")
    browse.set_defaults(handler=_run_browse)

    return parser
