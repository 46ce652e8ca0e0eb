"""Command-line entry point for applying search/replace edits to a file.

Usage:
    htmledit apply page.html edits.json
    htmledit apply page.html edits.json --in-place --json
    htmledit apply page.html edits.json --journal
    htmledit failures --limit 5
    htmledit session 20260101_120000_000000
    htmledit prune --days 7
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from htmledit.config import load_config
from htmledit.engine import apply_edit_operations
from htmledit.logging import (
    clear_old_sessions,
    get_recent_failures,
    get_session,
    log_failure,
    log_success,
)
from htmledit.types import ApplyFailure, ApplyPartial, EditOperation

EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_FAILURE = 2

_operations_adapter = TypeAdapter(list[EditOperation])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="htmledit",
        description="Apply ordered search/replace edits with approximate matching",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    apply_cmd = sub.add_parser("apply", help="Apply edit operations to a document")
    apply_cmd.add_argument("document", type=Path, help="Document to edit")
    apply_cmd.add_argument(
        "operations",
        type=Path,
        help='JSON list of {"search", "replace", "expectedReplacements"?} objects',
    )
    apply_cmd.add_argument(
        "--in-place",
        action="store_true",
        help="Write the edited document back unless every operation failed",
    )
    apply_cmd.add_argument("--config", type=Path, default=None, help="Path to engine.yaml override")
    apply_cmd.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON output for downstream tooling",
    )
    apply_cmd.add_argument(
        "--journal",
        action="store_true",
        help="Record the outcome in the edit journal (HTMLEDIT_HOME)",
    )

    failures_cmd = sub.add_parser("failures", help="Show recent failed edits from the journal")
    failures_cmd.add_argument("--limit", type=int, default=10, help="Number of lines to show")

    session_cmd = sub.add_parser("session", help="Print a journal session as JSON")
    session_cmd.add_argument("session_id", help="Session file name without .json")

    prune_cmd = sub.add_parser("prune", help="Delete journal sessions older than N days")
    prune_cmd.add_argument("--days", type=int, default=7, help="Age threshold in days")
    return parser


def _print_summary(result) -> None:
    if isinstance(result, ApplyFailure):
        print(f"Edit failed: {result.error}")
        if result.best_match:
            print("\nClosest match:\n")
            print(result.best_match.surrounding)
        return

    tiers = ", ".join(result.match_tiers)
    if isinstance(result, ApplyPartial):
        print(f"Edit partially applied: {result.applied_count} of "
              f"{result.applied_count + result.failed_count} changes made ({tiers})")
        for failed in result.failed_operations:
            print(f"  - {failed.error}")
        return

    print(f"Edit applied: {len(result.match_tiers)} change(s) ({tiers})")


def run_apply(args: argparse.Namespace) -> int:
    document = args.document.read_text()
    try:
        operations = _operations_adapter.validate_json(args.operations.read_text())
    except ValidationError as exc:
        print(f"Invalid operations file: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    config = load_config(args.config)
    result = apply_edit_operations(document, operations, config)

    if args.in_place and not isinstance(result, ApplyFailure):
        args.document.write_text(result.document)

    if args.journal:
        name = str(args.document)
        requested = [op.model_dump() for op in operations]
        if isinstance(result, (ApplyFailure, ApplyPartial)):
            log_failure(
                name,
                result.error,
                operations=requested,
                original=document,
                failed=[f.model_dump() for f in result.failed_operations],
                extra={"status": result.status},
            )
        else:
            log_success(name, operations=requested, match_tiers=list(result.match_tiers))

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        _print_summary(result)

    if isinstance(result, ApplyFailure):
        return EXIT_FAILURE
    if isinstance(result, ApplyPartial):
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "apply":
        return run_apply(args)
    if args.command == "failures":
        for line in get_recent_failures(args.limit):
            print(line)
        return EXIT_SUCCESS
    if args.command == "session":
        session = get_session(args.session_id)
        if session is None:
            print(f"Session not found: {args.session_id}", file=sys.stderr)
            return EXIT_FAILURE
        print(json.dumps(session, indent=2))
        return EXIT_SUCCESS
    if args.command == "prune":
        print(f"Deleted {clear_old_sessions(args.days)} session(s)")
        return EXIT_SUCCESS
    return EXIT_FAILURE


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
