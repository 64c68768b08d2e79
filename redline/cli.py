"""
Redline CLI
============

Command-line interface for reviewing suggestion batches and
maintaining per-document rejection stores.

Usage:
    python -m redline review --text doc.txt --suggestions edits.json --doc-id doc42
    python -m redline apply --text doc.txt --suggestions edits.json --output fixed.txt
    python -m redline rejections list --doc-id doc42
    python -m redline rejections prune --doc-id doc42 --text doc.txt
    python -m redline validate --suggestions edits.json --text doc.txt
    python -m redline export-schemas --output-dir schemas
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from redline.config import RedlineConfig, get_config
from redline.utils import load_json, read_text, save_json, setup_logging

REVIEW_HELP = """Commands:
  a        accept the active suggestion
  r        reject the active suggestion
  n / p    next / previous suggestion
  s ID     select suggestion ID
  A        accept all remaining suggestions
  q        close the review (keeps accepted changes)
  ?        show this help"""


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="redline",
        description="Redline: review grammar suggestions against a document",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config YAML")
    parser.add_argument("--verbose", "-v", action="store_true")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # ── review ──────────────────────────────────────────────────
    review_parser = subparsers.add_parser("review", help="Review suggestions interactively")
    _add_batch_args(review_parser)

    # ── apply ───────────────────────────────────────────────────
    apply_parser = subparsers.add_parser("apply", help="Accept all suggestions at once")
    _add_batch_args(apply_parser)

    # ── rejections ──────────────────────────────────────────────
    rej_parser = subparsers.add_parser("rejections", help="Inspect a document's rejections")
    rej_parser.add_argument("action", choices=["list", "prune", "clear"])
    rej_parser.add_argument("--doc-id", required=True, help="Document identifier")
    rej_parser.add_argument("--text", default=None, help="Current document text (for prune)")

    # ── validate ────────────────────────────────────────────────
    validate_parser = subparsers.add_parser("validate", help="Validate a suggestion batch")
    validate_parser.add_argument("--suggestions", required=True, help="Suggestion batch JSON")
    validate_parser.add_argument("--text", default=None, help="Original text file")

    # ── export-schemas ──────────────────────────────────────────
    schema_parser = subparsers.add_parser("export-schemas", help="Export JSON schemas")
    schema_parser.add_argument("--output-dir", default="schemas")

    args = parser.parse_args(argv)
    config = get_config(args.config)

    if args.verbose:
        setup_logging(level="DEBUG", format_style=config.log_format)
    else:
        setup_logging(level=config.log_level, format_style=config.log_format)

    if args.command == "review":
        cmd_review(args, config)
    elif args.command == "apply":
        cmd_apply(args, config)
    elif args.command == "rejections":
        cmd_rejections(args, config)
    elif args.command == "validate":
        cmd_validate(args)
    elif args.command == "export-schemas":
        cmd_export_schemas(args)
    else:
        parser.print_help()
        sys.exit(1)


def _add_batch_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--text", required=True, help="Original text file")
    parser.add_argument("--suggestions", required=True, help="Suggestion batch JSON")
    parser.add_argument("--doc-id", default=None, help="Document id (enables stored rejections)")
    parser.add_argument("--output", default=None, help="Write the final text here")
    parser.add_argument("--outcome", default=None, help="Write the review outcome JSON here")


def load_suggestions(path: str | Path) -> list[Any]:
    """Load a batch: a JSON list, or a backend response with an 'edits' list."""
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get("edits", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of suggestions")
    return data


def _load_inputs(args) -> tuple[str, list[Any]]:
    try:
        return read_text(args.text), load_suggestions(args.suggestions)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        print(f"Error: {e}")
        sys.exit(1)


def _open_session(args, config: RedlineConfig, text: str, items: list[Any]):
    from redline.review.engine import ReviewSession
    from redline.store.rejections import InMemoryRejectionStore, open_document_store

    if args.doc_id:
        store = open_document_store(args.doc_id, config)
        store.prune(text)
    else:
        store = InMemoryRejectionStore()
    return ReviewSession.from_config(text, items, config, rejection_store=store)


def _finish(args, session) -> None:
    outcome = session.outcome()
    if args.output:
        Path(args.output).write_text(session.live_text, encoding="utf-8")
        print(f"Final text saved to {args.output}")
    else:
        print(session.live_text)
    if args.outcome:
        save_json(outcome.model_dump(mode="json"), args.outcome)
        print(f"Outcome saved to {args.outcome}")
    print(
        f"\n  {outcome.num_accepted} accepted, {outcome.num_rejected} rejected, "
        f"{outcome.remaining} remaining ({outcome.state.value})"
    )


def _print_active(session) -> None:
    from redline.review.preview import format_preview

    print(format_preview(session.preview()))
    active = session.active_suggestion
    if active is None:
        return
    position = [s.id for s in session.suggestions].index(active.id) + 1
    label = f" [{active.category}]" if active.category else ""
    print(
        f"\n({position}/{session.pending_count}){label} {active.id}: "
        f"change '{active.original_phrase}' to '{active.replacement_phrase}'"
    )
    if active.explanation:
        print(f"  {active.explanation}")


def cmd_review(args, config: RedlineConfig):
    """Interactive review loop reading commands from stdin."""
    text, items = _load_inputs(args)
    session = _open_session(args, config, text, items)

    if session.is_finished:
        print("No suggestions to review.")
    else:
        print(REVIEW_HELP + "\n")
        _print_active(session)

    while not session.is_finished:
        try:
            line = input("> ").strip()
        except EOFError:
            session.close()
            break

        command, _, argument = line.partition(" ")
        if command == "a":
            session.accept_active()
        elif command == "r":
            session.reject_active()
        elif command == "n":
            session.navigate(1)
        elif command == "p":
            session.navigate(-1)
        elif command == "s":
            if not session.set_active(argument.strip()):
                print(f"Unknown suggestion: {argument.strip()}")
        elif command == "A":
            session.accept_all()
        elif command == "q":
            session.close()
        elif command in ("?", "h", "help"):
            print(REVIEW_HELP)
            continue
        else:
            print(f"Unknown command: {command!r} (type ? for help)")
            continue

        if not session.is_finished:
            _print_active(session)

    _finish(args, session)


def cmd_apply(args, config: RedlineConfig):
    """Accept every suggestion that is not already rejected."""
    text, items = _load_inputs(args)
    session = _open_session(args, config, text, items)
    if not session.is_finished:
        session.accept_all()
    _finish(args, session)


def cmd_rejections(args, config: RedlineConfig):
    """List, prune or clear a document's rejection store."""
    from tabulate import tabulate
    from redline.store.rejections import open_document_store

    store = open_document_store(args.doc_id, config)

    if args.action == "list":
        records = store.records()
        if not records:
            print(f"No rejections stored for {args.doc_id}.")
            return
        rows = [
            [p.range_key, p.original, p.replacement, p.rule or "", p.type]
            for p in records.values()
        ]
        print(tabulate(rows, headers=["Range", "Original", "Replacement", "Rule", "Type"],
                       tablefmt="grid"))
    elif args.action == "prune":
        if not args.text:
            print("Error: --text is required for prune")
            sys.exit(1)
        try:
            text = read_text(args.text)
        except OSError as e:
            print(f"Error: {e}")
            sys.exit(1)
        removed = store.prune(text)
        print(f"Pruned {removed} stale rejection(s); {len(store)} remain.")
    elif args.action == "clear":
        count = len(store)
        store.clear()
        print(f"Cleared {count} rejection(s) for {args.doc_id}.")


def cmd_validate(args):
    """Validate a suggestion batch, optionally against its text."""
    from redline.schemas.validator import validate_suggestion_batch

    try:
        data = load_json(args.suggestions)
        text = read_text(args.text) if args.text else None
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    errors = validate_suggestion_batch(data, text)
    if errors:
        print(f"Validation FAILED: {len(errors)} errors")
        for err in errors:
            print(f"  - {err}")
        sys.exit(1)
    else:
        print("Validation PASSED ✅")


def cmd_export_schemas(args):
    """Export JSON schemas for all data contracts."""
    from redline.schemas.validator import export_all_schemas

    paths = export_all_schemas(args.output_dir)
    for path in paths:
        print(f"Exported: {path}")
    print(f"\n{len(paths)} schemas exported to {args.output_dir}/")


if __name__ == "__main__":
    main()
