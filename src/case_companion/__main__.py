"""Command-line entry point.

Usage:
    python -m case_companion analysis --case case.json --doc notes.txt
    python -m case_companion roadmap --case case.json
    python -m case_companion chat --case case.json --message "What is the next hearing?"
    python -m case_companion devil --message "The contract was never signed."

Results are printed as JSON. The exit code is 1 when the flow reported an
error, 2 on invalid usage.
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import logging
import mimetypes
from pathlib import Path
import sys
from typing import Any

from case_companion.companion import CaseCompanion, create_companion
from case_companion.config import resolve_config
from case_companion.core.types import CaseContext, DocumentRef, coerce_document
from case_companion.exceptions import ConfigurationError
from case_companion.flows import FlowResult

CASE_FLOWS = ("analysis", "points", "strategy", "outline", "roadmap")
CHAT_FLOWS = ("chat", "devil")
HISTORY_ROLES = ("system", "user", "assistant")


def load_document(ref: str) -> DocumentRef:
    """Turn a ``--doc`` argument into a document reference.

    Data URIs are used as given, existing files are inlined as base64 data
    URIs, and anything else is passed on as an external name.
    """
    path = Path(ref)
    if not ref.startswith("data:") and path.is_file():
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        payload = base64.b64encode(path.read_bytes()).decode("ascii")
        return coerce_document(f"data:{mime_type};base64,{payload}")
    return coerce_document(ref)


def load_history(path: str | None) -> list[dict[str, str]]:
    if path is None:
        return []
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("history file must contain a JSON array of {role, content}")
    for index, turn in enumerate(data):
        if not (
            isinstance(turn, dict)
            and turn.get("role") in HISTORY_ROLES
            and isinstance(turn.get("content"), str)
        ):
            raise ValueError(
                f"history entry {index} must be an object with a role in "
                f"{list(HISTORY_ROLES)} and a string content"
            )
    return data


async def run_flow(
    companion: CaseCompanion,
    flow: str,
    case: CaseContext,
    *,
    message: str | None = None,
    history: list[dict[str, str]] | None = None,
) -> FlowResult:
    """Dispatch one flow by its CLI name."""
    turns = history or []
    if flow == "analysis":
        return await companion.case_analysis(case)
    if flow == "points":
        return await companion.points_summary(case)
    if flow == "strategy":
        return await companion.strategy_snapshot(case)
    if flow == "outline":
        return await companion.presentation_outline(case)
    if flow == "roadmap":
        return await companion.cost_roadmap(case)
    if flow == "chat":
        return await companion.chat(case, message or "", history=turns)
    if flow == "devil":
        return await companion.devils_advocate(case, message or "", history=turns)
    raise ValueError(f"Unknown flow: {flow}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a case-companion flow and print the result as JSON",
        prog="python -m case_companion",
    )
    parser.add_argument("flow", choices=CASE_FLOWS + CHAT_FLOWS, help="Flow to run")
    parser.add_argument("--case", help="File holding the case details JSON")
    parser.add_argument(
        "--doc",
        action="append",
        default=[],
        help="Document: data URI, file path, or external name (repeatable)",
    )
    parser.add_argument("--message", help="User question or statement (chat flows)")
    parser.add_argument("--history", help="JSON file with prior chat turns")
    parser.add_argument("--model", help="Override the model for this run")
    parser.add_argument("--env-file", help="Optional .env file with PERPLEXITY_* values")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.flow in CHAT_FLOWS and not args.message:
        parser.error(f"--message is required for the '{args.flow}' flow")

    try:
        case_details = (
            Path(args.case).read_text(encoding="utf-8") if args.case else ""
        )
        documents = tuple(load_document(ref) for ref in args.doc)
        history = load_history(args.history)
    except (OSError, ValueError) as e:
        parser.error(str(e))

    overrides: dict[str, Any] = {}
    if args.model:
        overrides["model"] = args.model
    try:
        config = resolve_config(overrides, env_file=args.env_file)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    companion = create_companion(config)
    case = CaseContext(case_details=case_details, documents=documents)
    result = asyncio.run(
        run_flow(companion, args.flow, case, message=args.message, history=history)
    )
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
