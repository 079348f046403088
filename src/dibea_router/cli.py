"""CLI entry point: ``dibea-router route`` and ``dibea-router validate``."""

from __future__ import annotations

# Phase 1: singleton logging before any transitive litellm imports
from dibea_router.logging_config import setup_logging

setup_logging("WARNING")

import argparse  # noqa: E402
import asyncio  # noqa: E402
import json  # noqa: E402
import sys  # noqa: E402
from collections.abc import Sequence  # noqa: E402
from pathlib import Path  # noqa: E402

import pydantic  # noqa: E402

from dibea_router import __version__  # noqa: E402
from dibea_router.config import Settings  # noqa: E402
from dibea_router.constants import UserRole  # noqa: E402
from dibea_router.lexicon.loader import (  # noqa: E402
    DEFAULT_LEXICON_PATH,
    load_lexicon,
)
from dibea_router.lexicon.store import LexiconStore  # noqa: E402
from dibea_router.logging_config import (  # noqa: E402
    cleanup_third_party_handlers,
)
from dibea_router.replies import build_reply_generator  # noqa: E402
from dibea_router.resilience.errors import (  # noqa: E402
    ConfigurationError,
    ValidationError,
)
from dibea_router.routing.router import AgentRouter  # noqa: E402
from dibea_router.routing.schemas import (  # noqa: E402
    AgentResponse,
    HistoryMessage,
)

EXIT_CONFIG_ERROR = 1
EXIT_INVALID_INPUT = 2

_history_adapter = pydantic.TypeAdapter(list[HistoryMessage])


def main(argv: Sequence[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"dibea-router {__version__}")
        return

    if args.command == "route":
        _run_route(args)
    elif args.command == "validate":
        _run_validate(args)
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dibea-router",
        description=(
            "Route DIBEA portal chat messages to specialised agents."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    route = sub.add_parser(
        "route",
        help="Route one message and print the AgentResponse as JSON",
    )
    route.add_argument("message", type=str, help="User message")
    route.add_argument(
        "--history-json",
        type=Path,
        default=None,
        help="JSON file with prior turns: [{sender, content}, ...]",
    )
    route.add_argument(
        "--role",
        type=str.upper,
        choices=[r.value for r in UserRole],
        default=None,
        help="Portal role used to filter suggested actions",
    )
    route.add_argument(
        "--lexicon",
        type=Path,
        default=None,
        help="Lexicon YAML (default: LEXICON_PATH or bundled lexicon)",
    )
    route.add_argument(
        "--session-id",
        default=None,
        help="Session id for log correlation",
    )

    validate = sub.add_parser(
        "validate",
        help="Load a lexicon and print its summary",
    )
    validate.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=None,
        help="Lexicon YAML (default: bundled lexicon)",
    )

    return parser


def _load_history(path: Path | None) -> list[HistoryMessage]:
    if path is None:
        return []
    try:
        return _history_adapter.validate_json(
            path.read_bytes()
        )
    except (OSError, pydantic.ValidationError) as exc:
        print(f"Error: invalid history file {path}: {exc}", file=sys.stderr)
        sys.exit(EXIT_INVALID_INPUT)


def _run_route(args: argparse.Namespace) -> None:
    """Execute the route command."""
    settings = Settings()
    history = _load_history(args.history_json)

    try:
        store = LexiconStore(path=args.lexicon or settings.lexicon_path)
        reply_generator = build_reply_generator(settings)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    # litellm (if selected) is imported by now.
    cleanup_third_party_handlers()

    router = AgentRouter(store, reply_generator)
    role = UserRole(args.role) if args.role else None
    try:
        response = asyncio.run(
            _route_once(router, args.message, history, args.session_id, role)
        )
    except ValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_INVALID_INPUT)

    print(
        json.dumps(
            response.model_dump(mode="json", by_alias=True),
            indent=2,
            ensure_ascii=False,
        )
    )


def _run_validate(args: argparse.Namespace) -> None:
    """Execute the validate command."""
    path = args.path or DEFAULT_LEXICON_PATH
    try:
        lexicon = load_lexicon(path)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    print(f"Lexicon OK: {path}")
    print(json.dumps(lexicon.summary(), indent=2, ensure_ascii=False))


async def _route_once(
    router: AgentRouter,
    message: str,
    history: list[HistoryMessage],
    session_id: str | None,
    role: UserRole | None,
) -> AgentResponse:
    try:
        return await router.route(
            message, history, session_id=session_id, role=role
        )
    finally:
        aclose = getattr(router.reply_generator, "aclose", None)
        if aclose is not None:
            await aclose()
