"""ICO register CLI entry points.

This module exposes import, search, and reporting commands for the
public register. It maps argparse commands onto SDK calls and prints
JSON results to stdout.
"""

from __future__ import annotations

import argparse
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Sequence

from cli.run_spec_command import add_run_spec_command, run_run_spec_command
from core.config import RegisterConfig
from core.constants import DEFAULT_SEARCH_LIMIT, DEFAULT_SEARCH_OFFSET
from core.errors import RegisterError
from core.logging_config import get_logger
from core.types import ImportOptions, SearchFilter
from store.record_payload import (
    data_version_to_payload,
    import_result_to_payload,
    registration_to_payload,
    stats_to_payload,
    to_json_line,
)
from store.registry_sdk import RegisterClient

_LOGGER = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="ico-register",
        description="Import and query the ICO data protection public register",
    )
    parser.add_argument("--data-root", help="Override ICO_DATA_ROOT for this command")
    parser.add_argument("--db-path", help="Override ICO_DB_PATH for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_import_command(subparsers)
    _add_search_command(subparsers)
    _add_get_command(subparsers)
    subparsers.add_parser("stats", help="Show record count and active data version")
    subparsers.add_parser("versions", help="List data versions, newest first")
    add_run_spec_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ICO register CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.data_root, args.db_path)
        return _dispatch_command(client, args)
    except RegisterError as error:
        _LOGGER.error("command_failed", command=args.command, error=str(error))
        return 1


def _dispatch_command(client: RegisterClient, args: argparse.Namespace) -> int:
    """Route a parsed command to its handler.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.

    Raises:
        RegisterError: If the command fails or is unknown.
    """
    if args.command == "import":
        return _run_import_command(client, args)
    if args.command == "search":
        return _run_search_command(client, args)
    if args.command == "get":
        return _run_get_command(client, args)
    if args.command == "stats":
        print(to_json_line(stats_to_payload(client.open().get_stats())))
        return 0
    if args.command == "versions":
        for version in client.open().list_versions():
            print(to_json_line(data_version_to_payload(version)))
        return 0
    if args.command == "run-spec":
        return run_run_spec_command(client, args)
    raise RegisterError(f"Unsupported command: {args.command}")


def _build_client(data_root: str | None, db_path: str | None) -> RegisterClient:
    """Build SDK client with optional path overrides.

    Args:
        data_root: Optional data root override.
        db_path: Optional database file override.

    Returns:
        Configured SDK client.
    """
    config = RegisterConfig.from_env()
    if data_root:
        config = config.with_data_root(Path(data_root))
    if db_path:
        config = config.with_database_path(Path(db_path))
    return RegisterClient(config)


def _run_import_command(client: RegisterClient, args: argparse.Namespace) -> int:
    """Handle import command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = ImportOptions(source_uri=args.source, provenance=args.provenance)
    lock: Any = nullcontext() if args.no_lock else client.import_lock()
    with lock:
        result = client.import_file(options)
    print(to_json_line(import_result_to_payload(result)))
    return 0


def _run_search_command(client: RegisterClient, args: argparse.Namespace) -> int:
    """Handle search command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    filter_spec = SearchFilter(
        registration_number=args.number,
        organisation_name=args.name,
        postcode=args.postcode,
        public_authority=args.public_authority,
        payment_tier=args.payment_tier,
        limit=args.limit,
        offset=args.offset,
    )
    for registration in client.open().search(filter_spec):
        print(to_json_line(registration_to_payload(registration)))
    return 0


def _run_get_command(client: RegisterClient, args: argparse.Namespace) -> int:
    """Handle get command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code, 1 when the registration number is unknown.
    """
    registration = client.open().get_by_key(args.registration_number)
    if registration is None:
        _LOGGER.warning("registration_not_found", registration_number=args.registration_number)
        return 1
    print(to_json_line(registration_to_payload(registration)))
    return 0


def _add_import_command(subparsers: Any) -> None:
    """Register import subcommand."""
    parser = subparsers.add_parser(
        "import",
        help="Import a register CSV extract, replacing current records",
    )
    parser.add_argument("source", help="Local CSV path or s3://bucket/key URI")
    parser.add_argument("--provenance", help="Origin recorded on the data version")
    parser.add_argument(
        "--no-lock",
        action="store_true",
        help="Skip the advisory import lock",
    )


def _add_search_command(subparsers: Any) -> None:
    """Register search subcommand."""
    parser = subparsers.add_parser("search", help="Search registrations")
    parser.add_argument("--name", help="Case-insensitive organisation name substring")
    parser.add_argument("--number", help="Exact registration number")
    parser.add_argument("--postcode", help="Case-insensitive postcode substring")
    parser.add_argument("--public-authority", help="Exact public authority flag")
    parser.add_argument("--payment-tier", help="Exact payment tier")
    parser.add_argument("--limit", type=int, default=DEFAULT_SEARCH_LIMIT)
    parser.add_argument("--offset", type=int, default=DEFAULT_SEARCH_OFFSET)


def _add_get_command(subparsers: Any) -> None:
    """Register get subcommand."""
    parser = subparsers.add_parser("get", help="Look up one registration by number")
    parser.add_argument("registration_number", help="Registration number, e.g. Z1234567")
