"""``run-spec`` subcommand: execute a YAML update job through the SDK."""

from __future__ import annotations

import argparse
from typing import Any

from core.logging_config import get_logger
from store.registry_sdk import RegisterClient

_LOGGER = get_logger(__name__)


def add_run_spec_command(subparsers: Any) -> None:
    """Register run-spec subcommand."""
    parser = subparsers.add_parser(
        "run-spec",
        help="Execute a YAML update job (import, search, get, stats, versions steps)",
    )
    parser.add_argument("spec_file", help="Path to the YAML job file")


def run_run_spec_command(client: RegisterClient, args: argparse.Namespace) -> int:
    """Print every output line of the job, in step order."""
    output_lines = client.run_spec(args.spec_file)
    for line in output_lines:
        print(line)
    _LOGGER.info("run_spec_completed", spec_file=args.spec_file, output_lines=len(output_lines))
    return 0
