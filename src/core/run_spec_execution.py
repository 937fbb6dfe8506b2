"""Shared run-spec execution engine for CLI and SDK workflows.

This module maps validated run-spec steps to client operations so the
cron job, the CLI, and the SDK run one declarative update path without
drift. Every step yields JSON output lines.
"""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, ContextManager, Protocol

from core.constants import DEFAULT_SEARCH_LIMIT, DEFAULT_SEARCH_OFFSET
from core.errors import RegisterRunSpecError
from core.run_spec import RunSpec, RunSpecStep, load_run_spec
from core.run_spec_fields import (
    int_with_default,
    optional_bool,
    optional_string,
    required_string,
)
from core.types import (
    DataVersion,
    ImportOptions,
    ImportResult,
    Registration,
    SearchFilter,
    StoreStats,
)
from store.record_payload import (
    data_version_to_payload,
    import_result_to_payload,
    registration_to_payload,
    stats_to_payload,
    to_json_line,
)


class RunSpecClient(Protocol):
    """Client API contract required by run-spec execution."""

    def with_data_root(self, data_root: str) -> Any: ...

    def with_database_path(self, database_path: str) -> Any: ...

    def open(self) -> Any: ...

    def import_file(self, options: ImportOptions) -> ImportResult: ...

    def import_lock(self) -> ContextManager[Any]: ...

    def search(self, filter_spec: SearchFilter) -> list[Registration]: ...

    def get_by_key(self, registration_number: str) -> Registration | None: ...

    def get_stats(self) -> StoreStats: ...

    def list_versions(self) -> list[DataVersion]: ...


@dataclass(frozen=True)
class RunSpecExecutionContext:
    """In-memory context used to execute run-spec steps."""

    client: RunSpecClient


def execute_run_spec_file(client: RunSpecClient, spec_file: str) -> tuple[str, ...]:
    """Load and execute a run-spec file, returning printable output lines."""
    spec = load_run_spec(spec_file)
    return execute_run_spec(client, spec)


def execute_run_spec(client: RunSpecClient, spec: RunSpec) -> tuple[str, ...]:
    """Execute a parsed run-spec object and return output lines.

    Args:
        client: Client used for every step.
        spec: Validated run-spec.

    Returns:
        Output lines in step order.
    """
    execution_client = client
    if spec.defaults.data_root:
        execution_client = execution_client.with_data_root(spec.defaults.data_root)
    if spec.defaults.db_path:
        execution_client = execution_client.with_database_path(spec.defaults.db_path)
    execution_client.open()
    context = RunSpecExecutionContext(client=execution_client)
    output_lines: list[str] = []
    for step in spec.steps:
        output_lines.extend(_execute_step(context, step))
    return tuple(output_lines)


def _execute_step(context: RunSpecExecutionContext, step: RunSpecStep) -> tuple[str, ...]:
    if step.command == "import":
        return (_execute_import_step(context, step),)
    if step.command == "search":
        return _execute_search_step(context, step)
    if step.command == "get":
        return (_execute_get_step(context, step),)
    if step.command == "stats":
        return (to_json_line(stats_to_payload(context.client.get_stats())),)
    if step.command == "versions":
        return tuple(
            to_json_line(data_version_to_payload(version))
            for version in context.client.list_versions()
        )
    raise RegisterRunSpecError(f"Unsupported run-spec command '{step.command}'.")


def _execute_import_step(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    options = ImportOptions(
        source_uri=required_string(step.args, "source"),
        provenance=optional_string(step.args, "provenance"),
    )
    use_lock = optional_bool(step.args, "lock", default_value=True)
    lock = context.client.import_lock() if use_lock else nullcontext()
    with lock:
        result = context.client.import_file(options)
    return to_json_line(import_result_to_payload(result))


def _execute_search_step(
    context: RunSpecExecutionContext,
    step: RunSpecStep,
) -> tuple[str, ...]:
    filter_spec = SearchFilter(
        registration_number=optional_string(step.args, "number"),
        organisation_name=optional_string(step.args, "name"),
        postcode=optional_string(step.args, "postcode"),
        public_authority=optional_string(step.args, "public_authority"),
        payment_tier=optional_string(step.args, "payment_tier"),
        limit=int_with_default(step.args, "limit", DEFAULT_SEARCH_LIMIT),
        offset=int_with_default(step.args, "offset", DEFAULT_SEARCH_OFFSET),
    )
    return tuple(
        to_json_line(registration_to_payload(registration))
        for registration in context.client.search(filter_spec)
    )


def _execute_get_step(context: RunSpecExecutionContext, step: RunSpecStep) -> str:
    registration = context.client.get_by_key(required_string(step.args, "number"))
    if registration is None:
        return "null"
    return to_json_line(registration_to_payload(registration))
