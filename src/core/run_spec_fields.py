"""Typed argument readers for run-spec steps."""

from __future__ import annotations

from typing import Mapping, TypeVar

from core.errors import RegisterRunSpecError

_T = TypeVar("_T")


def required_string(args: Mapping[str, object], field_name: str) -> str:
    """Return a non-blank string argument or fail."""
    value = optional_string(args, field_name)
    if value is None:
        raise RegisterRunSpecError(f"Run-spec step needs a value for '{field_name}'.")
    return value


def optional_string(args: Mapping[str, object], field_name: str) -> str | None:
    """Return a stripped string argument, treating blank as absent."""
    value = _typed_value(args, field_name, str, "a string")
    if value is None:
        return None
    return value.strip() or None


def int_with_default(args: Mapping[str, object], field_name: str, default_value: int) -> int:
    """Return an integer argument, keeping explicit zero."""
    value = _typed_value(args, field_name, int, "an integer")
    return default_value if value is None else value


def optional_bool(args: Mapping[str, object], field_name: str, default_value: bool) -> bool:
    """Return a true/false argument."""
    value = _typed_value(args, field_name, bool, "true or false")
    return default_value if value is None else value


def _typed_value(
    args: Mapping[str, object],
    field_name: str,
    expected_type: type[_T],
    description: str,
) -> _T | None:
    value = args.get(field_name)
    if value is None:
        return None
    # bool is an int subclass; YAML true must not pass as 1.
    if isinstance(value, expected_type) and (
        expected_type is bool or not isinstance(value, bool)
    ):
        return value
    raise RegisterRunSpecError(
        f"Run-spec argument '{field_name}' must be {description}, got {value!r}."
    )
