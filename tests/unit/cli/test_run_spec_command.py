"""Unit tests for the run-spec CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cli.main import main
from tests.fixture_paths import fixture_path, register_extract


def test_cli_run_spec_executes_steps(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """run-spec should print one line per step output."""
    spec_path = tmp_path / "job.yaml"
    spec_path.write_text(
        "version: 1\n"
        "steps:\n"
        f"  - command: import\n    source: {register_extract('pagination.csv')}\n"
        "  - command: get\n    number: Z0000004\n"
        "  - command: versions\n",
        encoding="utf-8",
    )

    exit_code = main(["--data-root", str(tmp_path / "data"), "run-spec", str(spec_path)])
    lines = capsys.readouterr().out.splitlines()

    assert exit_code == 0 and len(lines) == 3
    assert json.loads(lines[1])["organisation_name"] == "Delta Dental Practice"


def test_cli_run_spec_invalid_file_returns_one(tmp_path: Path) -> None:
    """Invalid run-spec files should exit with status 1."""
    exit_code = main(
        [
            "--data-root",
            str(tmp_path),
            "run-spec",
            str(fixture_path("run_spec/invalid_command.yaml")),
        ]
    )

    assert exit_code == 1
