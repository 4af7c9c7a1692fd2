"""CLI-related test helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from signal_plan.cli import run_cli


def write_text_plan(directory: Path, text: str, name: str = "plan.txt") -> Path:
    """Persist a text dump of a timing plan and return its path."""

    target = directory / name
    target.write_text(text, encoding="utf-8")
    return target


def run_cli_capture(
    args: Sequence[str],
    capsys: pytest.CaptureFixture[str],
) -> tuple[str, str]:
    """Run the CLI with logging routed to stderr and return ``(result, stdout)``."""

    result = run_cli(["--log-output", "stderr", *args])
    captured = capsys.readouterr()
    return result, captured.out
