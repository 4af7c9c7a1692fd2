from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent
from typing import Iterator

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


from signal_plan.core.models import TimingTable
from signal_plan.core.timing_table import parse_timing_table
from signal_plan.ingestion import SourceDocument

from tests.helpers import MONDAY_PLAN_TEXT, build_graphic


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Drop handlers installed by ``setup_logging`` so tests stay isolated."""

    logger = logging.getLogger("signal_plan")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the repository ``pyproject.toml`` out of CLI config discovery."""

    monkeypatch.delenv("SIGNAL_PLAN_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def monday_table() -> TimingTable:
    return parse_timing_table([MONDAY_PLAN_TEXT])


@pytest.fixture
def monday_document() -> SourceDocument:
    graphics = [build_graphic(fill=value) for value in (10, 20, 30)]
    return SourceDocument.from_pages([MONDAY_PLAN_TEXT], [graphics], source="monday.txt")

