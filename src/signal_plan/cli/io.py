"""Configuration and document loading helpers for the signal-plan CLI."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..configuration import PROJECT_FILENAME, load_project_config
from ..core.correlator import graphics_from_payload
from ..ingestion import (
    DocumentError,
    SourceDocument,
    fetch_document,
    is_remote_reference,
    read_document,
    read_text_document,
)
from ..processing import TimingPlan, extract_plan, table_from_payload
from ..settings import ParserOptions, SourceOptions
from .errors import CliError

CONFIG_ENV_VAR = "SIGNAL_PLAN_CONFIG"

_TEXT_SUFFIXES = {".txt", ".text"}


def _iter_unique_paths(candidates: List[Path]) -> List[Path]:
    seen: Dict[Path, None] = {}
    ordered: List[Path] = []
    for candidate in candidates:
        resolved = candidate.expanduser().resolve(strict=False)
        if resolved in seen:
            continue
        seen[resolved] = None
        ordered.append(resolved)
    return ordered


def _pyproject_candidates(base: Path) -> List[Path]:
    base = base.expanduser()
    if base.name == PROJECT_FILENAME:
        return [base]
    if base.suffix:
        return []
    return [base / PROJECT_FILENAME]


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load CLI defaults from ``pyproject.toml`` files.

    An explicit ``path`` wins over the ``SIGNAL_PLAN_CONFIG`` environment
    variable, which wins over the current working directory.
    """

    env_config = os.environ.get(CONFIG_ENV_VAR)
    bases: List[Path] = []
    if path is not None:
        bases.append(path)
    if env_config:
        bases.append(Path(env_config))
    bases.append(Path.cwd())

    for base in bases:
        for candidate in _iter_unique_paths(_pyproject_candidates(base)):
            loaded = load_project_config(candidate)
            if not loaded:
                continue
            payload, resolved = loaded
            payload["_config_path"] = str(resolved)
            return payload

    return {"_config_path": None}


def _load_json_plan(source: Path) -> TimingPlan:
    try:
        with source.open("r", encoding="utf8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise CliError(
            f"JSON plan {source} is not valid JSON: {exc.msg}",
            category="usage",
            context={"path": str(source), "line": exc.lineno},
        ) from exc
    if not isinstance(payload, Mapping) or "timingMap" not in payload:
        raise CliError(
            f"JSON plan {source} must contain a 'timingMap' object",
            category="usage",
            context={"path": str(source)},
        )
    grouped = graphics_from_payload(payload.get("images") or {})
    graphics = tuple(item for group in grouped.values() for item in group)
    return TimingPlan(table=table_from_payload(payload), graphics=graphics, source=str(source))


def load_document(reference: str, config: Mapping[str, Any]) -> SourceDocument:
    """Resolve ``reference`` (path, URL or plan identifier) into a source document."""

    source_options = SourceOptions.from_config(config)
    path = Path(reference).expanduser()
    try:
        if is_remote_reference(reference):
            return fetch_document(
                reference, base_url=source_options.base_url, timeout=source_options.timeout
            )
        if path.exists():
            suffix = path.suffix.lower()
            if suffix == ".pdf":
                return read_document(path)
            if suffix in _TEXT_SUFFIXES:
                return read_text_document(path)
            raise CliError(
                f"Unsupported document format: {path}",
                category="usage",
                context={"path": str(path), "suffix": suffix},
            )
        if path.suffix or os.sep in reference:
            raise CliError(
                f"Document {path} does not exist",
                category="not_found",
                context={"path": str(path)},
            )
        return fetch_document(
            reference, base_url=source_options.base_url, timeout=source_options.timeout
        )
    except DocumentError as exc:
        raise CliError.from_document_error(exc) from exc


def load_plan(reference: str, config: Mapping[str, Any]) -> TimingPlan:
    """Load a timing plan from a document or from a previously exported JSON payload."""

    path = Path(reference).expanduser()
    if path.suffix.lower() == ".json":
        if not path.exists():
            raise CliError(
                f"JSON plan {path} does not exist",
                category="not_found",
                context={"path": str(path)},
            )
        return _load_json_plan(path)

    document = load_document(reference, config)
    return extract_plan(document, **ParserOptions.from_config(config).as_kwargs())


__all__ = ["CONFIG_ENV_VAR", "load_cli_config", "load_document", "load_plan"]
