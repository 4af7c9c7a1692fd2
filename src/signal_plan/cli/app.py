"""Command line application entry point for signal-plan."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from ..logging.config import setup_logging
from .errors import CliError, log_cli_error
from .io import load_cli_config
from .parser import build_parser

CommandHandler = Callable[..., str]


def _preliminary_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", dest="config_path", type=Path, default=None)
    parser.add_argument("--log-level", dest="log_level", default=None)
    parser.add_argument("--log-output", dest="log_output", default=None)
    parser.add_argument("--log-format", dest="log_format", choices=("json", "text"), default=None)
    return parser


def _logging_config(
    config: Mapping[str, Any], preliminary: argparse.Namespace
) -> dict[str, Any]:
    raw = config.get("logging", {})
    logging_config = dict(raw) if isinstance(raw, Mapping) else {}
    if preliminary.log_level is not None:
        logging_config["level"] = preliminary.log_level
    if preliminary.log_output is not None:
        logging_config["output"] = preliminary.log_output
    if preliminary.log_format is not None:
        logging_config["format"] = preliminary.log_format
    logging_config.setdefault("level", "info")
    logging_config.setdefault("output", "stderr")
    logging_config.setdefault("format", "json")
    return logging_config


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the signal-plan command line interface."""

    preliminary, _ = _preliminary_parser().parse_known_args(args)

    config = load_cli_config(preliminary.config_path)
    config["logging"] = _logging_config(config, preliminary)
    try:
        setup_logging(config)
    except ValueError as exc:
        sys.stdout.write(f"{exc}\n")
        raise SystemExit(2) from exc

    parser = build_parser(config)
    namespace = parser.parse_args(args)
    namespace.config = config

    handler: Optional[CommandHandler] = getattr(namespace, "handler", None)
    if handler is None:
        raise CliError(
            f"Unknown command '{getattr(namespace, 'command', None)}'.",
            category="usage",
            context={"command": getattr(namespace, "command", None)},
        )

    try:
        result = handler(namespace, config=config)
    except CliError as exc:
        if not exc.logged:
            log_cli_error(exc.payload, exc_info=exc)
            exc.logged = True
        message = exc.payload.message
        if message:
            sys.stdout.write(message)
            if not message.endswith("\n"):
                sys.stdout.write("\n")
        raise SystemExit(exc.status_code) from exc
    if result:
        sys.stdout.write(result)
        if not result.endswith("\n"):
            sys.stdout.write("\n")
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
