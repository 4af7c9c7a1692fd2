"""Error helpers for the signal-plan command line tools."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..ingestion.document import DocumentError

__all__ = [
    "CliError",
    "ErrorPayload",
    "build_error_payload",
    "log_cli_error",
]


CATEGORY_STATUS_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
}

_DEFAULT_CATEGORY = "runtime"
_DEFAULT_LOGGER_NAME = "signal_plan.cli"


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """Structured description of a CLI failure."""

    status_code: int
    category: str
    message: str
    context: Mapping[str, Any]

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def _normalise_context(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    if not context:
        return {}
    return {
        key: value if isinstance(value, (str, int, float, bool)) or value is None else str(value)
        for key, value in context.items()
    }


def build_error_payload(
    message: str,
    *,
    category: str = _DEFAULT_CATEGORY,
    status_code: Optional[int] = None,
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    resolved_category = category or _DEFAULT_CATEGORY
    if status_code is None:
        status_code = CATEGORY_STATUS_CODES.get(
            resolved_category, CATEGORY_STATUS_CODES[_DEFAULT_CATEGORY]
        )
    return ErrorPayload(
        status_code=status_code,
        category=resolved_category,
        message=message,
        context=_normalise_context(context),
    )


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    """Emit ``payload`` through ``logger.error`` with structured context."""

    target = logger or logging.getLogger(_DEFAULT_LOGGER_NAME)
    target.error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """Error raised by CLI helpers; its category selects the exit status."""

    __slots__ = ("category", "status_code", "context", "_payload", "logged")

    def __init__(
        self,
        message: str,
        *,
        category: str = _DEFAULT_CATEGORY,
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
        logged: bool = False,
    ) -> None:
        super().__init__(message)
        self._payload = build_error_payload(
            message,
            category=category,
            status_code=status_code,
            context=context,
        )
        self.category = self._payload.category
        self.status_code = self._payload.status_code
        self.context = dict(self._payload.context)
        self.logged = logged

    @property
    def payload(self) -> ErrorPayload:
        return self._payload

    @classmethod
    def from_document_error(cls, exc: DocumentError) -> "CliError":
        return cls(str(exc), category="io", context={"source": exc.source})
