"""Plain-text adapter for pre-extracted timing-plan dumps."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from .document import DocumentError, SourceDocument

__all__ = ["PAGE_SEPARATOR", "read_text_document", "split_pages"]

PAGE_SEPARATOR = "\f"


def split_pages(text: str) -> tuple[str, ...]:
    """Split a dump into pages on form feeds; a dump without any is one page."""

    return tuple(text.split(PAGE_SEPARATOR))


def read_text_document(path: Union[str, Path], *, encoding: str = "utf-8") -> SourceDocument:
    source = Path(path).expanduser()
    try:
        text = source.read_text(encoding=encoding)
    except UnicodeDecodeError as exc:
        raise DocumentError(
            f"Text dump {source} is not valid {encoding}", source=str(source)
        ) from exc
    return SourceDocument.from_pages(split_pages(text), source=str(source))
