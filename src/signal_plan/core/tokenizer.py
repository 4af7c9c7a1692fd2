"""Whitespace tokenisation of extracted page text."""

from __future__ import annotations

import re
from typing import Iterable, Optional

__all__ = ["TokenRow", "tokenize_page", "tokenize_pages", "flatten_tokens"]

TokenRow = list[str]

_LINE_BREAK = re.compile(r"\r?\n")
_WHITESPACE = re.compile(r"\s+")


def tokenize_page(text: Optional[str]) -> list[TokenRow]:
    """Split one page into rows of non-empty tokens, one row per text line."""

    if not text:
        return []
    rows: list[TokenRow] = []
    for line in _LINE_BREAK.split(text):
        row = [token for token in _WHITESPACE.sub(" ", line.strip()).split(" ") if token]
        if row:
            rows.append(row)
    return rows


def tokenize_pages(pages: Iterable[Optional[str]]) -> list[TokenRow]:
    """Concatenate the token rows of ``pages`` in page order."""

    rows: list[TokenRow] = []
    for page in pages:
        rows.extend(tokenize_page(page))
    return rows


def flatten_tokens(text: Optional[str]) -> list[str]:
    """Return the single reading-order token stream of one page."""

    if not text:
        return []
    return [token for token in _WHITESPACE.split(text) if token]
