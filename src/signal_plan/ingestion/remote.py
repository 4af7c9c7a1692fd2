"""HTTP adapter fetching timing-plan PDFs with :mod:`httpx`."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from ..settings import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .document import DocumentError, SourceDocument
from .pdf import read_document

__all__ = ["is_remote_reference", "resolve_document_url", "fetch_pdf_bytes", "fetch_document"]

logger = logging.getLogger(__name__)

_SCHEMES = ("http://", "https://")


def is_remote_reference(reference: str) -> bool:
    return reference.lower().startswith(_SCHEMES)


def resolve_document_url(reference: str, *, base_url: str = DEFAULT_BASE_URL) -> str:
    """Return ``reference`` itself when it is a URL, else the plan URL for an identifier."""

    reference = reference.strip()
    if not reference:
        raise ValueError("A document URL or identifier is required")
    if is_remote_reference(reference):
        return reference
    if not base_url.endswith("/"):
        base_url += "/"
    return base_url + quote(reference, safe="")


def fetch_pdf_bytes(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None,
) -> bytes:
    owns_client = client is None
    session = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = session.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DocumentError(
            f"Failed to fetch PDF: {exc.response.status_code} {exc.response.reason_phrase}",
            source=url,
        ) from exc
    except httpx.HTTPError as exc:
        raise DocumentError(f"Failed to fetch PDF: {exc}", source=url) from exc
    finally:
        if owns_client:
            session.close()

    logger.info(
        "Fetched timing-plan document",
        extra={"event": "remote.fetched", "url": url, "bytes": len(response.content)},
    )
    return response.content


def fetch_document(
    reference: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None,
) -> SourceDocument:
    """Download a plan by URL or identifier (e.g. ``SIZTZ10``) and read it."""

    url = resolve_document_url(reference, base_url=base_url)
    payload = fetch_pdf_bytes(url, timeout=timeout, client=client)
    return read_document(payload, label=url)
