"""Adapters turning PDF files, text dumps and remote plans into source documents."""

from .document import DocumentError, SourceDocument
from .pdf import decode_page_image, read_document
from .remote import fetch_document, is_remote_reference, resolve_document_url
from .text import read_text_document, split_pages

__all__ = [
    "DocumentError",
    "SourceDocument",
    "decode_page_image",
    "fetch_document",
    "is_remote_reference",
    "read_document",
    "read_text_document",
    "resolve_document_url",
    "split_pages",
]
