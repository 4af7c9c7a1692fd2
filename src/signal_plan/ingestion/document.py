"""Source documents handed over by the PDF, text and HTTP adapters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.models import RasterGraphic

__all__ = ["DocumentError", "SourceDocument"]


class DocumentError(RuntimeError):
    """Raised when a timing-plan document cannot be fetched or decoded."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """Per-page text and decoded graphics of one timing-plan document."""

    pages: tuple[str, ...]
    graphics: tuple[tuple[RasterGraphic, ...], ...] = ()
    source: str = ""

    @classmethod
    def from_pages(
        cls,
        pages: Sequence[Optional[str]],
        graphics: Sequence[Sequence[RasterGraphic]] = (),
        *,
        source: str = "",
    ) -> "SourceDocument":
        return cls(
            pages=tuple(page or "" for page in pages),
            graphics=tuple(tuple(items) for items in graphics),
            source=source,
        )

    @property
    def page_count(self) -> int:
        return max(len(self.pages), len(self.graphics))

    @property
    def graphics_count(self) -> int:
        return sum(len(items) for items in self.graphics)
