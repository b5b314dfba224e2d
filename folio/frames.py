"""Per-page frame assembly: header, clipped content, footer."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional

from .blocks import Document
from .dimensions import Margins, PageDimensionProvider
from .mirror import PageClip
from .page_breaks import PageInfo
from .variables import HeaderFooterContent


@dataclass(frozen=True)
class PageFrame:
    index: int
    page_number: int
    total_pages: int
    is_active: bool
    is_mounted: bool
    header: Optional[HeaderFooterContent]
    content: Optional[PageClip]  # None for placeholders
    footer: Optional[HeaderFooterContent]
    width: float
    height: float
    zoom: float = 1.0
    margins: Margins = Margins()
    header_height: float = 0.0
    footer_height: float = 0.0
    content_height: float = 0.0

    @property
    def scaled_width(self) -> float:
        return self.width * self.zoom

    @property
    def scaled_height(self) -> float:
        return self.height * self.zoom

    @property
    def content_width(self) -> float:
        return self.width - self.margins.left - self.margins.right

    @property
    def is_placeholder(self) -> bool:
        return self.content is None


def resolve_band(template: Optional[HeaderFooterContent], page_number: int, total_pages: int,
                 document: Document,
                 today: Optional[datetime.date] = None) -> Optional[HeaderFooterContent]:
    """Resolve a header or footer template; None stays None (band disabled)."""
    if template is None:
        return None
    return template.resolve(page_number, total_pages, document.title, document.number, today)


def build_frame(page: PageInfo, total_pages: int, dimensions: PageDimensionProvider,
                clip: Optional[PageClip], is_active: bool, is_mounted: bool,
                zoom: float, document: Document,
                today: Optional[datetime.date] = None) -> PageFrame:
    """Assemble the frame of one page.

    Headers and footers are resolved even for placeholders so page numbers
    stay visible while scrolling quickly.
    """
    hf = dimensions.settings.header_footer
    page_number = page.index + 1
    header = resolve_band(hf.header_for(page_number), page_number, total_pages, document, today)
    footer = resolve_band(hf.footer_for(page_number), page_number, total_pages, document, today)

    size = dimensions.page_dimensions()
    return PageFrame(
        index=page.index,
        page_number=page_number,
        total_pages=total_pages,
        is_active=is_active,
        is_mounted=is_mounted,
        header=header,
        content=clip if is_mounted else None,
        footer=footer,
        width=size.width,
        height=size.height,
        zoom=zoom,
        margins=dimensions.margins,
        header_height=hf.header_height if header is not None else 0.0,
        footer_height=hf.footer_height if footer is not None else 0.0,
        content_height=dimensions.usable_height(),
    )
