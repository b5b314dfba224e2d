"""Page formats, orientation, margins and the usable content height.

All values are pixels at 96 DPI. The provider reads only the settings it is
given; nothing here consults global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from .constants import EngineConstants


class PageFormat(Enum):
    A4 = "A4"
    A5 = "A5"
    LETTER = "Letter"
    LEGAL = "Legal"
    CUSTOM = "custom"


class Orientation(Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


@dataclass(frozen=True)
class PageDimensions:
    width: float
    height: float


@dataclass(frozen=True)
class Margins:
    top: float = EngineConstants.DEFAULT_MARGIN
    right: float = EngineConstants.DEFAULT_MARGIN
    bottom: float = EngineConstants.DEFAULT_MARGIN
    left: float = EngineConstants.DEFAULT_MARGIN


# (width, height, label)
PAGE_FORMATS: Dict[PageFormat, Tuple[int, int, str]] = {
    PageFormat.A4: (794, 1123, "A4 (210 × 297 mm)"),
    PageFormat.A5: (559, 794, "A5 (148 × 210 mm)"),
    PageFormat.LETTER: (816, 1056, "Letter (8.5 × 11 in)"),
    PageFormat.LEGAL: (816, 1344, "Legal (8.5 × 14 in)"),
    PageFormat.CUSTOM: (794, 1123, "Custom"),
}

MARGIN_PRESETS: Dict[str, Margins] = {
    "etroit": Margins(57, 57, 57, 57),  # 1.5 cm
    "normal": Margins(95, 95, 95, 95),  # 2.5 cm
    "large": Margins(133, 133, 133, 133),  # 3.5 cm
    "juridique": Margins(95, 76, 95, 114),  # wide binding margin on the left
}


class PageDimensionProvider:
    """Resolves page geometry from a ``PageSettings`` record."""

    def __init__(self, settings):
        self.settings = settings

    def page_dimensions(self) -> PageDimensions:
        s = self.settings
        if s.page_format is PageFormat.CUSTOM:
            width, height = s.custom_width, s.custom_height
        else:
            width, height, _ = PAGE_FORMATS[s.page_format]
        if s.orientation is Orientation.LANDSCAPE:
            width, height = height, width
        return PageDimensions(width, height)

    @property
    def margins(self) -> Margins:
        return self.settings.margins

    def header_height(self) -> float:
        hf = self.settings.header_footer
        return hf.header_height if hf.header_enabled else 0

    def footer_height(self) -> float:
        hf = self.settings.header_footer
        return hf.footer_height if hf.footer_enabled else 0

    def content_width(self) -> float:
        page = self.page_dimensions()
        return page.width - self.margins.left - self.margins.right

    def usable_height(self) -> float:
        """Page height minus margins minus header/footer heights.

        May be zero or negative when margins exceed the page; callers treat
        that as a degenerate single-page layout.
        """
        page = self.page_dimensions()
        return (page.height - self.margins.top - self.margins.bottom
                - self.header_height() - self.footer_height())
