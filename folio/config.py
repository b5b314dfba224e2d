"""Page view configuration.

``PageSettings`` is the single configuration record handed to the engine.
It is immutable; changes produce a new record via ``with_changes`` so that
every consumer sees a consistent snapshot. ``to_dict``/``from_dict`` convert
to the JSON shape stored by ``settings_persistence``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Union

from .constants import EngineConstants
from .dimensions import MARGIN_PRESETS, Margins, Orientation, PageFormat
from .variables import FirstPageSettings, HeaderFooterContent, HeaderFooterSettings
from .view_mode import ViewMode

logger = logging.getLogger(__name__)

PagesPerRow = Union[int, str]  # 1, 2, 3 or "auto"
PAGES_PER_ROW_CHOICES = (1, 2, 3, "auto")


class ScrollBreakStyle(Enum):
    LINE = "line"
    COMPACT = "compact"
    FULL = "full"


def clamp_zoom(zoom: float) -> float:
    return max(EngineConstants.MIN_ZOOM, min(EngineConstants.MAX_ZOOM, zoom))


@dataclass(frozen=True)
class PageSettings:
    view_mode: ViewMode = ViewMode.SCROLL
    page_format: PageFormat = PageFormat.A4
    orientation: Orientation = Orientation.PORTRAIT
    custom_width: float = 794
    custom_height: float = 1123
    margins: Margins = field(default_factory=Margins)
    header_footer: HeaderFooterSettings = field(default_factory=HeaderFooterSettings)
    zoom: float = 1.0
    pages_per_row: PagesPerRow = 1
    show_page_breaks: bool = True
    show_scroll_page_breaks: bool = False
    scroll_page_break_style: ScrollBreakStyle = ScrollBreakStyle.COMPACT

    def __post_init__(self):
        object.__setattr__(self, "zoom", clamp_zoom(self.zoom))
        if self.pages_per_row not in PAGES_PER_ROW_CHOICES:
            raise ValueError(f"pages_per_row must be one of {PAGES_PER_ROW_CHOICES}")

    def with_changes(self, **changes) -> "PageSettings":
        return replace(self, **changes)

    def with_margin_preset(self, preset: str) -> "PageSettings":
        return replace(self, margins=MARGIN_PRESETS[preset])

    def to_dict(self) -> Dict[str, Any]:
        hf = self.header_footer
        fp = hf.first_page
        return {
            "view_mode": self.view_mode.value,
            "page_format": self.page_format.value,
            "orientation": self.orientation.value,
            "custom_size": [self.custom_width, self.custom_height],
            "margins": _margins_to_dict(self.margins),
            "header_enabled": hf.header_enabled,
            "header_height": hf.header_height,
            "header_content": _content_to_dict(hf.header_content),
            "footer_enabled": hf.footer_enabled,
            "footer_height": hf.footer_height,
            "footer_content": _content_to_dict(hf.footer_content),
            "first_page": {
                "different_first_page": fp.different_first_page,
                "header_enabled": fp.header_enabled,
                "header_content": _content_to_dict(fp.header_content),
                "footer_enabled": fp.footer_enabled,
                "footer_content": _content_to_dict(fp.footer_content),
            },
            "zoom": self.zoom,
            "pages_per_row": self.pages_per_row,
            "show_page_breaks": self.show_page_breaks,
            "show_scroll_page_breaks": self.show_scroll_page_breaks,
            "scroll_page_break_style": self.scroll_page_break_style.value,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PageSettings":
        """Build settings from stored values, ignoring invalid entries."""
        defaults = cls()
        if not data:
            return defaults
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if not validate_setting(key, value):
                logger.warning(f"Ignoring invalid page setting {key}={value!r}")
                continue
            values[key] = value

        def get(key: str, fallback: Any) -> Any:
            return values.get(key, fallback)

        hf = defaults.header_footer
        fp_data = get("first_page", {})
        first_page = FirstPageSettings(
            different_first_page=fp_data.get("different_first_page", False),
            header_enabled=fp_data.get("header_enabled", False),
            header_content=_content_from_dict(fp_data.get("header_content")),
            footer_enabled=fp_data.get("footer_enabled", False),
            footer_content=_content_from_dict(fp_data.get("footer_content")),
        )
        header_footer = HeaderFooterSettings(
            header_enabled=get("header_enabled", hf.header_enabled),
            header_height=get("header_height", hf.header_height),
            header_content=_content_from_dict(get("header_content", None), hf.header_content),
            footer_enabled=get("footer_enabled", hf.footer_enabled),
            footer_height=get("footer_height", hf.footer_height),
            footer_content=_content_from_dict(get("footer_content", None), hf.footer_content),
            first_page=first_page,
        )
        custom = get("custom_size", [defaults.custom_width, defaults.custom_height])
        return cls(
            view_mode=ViewMode(get("view_mode", defaults.view_mode.value)),
            page_format=PageFormat(get("page_format", defaults.page_format.value)),
            orientation=Orientation(get("orientation", defaults.orientation.value)),
            custom_width=custom[0],
            custom_height=custom[1],
            margins=_margins_from_dict(get("margins", None), defaults.margins),
            header_footer=header_footer,
            zoom=get("zoom", defaults.zoom),
            pages_per_row=get("pages_per_row", defaults.pages_per_row),
            show_page_breaks=get("show_page_breaks", defaults.show_page_breaks),
            show_scroll_page_breaks=get("show_scroll_page_breaks",
                                        defaults.show_scroll_page_breaks),
            scroll_page_break_style=ScrollBreakStyle(
                get("scroll_page_break_style", defaults.scroll_page_break_style.value)),
        )


def _margins_to_dict(margins: Margins) -> Dict[str, float]:
    return {"top": margins.top, "right": margins.right,
            "bottom": margins.bottom, "left": margins.left}


def _margins_from_dict(data: Optional[Dict[str, Any]], fallback: Margins) -> Margins:
    if not data:
        return fallback
    return Margins(
        top=data.get("top", fallback.top),
        right=data.get("right", fallback.right),
        bottom=data.get("bottom", fallback.bottom),
        left=data.get("left", fallback.left),
    )


def _content_to_dict(content: HeaderFooterContent) -> Dict[str, str]:
    return {"left": content.left, "center": content.center, "right": content.right}


def _content_from_dict(data: Optional[Dict[str, Any]],
                       fallback: Optional[HeaderFooterContent] = None) -> HeaderFooterContent:
    fallback = fallback or HeaderFooterContent()
    if not data:
        return fallback
    return HeaderFooterContent(
        left=data.get("left", fallback.left),
        center=data.get("center", fallback.center),
        right=data.get("right", fallback.right),
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_content(value: Any) -> bool:
    return (isinstance(value, dict)
            and all(isinstance(value.get(k, ""), str) for k in ("left", "center", "right")))


def validate_setting(key: str, value: Any) -> bool:
    """Validate one stored page setting.

    Returns:
        True if the value can be used, False otherwise. Unknown keys are
        accepted (forward compatibility) and simply not read.
    """
    if value is None:
        return False

    enums = {
        "view_mode": ViewMode,
        "page_format": PageFormat,
        "orientation": Orientation,
        "scroll_page_break_style": ScrollBreakStyle,
    }
    if key in enums:
        return value in {member.value for member in enums[key]}

    if key in ("header_enabled", "footer_enabled", "show_page_breaks",
               "show_scroll_page_breaks"):
        return isinstance(value, bool)

    if key in ("header_height", "footer_height"):
        return _is_number(value) and value > 0

    if key == "zoom":
        return _is_number(value) and value > 0

    if key == "pages_per_row":
        return value in PAGES_PER_ROW_CHOICES and not isinstance(value, bool)

    if key == "custom_size":
        return (isinstance(value, (list, tuple)) and len(value) == 2
                and all(_is_number(v) and v > 0 for v in value))

    if key == "margins":
        return (isinstance(value, dict)
                and all(_is_number(value.get(k, 0)) and value.get(k, 0) >= 0
                        for k in ("top", "right", "bottom", "left")))

    if key in ("header_content", "footer_content"):
        return _is_content(value)

    if key == "first_page":
        if not isinstance(value, dict):
            return False
        flags_ok = all(isinstance(value.get(k, False), bool)
                       for k in ("different_first_page", "header_enabled", "footer_enabled"))
        contents_ok = all(_is_content(value.get(k, {}))
                          for k in ("header_content", "footer_content"))
        return flags_ok and contents_ok

    return True
