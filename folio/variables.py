"""Header and footer template variables.

Templates may contain:

    {{page.current}}             current page number (1-based)
    {{page.total}}               total page count
    {{document.title}}           document title
    {{document.numero}}          dossier number
    {{date.format("DD/MM/YYYY")}}  today's date in the given pattern

Anything else between double braces is left untouched.
"""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field, replace
from typing import Optional

from .constants import EngineConstants

MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)
MONTHS_SHORT = (
    "janv.", "févr.", "mars", "avr.", "mai", "juin",
    "juill.", "août", "sept.", "oct.", "nov.", "déc.",
)

_TOKEN = re.compile(r'\{\{\s*([a-z]+\.[a-z]+)(?:\("([^"]*)"\))?\s*\}\}')
_DATE_PART = re.compile(r"YYYY|YY|MMMM|MMM|MM|DD|D")


def format_date(date: datetime.date, pattern: str) -> str:
    """Format ``date`` with YYYY/YY/MMMM/MMM/MM/DD/D pattern tokens."""
    def part(m: re.Match) -> str:
        token = m.group(0)
        if token == "YYYY":
            return str(date.year)
        if token == "YY":
            return str(date.year)[-2:]
        if token == "MMMM":
            return MONTHS[date.month - 1]
        if token == "MMM":
            return MONTHS_SHORT[date.month - 1]
        if token == "MM":
            return f"{date.month:02d}"
        if token == "DD":
            return f"{date.day:02d}"
        return str(date.day)
    return _DATE_PART.sub(part, pattern)


def resolve(template: str, page_number: int, total_pages: int, document_title: str,
            document_number: str = "", today: Optional[datetime.date] = None) -> str:
    """Expand the variables in ``template`` for one page."""
    if "{{" not in template:
        return template
    date = today or datetime.date.today()

    def expand(m: re.Match) -> str:
        name, argument = m.group(1), m.group(2)
        if argument is None:
            if name == "page.current":
                return str(page_number)
            if name == "page.total":
                return str(total_pages)
            if name == "document.title":
                return document_title or ""
            if name == "document.numero":
                return document_number or ""
        elif name == "date.format":
            return format_date(date, argument)
        return m.group(0)

    return _TOKEN.sub(expand, template)


@dataclass(frozen=True)
class HeaderFooterContent:
    left: str = ""
    center: str = ""
    right: str = ""

    def resolve(self, page_number: int, total_pages: int, document_title: str,
                document_number: str = "",
                today: Optional[datetime.date] = None) -> "HeaderFooterContent":
        return HeaderFooterContent(
            resolve(self.left, page_number, total_pages, document_title, document_number, today),
            resolve(self.center, page_number, total_pages, document_title, document_number, today),
            resolve(self.right, page_number, total_pages, document_title, document_number, today),
        )

    def is_empty(self) -> bool:
        return not (self.left or self.center or self.right)


DEFAULT_FOOTER = HeaderFooterContent(center="Page {{page.current}} / {{page.total}}")


@dataclass(frozen=True)
class FirstPageSettings:
    """Header/footer used on page 1 when ``different_first_page`` is set."""

    different_first_page: bool = False
    header_enabled: bool = False
    header_content: HeaderFooterContent = field(default_factory=HeaderFooterContent)
    footer_enabled: bool = False
    footer_content: HeaderFooterContent = field(default_factory=HeaderFooterContent)


def clamp_header_footer_height(height: float) -> float:
    return max(EngineConstants.HEADER_FOOTER_MIN_HEIGHT,
               min(EngineConstants.HEADER_FOOTER_MAX_HEIGHT, height))


@dataclass(frozen=True)
class HeaderFooterSettings:
    header_enabled: bool = False
    header_height: float = EngineConstants.HEADER_HEIGHT_DEFAULT
    header_content: HeaderFooterContent = field(default_factory=HeaderFooterContent)
    footer_enabled: bool = True
    footer_height: float = EngineConstants.FOOTER_HEIGHT_DEFAULT
    footer_content: HeaderFooterContent = DEFAULT_FOOTER
    first_page: FirstPageSettings = field(default_factory=FirstPageSettings)

    def __post_init__(self):
        object.__setattr__(self, "header_height", clamp_header_footer_height(self.header_height))
        object.__setattr__(self, "footer_height", clamp_header_footer_height(self.footer_height))

    def header_for(self, page_number: int) -> Optional[HeaderFooterContent]:
        """Header template for a 1-based page, or None when disabled there."""
        if page_number == 1 and self.first_page.different_first_page:
            if not self.first_page.header_enabled:
                return None
            return self.first_page.header_content
        return self.header_content if self.header_enabled else None

    def footer_for(self, page_number: int) -> Optional[HeaderFooterContent]:
        """Footer template for a 1-based page, or None when disabled there."""
        if page_number == 1 and self.first_page.different_first_page:
            if not self.first_page.footer_enabled:
                return None
            return self.first_page.footer_content
        return self.footer_content if self.footer_enabled else None

    def with_first_page(self, **changes) -> "HeaderFooterSettings":
        return replace(self, first_page=replace(self.first_page, **changes))
