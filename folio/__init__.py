"""Folio - pagination and page-view engine for a legal word processor."""

from .blocks import Block, BlockKind, Document
from .config import PageSettings, ScrollBreakStyle
from .dimensions import Margins, Orientation, PageDimensionProvider, PageFormat
from .layout import TextLayout
from .page_breaks import PageBreakCalculator, PageInfo, compute_pages
from .page_view import PageViewSystem
from .surface import BufferSurface, EditingSurface
from .variables import HeaderFooterContent, HeaderFooterSettings, resolve
from .view_mode import ViewMode

__all__ = [
    'Block',
    'BlockKind',
    'Document',
    'PageSettings',
    'ScrollBreakStyle',
    'Margins',
    'Orientation',
    'PageDimensionProvider',
    'PageFormat',
    'TextLayout',
    'PageBreakCalculator',
    'PageInfo',
    'compute_pages',
    'PageViewSystem',
    'BufferSurface',
    'EditingSurface',
    'HeaderFooterContent',
    'HeaderFooterSettings',
    'resolve',
    'ViewMode',
]
