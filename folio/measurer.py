"""Layout measurement interface.

Pagination and active-page tracking never look at a rendering surface
directly. They ask a ``LayoutMeasurer`` for block heights and caret
coordinates, which keeps them pure functions over measurement results and
lets tests drive them with synthetic measurers.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from .blocks import BlockHeight, BlockRange, Document

logger = logging.getLogger(__name__)


class MeasurementError(Exception):
    """A coordinate or height could not be determined.

    Typically raised at document boundaries while the content is changing.
    Callers treat it as "skip this frame".
    """


@dataclass
class CaretPosition:
    block_index: int = 0
    character_index: int = 0

    def __lt__(self, other):
        if self.block_index != other.block_index:
            return self.block_index < other.block_index
        return self.character_index < other.character_index

    def __ge__(self, other):
        return not self < other


@dataclass(frozen=True)
class CaretCoords:
    """Caret rectangle in document coordinates (pixels from the content top)."""

    top: float
    left: float
    bottom: float


class LayoutMeasurer(ABC):
    """Measures rendered document content."""

    @abstractmethod
    def block_heights(self, document: Document) -> List[BlockHeight]:
        """Return one measurement per block, in document order."""

    @abstractmethod
    def coords_at(self, document: Document, caret: CaretPosition) -> Optional[CaretCoords]:
        """Return caret coordinates, or None when they cannot be determined.

        May raise MeasurementError.
        """

    def height_of(self, document: Document, block_range: BlockRange) -> float:
        """Pixel height spanned by a range of blocks, margins included."""
        heights = self.block_heights(document)
        indices = block_range.indices(len(heights))
        if not indices:
            return 0.0
        first = heights[indices[0]]
        last = heights[indices[-1]]
        return (last.bottom + last.margin_bottom) - (first.offset - first.margin_top)

    def total_height(self, document: Document) -> float:
        heights = self.block_heights(document)
        if not heights:
            return 0.0
        last = heights[-1]
        return last.bottom + last.margin_bottom


def usable_coords(coords: Optional[CaretCoords]) -> Optional[CaretCoords]:
    """Return ``coords`` unless they are missing, non-finite or inconsistent."""
    if coords is None:
        return None
    if any(math.isnan(v) or math.isinf(v) for v in (coords.top, coords.left, coords.bottom)):
        logger.debug(f"Ignoring non-finite caret coordinates {coords}")
        return None
    if coords.top < 0 or coords.bottom < coords.top:
        logger.debug(f"Ignoring inconsistent caret coordinates {coords}")
        return None
    return coords


def safe_coords(coords_at: Callable[[CaretPosition], Optional[CaretCoords]],
                caret: CaretPosition) -> Optional[CaretCoords]:
    """Caret coordinates, or None if measuring failed or returned nonsense."""
    try:
        coords = coords_at(caret)
    except MeasurementError as e:
        logger.debug(f"Caret measurement failed at {caret}: {e}")
        return None
    return usable_coords(coords)
