"""Editing surface interface.

The rich-text editing surface is an external collaborator. The engine needs
only a narrow slice of it: the content, the caret, coordinate mapping in both
directions and change notifications. ``BufferSurface`` implements that slice
over an in-memory ``Document`` and a ``TextLayout``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .blocks import Block, Document
from .layout import TextLayout
from .measurer import CaretCoords, CaretPosition, MeasurementError

UpdateListener = Callable[[Document, bool], None]
SelectionListener = Callable[[CaretPosition], None]
Unsubscribe = Callable[[], None]


def _subscribe(listeners: list, listener) -> Unsubscribe:
    listeners.append(listener)

    def unsubscribe() -> None:
        if listener in listeners:
            listeners.remove(listener)
    return unsubscribe


class EditingSurface(ABC):
    """What the page view consumes from the live editing surface."""

    @property
    @abstractmethod
    def document(self) -> Document:
        """Current content."""

    @property
    @abstractmethod
    def caret(self) -> CaretPosition:
        """Current caret (selection head)."""

    @abstractmethod
    def coords_at(self, pos: CaretPosition) -> Optional[CaretCoords]:
        """Document coordinates of ``pos``; may raise MeasurementError."""

    @abstractmethod
    def pos_at_coords(self, x: float, y: float) -> Optional[CaretPosition]:
        """Caret position nearest to document coordinates."""

    @abstractmethod
    def set_caret(self, pos: CaretPosition) -> None:
        """Move the caret; fires a selection change."""

    @abstractmethod
    def on_update(self, listener: UpdateListener) -> Unsubscribe:
        """Subscribe to content changes. Listener gets (document, internal)."""

    @abstractmethod
    def on_selection_change(self, listener: SelectionListener) -> Unsubscribe:
        """Subscribe to caret movement."""

    def attach_layout(self, layout: TextLayout) -> None:
        """Reflow the surface with the layout the page view paginates with."""


class BufferSurface(EditingSurface):
    """In-memory editing surface laid out with a ``TextLayout``."""

    def __init__(self, document: Optional[Document] = None,
                 layout: Optional[TextLayout] = None):
        self._document = document or Document()
        self.layout = layout or TextLayout(604)
        self._caret = CaretPosition()
        self._update_listeners: List[UpdateListener] = []
        self._selection_listeners: List[SelectionListener] = []

    @property
    def document(self) -> Document:
        return self._document

    @property
    def caret(self) -> CaretPosition:
        return self._caret

    def coords_at(self, pos: CaretPosition) -> Optional[CaretCoords]:
        return self.layout.coords_at(self._document, pos)

    def pos_at_coords(self, x: float, y: float) -> Optional[CaretPosition]:
        try:
            return self.layout.pos_at(self._document, x, y)
        except MeasurementError:
            return None

    def set_caret(self, pos: CaretPosition) -> None:
        block_count = len(self._document.blocks)
        block_index = max(0, min(pos.block_index, max(0, block_count - 1)))
        text = self._document.blocks[block_index].text if block_count else ""
        self._caret = CaretPosition(block_index, max(0, min(pos.character_index, len(text))))
        for listener in list(self._selection_listeners):
            listener(self._caret)

    def on_update(self, listener: UpdateListener) -> Unsubscribe:
        return _subscribe(self._update_listeners, listener)

    def on_selection_change(self, listener: SelectionListener) -> Unsubscribe:
        return _subscribe(self._selection_listeners, listener)

    def attach_layout(self, layout: TextLayout) -> None:
        self.layout = layout

    def _emit_update(self, internal: bool) -> None:
        for listener in list(self._update_listeners):
            listener(self._document, internal)

    def edit(self, blocks: List[Block]) -> None:
        """Replace content as if typed into the surface (internal update)."""
        self._document = self._document.replace_blocks(blocks)
        self._emit_update(True)

    def insert_text(self, text: str) -> None:
        """Insert text at the caret within the caret's block."""
        blocks = list(self._document.blocks)
        if not blocks:
            return
        i = self._caret.block_index
        block = blocks[i]
        ci = self._caret.character_index
        blocks[i] = Block(block.id, block.kind, block.text[:ci] + text + block.text[ci:],
                          block.level, block.rows, block.height)
        self.edit(blocks)
        self.set_caret(CaretPosition(i, ci + len(text)))

    def load(self, document: Document) -> None:
        """Replace content programmatically (external update)."""
        self._document = document
        self._emit_update(False)
        if self._caret.block_index >= len(document.blocks):
            self.set_caret(CaretPosition(max(0, len(document.blocks) - 1), 0))
