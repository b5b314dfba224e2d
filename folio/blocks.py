"""Document block model.

A document is an ordered sequence of blocks. Blocks are the atomic unit of
pagination: a block is never split across pages. Block kinds form a closed
set; code that dispatches on the kind does so through a table built with
``exhaustive()`` so that adding a kind without handling it fails at import
time instead of falling through silently.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar


class BlockKind(Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST_ITEM = "list_item"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "code_block"
    TABLE = "table"
    IMAGE = "image"
    HORIZONTAL_RULE = "horizontal_rule"
    PAGE_BREAK = "page_break"


T = TypeVar("T")


def exhaustive(table: Mapping[BlockKind, T], name: str) -> Dict[BlockKind, T]:
    """Return ``table`` as a dict after checking it covers every block kind.

    Raises:
        TypeError: If a kind is missing from the table.
    """
    missing = [kind.value for kind in BlockKind if kind not in table]
    if missing:
        raise TypeError(f"{name} does not handle block kinds: {', '.join(missing)}")
    return dict(table)


@dataclass(frozen=True)
class Block:
    """A single block of content.

    ``text`` holds the inline text for textual kinds, ``level`` the heading
    level, ``rows`` the cell texts of a table and ``height`` the intrinsic
    pixel height of an image.
    """

    id: str
    kind: BlockKind
    text: str = ""
    level: int = 1
    rows: Tuple[Tuple[str, ...], ...] = ()
    height: int = 0

    @property
    def is_page_break(self) -> bool:
        return self.kind is BlockKind.PAGE_BREAK


@dataclass(frozen=True)
class Document:
    """Immutable document content plus a monotonically increasing version.

    Every edit bumps the version. Two documents may hold the same content
    under different versions; use ``same_content`` to compare content.
    """

    blocks: Tuple[Block, ...] = ()
    title: str = ""
    number: str = ""
    version: int = 0

    def replace_blocks(self, blocks: Iterable[Block]) -> "Document":
        """Return a new document with ``blocks`` and the next version."""
        return replace(self, blocks=tuple(blocks), version=self.version + 1)

    def manual_breaks(self) -> frozenset:
        """Ids of the manual page break markers in this document."""
        return frozenset(b.id for b in self.blocks if b.is_page_break)

    def block_index(self, block_id: str) -> Optional[int]:
        for i, block in enumerate(self.blocks):
            if block.id == block_id:
                return i
        return None

    def same_content(self, other: Optional["Document"]) -> bool:
        """Compare content, ignoring the version counter."""
        if other is None:
            return False
        return (self.blocks == other.blocks and self.title == other.title
                and self.number == other.number)

    @classmethod
    def from_text(cls, text: str, title: str = "", number: str = "") -> "Document":
        """Build a document from plain text, one block per line.

        Recognised line prefixes: ``#`` headings, ``-``/``*``/``1.`` list
        items, ``>`` quotes, four-space indented code, ``---`` rules,
        ``![alt](height)`` images and ``|a|b|`` table rows. A form feed or a
        line holding ``\\pagebreak`` is a manual page break.
        """
        lines = text.replace("\r\n", "\n").rstrip("\n").split("\n")
        blocks: List[Block] = []
        table_rows: List[Tuple[str, ...]] = []

        def flush_table() -> None:
            if table_rows:
                blocks.append(Block(f"b{len(blocks)}", BlockKind.TABLE,
                                    rows=tuple(table_rows)))
                table_rows.clear()

        for raw in lines:
            if raw.strip(" \t") == "\f":
                flush_table()
                blocks.append(Block(f"b{len(blocks)}", BlockKind.PAGE_BREAK))
                continue
            line = raw.rstrip()
            if line.startswith("|") and line.endswith("|") and len(line) > 1:
                table_rows.append(tuple(c.strip() for c in line[1:-1].split("|")))
                continue
            flush_table()
            block_id = f"b{len(blocks)}"
            blocks.append(_parse_line(block_id, line))
        flush_table()
        return cls(blocks=tuple(blocks), title=title, number=number)


_HEADING = re.compile(r"^(#{1,6}) (.*)$")
_LIST_ITEM = re.compile(r"^\s*(?:[-*]|\d+[.)]) \S")
_IMAGE = re.compile(r"^!\[(.*)\]\((\d+)\)$")


def _parse_line(block_id: str, line: str) -> Block:
    if line.strip() == "\\pagebreak":
        return Block(block_id, BlockKind.PAGE_BREAK)
    m = _HEADING.match(line)
    if m:
        return Block(block_id, BlockKind.HEADING, text=m.group(2), level=len(m.group(1)))
    if line.strip() == "---":
        return Block(block_id, BlockKind.HORIZONTAL_RULE)
    m = _IMAGE.match(line)
    if m:
        return Block(block_id, BlockKind.IMAGE, text=m.group(1), height=int(m.group(2)))
    if _LIST_ITEM.match(line):
        return Block(block_id, BlockKind.LIST_ITEM, text=line)
    if line.startswith("> "):
        return Block(block_id, BlockKind.BLOCKQUOTE, text=line[2:])
    if line.startswith("    ") and line.strip():
        return Block(block_id, BlockKind.CODE_BLOCK, text=line[4:])
    return Block(block_id, BlockKind.PARAGRAPH, text=line)


@dataclass(frozen=True)
class BlockHeight:
    """Measured vertical extent of one block within the full content."""

    block_id: str
    offset: float
    height: float
    margin_top: float = 0
    margin_bottom: float = 0

    @property
    def bottom(self) -> float:
        return self.offset + self.height


@dataclass(frozen=True)
class BlockRange:
    """Half-open range of block indices ``[start, end)``."""

    start: int
    end: int = field(default=-1)

    def indices(self, count: int) -> range:
        end = count if self.end < 0 else min(self.end, count)
        return range(max(0, self.start), end)
