"""Folio CLI entry point.

Allows running via `python -m folio` and provides the console script
defined in `pyproject.toml`. Paginates a plain-text document and prints its
page frames to the terminal.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import PAGES_PER_ROW_CHOICES, ScrollBreakStyle
from .constants import EngineConstants
from .dimensions import MARGIN_PRESETS, Orientation, PageFormat
from .version import get_version_string
from .view_mode import ViewMode

logger = logging.getLogger(__name__)


def _pages_per_row(value: str):
    if value == "auto":
        return value
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid pages per row: {value}")
    if count not in PAGES_PER_ROW_CHOICES:
        raise argparse.ArgumentTypeError("pages per row must be 1, 2, 3 or auto")
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="folio", description=__doc__.splitlines()[0])
    parser.add_argument("file", nargs="?", help="plain-text document to paginate")
    parser.add_argument("-V", "--version", action="store_true", help="print version and exit")
    parser.add_argument("--format", choices=[f.value for f in PageFormat], help="page format")
    parser.add_argument("--orientation", choices=[o.value for o in Orientation])
    parser.add_argument("--margins", choices=sorted(MARGIN_PRESETS), help="margin preset")
    parser.add_argument("--mode", choices=[m.value for m in ViewMode], help="view mode")
    parser.add_argument("--zoom", type=float)
    parser.add_argument("--pages-per-row", type=_pages_per_row)
    parser.add_argument("--break-style", choices=[s.value for s in ScrollBreakStyle],
                        help="page break indicator style in scroll mode")
    parser.add_argument("--page", type=int, help="1-based page to bring into view")
    parser.add_argument("--all", action="store_true", help="render every page, not only visible ones")
    parser.add_argument("--title", help="document title (defaults to the file name)")
    parser.add_argument("--number", default="", help="dossier number for {{document.numero}}")
    parser.add_argument("--save", action="store_true", help="remember these page settings")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.version:
        print(get_version_string())
        return 0
    if not args.file:
        print("folio: a document file is required", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Lazy import to avoid importing UI deps for --version
    import blessed

    from .blocks import Document
    from .page_view import PageViewSystem
    from .settings_persistence import SettingsPersistence
    from .surface import BufferSurface
    from .terminal import TerminalPageRenderer

    path = Path(args.file)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"folio: cannot read {path}: {e}", file=sys.stderr)
        return 1

    persistence = SettingsPersistence()
    settings = persistence.load(str(path))
    changes = {}
    if args.format:
        changes["page_format"] = PageFormat(args.format)
    if args.orientation:
        changes["orientation"] = Orientation(args.orientation)
    if args.mode:
        changes["view_mode"] = ViewMode(args.mode)
    if args.zoom is not None:
        changes["zoom"] = args.zoom
    if args.pages_per_row is not None:
        changes["pages_per_row"] = args.pages_per_row
    if args.break_style:
        changes["scroll_page_break_style"] = ScrollBreakStyle(args.break_style)
        changes["show_scroll_page_breaks"] = True
    if changes:
        settings = settings.with_changes(**changes)
    if args.margins:
        settings = settings.with_margin_preset(args.margins)

    document = Document.from_text(text, title=args.title or path.stem, number=args.number)
    term = blessed.Terminal()
    surface = BufferSurface(document)
    system = PageViewSystem(surface, settings,
                            container_width=term.width * EngineConstants.CHAR_WIDTH,
                            viewport_height=term.height * EngineConstants.LINE_HEIGHT)
    try:
        if args.page is not None:
            system.navigate_to_page(args.page - 1, animate=False)
            system.scheduler.run_until_idle()
        renderer = TerminalPageRenderer(term)
        if system.view_mode is ViewMode.SCROLL:
            lines = renderer.render_scroll(system.layout.render_lines(surface.document),
                                           system.pages, system.settings, surface.document,
                                           system.layout.columns)
        else:
            lines = renderer.render_grid(system.frames(mount_all=args.all),
                                         system.effective_pages_per_row)
        renderer.write(lines)
        logger.info(f"{path}: {system.total_pages} pages")
        if args.save and not persistence.save(str(path), system.settings):
            print(f"folio: could not save page settings for {path}", file=sys.stderr)
    finally:
        system.close()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
