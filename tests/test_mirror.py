"""Tests for mirror snapshots and per-page clipping."""

from folio.blocks import Document
from folio.layout import TextLayout
from folio.mirror import MirrorRenderer, clip_lines
from folio.page_breaks import PageInfo


class Source:
    def __init__(self, document):
        self.document = document

    def __call__(self):
        return self.document


def lines_doc(count):
    return Document.from_text("\n".join(f"line {i}" for i in range(count)))


def test_clip_shifts_content_up_by_page_start():
    layout = TextLayout(604)
    lines = layout.render_lines(lines_doc(10))
    clip = clip_lines(lines, PageInfo(1, 90, 180), 90)
    assert clip.offset == -90
    assert clip.texts() == ["line 5", "line 6", "line 7", "line 8", "line 9"]
    assert clip.lines[0][0] == 0
    assert not clip.editable


def test_clip_masks_content_of_the_next_page():
    layout = TextLayout(604)
    lines = layout.render_lines(lines_doc(10))
    # Page ends early (e.g. manual break) but the viewport is taller
    clip = clip_lines(lines, PageInfo(0, 0, 36), 180)
    assert clip.texts() == ["line 0", "line 1"]


def test_clip_cuts_at_viewport_height():
    layout = TextLayout(604)
    lines = layout.render_lines(lines_doc(10))
    clip = clip_lines(lines, PageInfo(0, 0, 180), 54)
    assert clip.texts() == ["line 0", "line 1", "line 2"]


def test_snapshot_regenerates_only_on_content_change(scheduler):
    source = Source(lines_doc(3))
    mirror = MirrorRenderer(TextLayout(604), scheduler, source)
    assert mirror.refresh_now()
    assert mirror.generation == 1

    # Same content, new version: nothing to do
    source.document = source.document.replace_blocks(source.document.blocks)
    mirror.request_refresh()
    scheduler.tick()
    assert mirror.generation == 1

    source.document = lines_doc(4)
    mirror.request_refresh()
    scheduler.tick()
    assert mirror.generation == 2
    assert len(mirror.snapshot.lines) == 4


def test_refresh_requests_coalesce_into_one_frame(scheduler):
    source = Source(lines_doc(1))
    mirror = MirrorRenderer(TextLayout(604), scheduler, source)
    mirror.refresh_now()
    for n in range(2, 7):
        source.document = lines_doc(n)
        mirror.request_refresh()
    assert mirror.generation == 1
    scheduler.tick()
    assert mirror.generation == 2
    assert len(mirror.snapshot.lines) == 6


def test_mirror_lags_until_the_frame_runs(scheduler):
    source = Source(lines_doc(2))
    mirror = MirrorRenderer(TextLayout(604), scheduler, source)
    source.document = lines_doc(5)
    page = PageInfo(0, 0, 500)
    assert len(mirror.clip(page, 500).lines) == 5  # first clip builds the snapshot
    source.document = lines_doc(8)
    mirror.request_refresh()
    assert len(mirror.clip(page, 500).lines) == 5
    assert len(mirror.live_clip(page, 500, source.document).lines) == 8
    scheduler.tick()
    assert len(mirror.clip(page, 500).lines) == 8


def test_live_clip_is_editable(scheduler):
    source = Source(lines_doc(2))
    mirror = MirrorRenderer(TextLayout(604), scheduler, source)
    clip = mirror.live_clip(PageInfo(0, 0, 36), 100, source.document)
    assert clip.editable
    assert clip.texts() == ["line 0", "line 1"]


def test_new_renderer_rebuilds_snapshot(scheduler):
    source = Source(Document.from_text("word " * 30))
    mirror = MirrorRenderer(TextLayout(604), scheduler, source)
    mirror.refresh_now()
    wide = len(mirror.snapshot.lines)
    mirror.set_renderer(TextLayout(90))
    assert len(mirror.snapshot.lines) > wide
    assert mirror.generation == 2


def test_cancel_drops_pending_refresh(scheduler):
    source = Source(lines_doc(1))
    mirror = MirrorRenderer(TextLayout(604), scheduler, source)
    mirror.refresh_now()
    source.document = lines_doc(2)
    mirror.request_refresh()
    mirror.cancel()
    scheduler.tick()
    assert mirror.generation == 1
