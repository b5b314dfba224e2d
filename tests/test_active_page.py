"""Tests for active page tracking."""

from unittest.mock import MagicMock

from folio.active_page import ActivePageTracker
from folio.blocks import Document
from folio.layout import TextLayout
from folio.measurer import CaretCoords, CaretPosition, MeasurementError
from folio.page_breaks import compute_uniform_pages
from folio.surface import BufferSurface


def ten_lines():
    return Document.from_text("\n".join(f"line {i}" for i in range(10)))


def make_tracker(uniform=True):
    surface = BufferSurface(ten_lines(), TextLayout(604))
    # 18px lines, 90px pages: five lines per page
    pages = compute_uniform_pages(180, 90)
    scroll = MagicMock()
    tracker = ActivePageTracker(surface, pages, uniform=uniform, usable_height=90,
                                scroll_to_page=scroll)
    return surface, tracker, scroll


def test_starts_on_first_page():
    _, tracker, _ = make_tracker()
    assert tracker.active_page == 0
    assert tracker.is_editable(0)
    assert not tracker.is_editable(1)


def test_caret_moving_to_another_page_migrates_and_scrolls():
    surface, tracker, scroll = make_tracker()
    migrations = []
    tracker.subscribe(lambda old, new: migrations.append((old, new)))
    surface.set_caret(CaretPosition(7, 0))
    assert tracker.active_page == 1
    assert migrations == [(0, 1)]
    scroll.assert_called_once_with(1)


def test_caret_moving_within_the_page_does_nothing():
    surface, tracker, scroll = make_tracker()
    surface.set_caret(CaretPosition(3, 2))
    assert tracker.active_page == 0
    scroll.assert_not_called()


def test_block_pages_use_enclosing_page():
    surface, tracker, scroll = make_tracker(uniform=False)
    surface.set_caret(CaretPosition(5, 0))
    assert tracker.active_page == 1


def test_measurement_failure_skips_update():
    surface, tracker, scroll = make_tracker()
    surface.coords_at = MagicMock(side_effect=MeasurementError("edge"))
    tracker.on_selection_change(CaretPosition(9, 0))
    assert tracker.active_page == 0
    surface.coords_at = MagicMock(return_value=None)
    tracker.on_selection_change(CaretPosition(9, 0))
    assert tracker.active_page == 0
    surface.coords_at = MagicMock(return_value=CaretCoords(float("nan"), 0, 0))
    tracker.on_selection_change(CaretPosition(9, 0))
    assert tracker.active_page == 0
    scroll.assert_not_called()


def test_caret_beyond_last_page_is_clamped():
    surface, tracker, _ = make_tracker()
    surface.coords_at = MagicMock(return_value=CaretCoords(10_000, 0, 10_018))
    tracker.on_selection_change(CaretPosition(9, 0))
    assert tracker.active_page == 1


def test_click_migrates_then_places_caret():
    surface, tracker, scroll = make_tracker()
    order = []
    tracker.subscribe(lambda old, new: order.append(("migrate", new)))
    surface.on_selection_change(lambda caret: order.append(("caret", caret.block_index)))
    tracker.on_page_click(1, 27, 20)
    assert tracker.active_page == 1
    # Page 1 starts at 90px; y=20 inside it is line 6
    assert surface.caret == CaretPosition(6, 3)
    assert order[0] == ("migrate", 1)
    assert ("caret", 6) in order
    scroll.assert_not_called()


def test_click_below_short_page_stays_on_that_page():
    surface, tracker, _ = make_tracker()
    tracker.on_page_click(0, 0, 500)
    assert tracker.active_page == 0
    assert surface.caret.block_index == 4


def test_click_on_a_line_straddling_the_page_top_keeps_the_clicked_page():
    surface = BufferSurface(ten_lines(), TextLayout(604))
    # 80px pages: line 4 spans 72-90px and starts on page 0
    scroll = MagicMock()
    tracker = ActivePageTracker(surface, compute_uniform_pages(180, 80), uniform=True,
                                usable_height=80, scroll_to_page=scroll)
    tracker.on_page_click(1, 0, 2)
    assert surface.caret.block_index == 4
    assert tracker.active_page == 1
    scroll.assert_not_called()
    # Later caret movement is tracked again
    surface.set_caret(CaretPosition(0, 0))
    assert tracker.active_page == 0
    scroll.assert_called_once_with(0)


def test_repagination_clamps_active_page():
    surface, tracker, _ = make_tracker()
    tracker.activate(1)
    tracker.set_pages(compute_uniform_pages(80, 90))
    assert tracker.active_page == 0


def test_activate_is_clamped_and_does_not_scroll():
    _, tracker, scroll = make_tracker()
    tracker.activate(99)
    assert tracker.active_page == 1
    tracker.activate(-3)
    assert tracker.active_page == 0
    scroll.assert_not_called()


def test_exactly_one_active_page_during_migration():
    surface, tracker, _ = make_tracker()
    seen = []
    tracker.subscribe(lambda old, new: seen.append(
        [i for i in range(tracker.total_pages) if tracker.is_editable(i)]))
    surface.set_caret(CaretPosition(8, 0))
    tracker.activate(0)
    assert seen == [[1], [0]]


def test_close_unsubscribes_from_surface():
    surface, tracker, _ = make_tracker()
    tracker.close()
    surface.set_caret(CaretPosition(8, 0))
    assert tracker.active_page == 0
