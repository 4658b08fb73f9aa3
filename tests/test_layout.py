from __future__ import annotations

import pytest

from kalpvriksha.pipeline.canvas import Canvas, Page
from kalpvriksha.pipeline.chrome import PageChrome
from kalpvriksha.pipeline.layout import LayoutEngine, LayoutError
from kalpvriksha.pipeline.theme import ReportTheme


def _engine() -> LayoutEngine:
    theme = ReportTheme()
    canvas = Canvas(theme.page_size)
    engine = LayoutEngine(canvas, PageChrome(canvas, theme), theme)
    engine.open_cover()
    return engine


def _footers(page: Page, theme: ReportTheme) -> list[str]:
    y = theme.page_height - theme.footer_offset
    return [
        op.payload["lines"][0]
        for op in page.ops
        if op.kind == "text" and op.geometry[1] == pytest.approx(y)
    ]


def test_reserve_without_overflow_is_noop() -> None:
    engine = _engine()
    engine.break_page()
    assert engine.reserve(50) is False
    assert engine.cursor == engine.theme.top_margin
    assert engine.canvas.page_count == 2


def test_reserve_breaks_and_resets_cursor() -> None:
    engine = _engine()
    engine.break_page()
    engine.advance(240, spacing=0)
    assert engine.reserve(20) is True
    assert engine.canvas.page_count == 3
    assert engine.canvas.active_index == 2
    assert engine.cursor == engine.theme.top_margin


def test_cursor_never_passes_bottom_limit() -> None:
    engine = _engine()
    engine.break_page()
    heights = [7, 33, 12, 48, 5, 90, 21, 64, 3, 150, 18, 300, 9]
    for height in heights * 3:
        page_before = engine.canvas.active_index
        top = engine.place("block", str(height), height)
        if engine.canvas.active_index != page_before:
            assert top == engine.theme.top_margin
        engine.advance(height)
        assert engine.cursor <= engine.bottom_limit


def test_break_draws_chrome_on_new_page() -> None:
    engine = _engine()
    engine.break_page()
    page = engine.canvas.pages[1]
    texts = page.texts()
    assert "KALPVRIKSHA" in texts          # watermark and header wordmark
    assert "Astrological Analysis" in texts
    # watermark comes first so content sits above it
    assert page.ops[0].payload["angle"] == 45


def test_each_page_gets_exactly_one_footer() -> None:
    engine = _engine()
    for _ in range(3):
        engine.break_page()
    engine.finalize()

    theme = engine.theme
    for page in engine.canvas.pages:
        assert _footers(page, theme) == [str(page.index + 1)]


def test_close_page_is_idempotent() -> None:
    engine = _engine()
    engine.break_page()
    engine.close_page()
    engine.close_page()
    engine.finalize()
    assert _footers(engine.canvas.pages[1], engine.theme) == ["2"]


def test_finalize_requires_closed_cover() -> None:
    engine = _engine()
    with pytest.raises(LayoutError):
        engine.finalize()


def test_no_breaks_after_finalize() -> None:
    engine = _engine()
    engine.break_page()
    engine.finalize()
    with pytest.raises(LayoutError):
        engine.break_page()


def test_negative_heights_are_rejected() -> None:
    engine = _engine()
    with pytest.raises(LayoutError):
        engine.reserve(-1)
    with pytest.raises(LayoutError):
        engine.advance(-1)


def test_cover_must_be_fresh() -> None:
    engine = _engine()
    engine.break_page()
    with pytest.raises(LayoutError):
        engine.open_cover()


def test_placements_are_logged() -> None:
    engine = _engine()
    engine.break_page()
    top = engine.place("card", "Gemstones", 30)
    assert engine.placements[-1].page == 1
    assert engine.placements[-1].top == top
    assert engine.placements[-1].height == 30


def test_oversize_block_on_fresh_page_does_not_add_blank_page() -> None:
    engine = _engine()
    engine.break_page()
    engine.advance(50)
    engine.reserve(400)
    assert engine.canvas.page_count == 3
    assert engine.reserve(400) is False
    assert engine.canvas.page_count == 3
