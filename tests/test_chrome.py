from __future__ import annotations

import pytest

from kalpvriksha.assets import prepare_logo
from kalpvriksha.pipeline.canvas import Canvas
from kalpvriksha.pipeline.chrome import PageChrome, fit_box
from kalpvriksha.pipeline.theme import ReportTheme


@pytest.mark.parametrize(
    "ratio, max_dim, expected",
    [
        (2.0, 6, (6, 3)),
        (4.0, 100, (100, 25)),
        (1.0, 45, (45, 45)),
        (0.5, 25, (12.5, 25)),
        (0.0, 10, (10, 10)),
    ],
)
def test_fit_box(ratio, max_dim, expected) -> None:
    assert fit_box(ratio, max_dim) == pytest.approx(expected)


def _chrome(logo=None) -> PageChrome:
    theme = ReportTheme()
    return PageChrome(Canvas(theme.page_size), theme, logo)


def _images(chrome: PageChrome):
    return [op for op in chrome.canvas.active_page.ops if op.kind == "image"]


def test_header_logo_keeps_aspect(make_png) -> None:
    chrome = _chrome(prepare_logo(make_png((300, 100))))
    chrome.draw_header()
    (image,) = _images(chrome)
    x, y, w, h = image.geometry
    assert (w, h) == pytest.approx((6, 2))
    assert x == chrome.theme.margin
    # wordmark sits right of the glyph
    wordmark = next(op for op in chrome.canvas.active_page.ops if op.kind == "text" and op.payload["lines"] == ["KALPVRIKSHA"])
    assert wordmark.geometry[0] == pytest.approx(chrome.theme.margin + 8)


def test_header_without_logo_is_text_only() -> None:
    chrome = _chrome()
    chrome.draw_header()
    assert _images(chrome) == []
    texts = chrome.canvas.active_page.texts()
    assert texts == ["KALPVRIKSHA", "Astrological Analysis"]


def test_watermark_is_faint_and_centered(make_png) -> None:
    chrome = _chrome(prepare_logo(make_png((100, 200))))
    chrome.draw_watermark()
    (image,) = _images(chrome)
    x, y, w, h = image.geometry
    theme = chrome.theme
    assert (w, h) == pytest.approx((50, 100))
    assert x + w / 2 == pytest.approx(theme.page_width / 2)
    assert y + h / 2 == pytest.approx(theme.page_height / 2)
    assert image.style == pytest.approx(0.05)

    text = chrome.canvas.active_page.ops[-1]
    assert text.payload["angle"] == 45
    assert text.style.color == theme.watermark_color


def test_footer_is_centered_page_number() -> None:
    chrome = _chrome()
    chrome.draw_footer(7)
    (op,) = chrome.canvas.active_page.ops
    assert op.payload["lines"] == ["7"]
    assert op.payload["align"] == "center"
    assert op.geometry[1] == pytest.approx(chrome.theme.page_height - 10)


def test_place_logo_rejects_empty_box(make_png) -> None:
    chrome = _chrome(prepare_logo(make_png()))
    assert chrome.place_logo(20, 20, 0) is None
    assert _images(chrome) == []
    assert _chrome().place_logo(20, 20, 10) is None
