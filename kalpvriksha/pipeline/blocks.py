from __future__ import annotations

import logging
import math
import random
from typing import List, Optional, Sequence, Tuple, Union

from ..assets import decode_image
from ..record import LabeledValue
from .layout import LayoutEngine

logger = logging.getLogger(__name__)

SECTION_TITLE_HEIGHT = 17.0
SECTION_TITLE_RESERVE = 20.0  # keeps a title off the last lines of a page
CARD_PADDING = 12.0
GRID_COLUMNS = 3
GRID_MAX_ITEMS = 6
CARD_LABEL_LINES = 1
CARD_VALUE_LINES = 2
ILLUSTRATION_RATIO = 16 / 9
INLINE_BOX_SHARE = 0.6

MARKERS = ("diamond", "circle", "triangle", "square")


def section_title(engine: LayoutEngine, title: str) -> None:
    t = engine.theme
    c = engine.canvas
    top = engine.place("section_title", title, SECTION_TITLE_RESERVE)

    y = top + 5
    c.line(t.margin, y, t.margin, y + 6, t.paint(stroke="accent", line_width=1))
    c.text(t.margin + 4, y + 5, title.upper(), t.text("bold", 14, "primary"))

    engine.advance(SECTION_TITLE_HEIGHT, spacing=0)


def label_value(engine: LayoutEngine, label: str, value: Union[str, Sequence[str]]) -> None:
    t = engine.theme
    c = engine.canvas

    label_style = t.text("bold", 10, "primary")
    value_style = t.text("regular", 10, "text")
    value_x = t.margin + t.label_width
    value_w = t.content_width - t.label_width

    text = "\n".join(value) if not isinstance(value, str) else value
    label_lines = c.wrap(label, label_style, t.label_width - 2)
    value_lines = c.wrap(text.strip() or "-", value_style, value_w)
    height = max(len(label_lines), len(value_lines)) * t.line_height

    top = engine.place("label_value", label, height)
    baseline = top + 4
    c.text(t.margin, baseline, label_lines, label_style)
    c.text(value_x, baseline, value_lines, value_style)

    engine.advance(height)


def grid_cells(count: int, left: float, top: float, width: float, card_height: float, gap: float) -> List[Tuple[float, float, float, float]]:
    n = max(0, min(count, GRID_MAX_ITEMS))
    card_w = (width - gap * (GRID_COLUMNS - 1)) / GRID_COLUMNS
    cells = []
    for i in range(n):
        col = i % GRID_COLUMNS
        row = i // GRID_COLUMNS
        cells.append((left + col * (card_w + gap), top + row * (card_height + gap), card_w, card_height))
    return cells


def grid_height(count: int, card_height: float, gap: float) -> float:
    n = max(0, min(count, GRID_MAX_ITEMS))
    return math.ceil(n / GRID_COLUMNS) * (card_height + gap)


def _fit_lines(lines: List[str], limit: int, label: str) -> List[str]:
    if len(lines) > limit:
        logger.info("Highlight %r cut to %d of %d lines", label, limit, len(lines))
    return lines[:limit]


def highlight_grid(engine: LayoutEngine, highlights: Sequence[LabeledValue], rng: random.Random) -> None:
    items = list(highlights)[:GRID_MAX_ITEMS]
    if not items:
        return

    t = engine.theme
    c = engine.canvas
    height = grid_height(len(items), t.card_height, t.grid_gap)
    top = engine.place("highlight_grid", f"{len(items)} highlights", height)

    label_style = t.text("bold", 7, "muted")
    value_style = t.text("bold", 10, "primary", leading=4)
    border = t.paint(stroke="accent", line_width=0.2)
    track = t.paint(fill="accent")
    fill = t.paint(fill="primary")

    for item, (x, y, w, h) in zip(items, grid_cells(len(items), t.margin, top, t.content_width, t.card_height, t.grid_gap)):
        c.round_rect(x, y, w, h, 1, border)
        label = _fit_lines(c.wrap(item.label.upper(), label_style, w - 4), CARD_LABEL_LINES, item.label)
        c.text(x + w / 2, y + 6, label, label_style, align="center")

        lines = _fit_lines(c.wrap(item.value, value_style, w - 4), CARD_VALUE_LINES, item.label)
        c.text(x + w / 2, y + 12, lines, value_style, align="center")

        # decorative only, not derived from the data
        bar_w = w - 12
        c.rect(x + 6, y + h - 3, bar_w, 1, track)
        c.rect(x + 6, y + h - 3, bar_w * (0.4 + rng.random() * 0.4), 1, fill)

    engine.advance(height, spacing=8 - t.grid_gap)


def draw_marker(engine: LayoutEngine, kind: str, x: float, y: float) -> None:
    """Geometric marker centered on (x, y + 1.5); purely visual."""
    c = engine.canvas
    paint = engine.theme.paint(fill="accent")
    r = 1.2
    cy = y + 1.5

    if kind == "diamond":
        c.triangle(x, cy - r, x + r, cy, x - r, cy, paint)
        c.triangle(x, cy + r, x + r, cy, x - r, cy, paint)
    elif kind == "circle":
        c.circle(x, cy, r, paint)
    elif kind == "triangle":
        c.triangle(x, cy - r, x + r, cy + r, x - r, cy + r, paint)
    elif kind == "square":
        c.rect(x - r, cy - r, r * 2, r * 2, paint)
    else:
        raise ValueError(f"Unknown marker: {kind}")


def card(engine: LayoutEngine, title: str, body: Union[str, Sequence[str]], marker: Optional[str] = None) -> None:
    t = engine.theme
    c = engine.canvas

    if marker is not None and marker not in MARKERS:
        raise ValueError(f"Unknown marker: {marker}")

    body_style = t.text("regular", 10, "text")
    text = body if isinstance(body, str) else "\n".join(f"• {item}" for item in body)
    lines = c.wrap(text, body_style, t.content_width - 8)
    height = len(lines) * t.line_height + CARD_PADDING

    top = engine.place("card", title, height)
    c.line(t.margin, top, t.margin, top + height - 5, t.paint(stroke="accent", line_width=0.8))

    title_x = t.margin + 5
    if marker:
        draw_marker(engine, marker, t.margin + 5, top + 1.5)
        title_x = t.margin + 12

    c.text(title_x, top + 4, title, t.text("bold", 10, "primary"))
    c.text(t.margin + 5, top + 10, lines, body_style)

    engine.advance(height, spacing=0)


def illustration_size(max_width: float, height: float) -> Tuple[float, float]:
    w = height * ILLUSTRATION_RATIO
    if w > max_width:
        return max_width, max_width / ILLUSTRATION_RATIO
    return w, height


def illustration(engine: LayoutEngine, kind: str, data: bytes, height: float, inline: bool = False) -> None:
    t = engine.theme
    # decode before reserving so a bad image leaves the layout untouched
    image = decode_image(data)

    box = t.content_width * INLINE_BOX_SHARE if inline else t.content_width
    w, h = illustration_size(box, height)

    top = engine.place("illustration", kind, h)
    engine.canvas.image(image, t.margin + (t.content_width - w) / 2, top, w, h)
    engine.advance(h)
