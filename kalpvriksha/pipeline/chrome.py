from __future__ import annotations

import logging
from typing import Optional, Tuple

from ..assets import LogoAsset
from ..config import BRAND_NAME, BRAND_TAGLINE
from .canvas import Canvas
from .theme import ReportTheme

logger = logging.getLogger(__name__)


def fit_box(ratio: float, max_dim: float) -> Tuple[float, float]:
    """Scale a logo of width/height `ratio` so its longer side equals max_dim."""
    if ratio <= 0:
        ratio = 1.0
    if ratio > 1:
        return max_dim, max_dim / ratio
    return max_dim * ratio, max_dim


class PageChrome:
    """Header, footer and watermark repeated on every page."""

    def __init__(self, canvas: Canvas, theme: ReportTheme, logo: Optional[LogoAsset] = None) -> None:
        self.canvas = canvas
        self.theme = theme
        self.logo = logo

    def place_logo(self, x: float, y: float, max_dim: float, alpha: float = 1.0) -> Optional[Tuple[float, float]]:
        """Draw the logo with its top-left at (x, y); returns (w, h) or None when unavailable."""
        if self.logo is None:
            return None
        w, h = fit_box(self.logo.ratio, max_dim)
        # only the box is checked here; a logo that fails at replay fails the render
        try:
            self.canvas.image(self.logo.image, x, y, w, h, alpha=alpha)
        except ValueError as exc:
            logger.warning("Could not place logo: %s", exc)
            return None
        return w, h

    def draw_watermark(self) -> None:
        t = self.theme
        cx = t.page_width / 2
        cy = t.page_height / 2

        if self.logo is not None:
            w, h = fit_box(self.logo.ratio, t.watermark_logo_size)
            self.place_logo(cx - w / 2, cy - h / 2, t.watermark_logo_size, alpha=t.watermark_opacity)

        style = t.text("bold", t.watermark_text_size, "watermark")
        self.canvas.text(cx, cy, BRAND_NAME, style, align="center", angle=45)

    def draw_header(self) -> None:
        t = self.theme
        c = self.canvas

        c.line(t.margin, t.header_line_y, t.page_width - t.margin, t.header_line_y, t.paint(stroke="accent", line_width=0.5))

        wordmark = t.text("bold", 8, "primary")
        size = self.place_logo(t.margin, t.header_line_y - 9, t.header_logo_size)
        if size is not None:
            c.text(t.margin + size[0] + 2, t.header_line_y - 4, BRAND_NAME, wordmark)
        else:
            c.text(t.margin, t.header_line_y - 3, BRAND_NAME, wordmark)

        c.text(t.page_width - t.margin, t.header_line_y - 4, BRAND_TAGLINE, t.text("regular", 8, "muted"), align="right")

    def draw_footer(self, page_number: int) -> None:
        t = self.theme
        self.canvas.text(
            t.page_width / 2,
            t.page_height - t.footer_offset,
            str(page_number),
            t.text("regular", 8, "muted"),
            align="center",
        )
