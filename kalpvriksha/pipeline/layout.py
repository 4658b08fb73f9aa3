from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from .canvas import Canvas
from .chrome import PageChrome
from .theme import ReportTheme

logger = logging.getLogger(__name__)

COVER_PAGE = 0


class LayoutError(RuntimeError):
    pass


@dataclass(frozen=True)
class Placement:
    page: int
    kind: str
    label: str
    top: float
    height: float


class LayoutEngine:
    """
    Owns the vertical write cursor for one render.

    Blocks are atomic: a renderer reserves its whole measured height before
    drawing, and a block that does not fit moves to a fresh page. Footers
    are written when a page is closed, either by a break or by finalize().
    """

    def __init__(self, canvas: Canvas, chrome: PageChrome, theme: ReportTheme) -> None:
        self.canvas = canvas
        self.chrome = chrome
        self.theme = theme
        self.placements: List[Placement] = []
        self._cursor = theme.top_margin
        self._closed: Set[int] = set()
        self._finalized = False

    @property
    def cursor(self) -> float:
        return self._cursor

    @property
    def left(self) -> float:
        return self.theme.margin

    @property
    def content_width(self) -> float:
        return self.theme.content_width

    @property
    def bottom_limit(self) -> float:
        return self.theme.bottom_limit

    @property
    def usable_height(self) -> float:
        return self.bottom_limit - self.theme.top_margin

    def open_cover(self) -> None:
        if self.canvas.page_count != 1 or self.canvas.active_index != COVER_PAGE:
            raise LayoutError("Cover must be drawn on a fresh canvas")
        self.chrome.draw_watermark()

    def fits(self, height: float) -> bool:
        return self._cursor + height <= self.bottom_limit

    def reserve(self, height: float) -> bool:
        if height < 0:
            raise LayoutError(f"Cannot reserve negative height {height}")
        if self.fits(height):
            return False
        if height > self.usable_height:
            logger.warning("Block of %.1fmm is taller than a page (%.1fmm)", height, self.usable_height)
            # already at the top of a page; another break would only add a blank one
            if self._cursor <= self.theme.top_margin:
                return False
        self.break_page()
        return True

    def place(self, kind: str, label: str, height: float) -> float:
        self.reserve(height)
        top = self._cursor
        self.placements.append(Placement(self.canvas.active_index, kind, label, top, height))
        return top

    def advance(self, height: float, spacing: Optional[float] = None) -> None:
        if height < 0:
            raise LayoutError(f"Cannot advance by negative height {height}")
        gap = self.theme.block_spacing if spacing is None else spacing
        self._cursor = min(self._cursor + height + gap, self.bottom_limit)

    def close_page(self) -> None:
        index = self.canvas.active_index
        if index in self._closed:
            return
        self.chrome.draw_footer(index + 1)
        self._closed.add(index)

    def break_page(self) -> None:
        if self._finalized:
            raise LayoutError("Document already finalized")
        self.close_page()
        self.canvas.new_page()
        self.chrome.draw_watermark()
        self.chrome.draw_header()
        self._cursor = self.theme.top_margin

    def finalize(self) -> None:
        for index in range(COVER_PAGE + 1, self.canvas.page_count):
            if index in self._closed:
                continue
            self.canvas.select_page(index)
            self.close_page()
        if COVER_PAGE not in self._closed:
            raise LayoutError("Cover page was never closed")
        self._finalized = True
