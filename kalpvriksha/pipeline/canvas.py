from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple, Union

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas


def _hex(value: Optional[str], default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except Exception:
        return default


@dataclass(frozen=True)
class TextStyle:
    font: str = "Times-Roman"
    size: float = 10.0      # points
    color: str = "#282828"
    leading: float = 5.0    # mm between wrapped lines
    alpha: float = 1.0


@dataclass(frozen=True)
class PaintStyle:
    stroke: Optional[str] = None
    fill: Optional[str] = None
    line_width: float = 0.2  # mm
    alpha: float = 1.0


@dataclass(frozen=True)
class DrawOp:
    kind: str
    geometry: Tuple[float, ...]
    payload: Any = None
    style: Any = None


@dataclass
class Page:
    index: int
    ops: List[DrawOp] = field(default_factory=list)

    def texts(self) -> List[str]:
        out: List[str] = []
        for op in self.ops:
            if op.kind == "text":
                out.extend(op.payload["lines"])
        return out


def wrap_words(text: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """
    Word-wrap text to max_width (mm) using the font's own metrics.

    Explicit newlines start a new line; a single word wider than the
    column is kept whole on its own line.
    """
    lines: List[str] = []
    limit = max_width * mm

    for paragraph in str(text or "").split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        cur: List[str] = []
        for w in words:
            test = " ".join(cur + [w])
            if stringWidth(test, font_name, font_size) <= limit:
                cur.append(w)
                continue

            if cur:
                lines.append(" ".join(cur))
                cur = [w]
            else:
                lines.append(w)

        if cur:
            lines.append(" ".join(cur))

    return lines or [""]


class Canvas:
    """
    Page-addressed drawing surface in millimeters from the top-left corner.

    Drawing calls are recorded per page and replayed onto a ReportLab canvas
    by render(), which lets earlier pages be revisited with select_page().
    """

    def __init__(self, page_size: Tuple[float, float] = A4) -> None:
        width, height = page_size
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid page size: {page_size!r}")
        self.page_size = (float(width), float(height))
        self.width = width / mm
        self.height = height / mm
        self.pages: List[Page] = [Page(0)]
        self._active = 0

    # ---------- pages ----------
    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def active_index(self) -> int:
        return self._active

    @property
    def active_page(self) -> Page:
        return self.pages[self._active]

    def new_page(self) -> int:
        self.pages.append(Page(len(self.pages)))
        self._active = len(self.pages) - 1
        return self._active

    def select_page(self, index: int) -> None:
        if not 0 <= index < len(self.pages):
            raise IndexError(f"No page {index} (page count {len(self.pages)})")
        self._active = index

    def _emit(self, op: DrawOp) -> None:
        self.pages[self._active].ops.append(op)

    # ---------- measurement ----------
    def wrap(self, text: str, style: TextStyle, max_width: float) -> List[str]:
        return wrap_words(text, style.font, style.size, max_width)

    def measure_lines(self, text: str, style: TextStyle, max_width: float) -> int:
        return len(self.wrap(text, style, max_width))

    # ---------- primitives ----------
    def text(
        self,
        x: float,
        y: float,
        text: Union[str, Sequence[str]],
        style: TextStyle,
        align: str = "left",
        angle: float = 0.0,
    ) -> None:
        if align not in ("left", "center", "right"):
            raise ValueError(f"Unknown alignment: {align}")
        lines = [text] if isinstance(text, str) else [str(line) for line in text]
        self._emit(DrawOp("text", (x, y), {"lines": lines, "align": align, "angle": angle}, style))

    def line(self, x1: float, y1: float, x2: float, y2: float, paint: PaintStyle) -> None:
        self._emit(DrawOp("line", (x1, y1, x2, y2), None, paint))

    def rect(self, x: float, y: float, w: float, h: float, paint: PaintStyle) -> None:
        self._emit(DrawOp("rect", (x, y, w, h), None, paint))

    def round_rect(self, x: float, y: float, w: float, h: float, radius: float, paint: PaintStyle) -> None:
        self._emit(DrawOp("round_rect", (x, y, w, h, radius), None, paint))

    def triangle(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        x3: float,
        y3: float,
        paint: PaintStyle,
    ) -> None:
        self._emit(DrawOp("triangle", (x1, y1, x2, y2, x3, y3), None, paint))

    def circle(self, cx: float, cy: float, r: float, paint: PaintStyle) -> None:
        self._emit(DrawOp("circle", (cx, cy, r), None, paint))

    def image(self, image, x: float, y: float, w: float, h: float, alpha: float = 1.0) -> None:
        if w <= 0 or h <= 0:
            raise ValueError(f"Image box must be positive, got {w}x{h}")
        self._emit(DrawOp("image", (x, y, w, h), ImageReader(image), alpha))

    # ---------- output ----------
    def render(self, title: str = "", author: str = "") -> bytes:
        buffer = io.BytesIO()
        canv = canvas.Canvas(buffer, pagesize=self.page_size, invariant=1)
        if title:
            canv.setTitle(title)
        if author:
            canv.setAuthor(author)
            canv.setCreator(author)

        for page in self.pages:
            for op in page.ops:
                getattr(self, f"_replay_{op.kind}")(canv, op)
            canv.showPage()

        canv.save()
        return buffer.getvalue()

    def _y(self, y: float) -> float:
        return self.page_size[1] - y * mm

    def _apply_paint(self, canv: canvas.Canvas, paint: PaintStyle) -> Tuple[int, int]:
        canv.setLineWidth(paint.line_width * mm)
        if paint.stroke:
            canv.setStrokeColor(_hex(paint.stroke))
        if paint.fill:
            canv.setFillColor(_hex(paint.fill))
        if paint.alpha < 1.0:
            canv.setStrokeAlpha(paint.alpha)
            canv.setFillAlpha(paint.alpha)
        return (1 if paint.stroke else 0), (1 if paint.fill else 0)

    def _replay_text(self, canv: canvas.Canvas, op: DrawOp) -> None:
        style: TextStyle = op.style
        x, y = op.geometry
        align = op.payload["align"]
        angle = op.payload["angle"]

        canv.saveState()
        canv.setFont(style.font, style.size)
        canv.setFillColor(_hex(style.color))
        if style.alpha < 1.0:
            canv.setFillAlpha(style.alpha)

        draw = {
            "left": canv.drawString,
            "center": canv.drawCentredString,
            "right": canv.drawRightString,
        }[align]

        if angle:
            canv.translate(x * mm, self._y(y))
            canv.rotate(angle)
            for i, line in enumerate(op.payload["lines"]):
                draw(0, -i * style.leading * mm, line)
        else:
            for i, line in enumerate(op.payload["lines"]):
                draw(x * mm, self._y(y + i * style.leading), line)
        canv.restoreState()

    def _replay_line(self, canv: canvas.Canvas, op: DrawOp) -> None:
        x1, y1, x2, y2 = op.geometry
        canv.saveState()
        self._apply_paint(canv, op.style)
        canv.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))
        canv.restoreState()

    def _replay_rect(self, canv: canvas.Canvas, op: DrawOp) -> None:
        x, y, w, h = op.geometry
        canv.saveState()
        stroke, fill = self._apply_paint(canv, op.style)
        canv.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=stroke, fill=fill)
        canv.restoreState()

    def _replay_round_rect(self, canv: canvas.Canvas, op: DrawOp) -> None:
        x, y, w, h, radius = op.geometry
        canv.saveState()
        stroke, fill = self._apply_paint(canv, op.style)
        canv.roundRect(x * mm, self._y(y + h), w * mm, h * mm, radius * mm, stroke=stroke, fill=fill)
        canv.restoreState()

    def _replay_triangle(self, canv: canvas.Canvas, op: DrawOp) -> None:
        x1, y1, x2, y2, x3, y3 = op.geometry
        canv.saveState()
        stroke, fill = self._apply_paint(canv, op.style)
        path = canv.beginPath()
        path.moveTo(x1 * mm, self._y(y1))
        path.lineTo(x2 * mm, self._y(y2))
        path.lineTo(x3 * mm, self._y(y3))
        path.close()
        canv.drawPath(path, stroke=stroke, fill=fill)
        canv.restoreState()

    def _replay_circle(self, canv: canvas.Canvas, op: DrawOp) -> None:
        cx, cy, r = op.geometry
        canv.saveState()
        stroke, fill = self._apply_paint(canv, op.style)
        canv.circle(cx * mm, self._y(cy), r * mm, stroke=stroke, fill=fill)
        canv.restoreState()

    def _replay_image(self, canv: canvas.Canvas, op: DrawOp) -> None:
        x, y, w, h = op.geometry
        alpha = float(op.style or 1.0)
        canv.saveState()
        if alpha < 1.0:
            canv.setFillAlpha(alpha)
        canv.drawImage(op.payload, x * mm, self._y(y + h), w * mm, h * mm, mask="auto")
        canv.restoreState()
