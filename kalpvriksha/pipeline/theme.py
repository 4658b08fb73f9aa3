from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import mm

from .canvas import PaintStyle, TextStyle


PAGE_SIZES: Dict[str, Tuple[float, float]] = {
    "A4": A4,
    "LETTER": LETTER,
}


def _s(style: dict, key: str, default):
    return style.get(key, default)


@dataclass(frozen=True)
class ReportTheme:
    """Immutable style context handed to every chrome and block renderer."""

    page_size: Tuple[float, float] = A4
    margin: float = 20.0
    top_margin: float = 30.0
    first_page_lead: float = 10.0
    bottom_margin: float = 20.0
    line_height: float = 5.0
    block_spacing: float = 4.0
    label_width: float = 45.0
    header_line_y: float = 15.0
    footer_offset: float = 10.0

    font_regular: str = "Times-Roman"
    font_bold: str = "Times-Bold"
    font_italic: str = "Times-Italic"

    primary_color: str = "#003C32"
    accent_color: str = "#B48232"
    text_color: str = "#282828"
    muted_color: str = "#646464"
    watermark_color: str = "#EFE9DD"

    watermark_opacity: float = 0.05
    watermark_logo_size: float = 100.0
    watermark_text_size: float = 60.0
    header_logo_size: float = 6.0
    cover_logo_size: float = 45.0
    seal_logo_size: float = 25.0
    card_height: float = 22.0
    grid_gap: float = 5.0
    illustration_height: float = 70.0
    inline_illustration_height: float = 45.0

    @classmethod
    def from_preset(cls, preset: dict) -> "ReportTheme":
        defaults = cls()
        size_name = str(_s(preset, "page_size", "A4")).upper()
        values = {"page_size": PAGE_SIZES.get(size_name, A4)}
        for name, default in defaults.__dict__.items():
            if name == "page_size":
                continue
            raw = _s(preset, name, default)
            values[name] = float(raw) if isinstance(default, float) else str(raw)
        return cls(**values)

    @property
    def page_width(self) -> float:
        return self.page_size[0] / mm

    @property
    def page_height(self) -> float:
        return self.page_size[1] / mm

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def bottom_limit(self) -> float:
        return self.page_height - self.bottom_margin

    def text(
        self,
        weight: str = "regular",
        size: float = 10.0,
        color: str = "text",
        leading: Optional[float] = None,
        alpha: float = 1.0,
    ) -> TextStyle:
        font = {
            "regular": self.font_regular,
            "bold": self.font_bold,
            "italic": self.font_italic,
        }[weight]
        return TextStyle(
            font=font,
            size=size,
            color=self.color(color),
            leading=self.line_height if leading is None else leading,
            alpha=alpha,
        )

    def paint(
        self,
        stroke: Optional[str] = None,
        fill: Optional[str] = None,
        line_width: float = 0.2,
        alpha: float = 1.0,
    ) -> PaintStyle:
        return PaintStyle(
            stroke=self.color(stroke) if stroke else None,
            fill=self.color(fill) if fill else None,
            line_width=line_width,
            alpha=alpha,
        )

    def color(self, name: str) -> str:
        if name.startswith("#"):
            return name
        return getattr(self, f"{name}_color")
