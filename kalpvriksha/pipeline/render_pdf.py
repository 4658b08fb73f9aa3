from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

from ..assets import LogoAsset
from ..config import BRAND_NAME, BRAND_STRAP, CLOSING_LINE, COVER_PREPARED_FOR, load_style_preset
from ..record import ReportRecord
from ..storage import report_filename
from . import blocks
from .canvas import Canvas, Page
from .chrome import PageChrome, fit_box
from .layout import LayoutEngine, LayoutError, Placement
from .theme import ReportTheme

logger = logging.getLogger(__name__)

SEAL_LEAD = 20.0
SEAL_LINE_GAP = 8.0


class ReportRenderError(RuntimeError):
    pass


@dataclass
class RenderedReport:
    filename: str
    content: bytes
    page_count: int
    placements: List[Placement] = field(default_factory=list)
    pages: List[Page] = field(default_factory=list)

    def write(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.content)
        return path


def _guarded(label: str, fn: Callable[..., None], *args, **kwargs) -> bool:
    """Run one block; a failing block is logged and skipped."""
    try:
        fn(*args, **kwargs)
    except LayoutError:
        raise
    except Exception as exc:
        logger.warning("Skipping %s block: %s", label, exc)
        return False
    return True


def _illustration(engine: LayoutEngine, record: ReportRecord, key: str, inline: bool = False) -> None:
    data = record.visual(key)
    if data is None:
        return
    t = engine.theme
    height = t.inline_illustration_height if inline else t.illustration_height
    _guarded(f"{key} illustration", blocks.illustration, engine, key, data, height, inline=inline)


# -------------------- Sections --------------------
def _cover(engine: LayoutEngine, chrome: PageChrome, record: ReportRecord, issued_on: date) -> None:
    t = engine.theme
    c = engine.canvas
    pw, ph = t.page_width, t.page_height

    c.text(pw - t.margin, 30, issued_on.strftime("%B %d, %Y").replace(" 0", " "), t.text("regular", 10, "muted"), align="right")

    center_y = ph / 2 - 20
    if chrome.logo is not None:
        w, _ = fit_box(chrome.logo.ratio, t.cover_logo_size)
        chrome.place_logo((pw - w) / 2, center_y - 55, t.cover_logo_size)

    c.text(t.margin, center_y, COVER_PREPARED_FOR, t.text("italic", 12, "accent"))

    name_style = t.text("bold", 32, "primary", leading=12)
    name_lines = c.wrap(record.client_name, name_style, t.content_width)
    c.text(t.margin, center_y + 15, name_lines, name_style)

    rule_y = center_y + 30 + (len(name_lines) - 1) * name_style.leading
    c.line(t.margin, rule_y, t.margin + 40, rule_y, t.paint(stroke="primary", line_width=0.5))

    c.text(t.margin, ph - 30, BRAND_NAME, t.text("bold", 10, "text"))
    c.text(t.margin, ph - 25, BRAND_STRAP, t.text("regular", 9, "muted"))


def _profile(engine: LayoutEngine, record: ReportRecord) -> None:
    blocks.section_title(engine, "Personal Profile")
    _guarded("Ascendant", blocks.label_value, engine, "Ascendant", record.ascendant)
    _guarded("Moon Sign", blocks.label_value, engine, "Moon Sign", record.moon_sign)
    if record.observations:
        engine.advance(2, spacing=0)
        _guarded("Key Observations", blocks.label_value, engine, "Key Observations", record.observations)


def _executive_summary(engine: LayoutEngine, record: ReportRecord, rng: random.Random) -> None:
    if not record.highlights:
        return
    t = engine.theme
    # keep the title on the same page as the first row of cards
    engine.reserve(blocks.SECTION_TITLE_RESERVE + t.card_height + t.grid_gap + 5)
    engine.advance(5, spacing=0)
    blocks.section_title(engine, "Executive Summary")
    _guarded("highlights", blocks.highlight_grid, engine, record.highlights, rng)


def _timeline(engine: LayoutEngine, record: ReportRecord) -> None:
    if not record.timeline:
        return
    blocks.section_title(engine, "Timeline & Forecast")
    for item in record.timeline:
        _guarded(item.label, blocks.label_value, engine, item.label, item.value)


def _personality(engine: LayoutEngine, record: ReportRecord) -> None:
    if record.personality.is_empty:
        return
    engine.advance(5, spacing=0)
    blocks.section_title(engine, "Personality & Health")
    # blank fields still get a row with a dash
    for item in record.personality.fields():
        _guarded(item.label, blocks.label_value, engine, item.label, item.value)


def _remedies(engine: LayoutEngine, record: ReportRecord) -> None:
    remedies = record.remedies
    if remedies.is_empty:
        return
    engine.advance(5, spacing=0)
    blocks.section_title(engine, "Remedial Measures")

    if remedies.gemstones:
        if _guarded("Gemstones", blocks.card, engine, "Gemstones", remedies.gemstones, "diamond"):
            _illustration(engine, record, "gemstone", inline=True)
    if remedies.rudraksha:
        _guarded("Rudraksha", blocks.card, engine, "Rudraksha", remedies.rudraksha, "circle")
    if remedies.rituals:
        _guarded("Rituals", blocks.card, engine, "Rituals", remedies.rituals, "triangle")
    if remedies.lifestyle:
        _guarded("Lifestyle", blocks.card, engine, "Lifestyle Adjustments", remedies.lifestyle, "square")


def _nature_and_spirit(engine: LayoutEngine, record: ReportRecord) -> None:
    if not (record.plants or record.pilgrimage):
        return
    engine.advance(5, spacing=0)
    blocks.section_title(engine, "Nature & Spirit")

    if record.plants:
        title = "Botanical Remedies (Trees to Plant)"
        if _guarded("Botanical", blocks.card, engine, title, ", ".join(record.plants)):
            _illustration(engine, record, "botanical", inline=True)
    if record.pilgrimage:
        temples = [f"{i}. {name}" for i, name in enumerate(record.pilgrimage, start=1)]
        if _guarded("Pilgrimage", blocks.card, engine, "Recommended Pilgrimage", "\n".join(temples)):
            _illustration(engine, record, "pilgrimage_map")


def _closing_seal(engine: LayoutEngine, chrome: PageChrome) -> None:
    t = engine.theme
    c = engine.canvas

    seal_w, seal_h = fit_box(chrome.logo.ratio, t.seal_logo_size) if chrome.logo is not None else (0.0, 0.0)
    height = SEAL_LEAD + seal_h + SEAL_LINE_GAP

    top = engine.place("closing_seal", CLOSING_LINE, height)
    y = top + SEAL_LEAD
    if seal_h and chrome.place_logo((t.page_width - seal_w) / 2, y, t.seal_logo_size) is None:
        seal_h = 0.0

    c.text(t.page_width / 2, y + seal_h + 5, CLOSING_LINE, t.text("italic", 8, "accent"), align="center")
    engine.advance(height, spacing=0)


# -------------------- Document --------------------
def render_report(
    record: ReportRecord,
    logo: Optional[LogoAsset] = None,
    *,
    theme: Optional[ReportTheme] = None,
    rng: Optional[random.Random] = None,
    issued_on: Optional[date] = None,
) -> RenderedReport:
    """
    Compose the full consultation report and return the PDF bytes.

    Section order is fixed; sections whose data is empty are left out
    entirely. Any failure outside a single block is raised as
    ReportRenderError and no document is produced.
    """
    try:
        theme = theme or ReportTheme.from_preset(load_style_preset())
        canv = Canvas(theme.page_size)
    except Exception as exc:
        raise ReportRenderError(f"Could not set up the canvas: {exc}") from exc

    rng = rng or random.Random()
    issued_on = issued_on or date.today()
    chrome = PageChrome(canv, theme, logo)
    engine = LayoutEngine(canv, chrome, theme)

    try:
        engine.open_cover()
        _cover(engine, chrome, record, issued_on)

        engine.break_page()
        engine.advance(theme.first_page_lead, spacing=0)

        _profile(engine, record)
        _illustration(engine, record, "planetary")
        _executive_summary(engine, record, rng)
        _timeline(engine, record)
        _illustration(engine, record, "career")
        _personality(engine, record)
        _illustration(engine, record, "personality")
        _remedies(engine, record)
        _nature_and_spirit(engine, record)
        _closing_seal(engine, chrome)

        engine.finalize()
        content = canv.render(title=f"Astrological Consultation - {record.client_name}", author=BRAND_NAME)
    except Exception as exc:
        logger.exception("Report render failed for %s", record.client_name)
        raise ReportRenderError(str(exc)) from exc

    logger.info("Rendered %d pages for %s", canv.page_count, record.client_name)
    return RenderedReport(
        filename=report_filename(record.client_name),
        content=content,
        page_count=canv.page_count,
        placements=list(engine.placements),
        pages=list(canv.pages),
    )
