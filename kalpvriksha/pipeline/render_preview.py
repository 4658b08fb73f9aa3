from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import fitz  # PyMuPDF

from ..storage import artifact_path

PREVIEW_TYPES: Tuple[str, str] = ("preview_cover", "preview_page")


def _render_page_to_png(doc: fitz.Document, page_index: int, out_path: Path, min_px: int = 1200) -> None:
    page = doc.load_page(page_index)

    # scale so the short side of the PNG is at least min_px
    rect = page.rect
    short_side = min(rect.width, rect.height)
    zoom = max(1.0, min_px / float(short_side))
    mat = fitz.Matrix(zoom, zoom)

    pix = page.get_pixmap(matrix=mat, alpha=False)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix.save(str(out_path))


def render_previews(
    slug: str,
    pdf_path: Path,
    base_dir: Path | None = None,
    include_slug: bool = True,
) -> List[Path]:
    """PNG previews of the cover and the first interior page."""
    out: List[Path] = []
    with fitz.open(str(pdf_path)) as doc:
        for page_index, artifact_type in enumerate(PREVIEW_TYPES):
            if page_index >= doc.page_count:
                break
            path = artifact_path(slug, artifact_type, base_dir=base_dir, include_slug=include_slug)
            _render_page_to_png(doc, page_index, path)
            out.append(path)
    return out
