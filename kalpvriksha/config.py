from __future__ import annotations

from pathlib import Path
from typing import List
import json


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "renders.db"
STYLE_PRESET_PATH = Path(__file__).resolve().parent / "styles" / "report_style.json"

BRAND_NAME = "KALPVRIKSHA"
BRAND_TAGLINE = "Astrological Analysis"
BRAND_STRAP = "Professional Astrological Services"
COVER_PREPARED_FOR = "Astrological Consultation For"
CLOSING_LINE = "May the stars guide you."

FILENAME_SUFFIX = "_consultation"
FILENAME_FALLBACK = "report"

VISUAL_KEYS: List[str] = [
    "planetary",
    "career",
    "personality",
    "gemstone",
    "botanical",
    "pilgrimage_map",
]

MAX_HIGHLIGHTS = 6

# Asset-storage bucket that holds the brand logo.
LOGO_BUCKET = "assets"
LOGO_FILENAME = "logo.png"
LOGO_FETCH_TIMEOUT = 10.0


def load_style_preset() -> dict:
    with STYLE_PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "renders.db"
