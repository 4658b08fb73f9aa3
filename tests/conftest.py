from __future__ import annotations

import copy
import io
from pathlib import Path

import pytest
from PIL import Image

from kalpvriksha import config
from kalpvriksha.models import reset_engine
from kalpvriksha.record import record_from_dict


def png_bytes(size=(200, 100), color=(255, 255, 255, 255), mark=(0, 60, 50, 255)) -> bytes:
    image = Image.new("RGBA", size, color)
    w, h = size
    for x in range(w // 4, 3 * w // 4):
        for y in range(h // 4, 3 * h // 4):
            image.putpixel((x, y), mark)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


FULL_RECORD = {
    "clientName": "Mr. Utkarsh Goyal",
    "ascendant": "Aquarius | Lord: Saturn",
    "moonSign": "Aries | Lord: Mars",
    "keyObservations": ["Saturn is debilitated", "Vish Dosha in 3rd House", "Strong Jupiter aspect on Moon"],
    "timelineAnalysis": [
        {"label": "Rahu Mahadasha", "value": "2019 - 2037, a long phase of ambition and restlessness."},
        {"label": "Sade Sati", "value": "Not active until 2027."},
        {"label": "Career Forecast", "value": "Steady growth after mid-2026 with a change of role."},
    ],
    "personalityHealth": {
        "temperament": "Control anger due to Rahu.",
        "caution": "Potential for addiction.",
        "physical": "Headaches and sleep issues.",
        "advice": "Daily meditation and a fixed routine.",
    },
    "structuredRemedies": {
        "gemstones": "Blue Sapphire in silver, middle finger, Saturday morning.",
        "rudraksha": "Seven Mukhi Rudraksha.",
        "rituals": ["Hanuman Chalisa on Tuesdays", "Offer water to the Sun daily"],
        "lifestyle": ["Donate black sesame on Saturdays", "Avoid alcohol"],
    },
    "botanicalRemedies": ["Kadamb", "Peepal"],
    "spiritualPilgrimage": ["Shani Shingnapur", "Kashi Vishwanath"],
    "summaryHighlights": [
        {"label": "Ascendant", "value": "Aquarius"},
        {"label": "Moon", "value": "Aries"},
        {"label": "Dasha", "value": "Rahu"},
        {"label": "Sade Sati", "value": "Inactive"},
        {"label": "Gemstone", "value": "Blue Sapphire"},
    ],
    "visualThemeDescription": "ignored by the renderer",
}


@pytest.fixture
def record_data() -> dict:
    return copy.deepcopy(FULL_RECORD)


@pytest.fixture
def full_record():
    return record_from_dict(FULL_RECORD)


@pytest.fixture
def empty_record():
    return record_from_dict({"clientName": "A. Test! User", "ascendant": "Aquarius", "moonSign": "Aries"})


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    config.set_out_dir(path)
    reset_engine()
    return path


@pytest.fixture
def make_png():
    return png_bytes
