from __future__ import annotations

import base64
import json
import logging
from pathlib import Path

import pytest

from kalpvriksha.record import load_record, record_from_dict



def test_generator_shape_is_parsed(full_record) -> None:
    assert full_record.client_name == "Mr. Utkarsh Goyal"
    assert full_record.moon_sign == "Aries | Lord: Mars"
    assert len(full_record.observations) == 3
    assert [item.label for item in full_record.timeline] == ["Rahu Mahadasha", "Sade Sati", "Career Forecast"]
    assert full_record.personality.caution == "Potential for addiction."
    assert full_record.remedies.rituals == ("Hanuman Chalisa on Tuesdays", "Offer water to the Sun daily")
    assert full_record.plants == ("Kadamb", "Peepal")
    assert len(full_record.highlights) == 5
    assert full_record.visuals == {}


def test_snake_case_keys_are_accepted() -> None:
    record = record_from_dict(
        {
            "client_name": "Asha",
            "moon_sign": "Leo",
            "remedies": {"gemstone": "Ruby"},
            "plants": ["Neem"],
        }
    )
    assert record.moon_sign == "Leo"
    assert record.remedies.gemstones == "Ruby"
    assert record.plants == ("Neem",)


def test_highlights_are_capped_at_grid_capacity() -> None:
    data = {"clientName": "Asha"}
    data["summaryHighlights"] = [{"label": f"L{i}", "value": f"V{i}"} for i in range(9)]
    record = record_from_dict(data)
    assert [item.label for item in record.highlights] == [f"L{i}" for i in range(6)]


def test_empty_sections_report_empty(empty_record) -> None:
    assert empty_record.personality.is_empty
    assert empty_record.remedies.is_empty
    assert empty_record.timeline == ()
    assert empty_record.visual("planetary") is None


def test_blank_strings_are_dropped() -> None:
    record = record_from_dict({"clientName": "Asha", "keyObservations": ["  ", "Mars strong", None]})
    assert record.observations == ("Mars strong",)


def test_data_uri_visual(make_png) -> None:
    data = make_png()
    uri = "data:image/png;base64," + base64.b64encode(data).decode("ascii")
    record = record_from_dict({"clientName": "Asha", "visuals": {"planetary": uri}})
    assert record.visual("planetary") == data


def test_relative_visual_path(tmp_path: Path, make_png) -> None:
    data = make_png()
    (tmp_path / "career.png").write_bytes(data)
    path = tmp_path / "record.json"
    path.write_text(json.dumps({"clientName": "Asha", "visuals": {"career": "career.png"}}), encoding="utf-8")

    record = load_record(path)
    assert record.visual("career") == data


def test_unknown_visual_key_is_ignored(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        record = record_from_dict({"clientName": "Asha", "visuals": {"horoscope_wheel": "x.png"}})
    assert record.visuals == {}
    assert "horoscope_wheel" in caplog.text


def test_bad_base64_visual_raises() -> None:
    with pytest.raises(ValueError):
        record_from_dict({"clientName": "Asha", "visuals": {"planetary": "data:image/png;base64,@@@"}})


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"clientName": "   "},
        {"clientName": "Asha", "personalityHealth": "calm"},
        {"clientName": "Asha", "timelineAnalysis": "2019 - 2037"},
        ["not", "an", "object"],
    ],
)
def test_invalid_records_raise(data) -> None:
    with pytest.raises(ValueError):
        record_from_dict(data)


def test_load_record_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_record(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_record(broken)
