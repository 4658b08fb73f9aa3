from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import MAX_HIGHLIGHTS, VISUAL_KEYS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabeledValue:
    label: str
    value: str


@dataclass(frozen=True)
class PersonalityHealth:
    temperament: str = ""
    caution: str = ""
    physical: str = ""
    advice: str = ""

    def fields(self) -> List[LabeledValue]:
        return [
            LabeledValue("Temperament", self.temperament),
            LabeledValue("Caution", self.caution),
            LabeledValue("Physical", self.physical),
            LabeledValue("Advice", self.advice),
        ]

    @property
    def is_empty(self) -> bool:
        return not any(item.value.strip() for item in self.fields())


@dataclass(frozen=True)
class Remedies:
    gemstones: str = ""
    rudraksha: str = ""
    rituals: Tuple[str, ...] = ()
    lifestyle: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.gemstones.strip() or self.rudraksha.strip() or self.rituals or self.lifestyle)


@dataclass(frozen=True)
class ReportRecord:
    client_name: str
    ascendant: str = ""
    moon_sign: str = ""
    observations: Tuple[str, ...] = ()
    timeline: Tuple[LabeledValue, ...] = ()
    personality: PersonalityHealth = field(default_factory=PersonalityHealth)
    remedies: Remedies = field(default_factory=Remedies)
    plants: Tuple[str, ...] = ()
    pilgrimage: Tuple[str, ...] = ()
    highlights: Tuple[LabeledValue, ...] = ()
    visuals: Dict[str, bytes] = field(default_factory=dict)

    def visual(self, key: str) -> Optional[bytes]:
        return self.visuals.get(key) or None


def _pick(data: dict, *keys: str, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _text(value) -> str:
    return str(value or "").strip()


def _strings(values) -> Tuple[str, ...]:
    if values is None:
        return ()
    if not isinstance(values, list):
        raise ValueError(f"Expected a list, got {type(values).__name__}")
    return tuple(s for s in (_text(v) for v in values) if s)


def _pairs(values) -> Tuple[LabeledValue, ...]:
    if values is None:
        return ()
    if not isinstance(values, list):
        raise ValueError(f"Expected a list of label/value pairs, got {type(values).__name__}")
    out: List[LabeledValue] = []
    for item in values:
        if not isinstance(item, dict):
            raise ValueError("Label/value entries must be objects")
        label = _text(item.get("label"))
        value = _text(item.get("value"))
        if label or value:
            out.append(LabeledValue(label, value))
    return tuple(out)


def _visual_bytes(value: str, base_dir: Optional[Path]) -> bytes:
    if value.startswith("data:"):
        _, _, payload = value.partition(",")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Invalid base64 image payload: {exc}") from exc
    path = Path(value)
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path.read_bytes()


def _visuals(data, base_dir: Optional[Path]) -> Dict[str, bytes]:
    if not data:
        return {}
    if not isinstance(data, dict):
        raise ValueError("visuals must be an object keyed by visual name")
    out: Dict[str, bytes] = {}
    for key, value in data.items():
        if key not in VISUAL_KEYS:
            logger.warning("Ignoring unknown visual key %r", key)
            continue
        if not value:
            continue
        out[key] = _visual_bytes(str(value), base_dir)
    return out


def record_from_dict(data: dict, base_dir: Optional[Path] = None) -> ReportRecord:
    """Build a ReportRecord from the content generator's JSON shape.

    Both the generator's camelCase keys and snake_case names are accepted.
    Summary highlights beyond the grid capacity are dropped.
    """
    if not isinstance(data, dict):
        raise ValueError("Report record must be a JSON object")
    client_name = _text(_pick(data, "clientName", "client_name"))
    if not client_name:
        raise ValueError("Report record is missing clientName")

    personality = _pick(data, "personalityHealth", "personality", default={}) or {}
    remedies = _pick(data, "structuredRemedies", "remedies", default={}) or {}
    if not isinstance(personality, dict) or not isinstance(remedies, dict):
        raise ValueError("personalityHealth and structuredRemedies must be objects")

    highlights = _pairs(_pick(data, "summaryHighlights", "highlights"))
    if len(highlights) > MAX_HIGHLIGHTS:
        logger.info("Dropping %d highlights beyond %d", len(highlights) - MAX_HIGHLIGHTS, MAX_HIGHLIGHTS)
        highlights = highlights[:MAX_HIGHLIGHTS]

    return ReportRecord(
        client_name=client_name,
        ascendant=_text(_pick(data, "ascendant")),
        moon_sign=_text(_pick(data, "moonSign", "moon_sign")),
        observations=_strings(_pick(data, "keyObservations", "observations")),
        timeline=_pairs(_pick(data, "timelineAnalysis", "timeline")),
        personality=PersonalityHealth(
            temperament=_text(personality.get("temperament")),
            caution=_text(personality.get("caution")),
            physical=_text(personality.get("physical")),
            advice=_text(personality.get("advice")),
        ),
        remedies=Remedies(
            gemstones=_text(_pick(remedies, "gemstones", "gemstone")),
            rudraksha=_text(remedies.get("rudraksha")),
            rituals=_strings(remedies.get("rituals")),
            lifestyle=_strings(remedies.get("lifestyle")),
        ),
        plants=_strings(_pick(data, "botanicalRemedies", "plants")),
        pilgrimage=_strings(_pick(data, "spiritualPilgrimage", "pilgrimage")),
        highlights=highlights,
        visuals=_visuals(_pick(data, "visuals"), base_dir),
    )


def load_record(path: Path) -> ReportRecord:
    if not path.exists():
        raise FileNotFoundError(f"Record not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Record is not valid JSON: {exc}") from exc
    return record_from_dict(data, base_dir=path.parent)
