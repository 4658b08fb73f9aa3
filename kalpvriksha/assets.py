from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests
from PIL import Image

from .config import LOGO_BUCKET, LOGO_FETCH_TIMEOUT, LOGO_FILENAME

logger = logging.getLogger(__name__)

BACKGROUND_TOLERANCE = 40
OPAQUE_THRESHOLD = 200


@dataclass(frozen=True)
class LogoAsset:
    data: bytes
    image: Image.Image
    ratio: float


def aspect_ratio(image: Image.Image) -> float:
    width, height = getattr(image, "size", (0, 0))
    if not width or not height:
        return 1.0
    return width / float(height)


def strip_background(
    image: Image.Image,
    tolerance: int = BACKGROUND_TOLERANCE,
    opaque_threshold: int = OPAQUE_THRESHOLD,
) -> Image.Image:
    """
    Key out a flat background sampled from the top-left pixel.

    Only runs when the corner is opaque; a logo that already carries
    transparency is returned as-is. Non-uniform backgrounds are not handled.
    """
    rgba = image.convert("RGBA")
    br, bg, bb, ba = rgba.getpixel((0, 0))
    if ba <= opaque_threshold:
        return image

    # convert() hands back a copy, so keying in place leaves the input alone
    pixels = rgba.load()
    width, height = rgba.size
    for y in range(height):
        for x in range(width):
            r, g, b, _ = pixels[x, y]
            if abs(r - br) <= tolerance and abs(g - bg) <= tolerance and abs(b - bb) <= tolerance:
                pixels[x, y] = (r, g, b, 0)
    return rgba


def decode_image(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def prepare_logo(data: bytes, strip: bool = True) -> Optional[LogoAsset]:
    try:
        image = decode_image(data)
    except Exception as exc:
        logger.warning("Logo could not be decoded, rendering without it: %s", exc)
        return None

    ratio = aspect_ratio(image)
    if strip:
        try:
            image = strip_background(image)
        except Exception as exc:
            logger.warning("Background strip failed, keeping original logo: %s", exc)
    return LogoAsset(data=data, image=image, ratio=ratio)


def public_logo_url(base_url: str, bucket: str = LOGO_BUCKET, filename: str = LOGO_FILENAME) -> str:
    return f"{base_url.rstrip('/')}/storage/v1/object/public/{bucket}/{filename}"


def fetch_logo_bytes(source: str, timeout: float = LOGO_FETCH_TIMEOUT) -> Optional[bytes]:
    try:
        if source.startswith(("http://", "https://")):
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
            return response.content
        return Path(source).read_bytes()
    except (requests.RequestException, OSError) as exc:
        logger.warning("Could not fetch logo from %s: %s", source, exc)
        return None


def load_logo(source: Optional[str], strip: bool = True) -> Optional[LogoAsset]:
    if not source:
        return None
    data = fetch_logo_bytes(source)
    if not data:
        return None
    return prepare_logo(data, strip=strip)
