from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from slugify import slugify

from . import config
from .config import FILENAME_FALLBACK, FILENAME_SUFFIX
from .models import Artifact, RenderJob, get_session


ARTIFACT_NAMES = {
    "record": "record.json",
    "preview_cover": "preview_cover.png",
    "preview_page": "preview_page.png",
    "error": "error.log",
}


def report_slug(client_name: str) -> str:
    slug = slugify(client_name or "", separator="_")
    slug = re.sub(r"[^a-z0-9_]+", "_", slug.lower()).strip("_")
    return slug or FILENAME_FALLBACK


def report_filename(client_name: str, extension: str = ".pdf") -> str:
    return f"{report_slug(client_name)}{FILENAME_SUFFIX}{extension}"


def report_dir(slug: str, base_dir: Path | None = None, include_slug: bool = True) -> Path:
    root = base_dir or config.OUT_DIR
    path = root / slug if include_slug else root
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_path(
    slug: str,
    artifact_type: str,
    base_dir: Path | None = None,
    include_slug: bool = True,
) -> Path:
    filename = ARTIFACT_NAMES[artifact_type]
    return report_dir(slug, base_dir=base_dir, include_slug=include_slug) / filename


def record_artifacts(job: RenderJob, artifacts: Iterable[tuple[str, Path]]) -> None:
    with get_session() as session:
        for artifact_type, path in artifacts:
            session.add(
                Artifact(
                    render_id=job.id,
                    type=artifact_type,
                    path=str(path.relative_to(config.OUT_DIR)),
                )
            )
        session.commit()
