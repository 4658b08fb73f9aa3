from __future__ import annotations

from pathlib import Path
import logging
import shutil
from typing import Iterable, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .. import config
from ..assets import LogoAsset, load_logo
from ..models import RenderJob, RenderStatus, get_session, init_db
from ..record import ReportRecord, load_record
from ..storage import artifact_path, record_artifacts, report_slug
from .render_pdf import ReportRenderError, render_report
from .render_preview import render_previews


logger = logging.getLogger(__name__)


def _write_error(slug: str, message: str) -> None:
    error_path = artifact_path(slug, "error", base_dir=config.OUT_DIR)
    error_path.write_text(message, encoding="utf-8")


def _prepare_temp_dir(slug: str) -> Path:
    temp_dir = config.OUT_DIR / f"{slug}.tmp"
    if temp_dir.exists():
        shutil.rmtree(temp_dir)
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir


def _finalize_artifacts(
    temp_dir: Path,
    final_dir: Path,
    artifacts: List[tuple[str, Path]],
) -> List[tuple[str, Path]]:
    if final_dir.exists():
        shutil.rmtree(final_dir)
    temp_dir.replace(final_dir)
    finalized: List[tuple[str, Path]] = []
    for artifact_type, path in artifacts:
        finalized.append((artifact_type, final_dir / path.relative_to(temp_dir)))
    return finalized


def process_record(
    record: ReportRecord,
    source: Path,
    logo: Optional[LogoAsset] = None,
    slug: Optional[str] = None,
) -> tuple[int, str, List[tuple[str, Path]]]:
    """Render one record into out/<slug>/ and return (page_count, filename, artifacts)."""
    slug = slug or report_slug(record.client_name)
    temp_dir = _prepare_temp_dir(slug)
    try:
        rendered = render_report(record, logo)

        artifacts: List[tuple[str, Path]] = []
        pdf_path = rendered.write(temp_dir)
        artifacts.append(("pdf", pdf_path))

        record_path = artifact_path(slug, "record", base_dir=temp_dir, include_slug=False)
        shutil.copyfile(source, record_path)
        artifacts.append(("record", record_path))

        previews = render_previews(slug, pdf_path, base_dir=temp_dir, include_slug=False)
        artifacts.extend(zip(("preview_cover", "preview_page"), previews))
    except Exception:
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise

    final_dir = config.OUT_DIR / slug
    return rendered.page_count, rendered.filename, _finalize_artifacts(temp_dir, final_dir, artifacts)


def _unique_slug(slug: str, source: Path, taken: Set[str]) -> str:
    """Keep records that share a client name from overwriting each other within a batch."""
    if slug not in taken:
        return slug
    candidate = f"{slug}_{report_slug(source.stem)}"
    n = 2
    unique = candidate
    while unique in taken:
        unique = f"{candidate}_{n}"
        n += 1
    return unique


def _persist(session: Session, job: RenderJob, artifacts: List[tuple[str, Path]]) -> bool:
    try:
        session.add(job)
        session.commit()
        session.refresh(job)
        if job.status == RenderStatus.READY:
            record_artifacts(job, artifacts)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not persist render job for %s", job.source)
        return False
    return True


def run_batch(
    record_paths: Iterable[Path],
    logo_source: Optional[str] = None,
    strip_background: bool = True,
) -> dict[str, list[str]]:
    init_db()
    results: dict[str, list[str]] = {"READY": [], "FAILED": []}
    taken: Set[str] = set()

    # fetched once and shared by every record in the batch
    logo = load_logo(logo_source, strip=strip_background)
    if logo_source and logo is None:
        logger.warning("Continuing without logo")

    with get_session() as session:
        for path in record_paths:
            job = RenderJob(
                client_name="",
                slug=_unique_slug(report_slug(path.stem), path, taken),
                source=str(path),
                has_logo=logo is not None,
            )
            artifacts: List[tuple[str, Path]] = []
            try:
                record = load_record(path)
            except (OSError, ValueError) as exc:
                logger.error("Invalid record %s: %s", path, exc)
                record = None
                job.fail_code = "INVALID_RECORD"
                job.fail_detail = str(exc)

            if record is not None:
                job.client_name = record.client_name
                job.slug = _unique_slug(report_slug(record.client_name), path, taken)
                try:
                    job.page_count, job.filename, artifacts = process_record(record, path, logo, slug=job.slug)
                    job.status = RenderStatus.READY
                except ReportRenderError as exc:
                    job.fail_code = "RENDER_FAILED"
                    job.fail_detail = str(exc)
                except Exception as exc:
                    logger.exception("Pipeline error for %s", path)
                    job.fail_code = "PIPELINE_ERROR"
                    job.fail_detail = str(exc)
            taken.add(job.slug)

            if not _persist(session, job, artifacts):
                _write_error(job.slug, "PERSIST_FAILED: render history could not be saved")
                results["FAILED"].append(job.slug)
            elif job.status == RenderStatus.READY:
                results["READY"].append(job.slug)
            else:
                _write_error(job.slug, job.fail_detail or "Unknown error")
                results["FAILED"].append(job.slug)
    return results


def list_renders(status: Optional[RenderStatus] = None) -> List[RenderJob]:
    init_db()
    with get_session() as session:
        statement = select(RenderJob).order_by(RenderJob.id)
        if status is not None:
            statement = statement.where(RenderJob.status == status)
        return list(session.exec(statement))
