from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from . import config
from .assets import public_logo_url
from .models import RenderStatus, reset_engine
from .pipeline.run import list_renders, run_batch

app = typer.Typer(help="Astrological consultation report renderer")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def render(
    records: List[Path] = typer.Argument(..., help="Report record JSON files"),
    logo: Optional[str] = typer.Option(None, "--logo", help="Logo path or URL"),
    storage_url: Optional[str] = typer.Option(None, "--storage-url", help="Asset storage base URL holding the logo"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    keep_background: bool = typer.Option(False, "--keep-background", help="Skip logo background stripping"),
) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()
    if logo is None and storage_url:
        logo = public_logo_url(storage_url)
    results = run_batch(records, logo_source=logo, strip_background=not keep_background)
    typer.echo(f"READY: {len(results['READY'])}")
    typer.echo(f"FAILED: {len(results['FAILED'])}")
    for slug in results["FAILED"]:
        typer.echo(f"FAILED: {slug}")
    if results["FAILED"]:
        raise typer.Exit(code=1)


@app.command()
def history(
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    status: Optional[RenderStatus] = typer.Option(None, "--status", help="Filter by status"),
) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()
    jobs = list_renders(status)
    if not jobs:
        typer.echo("No renders recorded")
        return
    for job in jobs:
        detail = job.filename if job.status == RenderStatus.READY else f"{job.fail_code}: {job.fail_detail}"
        typer.echo(f"{job.id}\t{RenderStatus(job.status).value}\t{job.slug}\t{job.page_count}p\t{detail}")


if __name__ == "__main__":
    app()
