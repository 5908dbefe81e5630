from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from . import config
from .models import reset_engine
from .render.run import load_record, process_record, run_batch

app = typer.Typer(help="Personnel record PDF renderer")


def _configure(out: Optional[Path], verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if out:
        config.set_out_dir(out)
        reset_engine()


@app.command()
def render(
    record: Path = typer.Argument(..., help="JSON file with one personnel record"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    preview: bool = typer.Option(False, "--preview", help="Also write a PNG of page 1"),
    include_incomplete: bool = typer.Option(False, "--include-incomplete", help="Render records not marked complete"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    _configure(out, verbose)
    data = load_record(record)
    if not data.is_complete and not include_incomplete:
        typer.echo("Record is not complete; use --include-incomplete to render anyway")
        raise typer.Exit(code=1)
    pdf_path, page_count, previews = process_record(data, preview=preview)
    typer.echo(f"{pdf_path} ({page_count} pages)")
    for path in previews:
        typer.echo(f"preview: {path}")


@app.command()
def batch(
    directory: Path = typer.Argument(..., help="Directory of JSON records"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    preview: bool = typer.Option(False, "--preview", help="Also write a PNG of page 1"),
    include_incomplete: bool = typer.Option(False, "--include-incomplete", help="Render records not marked complete"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    _configure(out, verbose)
    paths = sorted(directory.glob("*.json"))
    if not paths:
        typer.echo("No records to render")
        return
    results = run_batch(paths, include_incomplete=include_incomplete, preview=preview)
    typer.echo(f"READY: {len(results['READY'])}")
    typer.echo(f"SKIPPED: {len(results['SKIPPED'])}")
    typer.echo(f"FAILED: {len(results['FAILED'])}")
    for name in results["FAILED"]:
        typer.echo(f"FAILED: {name}")


if __name__ == "__main__":
    app()
