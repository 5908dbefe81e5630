from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import ValidationError

from ..models import PersonalRecord
from ..storage import record_artifact, record_slug, write_document, write_error
from .assemble import render_document
from .preview import render_previews


logger = logging.getLogger(__name__)


def load_record(path: Path) -> PersonalRecord:
    if not path.exists():
        raise FileNotFoundError(f"Record not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Record must be a JSON object: {path}")
    return PersonalRecord.model_validate(payload)


def process_record(
    record: PersonalRecord,
    preview: bool = False,
    slug: Optional[str] = None,
) -> tuple[Path, int, List[Path]]:
    document = render_document(record)
    slug = slug or record_slug(record)
    pdf_path = write_document(slug, document.file_name, document.pdf)
    record_artifact(record, pdf_path, document.page_count)
    previews = render_previews(pdf_path) if preview else []
    return pdf_path, document.page_count, previews


def run_batch(
    paths: Iterable[Path],
    include_incomplete: bool = False,
    preview: bool = False,
) -> dict[str, list[str]]:
    results: dict[str, list[str]] = {"READY": [], "FAILED": [], "SKIPPED": []}
    for path in paths:
        try:
            record = load_record(path)
        except (OSError, ValueError, ValidationError) as exc:
            logger.exception("Could not load record %s", path)
            results["FAILED"].append(f"{path.name}: {exc}")
            continue

        if not record.is_complete and not include_incomplete:
            logger.info("Skipping incomplete record %s", path.name)
            results["SKIPPED"].append(path.name)
            continue

        try:
            slug = record_slug(record)
        except ValueError as exc:
            logger.exception("No output directory for %s", path.name)
            results["FAILED"].append(f"{path.name}: {exc}")
            continue

        try:
            pdf_path, page_count, _ = process_record(record, preview=preview, slug=slug)
        except Exception as exc:
            logger.exception("Render error for %s", path.name)
            write_error(slug, str(exc))
            results["FAILED"].append(path.name)
            continue
        logger.info("%s -> %s (%s pages)", path.name, pdf_path.name, page_count)
        results["READY"].append(pdf_path.name)
    return results
