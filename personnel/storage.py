from __future__ import annotations

import hashlib
from pathlib import Path

from slugify import slugify

from . import config
from .models import DocumentArtifact, PersonalRecord, get_session, init_db


ERROR_LOG_NAME = "error.log"


def record_slug(record: PersonalRecord) -> str:
    parts = [record.last_name, record.first_name]
    if record.user_id:
        parts.append(record.user_id[:8])
    key = " ".join(parts)
    slug = slugify(key)
    if not slug:
        slug = hashlib.md5(key.encode("utf-8")).hexdigest()[:12]
    if ".." in slug or "/" in slug or "\\" in slug:
        raise ValueError(f"Invalid slug generated for record: {slug!r}")
    return slug


def record_dir(slug: str, base_dir: Path | None = None) -> Path:
    root = base_dir or config.OUT_DIR
    path = root / slug
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_document(slug: str, file_name: str, pdf: bytes, base_dir: Path | None = None) -> Path:
    path = record_dir(slug, base_dir=base_dir) / file_name
    path.write_bytes(pdf)
    return path


def write_error(slug: str, message: str, base_dir: Path | None = None) -> Path:
    path = record_dir(slug, base_dir=base_dir) / ERROR_LOG_NAME
    path.write_text(message, encoding="utf-8")
    return path


def record_artifact(record: PersonalRecord, path: Path, page_count: int) -> DocumentArtifact:
    init_db()
    artifact = DocumentArtifact(
        user_id=record.user_id,
        file_name=path.name,
        path=str(path.relative_to(config.OUT_DIR)),
        page_count=page_count,
    )
    with get_session() as session:
        session.add(artifact)
        session.commit()
        session.refresh(artifact)
    return artifact
