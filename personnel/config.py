from __future__ import annotations

from pathlib import Path
import json


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "personnel.db"
STYLE_PRESET_PATH = Path(__file__).resolve().parent / "assets" / "document_style.json"

# A4 in millimetres
PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
PAGE_MARGIN = 15.0
CONTENT_TOP = 40.0

DOCUMENT_TITLE = "Personaldaten"
BRAND_LABEL = "events"
LOGO_PATH: Path | None = Path(__file__).resolve().parent / "assets" / "logo.png"

EMPTY_PLACEHOLDER = "—"


def load_style_preset() -> dict:
    with STYLE_PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "personnel.db"
