from __future__ import annotations

from pathlib import Path
from typing import List

import fitz  # PyMuPDF


def _render_page_to_png(doc: fitz.Document, page_index: int, out_path: Path, min_px: int = 1200) -> None:
    page = doc.load_page(page_index)

    # scale so the short side ends up at least min_px wide
    rect = page.rect
    short_side = min(rect.width, rect.height)
    zoom = max(2.0, min_px / float(short_side))
    mat = fitz.Matrix(zoom, zoom)

    pix = page.get_pixmap(matrix=mat, alpha=False)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix.save(str(out_path))


def render_previews(pdf_path: Path, max_pages: int = 1) -> List[Path]:
    """PNG previews next to the PDF: <stem>_page1.png, <stem>_page2.png, ..."""
    previews: List[Path] = []
    with fitz.open(pdf_path) as doc:
        for index in range(min(max_pages, doc.page_count)):
            out_path = pdf_path.with_name(f"{pdf_path.stem}_page{index + 1}.png")
            _render_page_to_png(doc, index, out_path)
            previews.append(out_path)
    return previews
