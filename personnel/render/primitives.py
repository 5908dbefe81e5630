from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Iterator, List, Optional

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .. import config
from .blocks import Block, BulletList, ImageBlock, LabelValue, SectionHeader, TwoColumnPair


logger = logging.getLogger(__name__)

# Line height = font size * LINE_FACTOR + gap, all in mm.
LINE_FACTOR = 0.5
VALUE_LINE_GAP = 1.0
BULLET_LINE_GAP = 2.0
# Baseline offset below the top of a line, per pt of font size.
BASELINE_FACTOR = 0.35

LABEL_VALUE_GAP = 1.0
VALUE_INDENT = 2.0
FIELD_GAP = 2.0

COLUMN_GUTTER = 10.0
COLUMN_VALUE_OFFSET = 4.0
COLUMN_VALUE_INDENT = 2.0
ROW_GAP = 2.0

BULLET_MARKER = "•"
BULLET_INDENT = 4.0
BULLET_INSET = 6.0

HEADER_TITLE_GAP = 8.0
HEADER_RULE_GAP = 6.0
HEADER_HEIGHT = HEADER_TITLE_GAP + HEADER_RULE_GAP

CAPTION_GAP = 5.0
CAPTION_HEIGHT = 8.0


@dataclass(frozen=True)
class PageGeometry:
    width: float = config.PAGE_WIDTH
    height: float = config.PAGE_HEIGHT
    margin: float = config.PAGE_MARGIN
    content_top: float = config.CONTENT_TOP

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def bottom_limit(self) -> float:
        return self.height - self.margin

    @property
    def usable_height(self) -> float:
        return self.bottom_limit - self.content_top


@dataclass
class RenderContext:
    """Everything a primitive needs to measure or draw. Passed explicitly, never global."""

    canv: canvas.Canvas
    style: dict
    geometry: PageGeometry = field(default_factory=PageGeometry)
    logo: Optional[ImageReader] = None
    created: date = field(default_factory=date.today)

    def x(self, left_mm: float) -> float:
        return left_mm * mm

    def y(self, top_mm: float) -> float:
        # reportlab measures from the bottom edge in points
        return (self.geometry.height - top_mm) * mm


def _hex(value: str, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except ValueError:
        return default


def _s(style: dict, key: str, default):
    return style.get(key, default)


def line_height(size: float, gap: float = VALUE_LINE_GAP) -> float:
    return size * LINE_FACTOR + gap


def _split_word(word: str, font_name: str, font_size: float, max_pt: float) -> List[str]:
    parts: List[str] = []
    cur = ""
    for ch in word:
        if cur and stringWidth(cur + ch, font_name, font_size) > max_pt:
            parts.append(cur)
            cur = ch
        else:
            cur += ch
    if cur:
        parts.append(cur)
    return parts


def _wrap_lines(text: str, font_name: str, font_size: float, max_pt: float) -> Iterator[str]:
    for paragraph in (text or "").split("\n"):
        words = paragraph.split()
        if not words:
            yield ""
            continue
        cur: List[str] = []
        for w in words:
            test = " ".join(cur + [w])
            if stringWidth(test, font_name, font_size) <= max_pt:
                cur.append(w)
                continue
            if cur:
                yield " ".join(cur)
                cur = []
            if stringWidth(w, font_name, font_size) <= max_pt:
                cur = [w]
                continue
            # a single word wider than the line is broken by character
            pieces = _split_word(w, font_name, font_size, max_pt)
            yield from pieces[:-1]
            cur = [pieces[-1]]
        if cur:
            yield " ".join(cur)


def wrap_text(text: str, font_name: str, font_size: float, width: float) -> Iterator[str]:
    """
    Word wrap `text` to `width` mm. Lines are produced lazily; the same
    arguments always give the same lines.
    """
    if width is None or width <= 0:
        raise ValueError(f"wrap width must be positive, got {width!r}")
    return _wrap_lines(text, font_name, font_size, width * mm)


def _lines(text: str, font_name: str, font_size: float, width: float) -> List[str]:
    return list(wrap_text(text, font_name, font_size, width))


def _or_placeholder(value: str) -> str:
    return value if value else config.EMPTY_PLACEHOLDER


def _fonts(ctx: RenderContext) -> tuple[str, str]:
    return str(_s(ctx.style, "font_name", "Helvetica")), str(_s(ctx.style, "font_bold", "Helvetica-Bold"))


def _draw_lines(ctx: RenderContext, lines: List[str], left: float, top: float, size: float, gap: float) -> None:
    step = line_height(size, gap)
    for i, text in enumerate(lines):
        ctx.canv.drawString(ctx.x(left), ctx.y(top + i * step + size * BASELINE_FACTOR), text)


# -------------------- Measurement --------------------
def _measure_header(ctx: RenderContext, block: SectionHeader) -> float:
    return HEADER_HEIGHT


def _label_value_parts(ctx: RenderContext, block: LabelValue) -> tuple[List[str], List[str]]:
    font, bold = _fonts(ctx)
    width = ctx.geometry.content_width
    label_lines = _lines(block.label, font, float(_s(ctx.style, "label_size", 8)), width)
    value_lines = _lines(_or_placeholder(block.value), bold, float(_s(ctx.style, "value_size", 10)), width - VALUE_INDENT)
    return label_lines, value_lines


def _measure_label_value(ctx: RenderContext, block: LabelValue) -> float:
    label_lines, value_lines = _label_value_parts(ctx, block)
    label_size = float(_s(ctx.style, "label_size", 8))
    value_size = float(_s(ctx.style, "value_size", 10))
    return (
        len(label_lines) * line_height(label_size)
        + LABEL_VALUE_GAP
        + len(value_lines) * line_height(value_size)
        + FIELD_GAP
    )


def column_width(ctx: RenderContext) -> float:
    return (ctx.geometry.content_width - COLUMN_GUTTER) / 2


def _pair_columns(ctx: RenderContext, block: TwoColumnPair) -> tuple[List[str], List[str]]:
    _, bold = _fonts(ctx)
    size = float(_s(ctx.style, "value_size", 10))
    width = column_width(ctx)
    return (
        _lines(_or_placeholder(block.value1), bold, size, width),
        _lines(_or_placeholder(block.value2), bold, size, width),
    )


def _measure_pair(ctx: RenderContext, block: TwoColumnPair) -> float:
    left, right = _pair_columns(ctx, block)
    size = float(_s(ctx.style, "value_size", 10))
    return COLUMN_VALUE_OFFSET + max(len(left), len(right)) * line_height(size) + ROW_GAP


def measure_bullet_item(ctx: RenderContext, text: str) -> float:
    font, _ = _fonts(ctx)
    size = float(_s(ctx.style, "value_size", 10))
    lines = _lines(text, font, size, ctx.geometry.content_width - BULLET_INSET)
    return len(lines) * line_height(size, BULLET_LINE_GAP)


def _measure_bullets(ctx: RenderContext, block: BulletList) -> float:
    return sum(measure_bullet_item(ctx, item) for item in block.items)


def _measure_image(ctx: RenderContext, block: ImageBlock) -> float:
    height = block.height + CAPTION_GAP
    if block.caption:
        height += CAPTION_HEIGHT
    return height


MEASURERS: Dict[type, Callable[[RenderContext, Block], float]] = {
    SectionHeader: _measure_header,
    LabelValue: _measure_label_value,
    TwoColumnPair: _measure_pair,
    BulletList: _measure_bullets,
    ImageBlock: _measure_image,
}


def measure(ctx: RenderContext, block: Block) -> float:
    """Height in mm the block needs. Reads font metrics only; never draws."""
    fn = MEASURERS.get(type(block))
    if fn is None:
        raise TypeError(f"Unsupported block: {type(block).__name__}")
    return fn(ctx, block)


# -------------------- Drawing --------------------
def _draw_header(ctx: RenderContext, block: SectionHeader, top: float) -> None:
    _, bold = _fonts(ctx)
    size = float(_s(ctx.style, "section_size", 14))
    g = ctx.geometry
    canv = ctx.canv
    canv.setFillColor(_hex(_s(ctx.style, "accent_color", "#8B45FF")))
    canv.setFont(bold, size)
    canv.drawString(ctx.x(g.margin), ctx.y(top + size * BASELINE_FACTOR), block.title)

    rule_y = ctx.y(top + HEADER_TITLE_GAP)
    canv.setStrokeColor(_hex(_s(ctx.style, "divider_color", "#FFFFFF")))
    canv.setLineWidth(0.2 * mm)
    canv.line(ctx.x(g.margin), rule_y, ctx.x(g.width - g.margin), rule_y)


def _draw_label_value(ctx: RenderContext, block: LabelValue, top: float) -> None:
    font, bold = _fonts(ctx)
    label_size = float(_s(ctx.style, "label_size", 8))
    value_size = float(_s(ctx.style, "value_size", 10))
    label_lines, value_lines = _label_value_parts(ctx, block)
    margin = ctx.geometry.margin

    ctx.canv.setFont(font, label_size)
    ctx.canv.setFillColor(_hex(_s(ctx.style, "label_color", "#C8C8C8")))
    _draw_lines(ctx, label_lines, margin, top, label_size, VALUE_LINE_GAP)

    value_top = top + len(label_lines) * line_height(label_size) + LABEL_VALUE_GAP
    ctx.canv.setFont(bold, value_size)
    ctx.canv.setFillColor(_hex(_s(ctx.style, "text_color", "#FFFFFF")))
    _draw_lines(ctx, value_lines, margin + VALUE_INDENT, value_top, value_size, VALUE_LINE_GAP)


def _draw_pair(ctx: RenderContext, block: TwoColumnPair, top: float) -> None:
    font, bold = _fonts(ctx)
    label_size = float(_s(ctx.style, "label_size", 8))
    value_size = float(_s(ctx.style, "value_size", 10))
    left_lines, right_lines = _pair_columns(ctx, block)
    margin = ctx.geometry.margin
    col_w = column_width(ctx)

    columns = [
        (margin, block.label1, left_lines),
        (margin + col_w + COLUMN_GUTTER, block.label2, right_lines),
    ]
    for left, label, lines in columns:
        ctx.canv.setFont(font, label_size)
        ctx.canv.setFillColor(_hex(_s(ctx.style, "label_color", "#C8C8C8")))
        ctx.canv.drawString(ctx.x(left), ctx.y(top + label_size * BASELINE_FACTOR), label)

        ctx.canv.setFont(bold, value_size)
        ctx.canv.setFillColor(_hex(_s(ctx.style, "text_color", "#FFFFFF")))
        _draw_lines(ctx, lines, left + COLUMN_VALUE_INDENT, top + COLUMN_VALUE_OFFSET, value_size, VALUE_LINE_GAP)


def draw_bullet_item(ctx: RenderContext, text: str, top: float) -> None:
    font, _ = _fonts(ctx)
    size = float(_s(ctx.style, "value_size", 10))
    margin = ctx.geometry.margin
    lines = _lines(text, font, size, ctx.geometry.content_width - BULLET_INSET)

    ctx.canv.setFont(font, size)
    ctx.canv.setFillColor(_hex(_s(ctx.style, "text_color", "#FFFFFF")))
    ctx.canv.drawString(ctx.x(margin), ctx.y(top + size * BASELINE_FACTOR), BULLET_MARKER)
    _draw_lines(ctx, lines, margin + BULLET_INDENT, top, size, BULLET_LINE_GAP)


def _draw_bullets(ctx: RenderContext, block: BulletList, top: float) -> None:
    yy = top
    for item in block.items:
        draw_bullet_item(ctx, item, yy)
        yy += measure_bullet_item(ctx, item)


def _draw_image(ctx: RenderContext, block: ImageBlock, top: float) -> None:
    canv = ctx.canv
    left = ctx.geometry.margin
    bottom = ctx.y(top + block.height)

    # backing fill for images without reliable transparency
    canv.setFillColor(_hex(_s(ctx.style, "signature_fill", "#FFFFFF"), default=colors.white))
    canv.rect(ctx.x(left), bottom, block.width * mm, block.height * mm, stroke=0, fill=1)
    try:
        canv.drawImage(block.image, ctx.x(left), bottom, block.width * mm, block.height * mm, mask="auto")
    except Exception:
        logger.warning("Image could not be drawn; continuing without it", exc_info=True)

    if block.caption:
        font, _ = _fonts(ctx)
        size = float(_s(ctx.style, "caption_size", 9))
        canv.setFont(font, size)
        canv.setFillColor(_hex(_s(ctx.style, "label_color", "#C8C8C8")))
        caption_top = top + block.height + CAPTION_GAP
        canv.drawString(ctx.x(left), ctx.y(caption_top + size * BASELINE_FACTOR), block.caption)


DRAWERS: Dict[type, Callable[[RenderContext, Block, float], None]] = {
    SectionHeader: _draw_header,
    LabelValue: _draw_label_value,
    TwoColumnPair: _draw_pair,
    BulletList: _draw_bullets,
    ImageBlock: _draw_image,
}


def draw(ctx: RenderContext, block: Block, top: float) -> None:
    fn = DRAWERS.get(type(block))
    if fn is None:
        raise TypeError(f"Unsupported block: {type(block).__name__}")
    fn(ctx, block, top)


# -------------------- Page chrome --------------------
def draw_page_chrome(ctx: RenderContext, page_number: int) -> None:
    """Background, brand mark, title, page marker and creation date."""
    canv = ctx.canv
    g = ctx.geometry
    font, bold = _fonts(ctx)

    canv.setFillColor(_hex(_s(ctx.style, "background_color", "#141418")))
    canv.rect(0, 0, g.width * mm, g.height * mm, stroke=0, fill=1)

    if ctx.logo is not None:
        logo_size = float(_s(ctx.style, "logo_size", 16))
        try:
            canv.drawImage(ctx.logo, ctx.x(g.margin), ctx.y(12 + logo_size), logo_size * mm, logo_size * mm, mask="auto")
        except Exception:
            logger.warning("Logo could not be drawn on page %s", page_number, exc_info=True)
        else:
            canv.setFillColor(_hex(_s(ctx.style, "accent_color", "#8B45FF")))
            canv.setFont(bold, float(_s(ctx.style, "brand_size", 12)))
            canv.drawString(ctx.x(g.margin + logo_size + 4), ctx.y(22), config.BRAND_LABEL)

    canv.setFillColor(_hex(_s(ctx.style, "text_color", "#FFFFFF")))
    canv.setFont(bold, float(_s(ctx.style, "title_size", 16)))
    canv.drawCentredString(ctx.x(g.width / 2), ctx.y(20), config.DOCUMENT_TITLE)

    canv.setFont(font, float(_s(ctx.style, "subheader_size", 10)))
    canv.setFillColor(_hex(_s(ctx.style, "label_color", "#C8C8C8")))
    canv.drawCentredString(ctx.x(g.width / 2), ctx.y(28), f"Seite {page_number}")
    canv.drawRightString(ctx.x(g.width - g.margin), ctx.y(28), f"Erstellt: {ctx.created.strftime('%d.%m.%Y')}")
