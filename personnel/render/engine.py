from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from reportlab.lib.utils import ImageReader

from .blocks import Block, BulletList, ImageBlock, LabelValue, SectionHeader, TwoColumnPair
from .primitives import (
    HEADER_HEIGHT,
    RenderContext,
    draw,
    draw_bullet_item,
    draw_page_chrome,
    measure,
    measure_bullet_item,
)


logger = logging.getLogger(__name__)

# A header only starts on a page that has room for a little content below it.
HEADER_KEEP_WITH_NEXT = 2.0
BULLET_LIST_GAP = 2.0


class PageState(str, Enum):
    BEFORE_FIRST_PAGE = "BEFORE_FIRST_PAGE"
    ON_PAGE = "ON_PAGE"


@dataclass
class Cursor:
    page_number: int
    offset: float


@dataclass(frozen=True)
class Placement:
    page: int
    kind: str
    top: float
    bottom: float


class PaginationEngine:
    """
    Places blocks top to bottom on fixed-size pages.

    Every block is measured before anything is drawn. If it does not fit
    between the cursor and the bottom margin the page is broken first, so a
    block is never split by the engine. Bullet lists are placed item by item;
    each item is atomic. A block taller than an empty page is placed anyway
    (with a warning) rather than looping on fresh pages.
    """

    def __init__(self, ctx: RenderContext) -> None:
        self.ctx = ctx
        self.state = PageState.BEFORE_FIRST_PAGE
        self.cursor = Cursor(page_number=0, offset=ctx.geometry.content_top)
        self.placements: List[Placement] = []
        self._page_has_content = False

    @property
    def page_count(self) -> int:
        return self.cursor.page_number

    def transition_to_next_page(self) -> None:
        if self.state == PageState.ON_PAGE:
            self.ctx.canv.showPage()
        self.state = PageState.ON_PAGE
        self.cursor.page_number += 1
        self.cursor.offset = self.ctx.geometry.content_top
        self._page_has_content = False
        draw_page_chrome(self.ctx, self.cursor.page_number)

    def ensure_space(self, required: float) -> float:
        """Break the page if `required` mm do not fit; return the draw origin."""
        if self.state == PageState.BEFORE_FIRST_PAGE:
            self.transition_to_next_page()
        limit = self.ctx.geometry.bottom_limit
        if self.cursor.offset + required > limit and self._page_has_content:
            self.transition_to_next_page()
        if self.cursor.offset + required > limit:
            logger.warning(
                "Block of %.1fmm exceeds usable page height on page %s; placing it anyway",
                required,
                self.cursor.page_number,
            )
        return self.cursor.offset

    def _advance(self, kind: str, top: float, height: float) -> None:
        self.placements.append(Placement(self.cursor.page_number, kind, top, top + height))
        self.cursor.offset = top + height
        self._page_has_content = True

    def _skip(self, gap: float) -> None:
        limit = self.ctx.geometry.bottom_limit
        if self.cursor.offset < limit:
            self.cursor.offset = min(self.cursor.offset + gap, limit)

    def place_section_header(self, title: str) -> None:
        top = self.ensure_space(HEADER_HEIGHT + HEADER_KEEP_WITH_NEXT)
        draw(self.ctx, SectionHeader(title), top)
        self._advance("section_header", top, HEADER_HEIGHT)

    def place_label_value(self, label: str, value: str) -> None:
        block = LabelValue(label, value)
        height = measure(self.ctx, block)
        top = self.ensure_space(height)
        draw(self.ctx, block, top)
        self._advance("label_value", top, height)

    def place_two_column_pair(self, label1: str, value1: str, label2: str, value2: str) -> None:
        block = TwoColumnPair(label1, value1, label2, value2)
        height = measure(self.ctx, block)
        top = self.ensure_space(height)
        draw(self.ctx, block, top)
        self._advance("two_column_pair", top, height)

    def place_bullet_list(self, items: Sequence[str]) -> None:
        if not items:
            return
        for item in items:
            height = measure_bullet_item(self.ctx, item)
            top = self.ensure_space(height)
            draw_bullet_item(self.ctx, item, top)
            self._advance("bullet_item", top, height)
        self._skip(BULLET_LIST_GAP)

    def place_image_block(self, image: ImageReader, width: float, height: float, caption: Optional[str] = None) -> None:
        block = ImageBlock(image, width, height, caption)
        total = measure(self.ctx, block)
        top = self.ensure_space(total)
        draw(self.ctx, block, top)
        self._advance("image", top, total)

    def place(self, block: Block) -> None:
        fn = BLOCK_PLACERS.get(type(block))
        if fn is None:
            raise TypeError(f"Unsupported block: {type(block).__name__}")
        fn(self, block)

    def finish(self) -> int:
        """Close the last page; a document always has at least one page."""
        if self.state == PageState.BEFORE_FIRST_PAGE:
            self.transition_to_next_page()
        self.ctx.canv.showPage()
        return self.page_count


BLOCK_PLACERS: Dict[type, Callable[[PaginationEngine, Block], None]] = {
    SectionHeader: lambda eng, b: eng.place_section_header(b.title),
    LabelValue: lambda eng, b: eng.place_label_value(b.label, b.value),
    TwoColumnPair: lambda eng, b: eng.place_two_column_pair(b.label1, b.value1, b.label2, b.value2),
    BulletList: lambda eng, b: eng.place_bullet_list(b.items),
    ImageBlock: lambda eng, b: eng.place_image_block(b.image, b.width, b.height, b.caption),
}
