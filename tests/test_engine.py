from __future__ import annotations

import io
import unittest
from datetime import date

from PIL import Image
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from personnel import config
from personnel.render.blocks import BulletList, LabelValue, SectionHeader, TwoColumnPair
from personnel.render.engine import PageState, PaginationEngine
from personnel.render.primitives import RenderContext


def _image() -> ImageReader:
    buffer = io.BytesIO()
    Image.new("RGB", (40, 12), "black").save(buffer, format="PNG")
    buffer.seek(0)
    return ImageReader(buffer)


class PaginationEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.buffer = io.BytesIO()
        self.canv = canvas.Canvas(self.buffer, pagesize=A4)
        self.ctx = RenderContext(canv=self.canv, style=config.load_style_preset(), created=date(2024, 3, 1))
        self.engine = PaginationEngine(self.ctx)
        self.limit = self.ctx.geometry.bottom_limit

    def assert_layout_invariants(self) -> None:
        previous = None
        for placement in self.engine.placements:
            self.assertLessEqual(placement.bottom, self.limit)
            self.assertGreaterEqual(placement.top, self.ctx.geometry.content_top)
            if previous is not None:
                self.assertIn(placement.page - previous.page, (0, 1))
                if placement.page == previous.page:
                    self.assertGreaterEqual(placement.top, previous.bottom)
            previous = placement

    def test_starts_before_first_page(self) -> None:
        self.assertEqual(self.engine.state, PageState.BEFORE_FIRST_PAGE)
        self.assertEqual(self.engine.page_count, 0)
        self.engine.place_section_header("Persönliche Angaben")
        self.assertEqual(self.engine.state, PageState.ON_PAGE)
        self.assertEqual(self.engine.cursor.page_number, 1)

    def test_empty_document_still_has_one_page(self) -> None:
        self.assertEqual(self.engine.finish(), 1)

    def test_page_break_resets_offset(self) -> None:
        for i in range(40):
            self.engine.place_label_value(f"Feld {i}", "Wert")
        self.assertGreater(self.engine.page_count, 1)
        first_on_page_two = next(p for p in self.engine.placements if p.page == 2)
        self.assertEqual(first_on_page_two.top, self.ctx.geometry.content_top)
        self.assert_layout_invariants()

    def test_pair_is_never_split(self) -> None:
        long_value = " ".join(["Sehr langer Wert"] * 40)
        while self.engine.cursor.offset < self.limit - 30:
            self.engine.place_label_value("Füller", "x")
        self.engine.place_two_column_pair("Links", long_value, "Rechts", "kurz")
        pair = self.engine.placements[-1]
        self.assertEqual(pair.kind, "two_column_pair")
        self.assertEqual(pair.page, 2)
        self.assertEqual(pair.top, self.ctx.geometry.content_top)
        self.assert_layout_invariants()

    def test_image_breaks_before_overflow(self) -> None:
        while self.engine.cursor.offset < self.limit - 20:
            self.engine.place_label_value("Füller", "x")
        page_before = self.engine.cursor.page_number
        self.engine.place_image_block(_image(), 80, 25)
        image = self.engine.placements[-1]
        self.assertEqual(image.kind, "image")
        self.assertEqual(image.page, page_before + 1)
        self.assertAlmostEqual(image.bottom - image.top, 30)
        self.assert_layout_invariants()

    def test_bullet_items_spread_across_pages(self) -> None:
        items = [" ".join([f"Eintrag {i} mit sehr langem Text"] * 6) for i in range(40)]
        self.engine.place(SectionHeader("Weitere Beschäftigungen"))
        self.engine.place(BulletList(tuple(items)))
        bullets = [p for p in self.engine.placements if p.kind == "bullet_item"]
        self.assertEqual(len(bullets), 40)
        self.assertGreater(self.engine.page_count, 1)
        self.assert_layout_invariants()

    def test_oversized_block_terminates_with_warning(self) -> None:
        huge = " ".join(["Überlang"] * 4000)
        self.engine.place_section_header("Persönliche Angaben")
        with self.assertLogs("personnel.render.engine", level="WARNING"):
            self.engine.place(LabelValue("Notizen", huge))
        self.assertEqual(self.engine.page_count, 2)
        self.engine.place(TwoColumnPair("IBAN", "DE00", "BIC", "X"))
        self.assertEqual(self.engine.page_count, 3)

    def test_oversized_first_block_does_not_leave_blank_page(self) -> None:
        huge = " ".join(["Überlang"] * 4000)
        with self.assertLogs("personnel.render.engine", level="WARNING"):
            self.engine.place_label_value("Notizen", huge)
        self.assertEqual(self.engine.finish(), 1)

    def test_header_needs_room_for_following_content(self) -> None:
        while self.engine.cursor.offset < self.limit - 15:
            self.engine.place_label_value("Füller", "x")
        self.engine.cursor.offset = self.limit - 15
        self.engine.place_section_header("Bankverbindung")
        self.assertEqual(self.engine.placements[-1].page, 2)

    def test_empty_bullet_list_leaves_cursor_alone(self) -> None:
        self.engine.place_bullet_list(())
        self.assertEqual(self.engine.state, PageState.BEFORE_FIRST_PAGE)
        self.assertEqual(self.engine.cursor.offset, self.ctx.geometry.content_top)
        self.engine.place_label_value("Feld", "Wert")
        offset = self.engine.cursor.offset
        self.engine.place(BulletList(()))
        self.assertEqual(self.engine.cursor.offset, offset)

    def test_unknown_block_type_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            self.engine.place("not a block")


if __name__ == "__main__":
    unittest.main()
