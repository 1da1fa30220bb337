from __future__ import annotations

import io

import pytest
from pypdf import PdfReader

from pdf_editor.engine import MutationEngine
from pdf_editor.exceptions import (
    DeleteAllPagesError,
    InputValidationError,
    InvalidColorError,
    InvalidPermutationError,
    InvalidRotationError,
    LoadError,
    NotAPDFError,
    PageOutOfBoundsError,
)
from pdf_editor.types import CropBox, MergeRule, TextAnnotation

from conftest import build_pdf, page_widths, rotations


@pytest.fixture()
def engine() -> MutationEngine:
    return MutationEngine()


def _reader(data: bytes) -> PdfReader:
    return PdfReader(io.BytesIO(data))


def test_page_count_and_sizes(engine: MutationEngine, labelled_pdf: bytes) -> None:
    assert engine.page_count(labelled_pdf) == 5
    assert engine.page_sizes(labelled_pdf)[0] == pytest.approx((101, 200))


def test_load_rejects_non_pdf(engine: MutationEngine) -> None:
    with pytest.raises(NotAPDFError):
        engine.page_count(b"hello world")


def test_load_rejects_corrupt_pdf(engine: MutationEngine) -> None:
    with pytest.raises(LoadError):
        engine.page_count(b"%PDF-1.4\nthis is not really a pdf")


def test_load_rejects_encrypted_pdf(engine: MutationEngine, encrypted_pdf_bytes: bytes) -> None:
    with pytest.raises(LoadError):
        engine.page_count(encrypted_pdf_bytes)


class TestRotate:
    def test_rotate_selected_pages(self, engine: MutationEngine, ten_page_pdf: bytes) -> None:
        result = engine.rotate(ten_page_pdf, [2, 4], 90)

        assert rotations(result) == [0, 0, 90, 0, 90, 0, 0, 0, 0, 0]
        assert engine.page_count(result) == 10

    def test_rotation_accumulates_modulo_360(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        result = engine.rotate(sample_pdf_bytes, [0], 270)
        result = engine.rotate(result, [0], 180)
        assert rotations(result)[0] == 90

    def test_negative_rotation(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        assert rotations(engine.rotate(sample_pdf_bytes, [1], -90))[1] == 270

    def test_out_of_range_indices_are_skipped(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        result = engine.rotate(sample_pdf_bytes, [1, 9, -1], 180)
        assert rotations(result) == [0, 180, 0, 0, 0]

    def test_repeated_index_rotates_once(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        result = engine.rotate(sample_pdf_bytes, [3, 3, 3], 90)
        assert rotations(result) == [0, 0, 0, 90, 0]

    def test_invalid_rotation(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        with pytest.raises(InvalidRotationError):
            engine.rotate(sample_pdf_bytes, [0], 45)

    def test_input_is_not_modified(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        original = bytes(sample_pdf_bytes)
        engine.rotate(sample_pdf_bytes, [0], 90)
        assert sample_pdf_bytes == original


class TestCrop:
    def test_full_preview_crop_is_full_page(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        result = engine.crop(sample_pdf_bytes, 0, CropBox(0, 0, 300, 300), 300, 300)
        box = _reader(result).pages[0].cropbox

        assert float(box.left) == pytest.approx(0)
        assert float(box.bottom) == pytest.approx(0)
        assert float(box.right) == pytest.approx(200)
        assert float(box.top) == pytest.approx(200)

    def test_crop_top_left_quadrant(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        result = engine.crop(sample_pdf_bytes, 1, CropBox(0, 0, 150, 150), 300, 300)
        pages = _reader(result).pages
        box = pages[1].cropbox

        assert (float(box.left), float(box.bottom)) == pytest.approx((0, 100))
        assert (float(box.right), float(box.top)) == pytest.approx((100, 200))
        assert float(pages[0].cropbox.top) == pytest.approx(200)

    def test_recrop_maps_onto_current_crop_box(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        cropped = engine.crop(sample_pdf_bytes, 1, CropBox(0, 0, 150, 150), 300, 300)
        assert engine.page_sizes(cropped)[1] == pytest.approx((100, 100))

        # The preview of the cropped page now shows only the 100pt box.
        recropped = engine.crop(cropped, 1, CropBox(0, 0, 150, 150), 150, 150)
        box = _reader(recropped).pages[1].cropbox
        assert (float(box.left), float(box.bottom)) == pytest.approx((0, 100))
        assert (float(box.right), float(box.top)) == pytest.approx((100, 200))

        quarter = engine.crop(cropped, 1, CropBox(75, 75, 75, 75), 150, 150)
        box = _reader(quarter).pages[1].cropbox
        assert (float(box.left), float(box.bottom)) == pytest.approx((50, 100))
        assert (float(box.right), float(box.top)) == pytest.approx((100, 150))

    def test_crop_out_of_bounds(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        with pytest.raises(PageOutOfBoundsError):
            engine.crop(sample_pdf_bytes, 5, CropBox(0, 0, 10, 10), 100, 100)

    def test_crop_zero_preview(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        with pytest.raises(InputValidationError):
            engine.crop(sample_pdf_bytes, 0, CropBox(0, 0, 10, 10), 0, 100)


class TestAddText:
    def _text_position(self, data: bytes, page_index: int = 0) -> tuple[float, float]:
        content = _reader(data).pages[page_index].get_contents()
        operands = [operands for operands, operator in content.operations if operator == b"Td"]
        assert operands, "no text positioning operator found"
        x, y = operands[-1]
        return float(x), float(y)

    def test_text_is_drawn_at_flipped_baseline(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        annotation = TextAnnotation(text="Hello", x=10, y=10, font_size=16)
        result = engine.add_text(sample_pdf_bytes, 0, [annotation])

        assert self._text_position(result) == pytest.approx((10, 174))
        page = _reader(result).pages[0]
        assert "Hello" in page.extract_text()
        fonts = page["/Resources"]["/Font"]
        assert [font["/BaseFont"] for font in fonts.values()] == ["/Helvetica"]

    def test_text_position_scales_with_preview(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        annotation = TextAnnotation(text="Scaled", x=30, y=30, font_size=24)
        result = engine.add_text(sample_pdf_bytes, 0, [annotation], preview_width=300, preview_height=300)
        assert self._text_position(result) == pytest.approx((20, 164))

    def test_font_embedded_once_for_several_annotations(
        self, engine: MutationEngine, sample_pdf_bytes: bytes
    ) -> None:
        annotations = [
            TextAnnotation(text="One", x=10, y=10),
            TextAnnotation(text="Two", x=10, y=50, color="#ff0000"),
        ]
        result = engine.add_text(sample_pdf_bytes, 2, annotations)
        page = _reader(result).pages[2]

        assert len(page["/Resources"]["/Font"]) == 1
        text = page.extract_text()
        assert "One" in text and "Two" in text

    def test_unknown_font_falls_back_to_helvetica(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        annotation = TextAnnotation(text="Fallback", x=0, y=0, font_family="Comic Sans")
        result = engine.add_text(sample_pdf_bytes, 0, [annotation])
        fonts = _reader(result).pages[0]["/Resources"]["/Font"]
        assert [font["/BaseFont"] for font in fonts.values()] == ["/Helvetica"]

    def test_invalid_color_is_rejected_before_loading(self, engine: MutationEngine) -> None:
        with pytest.raises(InvalidColorError):
            engine.add_text(b"not a pdf", 0, [TextAnnotation(text="x", x=0, y=0, color="blue")])

    def test_unencodable_text(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        with pytest.raises(InputValidationError):
            engine.add_text(sample_pdf_bytes, 0, [TextAnnotation(text="漢字", x=0, y=0)])

    def test_page_out_of_bounds(self, engine: MutationEngine, sample_pdf_bytes: bytes) -> None:
        with pytest.raises(PageOutOfBoundsError):
            engine.add_text(sample_pdf_bytes, 7, [TextAnnotation(text="x", x=0, y=0)])


class TestRebuild:
    def test_extract_in_caller_order_with_duplicates(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        result = engine.extract_pages(labelled_pdf, [3, 0, 3])
        assert page_widths(result) == [104, 101, 104]

    def test_extract_out_of_bounds(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        with pytest.raises(PageOutOfBoundsError):
            engine.extract_pages(labelled_pdf, [0, 5])

    def test_identity_reorder(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        result = engine.reorder_pages(labelled_pdf, [0, 1, 2, 3, 4])
        assert page_widths(result) == [101, 102, 103, 104, 105]

    def test_reorder(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        result = engine.reorder_pages(labelled_pdf, [4, 3, 2, 1, 0])
        assert page_widths(result) == [105, 104, 103, 102, 101]

    def test_reorder_requires_permutation(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        with pytest.raises(InvalidPermutationError):
            engine.reorder_pages(labelled_pdf, [0, 0, 1, 2, 3])

    def test_delete_subset(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        result = engine.delete_pages(labelled_pdf, [1, 3])
        assert page_widths(result) == [101, 103, 105]

    def test_delete_all_rejected(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        with pytest.raises(DeleteAllPagesError):
            engine.delete_pages(labelled_pdf, range(5))

    def test_move_page(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        result = engine.move_page(labelled_pdf, 0, 3)
        assert page_widths(result) == [102, 103, 104, 101, 105]

    def test_rebuild_keeps_rotation(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        rotated = engine.rotate(labelled_pdf, [2], 90)
        result = engine.rebuild(rotated, [2, 0])
        assert rotations(result) == [90, 0]


class TestSplitMerge:
    def test_split_by_rules(self, engine: MutationEngine, ten_page_pdf: bytes) -> None:
        rules = [MergeRule(0, 1), MergeRule(2, 2), MergeRule(3, 8), MergeRule(9, 9)]
        parts = engine.split(ten_page_pdf, rules)
        assert [engine.page_count(part) for part in parts] == [2, 1, 6, 1]

    def test_split_without_rules(self, engine: MutationEngine, ten_page_pdf: bytes) -> None:
        assert engine.split(ten_page_pdf, []) == []

    def test_split_then_merge_keeps_page_count(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        parts = engine.split(labelled_pdf, [MergeRule(0, 1), MergeRule(2, 4)])
        merged = engine.merge(parts)
        assert page_widths(merged) == [101, 102, 103, 104, 105]

    def test_merge_preserves_input_order(self, engine: MutationEngine) -> None:
        first = build_pdf([300, 301])
        second = build_pdf([400])
        assert page_widths(engine.merge([second, first])) == [400, 300, 301]

    def test_merge_single_input(self, engine: MutationEngine, labelled_pdf: bytes) -> None:
        assert page_widths(engine.merge([labelled_pdf])) == page_widths(labelled_pdf)

    def test_merge_requires_input(self, engine: MutationEngine) -> None:
        with pytest.raises(InputValidationError):
            engine.merge([])
