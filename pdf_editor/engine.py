"""Document mutation engine built around a pluggable :class:`PDFCodec`.

Every operation loads the given bytes into a transient codec document,
mutates it and returns freshly serialised bytes. Input buffers are never
modified and codec documents are never shared between calls.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .algebra import (
    move_permutation,
    remaining_indices,
    validate_indices,
    validate_permutation,
)
from .backends.base import EditableDocument, FontHandle, PDFCodec
from .backends.pypdf_backend import STANDARD_FONTS, PypdfCodec
from .exceptions import InputValidationError, InvalidRotationError, PageOutOfBoundsError
from .geometry import CoordinateTransform, parse_hex_color
from .types import CropBox, MergeRule, TextAnnotation

LOGGER = logging.getLogger("pdf_editor.engine")

DEFAULT_FONT = "Helvetica"


class MutationEngine:
    """Byte-buffer in, byte-buffer out PDF operations."""

    def __init__(self, codec: Optional[PDFCodec] = None, *, default_font: str = DEFAULT_FONT) -> None:
        self.codec: PDFCodec = codec or PypdfCodec()
        self.default_font = default_font

    # ------------------------------------------------------------------
    # Read-only helpers
    # ------------------------------------------------------------------
    def page_count(self, data: bytes) -> int:
        return self.codec.load(data).page_count

    def page_sizes(self, data: bytes) -> List[Tuple[float, float]]:
        return [page.size() for page in self.codec.load(data).pages]

    def _check_page(self, document: EditableDocument, page_index: int) -> None:
        if page_index < 0 or page_index >= document.page_count:
            raise PageOutOfBoundsError(
                f"Page index {page_index} is out of bounds. Document has {document.page_count} pages."
            )

    # ------------------------------------------------------------------
    # In-place page edits
    # ------------------------------------------------------------------
    def rotate(self, data: bytes, indices: Iterable[int], degrees: int) -> bytes:
        """Add ``degrees`` to the stored rotation of each page in ``indices``.

        ``indices`` is treated as a set: a page listed twice is rotated once.
        Indices outside the document are skipped.
        """

        if degrees % 90 != 0:
            raise InvalidRotationError(f"Rotation must be a multiple of 90 degrees, got {degrees}.")

        document = self.codec.load(data)
        pages = document.pages
        rotated = 0
        for index in dict.fromkeys(indices):
            if index < 0 or index >= len(pages):
                LOGGER.warning("Skipping rotation of page index %d (pages: %d)", index, len(pages))
                continue
            page = pages[index]
            page.set_rotation((page.rotation + degrees) % 360)
            rotated += 1

        LOGGER.info("Rotated %d page(s) by %d degrees", rotated, degrees)
        return document.save()

    def crop(
        self,
        data: bytes,
        page_index: int,
        crop_box: CropBox,
        preview_width: float,
        preview_height: float,
    ) -> bytes:
        """Set the crop box of one page from a rectangle drawn on its preview."""

        if crop_box.width <= 0 or crop_box.height <= 0:
            raise InputValidationError("Crop rectangle must have a positive width and height.")

        document = self.codec.load(data)
        self._check_page(document, page_index)
        page = document.pages[page_index]

        transform = CoordinateTransform.from_sizes(
            (preview_width, preview_height), page.size(), page.origin()
        )
        x, y, width, height = transform.rect_to_pdf(crop_box)
        page.set_crop_box(x, y, width, height)

        LOGGER.info(
            "Cropped page %d to (%.2f, %.2f, %.2f, %.2f)", page_index + 1, x, y, width, height
        )
        return document.save()

    def add_text(
        self,
        data: bytes,
        page_index: int,
        annotations: Sequence[TextAnnotation],
        preview_width: Optional[float] = None,
        preview_height: Optional[float] = None,
    ) -> bytes:
        """Burn ``annotations`` into one page.

        Annotation positions are in preview space. Without a preview size
        the preview is taken to be the page at scale 1.
        """

        colors = [parse_hex_color(annotation.color) for annotation in annotations]
        if (preview_width is None) != (preview_height is None):
            raise InputValidationError("Preview width and height must be given together.")

        document = self.codec.load(data)
        self._check_page(document, page_index)
        page = document.pages[page_index]

        if preview_width is None or preview_height is None:
            transform = CoordinateTransform.identity(page.size(), page.origin())
        else:
            transform = CoordinateTransform.from_sizes(
                (preview_width, preview_height), page.size(), page.origin()
            )

        fonts: Dict[str, FontHandle] = {}
        for annotation, color in zip(annotations, colors):
            family = annotation.font_family if annotation.font_family in STANDARD_FONTS else self.default_font
            if family not in fonts:
                fonts[family] = document.embed_font(family)

            x, y = transform.text_origin(annotation.x, annotation.y, annotation.font_size)
            size = transform.length_to_pdf(annotation.font_size)
            page.draw_text(annotation.text, x, y, size, fonts[family], color)
            LOGGER.debug("Drew '%s' on page %d at (%.2f, %.2f)", annotation.text, page_index + 1, x, y)

        LOGGER.info("Burned %d annotation(s) into page %d", len(annotations), page_index + 1)
        return document.save()

    # ------------------------------------------------------------------
    # Whole-document rebuilds
    # ------------------------------------------------------------------
    def _copy_into_new(self, source: EditableDocument, order: Sequence[int]) -> bytes:
        target = self.codec.new_document()
        for page in target.copy_pages(source, order):
            target.add_page(page)
        return target.save()

    def rebuild(self, data: bytes, order: Sequence[int]) -> bytes:
        """New document holding the pages of ``data`` in ``order``.

        This is the single primitive behind extraction, reordering and
        deletion. Duplicates replicate a page.
        """

        source = self.codec.load(data)
        validate_indices(order, source.page_count)
        result = self._copy_into_new(source, order)
        LOGGER.debug("Rebuilt document with order %s", list(order))
        return result

    def extract_pages(self, data: bytes, indices: Sequence[int]) -> bytes:
        result = self.rebuild(data, indices)
        LOGGER.info("Extracted %d page(s)", len(indices))
        return result

    def reorder_pages(self, data: bytes, new_order: Sequence[int]) -> bytes:
        source = self.codec.load(data)
        order = validate_permutation(new_order, source.page_count)
        result = self._copy_into_new(source, order)
        LOGGER.info("Reordered %d page(s)", len(order))
        return result

    def delete_pages(self, data: bytes, remove: Iterable[int]) -> bytes:
        source = self.codec.load(data)
        keep = remaining_indices(source.page_count, remove)
        result = self._copy_into_new(source, keep)
        LOGGER.info("Deleted %d page(s); %d remain", source.page_count - len(keep), len(keep))
        return result

    def move_page(self, data: bytes, from_index: int, to_index: int) -> bytes:
        source = self.codec.load(data)
        order = move_permutation(source.page_count, from_index, to_index)
        result = self._copy_into_new(source, order)
        LOGGER.info("Moved page %d to position %d", from_index + 1, to_index + 1)
        return result

    # ------------------------------------------------------------------
    # Split / merge
    # ------------------------------------------------------------------
    def split(self, data: bytes, rules: Sequence[MergeRule]) -> List[bytes]:
        """One independent document per rule; ``[]`` for no rules."""

        if not rules:
            LOGGER.info("No split rules given; nothing to export")
            return []

        source = self.codec.load(data)
        parts: List[bytes] = []
        for rule in rules:
            order = validate_indices(rule.indices(), source.page_count)
            parts.append(self._copy_into_new(source, order))

        LOGGER.info("Split document into %d part(s)", len(parts))
        return parts

    def merge(self, buffers: Sequence[bytes]) -> bytes:
        """All pages of ``buffers`` in input order, as one document."""

        if not buffers:
            raise InputValidationError("At least one PDF is required to merge.")

        target = self.codec.new_document()
        for position, data in enumerate(buffers, start=1):
            source = self.codec.load(data)
            LOGGER.debug("Appending %d page(s) from input %d", source.page_count, position)
            for page in target.copy_pages(source, range(source.page_count)):
                target.add_page(page)

        result = target.save()
        LOGGER.info("Merged %d PDF(s) into %d page(s)", len(buffers), target.page_count)
        return result


__all__ = ["MutationEngine", "DEFAULT_FONT"]
