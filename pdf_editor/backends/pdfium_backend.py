"""pypdfium2 backend implementation of the page rasterizer."""

from __future__ import annotations

import io
import logging
import threading
from typing import Tuple

import pypdfium2 as pdfium  # type: ignore[import-untyped]
from PIL import Image

from ..exceptions import LoadError, NotAPDFError, PageOutOfBoundsError, RenderError
from ..utils import looks_like_pdf
from .base import PageRasterizer

LOGGER = logging.getLogger("pdf_editor.rasterizer")

# PDFium is not thread-safe; all native calls go through this lock.
_PDFIUM_LOCK = threading.RLock()


def encode_image(image: Image.Image, image_format: str = "JPEG", quality: int = 70) -> bytes:
    """Encode a PIL image, flattening transparency for JPEG output."""

    image_format = image_format.upper()
    if image_format == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    buffer = io.BytesIO()
    if image_format == "JPEG":
        image.save(buffer, format="JPEG", quality=quality)
    else:
        image.save(buffer, format=image_format)
    return buffer.getvalue()


class PdfiumPageView:
    """One page of a :class:`PdfiumDocument`."""

    def __init__(self, document: "PdfiumDocument", index: int) -> None:
        self.document = document
        self.index = index

    def viewport(self, scale: float) -> Tuple[float, float]:
        with _PDFIUM_LOCK:
            page = self.document.pdf[self.index]
            try:
                # PDFium reports the crop box size with /Rotate already applied.
                width, height = page.get_size()
            finally:
                page.close()
        return width * scale, height * scale

    def render(self, scale: float, *, image_format: str = "JPEG", quality: int = 70) -> bytes:
        with _PDFIUM_LOCK:
            try:
                page = self.document.pdf[self.index]
                try:
                    bitmap = page.render(scale=scale)
                    image = bitmap.to_pil()
                finally:
                    page.close()
            except pdfium.PdfiumError as exc:
                LOGGER.error("Failed to render page %d: %s", self.index + 1, exc)
                raise RenderError(f"Failed to render page {self.index + 1}. Error: {exc}") from exc

        LOGGER.debug("Rendered page %d at scale %.2f (%dx%d)", self.index + 1, scale, image.width, image.height)
        return encode_image(image, image_format, quality)


class PdfiumDocument:
    """Renderable document wrapping :class:`pypdfium2.PdfDocument`."""

    def __init__(self, pdf: pdfium.PdfDocument) -> None:
        self.pdf = pdf

    @property
    def page_count(self) -> int:
        with _PDFIUM_LOCK:
            return len(self.pdf)

    def get_page(self, number: int) -> PdfiumPageView:
        count = self.page_count
        if number < 1 or number > count:
            raise PageOutOfBoundsError(f"Page {number} is out of bounds. PDF has {count} pages.")
        return PdfiumPageView(self, number - 1)

    def close(self) -> None:
        with _PDFIUM_LOCK:
            self.pdf.close()

    def __enter__(self) -> "PdfiumDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PdfiumRasterizer(PageRasterizer):
    """Rasterizer implementation that uses `pypdfium2` under the hood."""

    def load(self, data: bytes) -> PdfiumDocument:
        if not looks_like_pdf(data):
            raise NotAPDFError("Data does not start with a PDF header.")

        with _PDFIUM_LOCK:
            try:
                pdf = pdfium.PdfDocument(data)
            except pdfium.PdfiumError as exc:
                LOGGER.error("Rasterizer failed to load PDF (%d bytes): %s", len(data), exc)
                raise LoadError(f"Corrupted or invalid PDF data. Error: {exc}") from exc
        return PdfiumDocument(pdf)


__all__ = ["PdfiumRasterizer", "PdfiumDocument", "PdfiumPageView", "encode_image"]
