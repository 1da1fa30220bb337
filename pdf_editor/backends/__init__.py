"""Backend abstractions for the PDF editor core."""

from .base import (
    EditableDocument,
    FontHandle,
    PageHandle,
    PageRasterizer,
    PageView,
    PDFCodec,
    RenderableDocument,
)
from .pdfium_backend import PdfiumRasterizer
from .pypdf_backend import PypdfCodec

__all__ = [
    "EditableDocument",
    "FontHandle",
    "PageHandle",
    "PageRasterizer",
    "PageView",
    "PDFCodec",
    "RenderableDocument",
    "PdfiumRasterizer",
    "PypdfCodec",
]
