"""Backend protocols for the PDF codec and the page rasterizer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence, Tuple

Color = Tuple[float, float, float]
Size = Tuple[float, float]


@dataclass
class FontHandle:
    """A font registered with an editable document."""

    name: str
    resource_name: str
    reference: Any = None


class PageHandle(Protocol):
    """One page of an :class:`EditableDocument`."""

    @property
    def rotation(self) -> int:
        """Stored page rotation in degrees."""

    def set_rotation(self, angle: int) -> None:
        """Replace the stored rotation."""

    def size(self) -> Size:
        """Unrotated ``(width, height)`` of the visible (crop) box in points."""

    def origin(self) -> Tuple[float, float]:
        """Lower-left corner of the visible (crop) box."""

    def set_crop_box(self, x: float, y: float, width: float, height: float) -> None:
        """Set the visible region of the page."""

    def draw_text(self, text: str, x: float, y: float, size: float, font: FontHandle, color: Color) -> None:
        """Draw ``text`` with its baseline starting at ``(x, y)``."""


class EditableDocument(Protocol):
    """A loaded PDF whose pages can be changed and serialised again."""

    @property
    def pages(self) -> Sequence[PageHandle]:
        """Pages in document order."""

    @property
    def page_count(self) -> int:
        """Number of pages."""

    def embed_font(self, name: str) -> FontHandle:
        """Register a standard font and return its handle."""

    def copy_pages(self, source: "EditableDocument", indices: Sequence[int]) -> Sequence[PageHandle]:
        """Return copies of ``source`` pages ready for :meth:`add_page`."""

    def add_page(self, page: PageHandle) -> PageHandle:
        """Append ``page`` and return the handle bound to this document."""

    def save(self) -> bytes:
        """Serialise the document."""


class PDFCodec(Protocol):
    """Protocol defining backend operations for loading and creating PDFs."""

    def load(self, data: bytes) -> EditableDocument:
        """Parse ``data``; raises :class:`~pdf_editor.exceptions.LoadError`."""

    def new_document(self) -> EditableDocument:
        """Return an empty editable document."""


class PageView(Protocol):
    """A single renderable page."""

    def viewport(self, scale: float) -> Size:
        """Rendered ``(width, height)`` in pixels at ``scale``, rotation applied."""

    def render(self, scale: float, *, image_format: str = "JPEG", quality: int = 70) -> bytes:
        """Encoded image of the page; raises :class:`~pdf_editor.exceptions.RenderError`."""


class RenderableDocument(Protocol):
    """A PDF opened for rasterization."""

    @property
    def page_count(self) -> int:
        """Number of pages."""

    def get_page(self, number: int) -> PageView:
        """Return the page with 1-based ``number``."""

    def close(self) -> None:
        """Release native resources."""


class PageRasterizer(Protocol):
    """Protocol defining page rendering."""

    def load(self, data: bytes) -> RenderableDocument:
        """Parse ``data``; raises :class:`~pdf_editor.exceptions.LoadError`."""
