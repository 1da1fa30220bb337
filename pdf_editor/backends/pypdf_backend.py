"""pypdf backend implementation of the PDF codec."""

from __future__ import annotations

import io
import logging
import uuid
from typing import Dict, List, Optional, Sequence, Tuple

from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import (
    ByteStringObject,
    ContentStream,
    DictionaryObject,
    FloatObject,
    NameObject,
    RectangleObject,
)

from ..exceptions import (
    EncryptedPDFError,
    InputValidationError,
    LoadError,
    NotAPDFError,
    PageOutOfBoundsError,
    PDFEditorException,
)
from ..utils import looks_like_pdf
from .base import Color, FontHandle, PDFCodec

LOGGER = logging.getLogger("pdf_editor.codec")

STANDARD_FONTS = (
    "Helvetica",
    "Helvetica-Bold",
    "Helvetica-Oblique",
    "Helvetica-BoldOblique",
    "Times-Roman",
    "Times-Bold",
    "Times-Italic",
    "Times-BoldItalic",
    "Courier",
    "Courier-Bold",
    "Courier-Oblique",
    "Courier-BoldOblique",
)

# Standard 14 text fonts are drawn with WinAnsiEncoding.
TEXT_ENCODING = "cp1252"


def _fmt(value: float) -> FloatObject:
    return FloatObject(round(float(value), 4))


class PypdfPage:
    """Page handle wrapping a :class:`pypdf.PageObject`."""

    def __init__(self, page: PageObject, document: Optional["PypdfDocument"] = None) -> None:
        self.page = page
        self.document = document

    @property
    def rotation(self) -> int:
        return int(self.page.rotation)

    def set_rotation(self, angle: int) -> None:
        self.page.rotation = angle

    def size(self) -> Tuple[float, float]:
        # The crop box is what previews show; it defaults to the media box.
        box = self.page.cropbox
        return float(box.width), float(box.height)

    def origin(self) -> Tuple[float, float]:
        box = self.page.cropbox
        return float(box.left), float(box.bottom)

    def set_crop_box(self, x: float, y: float, width: float, height: float) -> None:
        self.page.cropbox = RectangleObject([_fmt(x), _fmt(y), _fmt(x + width), _fmt(y + height)])

    def _register_font(self, font: FontHandle) -> None:
        resources = self.page.get("/Resources")
        if resources is None:
            resources = DictionaryObject()
            self.page[NameObject("/Resources")] = resources
        else:
            resources = resources.get_object()

        fonts = resources.get("/Font")
        if fonts is None:
            fonts = DictionaryObject()
            resources[NameObject("/Font")] = fonts
        else:
            fonts = fonts.get_object()

        if font.resource_name not in fonts:
            fonts[NameObject(font.resource_name)] = font.reference

    def draw_text(self, text: str, x: float, y: float, size: float, font: FontHandle, color: Color) -> None:
        try:
            encoded = text.encode(TEXT_ENCODING)
        except UnicodeEncodeError as exc:
            raise InputValidationError(
                f"Text '{text}' contains characters that {font.name} cannot encode."
            ) from exc

        self._register_font(font)
        pdf = self.document.writer if self.document is not None else None
        content = self.page.get_contents()
        if content is None:
            content = ContentStream(None, pdf)

        # Isolate the existing graphics state before appending.
        operations = [([], b"q")] + list(content.operations) + [([], b"Q")]
        operations += [
            ([], b"q"),
            ([_fmt(component) for component in color], b"rg"),
            ([], b"BT"),
            ([NameObject(font.resource_name), _fmt(size)], b"Tf"),
            ([_fmt(x), _fmt(y)], b"Td"),
            ([ByteStringObject(encoded)], b"Tj"),
            ([], b"ET"),
            ([], b"Q"),
        ]
        content.operations = operations
        self.page.replace_contents(content)


class PypdfDocument:
    """Editable document backed by a :class:`pypdf.PdfWriter`."""

    def __init__(self, writer: PdfWriter) -> None:
        self.writer = writer
        self._fonts: Dict[str, FontHandle] = {}

    @property
    def pages(self) -> List[PypdfPage]:
        return [PypdfPage(page, self) for page in self.writer.pages]

    @property
    def page_count(self) -> int:
        return len(self.writer.pages)

    def embed_font(self, name: str) -> FontHandle:
        if name not in STANDARD_FONTS:
            raise InputValidationError(
                f"Unsupported font '{name}'. Expected one of: {', '.join(STANDARD_FONTS)}."
            )
        if name in self._fonts:
            return self._fonts[name]

        font_dict = DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Font"),
                NameObject("/Subtype"): NameObject("/Type1"),
                NameObject("/BaseFont"): NameObject(f"/{name}"),
                NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
            }
        )
        reference = self.writer._add_object(font_dict)  # type: ignore[attr-defined]
        handle = FontHandle(
            name=name,
            resource_name=f"/F{uuid.uuid4().hex[:8]}",
            reference=reference,
        )
        self._fonts[name] = handle
        LOGGER.debug("Embedded font %s as %s", name, handle.resource_name)
        return handle

    def copy_pages(self, source: "PypdfDocument", indices: Sequence[int]) -> List[PypdfPage]:
        source_pages = source.writer.pages
        handles: List[PypdfPage] = []
        for index in indices:
            if index < 0 or index >= len(source_pages):
                raise PageOutOfBoundsError(
                    f"Page index {index} is out of bounds. Document has {len(source_pages)} pages."
                )
            handles.append(PypdfPage(source_pages[index]))
        return handles

    def add_page(self, page: PypdfPage) -> PypdfPage:
        # add_page clones the page, so repeated sources yield distinct pages.
        added = self.writer.add_page(page.page)
        return PypdfPage(added, self)

    def save(self) -> bytes:
        buffer = io.BytesIO()
        try:
            self.writer.write(buffer)
        except Exception as exc:  # pragma: no cover
            raise PDFEditorException(f"Unexpected error serialising PDF. Error: {exc}") from exc
        return buffer.getvalue()


class PypdfCodec(PDFCodec):
    """Codec implementation that uses `pypdf` under the hood."""

    def load(self, data: bytes) -> PypdfDocument:
        if not looks_like_pdf(data):
            raise NotAPDFError("Data does not start with a PDF header.")

        try:
            reader = PdfReader(io.BytesIO(data))
        except PyPdfError as exc:
            LOGGER.error("Failed to parse PDF (%d bytes): %s", len(data), exc)
            raise LoadError(f"Corrupted or invalid PDF data. Error: {exc}") from exc
        except Exception as exc:
            LOGGER.error("Unexpected error parsing PDF (%d bytes): %s", len(data), exc)
            raise LoadError(f"Unexpected error reading PDF. Error: {exc}") from exc

        if reader.is_encrypted:
            try:
                decrypted = reader.decrypt("")
            except Exception as exc:
                raise EncryptedPDFError(f"Unable to decrypt PDF. Error: {exc}") from exc
            if decrypted == 0:
                raise EncryptedPDFError("PDF is encrypted. Remove the password before editing.")

        try:
            writer = PdfWriter(clone_from=reader)
        except Exception as exc:
            LOGGER.error("Failed to read PDF structure: %s", exc)
            raise LoadError(f"Corrupted or invalid PDF data. Error: {exc}") from exc

        return PypdfDocument(writer)

    def new_document(self) -> PypdfDocument:
        return PypdfDocument(PdfWriter())


__all__ = ["PypdfCodec", "PypdfDocument", "PypdfPage", "STANDARD_FONTS"]
