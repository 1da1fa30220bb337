"""Keeps the in-memory page model consistent with a document's bytes."""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterable, List, Optional

from .backends.base import PageRasterizer
from .backends.pdfium_backend import PdfiumRasterizer
from .config import DEFAULT_SETTINGS, EditorSettings
from .exceptions import ConsistencyError, PageOutOfBoundsError
from .types import Document, PageContent, PagePreview, PageUiState

LOGGER = logging.getLogger("pdf_editor.synchronizer")


class ModelSynchronizer:
    """Rebuild page records and previews from PDF bytes.

    The synchronizer never mutates a :class:`Document`; it returns the
    next generation for the caller to install.
    """

    def __init__(
        self,
        rasterizer: Optional[PageRasterizer] = None,
        settings: Optional[EditorSettings] = None,
    ) -> None:
        self.rasterizer: PageRasterizer = rasterizer or PdfiumRasterizer()
        self.settings = settings or DEFAULT_SETTINGS

    def build_pages(self, data: bytes, expected_count: Optional[int] = None) -> List[PageContent]:
        """Render one thumbnail per page of ``data``."""

        document = self.rasterizer.load(data)
        try:
            count = document.page_count
            if expected_count is not None and count != expected_count:
                raise ConsistencyError(
                    f"Rasterizer reports {count} pages but the document has {expected_count}."
                )

            pages: List[PageContent] = []
            for number in range(1, count + 1):
                view = document.get_page(number)
                thumbnail = view.render(
                    self.settings.thumbnail_scale,
                    image_format=self.settings.image_format,
                    quality=self.settings.image_quality,
                )
                pages.append(PageContent(index=number - 1, thumbnail=thumbnail))
                LOGGER.debug("Rendered thumbnail for page %d", number)
        finally:
            document.close()

        if len(pages) != count:
            raise ConsistencyError(f"Rendered {len(pages)} thumbnails for {count} pages.")
        return pages

    def regenerate(
        self,
        document: Document,
        data: bytes,
        *,
        rotated: Iterable[int] = (),
        degrees: int = 0,
        reset_pages: Iterable[int] = (),
        reinitialise: bool = False,
        expected_count: Optional[int] = None,
    ) -> Document:
        """Return the next generation of ``document`` built from ``data``.

        Args:
            document: Current generation
            data: Bytes produced by the mutation engine
            rotated: Page indices whose rotation delta grows by ``degrees``
            degrees: Rotation applied to ``rotated``
            reset_pages: Page indices whose pending annotations/crop are cleared
            reinitialise: Page order changed; drop all per-page state
            expected_count: Page count the engine produced, checked against the rasterizer

        Returns:
            A new :class:`Document` with matching bytes, pages and page count
        """

        fresh = self.build_pages(data, expected_count)
        count = len(fresh)

        if reinitialise:
            pages = tuple(fresh)
            ui_state: Dict[int, PageUiState] = {}
        else:
            rotated_set = set(rotated)
            reset_set = set(reset_pages)
            carried = {page.index: page.rotation for page in document.pages}
            pages = tuple(
                dataclasses.replace(
                    page,
                    rotation=(carried.get(page.index, 0) + (degrees if page.index in rotated_set else 0)) % 360,
                )
                for page in fresh
            )
            ui_state = {
                index: state
                for index, state in document.ui_state.items()
                if index < count and index not in reset_set and not state.is_empty
            }

        updated = dataclasses.replace(
            document,
            data=data,
            page_count=count,
            pages=pages,
            ui_state=ui_state,
            generation=document.generation + 1,
        )
        LOGGER.info("Synchronised %s", updated)
        return updated

    def render_preview(self, data: bytes, page_index: int, scale: Optional[float] = None) -> PagePreview:
        """Render one page at preview scale, returning the image and its viewport."""

        scale = scale or self.settings.preview_scale
        document = self.rasterizer.load(data)
        try:
            if page_index < 0 or page_index >= document.page_count:
                raise PageOutOfBoundsError(
                    f"Page index {page_index} is out of bounds. Document has {document.page_count} pages."
                )
            view = document.get_page(page_index + 1)
            width, height = view.viewport(scale)
            image = view.render(
                scale,
                image_format=self.settings.image_format,
                quality=self.settings.image_quality,
            )
        finally:
            document.close()

        LOGGER.debug("Rendered preview of page %d at %.2fx (%.0fx%.0f)", page_index + 1, scale, width, height)
        return PagePreview(page_index=page_index, image=image, width=width, height=height, scale=scale)


__all__ = ["ModelSynchronizer"]
