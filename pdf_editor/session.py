"""
In-memory editing session over one or more open documents.

The session owns the documents, the page selection and the per-page
pending edits. Codec and rasterizer work runs in worker threads so the
event loop is only suspended at load, render and save boundaries.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .algebra import (
    drop_document_selection,
    move_permutation,
    remaining_indices,
    select_all,
    selected_indices,
    toggle_selection,
)
from .config import DEFAULT_SETTINGS, EditorSettings
from .engine import MutationEngine
from .exceptions import (
    BusinessRuleViolation,
    DocumentBusyError,
    DocumentNotFoundError,
    InputValidationError,
    InvalidRangeError,
    InvalidRotationError,
    LoadError,
    NotAPDFError,
    PageOutOfBoundsError,
)
from .geometry import parse_hex_color
from .ranges import EXAMPLE_RULES, parse_merge_rules, rules_for_every_page
from .synchronizer import ModelSynchronizer
from .types import (
    CropBox,
    Document,
    PagePreview,
    PageUiState,
    SelectionSet,
    TextAnnotation,
    new_id,
)
from .utils import looks_like_pdf, numbered_names, strip_pdf_suffix

LOGGER = logging.getLogger("pdf_editor.session")

Viewport = Tuple[float, float]


class EditorSession:
    """
    Open documents, selection and pending page edits.

    Every mutating method is a coroutine. A document that is already being
    mutated rejects a second mutation with :class:`DocumentBusyError`.
    """

    def __init__(
        self,
        engine: Optional[MutationEngine] = None,
        synchronizer: Optional[ModelSynchronizer] = None,
        settings: Optional[EditorSettings] = None,
    ) -> None:
        self.settings = settings or DEFAULT_SETTINGS
        self.engine = engine or MutationEngine(default_font=self.settings.default_font)
        self.synchronizer = synchronizer or ModelSynchronizer(settings=self.settings)
        self.selection = SelectionSet()
        self.active_id: Optional[str] = None
        self._documents: Dict[str, Document] = {}
        self._viewports: Dict[Tuple[str, int], Viewport] = {}
        self._busy: Set[str] = set()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------
    @property
    def documents(self) -> List[Document]:
        """Open documents in upload order."""

        return list(self._documents.values())

    @property
    def active_document(self) -> Optional[Document]:
        if self.active_id is None:
            return None
        return self._documents.get(self.active_id)

    def get_document(self, doc_id: str) -> Document:
        try:
            return self._documents[doc_id]
        except KeyError:
            raise DocumentNotFoundError(f"No open document with id '{doc_id}'") from None

    def activate(self, doc_id: str) -> Document:
        document = self.get_document(doc_id)
        self.active_id = doc_id
        return document

    def is_busy(self, doc_id: str) -> bool:
        return doc_id in self._busy

    async def open_document(self, name: str, data: bytes) -> Document:
        """Load ``data`` as a new document named after ``name``."""

        if not looks_like_pdf(data):
            raise NotAPDFError(f"'{name}' is not a PDF file")

        page_count = await asyncio.to_thread(self.engine.page_count, data)
        if page_count == 0:
            raise LoadError(f"'{name}' has no pages")

        pages = await asyncio.to_thread(self.synchronizer.build_pages, data, page_count)
        document = Document(
            doc_id=new_id(),
            name=strip_pdf_suffix(name),
            data=data,
            page_count=page_count,
            pages=tuple(pages),
        )
        self._documents[document.doc_id] = document
        if self.active_id is None:
            self.active_id = document.doc_id

        LOGGER.info("Opened %s", document)
        return document

    def remove_document(self, doc_id: str) -> Document:
        document = self.get_document(doc_id)
        if doc_id in self._busy:
            raise DocumentBusyError(f"'{document.name}' is being modified")

        del self._documents[doc_id]
        self.selection = drop_document_selection(self.selection, doc_id)
        self._forget_viewports(doc_id)
        if self.active_id == doc_id:
            self.active_id = next(iter(self._documents), None)

        LOGGER.info("Closed %s", document)
        return document

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def _check_page(self, document: Document, page_index: int) -> None:
        if page_index < 0 or page_index >= document.page_count:
            raise PageOutOfBoundsError(
                f"Page index {page_index} is out of bounds. '{document.name}' has {document.page_count} pages."
            )

    def toggle_page(self, doc_id: str, page_index: int) -> SelectionSet:
        self._check_page(self.get_document(doc_id), page_index)
        self.selection = toggle_selection(self.selection, doc_id, page_index)
        return self.selection

    def select_all(self, doc_id: str) -> SelectionSet:
        """Select every page of ``doc_id``, replacing the current selection."""

        document = self.get_document(doc_id)
        self.selection = select_all(doc_id, document.page_count)
        return self.selection

    def clear_selection(self) -> SelectionSet:
        self.selection = SelectionSet()
        return self.selection

    def selected_pages(self, doc_id: str) -> List[int]:
        return selected_indices(self.selection, doc_id)

    # ------------------------------------------------------------------
    # Structural mutations
    # ------------------------------------------------------------------
    @contextlib.contextmanager
    def _mutating(self, doc_id: str) -> Iterator[Document]:
        document = self.get_document(doc_id)
        if doc_id in self._busy:
            raise DocumentBusyError(f"'{document.name}' is being modified")
        self._busy.add(doc_id)
        try:
            yield document
        finally:
            self._busy.discard(doc_id)

    def _install(self, document: Document) -> Document:
        if document.doc_id not in self._documents:
            raise DocumentNotFoundError(f"'{document.name}' was closed during the operation")
        self._documents[document.doc_id] = document
        return document

    def _install_generation(
        self, updated: Document, reset_pages: Iterable[int] = (), reinitialised: bool = False
    ) -> Document:
        """Install a regenerated document, keeping page edits made while it was built.

        Pending edits live on the installed generation and may change while
        a mutation awaits its worker thread. Unless the page order changed,
        those edits are carried over except for ``reset_pages``.
        """

        current = self._documents.get(updated.doc_id)
        if current is not None and not reinitialised:
            reset = set(reset_pages)
            ui_state = {
                index: state
                for index, state in current.ui_state.items()
                if index < updated.page_count and index not in reset and not state.is_empty
            }
            updated = dataclasses.replace(updated, ui_state=ui_state)
        return self._install(updated)

    async def rotate_selected(self, doc_id: str, degrees: int = 90) -> Document:
        """Rotate the selected pages of ``doc_id`` by ``degrees``."""

        if degrees % 90 != 0:
            raise InvalidRotationError(f"Rotation must be a multiple of 90 degrees, got {degrees}.")

        with self._mutating(doc_id) as document:
            indices = selected_indices(self.selection, doc_id)
            if not indices:
                LOGGER.info("Nothing selected in '%s'; rotation skipped", document.name)
                return document

            data = await asyncio.to_thread(self.engine.rotate, document.data, indices, degrees)
            updated = await asyncio.to_thread(
                self.synchronizer.regenerate,
                document,
                data,
                rotated=indices,
                degrees=degrees,
                reset_pages=indices,
                expected_count=document.page_count,
            )
            # Rotated previews swap width and height.
            for index in indices:
                self._viewports.pop((doc_id, index), None)
            return self._install_generation(updated, reset_pages=indices)

    async def delete_selected(self, doc_id: str) -> Document:
        """Delete the selected pages; at least one page must remain."""

        with self._mutating(doc_id) as document:
            indices = selected_indices(self.selection, doc_id)
            if not indices:
                LOGGER.info("Nothing selected in '%s'; deletion skipped", document.name)
                return document

            keep = remaining_indices(document.page_count, indices)
            data = await asyncio.to_thread(self.engine.delete_pages, document.data, indices)
            updated = await asyncio.to_thread(
                self.synchronizer.regenerate,
                document,
                data,
                reinitialise=True,
                expected_count=len(keep),
            )
            self.selection = drop_document_selection(self.selection, doc_id)
            self._forget_viewports(doc_id)
            return self._install_generation(updated, reinitialised=True)

    async def move_page(self, doc_id: str, from_index: int, to_index: int) -> Document:
        with self._mutating(doc_id) as document:
            move_permutation(document.page_count, from_index, to_index)
            if from_index == to_index:
                return document

            data = await asyncio.to_thread(self.engine.move_page, document.data, from_index, to_index)
            updated = await asyncio.to_thread(
                self.synchronizer.regenerate,
                document,
                data,
                reinitialise=True,
                expected_count=document.page_count,
            )
            self.selection = drop_document_selection(self.selection, doc_id)
            self._forget_viewports(doc_id)
            return self._install_generation(updated, reinitialised=True)

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------
    async def extract_selected(self, doc_id: str) -> bytes:
        """New PDF with the selected pages of ``doc_id`` in ascending order."""

        document = self.get_document(doc_id)
        indices = selected_indices(self.selection, doc_id)
        if not indices:
            raise InputValidationError(f"No pages of '{document.name}' are selected")
        return await asyncio.to_thread(self.engine.extract_pages, document.data, indices)

    async def split(self, doc_id: str, rule_text: str = "") -> List[bytes]:
        """
        Split ``doc_id`` according to ``rule_text``.

        Args:
            doc_id: Document to split
            rule_text: Comma separated 1-based ranges; blank splits every page

        Returns:
            One PDF per rule, in rule order

        Raises:
            InvalidRangeError: If no usable rule remains after parsing
        """

        document = self.get_document(doc_id)
        if rule_text.strip():
            rules = parse_merge_rules(rule_text, document.page_count)
        else:
            rules = rules_for_every_page(document.page_count)

        if not rules:
            raise InvalidRangeError(f"No valid split rules in '{rule_text}'. Example: {EXAMPLE_RULES}")
        return await asyncio.to_thread(self.engine.split, document.data, rules)

    async def merge_all(self) -> bytes:
        """All open documents merged in upload order."""

        if len(self._documents) < 2:
            raise BusinessRuleViolation("At least two documents are required to merge")
        buffers = [document.data for document in self._documents.values()]
        return await asyncio.to_thread(self.engine.merge, buffers)

    def export_names(self, doc_id: Optional[str] = None, count: Optional[int] = None) -> List[str]:
        """
        Padded output file names.

        With ``doc_id`` the names number ``count`` split parts of that
        document, otherwise they number every open document.
        """

        padding = self.settings.export_padding
        if doc_id is None:
            return numbered_names([document.name for document in self._documents.values()], padding)

        document = self.get_document(doc_id)
        parts = document.page_count if count is None else count
        return numbered_names([document.name] * parts, padding)

    # ------------------------------------------------------------------
    # Page editor
    # ------------------------------------------------------------------
    def _forget_viewports(self, doc_id: str) -> None:
        for key in [key for key in self._viewports if key[0] == doc_id]:
            del self._viewports[key]

    def _set_page_state(self, document: Document, page_index: int, state: PageUiState) -> Document:
        ui_state = dict(document.ui_state)
        if state.is_empty:
            ui_state.pop(page_index, None)
        else:
            ui_state[page_index] = state
        return self._install(dataclasses.replace(document, ui_state=ui_state))

    async def preview_page(self, doc_id: str, page_index: int) -> PagePreview:
        """Render ``page_index`` at preview scale and remember its viewport."""

        document = self.get_document(doc_id)
        self._check_page(document, page_index)
        preview = await asyncio.to_thread(self.synchronizer.render_preview, document.data, page_index)
        self._viewports[(doc_id, page_index)] = (preview.width, preview.height)
        return preview

    async def _viewport(self, document: Document, page_index: int, viewport: Optional[Viewport]) -> Viewport:
        if viewport is not None:
            return viewport
        known = self._viewports.get((document.doc_id, page_index))
        if known is not None:
            return known
        preview = await self.preview_page(document.doc_id, page_index)
        return preview.width, preview.height

    def set_crop_box(self, doc_id: str, page_index: int, crop_box: Optional[CropBox]) -> Document:
        document = self.get_document(doc_id)
        self._check_page(document, page_index)
        if crop_box is not None and (crop_box.width <= 0 or crop_box.height <= 0):
            raise InputValidationError("Crop rectangle must have a positive width and height")
        state = dataclasses.replace(document.page_state(page_index), crop_box=crop_box)
        return self._set_page_state(document, page_index, state)

    async def apply_crop(self, doc_id: str, page_index: int, viewport: Optional[Viewport] = None) -> Document:
        """Apply the pending crop box of one page.

        ``viewport`` is the preview size the box was drawn on; it defaults
        to the last preview rendered for that page. The page's other
        pending edits are cleared with the box.
        """

        with self._mutating(doc_id) as document:
            self._check_page(document, page_index)
            state = document.page_state(page_index)
            if state.crop_box is None:
                LOGGER.info("No crop box on page %d of '%s'", page_index + 1, document.name)
                return document

            width, height = await self._viewport(document, page_index, viewport)
            data = await asyncio.to_thread(
                self.engine.crop, document.data, page_index, state.crop_box, width, height
            )
            updated = await asyncio.to_thread(
                self.synchronizer.regenerate,
                document,
                data,
                reset_pages=[page_index],
                expected_count=document.page_count,
            )
            self._viewports.pop((doc_id, page_index), None)
            return self._install_generation(updated, reset_pages=[page_index])

    def add_annotation(
        self,
        doc_id: str,
        page_index: int,
        x: float,
        y: float,
        text: Optional[str] = None,
        *,
        font_size: Optional[float] = None,
        font_family: Optional[str] = None,
        color: Optional[str] = None,
    ) -> TextAnnotation:
        """Place a pending text annotation at preview position ``(x, y)``."""

        document = self.get_document(doc_id)
        self._check_page(document, page_index)
        size = font_size if font_size is not None else self.settings.default_font_size
        annotation = TextAnnotation(
            text=self.settings.default_annotation_text if text is None else text,
            x=x,
            y=y,
            font_size=size,
            font_family=font_family or self.settings.default_font,
            color=color or self.settings.default_color,
            width=self.settings.default_annotation_width,
            height=size + 4,
        )
        parse_hex_color(annotation.color)

        state = document.page_state(page_index)
        self._set_page_state(
            document,
            page_index,
            dataclasses.replace(state, annotations=state.annotations + (annotation,)),
        )
        return annotation

    def _find_annotation(self, document: Document, page_index: int, annotation_id: str) -> int:
        for position, annotation in enumerate(document.page_state(page_index).annotations):
            if annotation.annotation_id == annotation_id:
                return position
        raise InputValidationError(f"No annotation '{annotation_id}' on page {page_index + 1}")

    def update_annotation(self, doc_id: str, page_index: int, annotation_id: str, **changes: object) -> TextAnnotation:
        if "annotation_id" in changes:
            raise InputValidationError("Annotation ids cannot be changed")

        document = self.get_document(doc_id)
        position = self._find_annotation(document, page_index, annotation_id)
        state = document.page_state(page_index)
        annotation = dataclasses.replace(state.annotations[position], **changes)
        parse_hex_color(annotation.color)

        annotations = list(state.annotations)
        annotations[position] = annotation
        self._set_page_state(document, page_index, dataclasses.replace(state, annotations=tuple(annotations)))
        return annotation

    def remove_annotation(self, doc_id: str, page_index: int, annotation_id: str) -> Document:
        document = self.get_document(doc_id)
        position = self._find_annotation(document, page_index, annotation_id)
        state = document.page_state(page_index)
        annotations = state.annotations[:position] + state.annotations[position + 1:]
        return self._set_page_state(document, page_index, dataclasses.replace(state, annotations=annotations))

    async def burn_annotations(
        self, doc_id: str, page_index: int, viewport: Optional[Viewport] = None
    ) -> Document:
        """Burn one page's pending annotations into the PDF and clear its pending edits."""

        with self._mutating(doc_id) as document:
            self._check_page(document, page_index)
            state = document.page_state(page_index)
            if not state.annotations:
                LOGGER.info("No annotations on page %d of '%s'", page_index + 1, document.name)
                return document

            for annotation in state.annotations:
                parse_hex_color(annotation.color)

            width, height = await self._viewport(document, page_index, viewport)
            data = await asyncio.to_thread(
                self.engine.add_text, document.data, page_index, state.annotations, width, height
            )
            updated = await asyncio.to_thread(
                self.synchronizer.regenerate,
                document,
                data,
                reset_pages=[page_index],
                expected_count=document.page_count,
            )
            return self._install_generation(updated, reset_pages=[page_index])


__all__ = ["EditorSession"]
