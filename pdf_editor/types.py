"""
Type definitions and dataclasses for the PDF editor core.

Durable page data (``PageContent``) is kept apart from interaction state
(``PageUiState``) so that nothing transient is ever written into a PDF.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

SelectionKey = Tuple[str, int]


def new_id() -> str:
    """Return an opaque unique identifier."""

    return uuid.uuid4().hex


@dataclass(frozen=True)
class MergeRule:
    """
    Zero-based inclusive page range used for splitting.

    Attributes:
        start: First page index (0-based)
        end: Last page index (0-based, inclusive)
    """
    start: int
    end: int

    def indices(self) -> List[int]:
        return list(range(self.start, self.end + 1))

    def __len__(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class CropBox:
    """Rectangle in preview (rasterized image) coordinates, origin top-left."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class TextAnnotation:
    """
    Pending text annotation placed on a page preview.

    Attributes:
        text: Text content to draw
        x: Left edge in preview coordinates
        y: Top edge in preview coordinates
        font_size: Font size in preview pixels
        font_family: Requested font family
        color: Hex colour string ``#RRGGBB``
        rotation: Carried for the UI; not applied at burn-in
        width: Advisory bounding box width for selection highlighting
        height: Advisory bounding box height for selection highlighting
        annotation_id: Opaque identifier
    """
    text: str
    x: float
    y: float
    font_size: float = 16
    font_family: str = "Helvetica"
    color: str = "#000000"
    rotation: float = 0
    width: float = 100
    height: float = 20
    annotation_id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class PageContent:
    """
    Durable per-page state derived from the document bytes.

    Attributes:
        index: Zero-based position within the document
        rotation: Cumulative rotation delta in degrees, in ``[0, 360)``
        thumbnail: Encoded thumbnail image, ``None`` until rendered
    """
    index: int
    rotation: int = 0
    thumbnail: Optional[bytes] = None


@dataclass(frozen=True)
class PageUiState:
    """Ephemeral per-page editing state, discarded once applied."""

    annotations: Tuple[TextAnnotation, ...] = ()
    crop_box: Optional[CropBox] = None

    @property
    def is_empty(self) -> bool:
        return not self.annotations and self.crop_box is None


@dataclass(frozen=True)
class PagePreview:
    """Rendered page image with the viewport size used to produce it."""

    page_index: int
    image: bytes
    width: float
    height: float
    scale: float


@dataclass(frozen=True)
class Document:
    """
    One open PDF and its page model.

    ``data`` is the single source of truth for content. ``data`` and
    ``pages`` are always replaced together, producing a new generation.

    Attributes:
        doc_id: Opaque identifier
        name: Display name (without the ``.pdf`` suffix)
        data: Current PDF bytes
        page_count: Number of pages in ``data``
        pages: Page records, ``pages[i].index == i``
        ui_state: Pending annotations / crop boxes keyed by page index
        generation: Incremented by every installed mutation
    """
    doc_id: str
    name: str
    data: bytes
    page_count: int
    pages: Tuple[PageContent, ...]
    ui_state: Dict[int, PageUiState] = field(default_factory=dict)
    generation: int = 0

    def page_state(self, index: int) -> PageUiState:
        return self.ui_state.get(index, PageUiState())

    def __str__(self) -> str:
        return f"Document(name='{self.name}', pages={self.page_count}, generation={self.generation})"


@dataclass(frozen=True)
class SelectionSet:
    """
    Selected pages across all open documents.

    Keys are ``(doc_id, page_index)`` pairs kept in insertion order.
    """
    keys: Tuple[SelectionKey, ...] = ()

    def __contains__(self, key: object) -> bool:
        return key in self.keys

    def __iter__(self) -> Iterator[SelectionKey]:
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    @classmethod
    def of(cls, *keys: SelectionKey) -> "SelectionSet":
        unique: List[SelectionKey] = []
        for key in keys:
            if key not in unique:
                unique.append(key)
        return cls(tuple(unique))
