"""
PDF Editor Core - page-level PDF editing with a synchronised page model.

This library turns a PDF byte buffer plus an edit (rotate, crop, reorder,
delete, split, merge, extract, annotate) into a new PDF byte buffer, and
keeps thumbnails and pending per-page edits consistent with those bytes.

Quick Start:
    >>> from pdf_editor import MutationEngine
    >>> engine = MutationEngine()
    >>> rotated = engine.rotate(data, [0, 2], 90)

    >>> import asyncio
    >>> from pdf_editor import EditorSession
    >>> session = EditorSession()
    >>> doc = asyncio.run(session.open_document("report.pdf", data))

Main Classes:
    - MutationEngine: Byte-in, byte-out PDF operations
    - ModelSynchronizer: Thumbnails and page records for a document
    - EditorSession: Open documents, selection and pending page edits

Exceptions:
    - PDFEditorException: Base exception
    - InputValidationError: Rejected caller input
    - LoadError: Bytes the codec or rasterizer could not open
    - BusinessRuleViolation: Operation not allowed in the current state

For CLI usage, use the 'pdf-editor' command after installation.
"""

# Core classes
from pdf_editor.engine import MutationEngine
from pdf_editor.session import EditorSession
from pdf_editor.synchronizer import ModelSynchronizer

# Configuration
from pdf_editor.config import EditorSettings

# Data types
from pdf_editor.types import (
    CropBox,
    Document,
    MergeRule,
    PageContent,
    PagePreview,
    PageUiState,
    SelectionSet,
    TextAnnotation,
)

# Exceptions
from pdf_editor.exceptions import (
    PDFEditorException,
    InputValidationError,
    InvalidRangeError,
    PageOutOfBoundsError,
    InvalidColorError,
    InvalidRotationError,
    InvalidPermutationError,
    LoadError,
    NotAPDFError,
    EncryptedPDFError,
    RenderError,
    ConsistencyError,
    BusinessRuleViolation,
    DeleteAllPagesError,
    DocumentBusyError,
    DocumentNotFoundError,
)

# Parsing
from pdf_editor.ranges import parse_merge_rules

__version__ = "1.0.0"

__all__ = [
    # Main classes
    "MutationEngine",
    "ModelSynchronizer",
    "EditorSession",
    "EditorSettings",
    # Data types
    "CropBox",
    "Document",
    "MergeRule",
    "PageContent",
    "PagePreview",
    "PageUiState",
    "SelectionSet",
    "TextAnnotation",
    # Exceptions
    "PDFEditorException",
    "InputValidationError",
    "InvalidRangeError",
    "PageOutOfBoundsError",
    "InvalidColorError",
    "InvalidRotationError",
    "InvalidPermutationError",
    "LoadError",
    "NotAPDFError",
    "EncryptedPDFError",
    "RenderError",
    "ConsistencyError",
    "BusinessRuleViolation",
    "DeleteAllPagesError",
    "DocumentBusyError",
    "DocumentNotFoundError",
    # Parsing
    "parse_merge_rules",
    # Version info
    "__version__",
]
