"""
Custom exceptions for the PDF editor core.

Validation and business-rule errors are raised before any bytes are
touched. Load and render errors abort the operation that triggered them.
``ConsistencyError`` signals an internal bug and is never swallowed.
"""


class PDFEditorException(Exception):
    """Base exception for all PDF editor errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown PDF editor error occurred."


# ----------------------------------------------------------------------
# Input validation
# ----------------------------------------------------------------------
class InputValidationError(PDFEditorException):
    """Raised when caller supplied input cannot be used."""

    @property
    def default_message(self) -> str:
        return "Invalid input."


class InvalidRangeError(InputValidationError):
    """Raised when no usable page range could be derived from user input."""

    @property
    def default_message(self) -> str:
        return "Invalid page range."


class PageOutOfBoundsError(InputValidationError):
    """Raised when an explicit page index falls outside the document."""

    @property
    def default_message(self) -> str:
        return "Requested page index is out of bounds."


class InvalidColorError(InputValidationError):
    """Raised when an annotation colour is not a ``#RRGGBB`` hex string."""

    @property
    def default_message(self) -> str:
        return "Colour must be a 6-digit hex string such as '#000000'."


class InvalidRotationError(InputValidationError):
    """Raised when a rotation is not a multiple of 90 degrees."""

    @property
    def default_message(self) -> str:
        return "Rotation must be a multiple of 90 degrees."


class InvalidPermutationError(InputValidationError):
    """Raised when a page order is not a bijection on the page range."""

    @property
    def default_message(self) -> str:
        return "Page order must contain every page index exactly once."


# ----------------------------------------------------------------------
# Codec / rasterizer failures
# ----------------------------------------------------------------------
class LoadError(PDFEditorException):
    """Raised when a byte buffer cannot be parsed as a PDF."""

    @property
    def default_message(self) -> str:
        return "Failed to load PDF. The data is not a valid PDF or is corrupted."


class NotAPDFError(LoadError):
    """Raised when uploaded bytes do not carry a PDF header."""

    @property
    def default_message(self) -> str:
        return "The uploaded file is not a PDF document."


class EncryptedPDFError(LoadError):
    """Raised when a PDF is encrypted and cannot be opened without a password."""

    @property
    def default_message(self) -> str:
        return "PDF is encrypted and cannot be processed without a password."


class RenderError(PDFEditorException):
    """Raised when the rasterizer cannot render a page."""

    @property
    def default_message(self) -> str:
        return "Failed to render PDF page."


# ----------------------------------------------------------------------
# Internal consistency and business rules
# ----------------------------------------------------------------------
class ConsistencyError(PDFEditorException):
    """Raised when the page model disagrees with the document bytes."""

    @property
    def default_message(self) -> str:
        return "Page model does not match the document page count."


class BusinessRuleViolation(PDFEditorException):
    """Raised when an operation is refused before touching the document."""

    @property
    def default_message(self) -> str:
        return "Operation is not allowed."


class DeleteAllPagesError(BusinessRuleViolation):
    """Raised when a deletion would leave the document without pages."""

    @property
    def default_message(self) -> str:
        return "Cannot delete every page; at least one page must remain."


class DocumentBusyError(BusinessRuleViolation):
    """Raised when a mutation is requested while another one is running."""

    @property
    def default_message(self) -> str:
        return "Another operation is already running on this document."


class DocumentNotFoundError(PDFEditorException):
    """Raised when a document id is not open in the session."""

    @property
    def default_message(self) -> str:
        return "Document not found."
