"""Settings controlling rendering and default annotation values."""

from __future__ import annotations

import dataclasses
from typing import Any

from .exceptions import InputValidationError
from .geometry import parse_hex_color

IMAGE_FORMATS = ("JPEG", "PNG")


@dataclasses.dataclass(slots=True, frozen=True)
class EditorSettings:
    """Options shared by the synchronizer, the session and the CLI."""

    thumbnail_scale: float = 0.3
    preview_scale: float = 1.5
    image_format: str = "JPEG"
    image_quality: int = 70
    default_font: str = "Helvetica"
    default_font_size: float = 16
    default_color: str = "#000000"
    default_annotation_text: str = "New text"
    default_annotation_width: float = 100
    export_padding: int = 3

    def __post_init__(self) -> None:
        if self.thumbnail_scale <= 0 or self.preview_scale <= 0:
            raise InputValidationError("Render scales must be positive")
        if self.image_format.upper() not in IMAGE_FORMATS:
            raise InputValidationError(
                f"Unsupported image format '{self.image_format}'. Expected one of {', '.join(IMAGE_FORMATS)}."
            )
        if not 1 <= self.image_quality <= 100:
            raise InputValidationError("Image quality must be between 1 and 100")
        if self.default_font_size <= 0:
            raise InputValidationError("Default font size must be positive")
        if self.export_padding < 1:
            raise InputValidationError("Export padding must be >= 1")
        parse_hex_color(self.default_color)

    def with_updates(self, **changes: Any) -> "EditorSettings":
        """Return a copy with ``changes`` applied and validated."""

        return dataclasses.replace(self, **changes)


DEFAULT_SETTINGS = EditorSettings()

__all__ = ["EditorSettings", "DEFAULT_SETTINGS", "IMAGE_FORMATS"]
