"""Coordinate conversion between preview images and PDF page space.

Previews are raster images with the origin in the top-left corner and the
y axis pointing down. PDF page space has its origin in the bottom-left
corner with the y axis pointing up. Both crop and text burn-in go through
:class:`CoordinateTransform` so the two call sites cannot drift apart.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

from .exceptions import InputValidationError, InvalidColorError
from .types import CropBox

Point = Tuple[float, float]
Rect = Tuple[float, float, float, float]

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def parse_hex_color(color: str) -> Tuple[float, float, float]:
    """Return normalised ``(r, g, b)`` components for a ``#RRGGBB`` string."""

    match = _HEX_COLOR.match(color.strip()) if isinstance(color, str) else None
    if not match:
        raise InvalidColorError(f"Invalid colour '{color}'. Expected a 6-digit hex string such as '#ff0000'.")

    digits = match.group(1)
    return tuple(int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))  # type: ignore[return-value]


@dataclass(frozen=True)
class CoordinateTransform:
    """Maps between a preview of ``preview_size`` and a page of ``pdf_size``."""

    preview_width: float
    preview_height: float
    pdf_width: float
    pdf_height: float
    origin_x: float = 0.0
    origin_y: float = 0.0

    def __post_init__(self) -> None:
        if self.preview_width <= 0 or self.preview_height <= 0:
            raise InputValidationError(
                f"Preview size must be positive, got {self.preview_width}x{self.preview_height}"
            )
        if self.pdf_width <= 0 or self.pdf_height <= 0:
            raise InputValidationError(
                f"Page size must be positive, got {self.pdf_width}x{self.pdf_height}"
            )

    @classmethod
    def from_sizes(
        cls,
        preview_size: Tuple[float, float],
        pdf_size: Tuple[float, float],
        origin: Point = (0.0, 0.0),
    ) -> "CoordinateTransform":
        return cls(preview_size[0], preview_size[1], pdf_size[0], pdf_size[1], origin[0], origin[1])

    @classmethod
    def identity(cls, pdf_size: Tuple[float, float], origin: Point = (0.0, 0.0)) -> "CoordinateTransform":
        """Transform for previews rendered at scale 1 (preview units == points)."""

        return cls.from_sizes(pdf_size, pdf_size, origin)

    @property
    def scale_x(self) -> float:
        return self.pdf_width / self.preview_width

    @property
    def scale_y(self) -> float:
        return self.pdf_height / self.preview_height

    def to_pdf(self, point: Point) -> Point:
        x, y = point
        return (
            self.origin_x + x * self.scale_x,
            self.origin_y + self.pdf_height - y * self.scale_y,
        )

    def to_preview(self, point: Point) -> Point:
        x, y = point
        return (
            (x - self.origin_x) / self.scale_x,
            (self.pdf_height - (y - self.origin_y)) / self.scale_y,
        )

    def rect_to_pdf(self, box: CropBox) -> Rect:
        """Return ``(x, y, width, height)`` of ``box`` in PDF space."""

        left, bottom = self.to_pdf((box.x, box.y + box.height))
        return (left, bottom, box.width * self.scale_x, box.height * self.scale_y)

    def text_origin(self, x: float, y: float, font_size: float) -> Point:
        """Baseline origin for text whose top-left preview corner is ``(x, y)``."""

        return self.to_pdf((x, y + font_size))

    def length_to_pdf(self, value: float) -> float:
        return value * self.scale_y


__all__ = ["CoordinateTransform", "parse_hex_color", "Point", "Rect"]
