"""Utility helpers shared by the library and the CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

PDF_MAGIC = b"%PDF-"
# Readers accept the header anywhere in the first kilobyte.
HEADER_SEARCH_WINDOW = 1024


def configure_logging(level: int = logging.INFO) -> None:
    """Configure package-wide logging."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def looks_like_pdf(data: bytes) -> bool:
    """Return ``True`` if ``data`` carries a PDF header."""

    return bool(data) and PDF_MAGIC in data[:HEADER_SEARCH_WINDOW]


def strip_pdf_suffix(filename: str) -> str:
    """Display name for an uploaded file (``report.pdf`` -> ``report``)."""

    name = Path(filename).name
    if name.lower().endswith(".pdf"):
        name = name[: -len(".pdf")]
    return name or "document"


def numbered_names(base_names: Sequence[str], padding: int = 3) -> List[str]:
    """Build ``<name>_001.pdf`` style names, numbering by position."""

    return [
        f"{name}_{index:0{padding}d}.pdf"
        for index, name in enumerate(base_names, start=1)
    ]


SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_file_size(size: float) -> str:
    """Human-readable size of a byte buffer (``"1.5 MB"``)."""

    for unit in SIZE_UNITS[:-1]:
        if abs(size) < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} {SIZE_UNITS[-1]}"


__all__ = [
    "configure_logging",
    "looks_like_pdf",
    "strip_pdf_suffix",
    "numbered_names",
    "format_file_size",
]
