from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Sequence
import sys

import pytest
from pypdf import PdfReader, PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def build_pdf(widths: Sequence[float], height: float = 200) -> bytes:
    """Blank pages whose widths identify them after reordering."""
    writer = PdfWriter()
    for width in widths:
        writer.add_blank_page(width=width, height=height)
    writer.add_metadata({"/Producer": "pdf-editor-tests", "/Title": "Sample"})
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_widths(data: bytes) -> list[int]:
    return [round(float(page.mediabox.width)) for page in PdfReader(io.BytesIO(data)).pages]


def rotations(data: bytes) -> list[int]:
    return [page.rotation for page in PdfReader(io.BytesIO(data)).pages]


@pytest.fixture()
def pdf_factory() -> Callable[[int], bytes]:
    def _create(count: int, size: float = 200) -> bytes:
        return build_pdf([size] * count, height=size)

    return _create


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    return build_pdf([200] * 5)


@pytest.fixture()
def ten_page_pdf() -> bytes:
    return build_pdf([200] * 10)


@pytest.fixture()
def labelled_pdf() -> bytes:
    """Five pages, page ``i`` is ``101 + i`` points wide."""
    return build_pdf([101 + index for index in range(5)])


@pytest.fixture()
def sample_pdf(tmp_path: Path, sample_pdf_bytes: bytes) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    pdf_path.write_bytes(sample_pdf_bytes)
    return pdf_path


@pytest.fixture()
def sample_pdfs(tmp_path: Path) -> list[Path]:
    paths = []
    for name, count in (("one.pdf", 1), ("two.pdf", 2)):
        path = tmp_path / name
        path.write_bytes(build_pdf([72] * count, height=72))
        paths.append(path)
    return paths


@pytest.fixture()
def encrypted_pdf_bytes() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    writer.encrypt("secret", algorithm="RC4-128")
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()
