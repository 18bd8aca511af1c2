"""Shared fixtures: PDFs and page images built in memory."""

from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional, Tuple

import pytest
from PIL import Image, ImageDraw
from PyPDF2 import PdfWriter

from exam_pdf.config import Config
from exam_pdf.models.page_models import PageImage


def make_pdf(page_count: int, sizes: Optional[Iterable[Tuple[float, float]]] = None) -> bytes:
    """Blank PDF; page i (1-indexed) is (100 + i) x 200 points unless sizes is given."""
    writer = PdfWriter()
    if sizes is None:
        sizes = [(100 + i, 200) for i in range(1, page_count + 1)]
    for width, height in sizes:
        writer.add_blank_page(width=width, height=height)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def make_page_image(
    width: int = 400,
    height: int = 400,
    square: Optional[Tuple[int, int, int, int]] = None,
    page_num: int = 1,
) -> PageImage:
    """White RGBA page, optionally with a red square (left, top, right, bottom)."""
    img = Image.new("RGBA", (width, height), (255, 255, 255, 255))
    if square:
        ImageDraw.Draw(img).rectangle(
            (square[0], square[1], square[2] - 1, square[3] - 1), fill=(255, 0, 0, 255)
        )
    return PageImage.from_pil_image(page_num, img, renderer="test")


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def page_image_factory():
    return make_page_image


@pytest.fixture
def scratch_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point the fallback renderer's temp files at an isolated directory."""
    directory = tmp_path / "scratch"
    directory.mkdir()
    monkeypatch.setattr(Config(), "TEMP_DIR", str(directory))
    return directory
