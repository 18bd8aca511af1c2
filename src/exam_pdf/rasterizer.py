"""Render single PDF pages to RGBA PNG images.

Rendering tries two strategies in a fixed order. PyMuPDF renders in-process
and is fast; when it chokes on a page (broken content streams, exotic image
filters) poppler's ``pdftoppm`` is run through pdf2image on a temporary
copy of the document.
"""

import logging
import math
import os
import shutil
import tempfile
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import pymupdf
from pdf2image import convert_from_path
from PIL import Image

from .config import Config
from .errors import PageRenderFailed
from .models.page_models import PageImage

config = Config()
log = logging.getLogger(__name__)


def fallback_scale(density: float) -> int:
    """Map a render density to poppler's scale, in tenths of the 72 dpi base.

    clamp(round(density * 10 / 72), 1, 10), rounding halves up.
    """
    scale = math.floor(density * 10 / config.PDF_BASE_DPI + 0.5)
    return max(config.MIN_FALLBACK_SCALE, min(config.MAX_FALLBACK_SCALE, scale))


def _scratch_name() -> str:
    return f"{config.TEMP_PREFIX}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def _release(path: Path) -> None:
    try:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            os.remove(path)
    except OSError as e:
        log.warning(f"Could not remove temporary path {path}: {e}")


@contextmanager
def scratch_space(document: bytes) -> Iterator[Tuple[Path, Path]]:
    """Write the document to a temp file and create a temp output directory.

    Both paths are removed when the block exits, however it exits.
    """
    acquired: List[Path] = []
    try:
        out_dir = Path(tempfile.mkdtemp(prefix=f"{_scratch_name()}-out-", dir=config.TEMP_DIR))
        acquired.append(out_dir)
        fd, pdf_name = tempfile.mkstemp(
            prefix=f"{_scratch_name()}-", suffix=".pdf", dir=config.TEMP_DIR
        )
        pdf_path = Path(pdf_name)
        acquired.append(pdf_path)
        with os.fdopen(fd, "wb") as f:
            f.write(document)
        yield pdf_path, out_dir
    finally:
        for path in reversed(acquired):
            _release(path)


class RenderStrategy(ABC):
    """One way of turning a PDF page into a PageImage."""

    name = "abstract"

    @abstractmethod
    def render(self, document: bytes, page: int, density: float) -> PageImage:
        ...


class PyMuPdfRenderer(RenderStrategy):
    """In-process rendering with PyMuPDF."""

    name = "pymupdf"

    def render(self, document: bytes, page: int, density: float) -> PageImage:
        zoom = density / config.PDF_BASE_DPI
        with pymupdf.open(stream=document, filetype="pdf") as doc:
            if page > doc.page_count:
                raise ValueError(f"Page {page} is out of range (1-{doc.page_count})")
            pdf_page = doc.load_page(page - 1)
            pix = pdf_page.get_pixmap(matrix=pymupdf.Matrix(zoom, zoom), alpha=True)
            return PageImage(
                page_num=page,
                image_bytes=pix.tobytes("png"),
                dimensions=(pix.width, pix.height),
                renderer=self.name,
            )


class PopplerRenderer(RenderStrategy):
    """Rendering through poppler's pdftoppm on a temporary copy of the PDF."""

    name = "poppler"

    def render(self, document: bytes, page: int, density: float) -> PageImage:
        dpi = config.PDF_BASE_DPI * fallback_scale(density) / 10
        log.debug(f"pdftoppm rendering page {page} at {dpi:g} dpi (requested {density:g})")
        with scratch_space(document) as (pdf_path, out_dir):
            paths = convert_from_path(
                str(pdf_path),
                dpi=dpi,
                first_page=page,
                last_page=page,
                output_folder=str(out_dir),
                fmt="png",
                output_file="page",
                paths_only=True,
                poppler_path=config.POPPLER_PATH,
            )
            if not paths:
                raise ValueError(f"pdftoppm produced no image for page {page}")
            with Image.open(paths[0]) as img:
                img.load()
                return PageImage.from_pil_image(page, img, renderer=self.name)


class PageRasterizer:
    """Tries each strategy in order and returns the first successful render."""

    def __init__(self, strategies: Optional[Sequence[RenderStrategy]] = None) -> None:
        if strategies is None:
            strategies = (PyMuPdfRenderer(), PopplerRenderer())
        if not strategies:
            raise ValueError("At least one render strategy is required")
        self.strategies = list(strategies)

    def render(self, document: bytes, page: int = 1, density: Optional[float] = None) -> PageImage:
        page = max(1, int(page))
        if density is None:
            density = config.RENDER_DPI

        last_error: Optional[Exception] = None
        for strategy in self.strategies:
            try:
                image = strategy.render(document, page, density)
                log.info(
                    f"✅ Rendered page {page} with {strategy.name}: "
                    f"{image.dimensions[0]}x{image.dimensions[1]}"
                )
                return image
            except Exception as e:
                last_error = e
                log.warning(f"⚠️ {strategy.name} failed on page {page}: {e}")

        log.error(f"❌ All renderers failed for page {page}")
        raise PageRenderFailed(page, str(last_error)) from last_error


def render_page(document: bytes, page: int = 1, density: Optional[float] = None) -> PageImage:
    """Render one 1-indexed page with the default primary/fallback strategies."""
    return PageRasterizer().render(document, page=page, density=density)
