"""Data models for page chunks and rasterized pages."""

from dataclasses import dataclass
from io import BytesIO
from typing import List, Tuple

from PIL import Image


@dataclass
class PageChunk:
    """A standalone PDF holding pages [start_page, end_page] of a source PDF."""

    buffer: bytes
    start_page: int
    end_page: int

    @property
    def page_count(self) -> int:
        return self.end_page - self.start_page + 1

    @property
    def page_offset(self) -> int:
        """Subtract from an absolute page number to get the page within this chunk."""
        return self.start_page - 1


@dataclass
class ExtractedPages:
    """A standalone PDF built from a selection of pages."""

    buffer: bytes
    pages: List[int]
    original_page_count: int
    extracted_page_count: int


@dataclass
class PageImage:
    """Represents a single rasterized page from a PDF."""

    page_num: int
    image_bytes: bytes
    dimensions: Tuple[int, int]  # (width, height)
    renderer: str = ""

    @classmethod
    def from_pil_image(
        cls, page_num: int, pil_image: Image.Image, renderer: str = "", format: str = "PNG"
    ) -> "PageImage":
        """Encode a PIL image as RGBA and wrap it."""
        if pil_image.mode != "RGBA":
            pil_image = pil_image.convert("RGBA")
        buffer = BytesIO()
        pil_image.save(buffer, format=format)
        return cls(
            page_num=page_num,
            image_bytes=buffer.getvalue(),
            dimensions=(pil_image.width, pil_image.height),
            renderer=renderer,
        )

    def to_pil_image(self) -> Image.Image:
        return Image.open(BytesIO(self.image_bytes))
