"""Cropped region dataclass combining crop geometry with image bytes."""

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import NamedTuple, Tuple

from PIL import Image


class CropRegion(NamedTuple):
    """Pixel rectangle inside a page image."""

    left: int
    top: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """(left, upper, right, lower) as Pillow expects it."""
        return (self.left, self.top, self.left + self.width, self.top + self.height)


@dataclass
class CroppedImage:
    """Combines the crop region with the actual extracted image bytes."""

    page_num: int
    region: CropRegion
    image_bytes: bytes
    image_format: str = "PNG"

    @property
    def dimensions(self) -> Tuple[int, int]:
        return (self.region.width, self.region.height)

    @classmethod
    def from_pil_image(
        cls, page_num: int, region: CropRegion, pil_image: Image.Image, format: str = "PNG"
    ) -> "CroppedImage":
        """Create from PIL Image object."""
        buffer = BytesIO()
        pil_image.save(buffer, format=format)
        buffer.seek(0)
        return cls(
            page_num=page_num,
            region=region,
            image_bytes=buffer.read(),
            image_format=format,
        )

    def to_pil_image(self) -> Image.Image:
        """Convert back to PIL Image for processing."""
        return Image.open(BytesIO(self.image_bytes))

    def save_to_disk(self, images_dir: Path, name: str) -> Path:
        """Save image to disk and return its path."""
        filepath = images_dir / f"{name}.{self.image_format.lower()}"
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "wb") as f:
            f.write(self.image_bytes)

        return filepath
