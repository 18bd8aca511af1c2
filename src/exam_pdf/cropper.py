"""Crop diagram regions out of rasterized pages."""

import logging
import math
from typing import Any, Iterable, List, Mapping, Tuple, Union

from PIL import Image

from .config import Config
from .errors import CropOutOfBounds, InvalidBoundingBox
from .models.bounding_box import BoundingBox
from .models.cropped_image import CroppedImage, CropRegion
from .models.page_models import PageImage

config = Config()
log = logging.getLogger(__name__)

BoxLike = Union[BoundingBox, Mapping[str, Any]]


def _round(value: float) -> int:
    # Round half up; Python's round() goes to even
    return math.floor(value + 0.5)


def as_bounding_box(bbox: BoxLike) -> BoundingBox:
    if isinstance(bbox, BoundingBox):
        return bbox
    return BoundingBox.from_mapping(bbox)


def compute_crop_region(bbox: BoundingBox, image_size: Tuple[int, int]) -> CropRegion:
    """Scale a bounding box into image pixels and clamp it to the image."""
    actual_width, actual_height = image_size

    reference_width = bbox.page_width if bbox.page_width and bbox.page_width > 0 else actual_width
    reference_height = (
        bbox.page_height if bbox.page_height and bbox.page_height > 0 else actual_height
    )
    if not reference_width or reference_width <= 0 or not reference_height or reference_height <= 0:
        raise InvalidBoundingBox(
            f"No usable reference dimensions for bounding box on a {actual_width}x{actual_height} image"
        )

    scale_x = actual_width / reference_width
    scale_y = actual_height / reference_height

    left = max(0, _round(bbox.x * scale_x))
    top = max(0, _round(bbox.y * scale_y))
    width = max(1, _round(bbox.width * scale_x))
    height = max(1, _round(bbox.height * scale_y))

    width = min(width, actual_width - left)
    height = min(height, actual_height - top)

    region = CropRegion(left, top, width, height)
    if width <= 0 or height <= 0:
        raise CropOutOfBounds(
            f"Crop region at ({left}, {top}) lies outside the {actual_width}x{actual_height} image",
            region=region,
        )
    return region


def _crop(img: Image.Image, page_num: int, bbox: BoundingBox) -> CroppedImage:
    region = compute_crop_region(bbox, img.size)
    log.debug(
        f"✂️ Cropping page {page_num}: {region.width}x{region.height} at ({region.left}, {region.top})"
    )
    cropped = img.crop(region.box)
    return CroppedImage.from_pil_image(page_num, region, cropped, format=config.IMAGE_FORMAT)


def _open_rgba(page_image: PageImage) -> Image.Image:
    img = page_image.to_pil_image()
    return img.convert("RGBA") if img.mode != "RGBA" else img


def crop_region(page_image: PageImage, bbox: BoxLike) -> CroppedImage:
    """Extract the region described by bbox from a rendered page."""
    box = as_bounding_box(bbox)
    with _open_rgba(page_image) as img:
        return _crop(img, page_image.page_num, box)


def crop_regions(page_image: PageImage, bboxes: Iterable[BoxLike]) -> List[CroppedImage]:
    """Crop several regions from one page, decoding the page only once.

    Every box is validated before the page is decoded.
    """
    boxes = [as_bounding_box(bbox) for bbox in bboxes]
    if not boxes:
        return []
    with _open_rgba(page_image) as img:
        return [_crop(img, page_image.page_num, box) for box in boxes]
