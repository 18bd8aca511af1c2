from .bounding_box import BoundingBox
from .callbacks import DiagramCallbacks
from .cropped_image import CroppedImage, CropRegion
from .page_models import ExtractedPages, PageChunk, PageImage

__all__ = [
    "BoundingBox",
    "CropRegion",
    "CroppedImage",
    "DiagramCallbacks",
    "ExtractedPages",
    "PageChunk",
    "PageImage",
]
