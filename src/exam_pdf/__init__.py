"""PDF chunking, page rendering and diagram cropping for exam papers."""

from .cropper import compute_crop_region, crop_region, crop_regions
from .diagrams import DiagramOutcome, DiagramProcessor, DirectorySink, crop_regions_from_pdf
from .errors import (
    CropOutOfBounds,
    InvalidBoundingBox,
    InvalidDocument,
    PageRenderFailed,
    PdfPipelineError,
)
from .models import BoundingBox, CroppedImage, CropRegion, PageChunk, PageImage
from .rasterizer import PageRasterizer, fallback_scale, render_page
from .splitter import count_pages, extract_specific_pages, split_into_chunks

__all__ = [
    "BoundingBox",
    "CropOutOfBounds",
    "CropRegion",
    "CroppedImage",
    "DiagramOutcome",
    "DiagramProcessor",
    "DirectorySink",
    "InvalidBoundingBox",
    "InvalidDocument",
    "PageChunk",
    "PageImage",
    "PageRasterizer",
    "PageRenderFailed",
    "PdfPipelineError",
    "compute_crop_region",
    "count_pages",
    "crop_region",
    "crop_regions",
    "crop_regions_from_pdf",
    "extract_specific_pages",
    "fallback_scale",
    "render_page",
    "split_into_chunks",
]
