"""Exception types raised by the PDF pipeline."""

from typing import Optional


class PdfPipelineError(Exception):
    """Base class for every error raised by exam_pdf."""


class InvalidDocument(PdfPipelineError):
    """The supplied bytes could not be parsed as a PDF."""


class PageRenderFailed(PdfPipelineError):
    """Every rendering strategy failed for a page."""

    def __init__(self, page: int, reason: Optional[str] = None) -> None:
        self.page = page
        self.reason = reason
        message = f"Could not render page {page}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InvalidBoundingBox(PdfPipelineError, ValueError):
    """Crop metadata is missing or not numeric."""


class CropOutOfBounds(PdfPipelineError):
    """The crop region does not overlap the page image."""

    def __init__(self, message: str, region=None) -> None:
        self.region = region
        super().__init__(message)
