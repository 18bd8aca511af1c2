"""Crop the diagrams referenced by extracted questions and hand them to storage.

Questions arrive as plain dicts from the extraction step. A diagram entry
looks like::

    {
        "present": true,
        "page": 3,
        "page_width": 1700,
        "page_height": 2200,
        "bounding_box": {"x": 120, "y": 400, "width": 600, "height": 350},
        "description": "circuit with two resistors"
    }

Diagrams can hang off the question itself or off any of its options.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .config import Config
from .cropper import BoxLike, crop_regions
from .errors import PageRenderFailed, PdfPipelineError
from .models.bounding_box import BoundingBox
from .models.callbacks import DiagramCallbacks
from .models.cropped_image import CroppedImage
from .models.page_models import PageChunk, PageImage
from .rasterizer import PageRasterizer

config = Config()
log = logging.getLogger(__name__)

Sink = Callable[[str, CroppedImage], str]
PageCache = Dict[int, Union[PageImage, PageRenderFailed]]


@dataclass
class DiagramOutcome:
    identifier: str
    page_num: Optional[int]
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DirectorySink:
    """Stores crops as PNG files in a local directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def __call__(self, identifier: str, cropped: CroppedImage) -> str:
        return str(cropped.save_to_disk(self.directory, identifier))


def crop_regions_from_pdf(
    document: bytes,
    page: int,
    bboxes: Sequence[BoxLike],
    density: Optional[float] = None,
    rasterizer: Optional[PageRasterizer] = None,
) -> List[CroppedImage]:
    """Render a page once and crop every bounding box from it."""
    rasterizer = rasterizer or PageRasterizer()
    page_image = rasterizer.render(document, page=page, density=density)
    return crop_regions(page_image, bboxes)


def page_number(raw: Any, page_offset: int = 0) -> int:
    """Turn a diagram's absolute ``page`` into a 1-indexed page of the document.

    The extraction step is an AI model, so "3" and 3.0 show up as often as 3.
    A missing or zero page means page 1.
    """
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        raise ValueError(f"invalid page number {raw!r}")
    if not raw:
        raw = 1
    try:
        page = int(raw)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"invalid page number {raw!r}") from e
    return max(1, page - page_offset)


def iter_diagrams(questions: Iterable[Dict[str, Any]]) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """Yield (identifier, diagram) for every diagram that should be cropped."""
    for question_index, question in enumerate(questions):
        question_key = question.get("id") or question_index
        candidates = [(f"question_{question_key}", question.get("diagram"))]

        for option_index, option in enumerate(question.get("options") or []):
            if not isinstance(option, dict):
                continue
            option_key = option.get("label") or option_index
            candidates.append(
                (f"question_{question_key}_option_{option_key}", option.get("diagram"))
            )

        for identifier, diagram in candidates:
            if not isinstance(diagram, dict):
                continue
            if diagram.get("present") is False or not diagram.get("bounding_box"):
                continue
            yield identifier, diagram


class DiagramProcessor:
    """Renders pages on demand and crops each diagram onto the sink."""

    def __init__(
        self,
        sink: Sink,
        rasterizer: Optional[PageRasterizer] = None,
        density: Optional[float] = None,
        callbacks: Optional[DiagramCallbacks] = None,
    ) -> None:
        self.sink = sink
        self.rasterizer = rasterizer or PageRasterizer()
        self.density = density if density is not None else config.RENDER_DPI
        self.callbacks = callbacks or DiagramCallbacks()

    def _render_cached(self, document: bytes, page_num: int, page_cache: PageCache) -> PageImage:
        if page_num not in page_cache:
            try:
                page_cache[page_num] = self.rasterizer.render(
                    document, page=page_num, density=self.density
                )
            except PageRenderFailed as e:
                # Remember the failure so later diagrams on this page skip both renderers
                page_cache[page_num] = e
                raise
            if self.callbacks.on_page_render:
                self.callbacks.on_page_render(page_num)

        cached = page_cache[page_num]
        if isinstance(cached, PageRenderFailed):
            raise cached
        return cached

    def _process_one(
        self,
        document: bytes,
        identifier: str,
        diagram: Dict[str, Any],
        page_offset: int,
        page_cache: PageCache,
    ) -> DiagramOutcome:
        outcome = DiagramOutcome(identifier=identifier, page_num=None)
        try:
            page_num = page_number(diagram.get("page"), page_offset)
            outcome.page_num = page_num
            bbox = BoundingBox.from_diagram(diagram)
            page_image = self._render_cached(document, page_num, page_cache)
            cropped = crop_regions(page_image, [bbox])[0]
            if self.callbacks.on_diagram_cropped:
                self.callbacks.on_diagram_cropped(identifier, page_num)

            outcome.url = self.sink(identifier, cropped)
            diagram["url"] = outcome.url
            diagram["uploaded_at"] = datetime.now(timezone.utc).isoformat()
        except Exception as e:
            # A broken diagram must not sink the rest of the paper
            page_label = outcome.page_num
            if page_label is None:
                page_label = repr(diagram.get("page"))
            outcome.error = f"could not process page {page_label}: {e}"
            log.error(
                f"❌ Failed to crop/store diagram {identifier}: {outcome.error}",
                exc_info=not isinstance(e, PdfPipelineError),
            )
            diagram["url"] = None
            diagram["upload_error"] = outcome.error
            if self.callbacks.on_error:
                self.callbacks.on_error(identifier, outcome.error)
        return outcome

    def process(
        self, document: bytes, questions: Iterable[Dict[str, Any]], page_offset: int = 0
    ) -> List[DiagramOutcome]:
        """Crop every diagram in questions, annotating each diagram dict in place.

        ``page_offset`` is subtracted from each diagram's absolute page number,
        so pass ``chunk.page_offset`` when ``document`` is a chunk.
        """
        page_cache: PageCache = {}
        outcomes = [
            self._process_one(document, identifier, diagram, page_offset, page_cache)
            for identifier, diagram in iter_diagrams(questions)
        ]

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        log.info(
            f"Processed {len(outcomes)} diagram(s) across {len(page_cache)} page(s), {failed} failed"
        )
        return outcomes

    def process_chunk(
        self, chunk: PageChunk, questions: Iterable[Dict[str, Any]]
    ) -> List[DiagramOutcome]:
        return self.process(chunk.buffer, questions, page_offset=chunk.page_offset)
