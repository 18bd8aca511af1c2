"""Split PDFs into page-range chunks to keep AI requests within size limits."""

import logging
from io import BytesIO
from typing import Iterable, List, Optional

from PyPDF2 import PdfReader, PdfWriter

from .config import Config
from .errors import InvalidDocument
from .models.page_models import ExtractedPages, PageChunk

config = Config()
log = logging.getLogger(__name__)


def _open(document: bytes) -> PdfReader:
    try:
        reader = PdfReader(BytesIO(document))
        # Force the page tree to be parsed so broken files fail here
        len(reader.pages)
        return reader
    except Exception as e:
        log.error(f"❌ Error reading PDF: {e}")
        raise InvalidDocument(f"Failed to parse PDF ({len(document)} bytes)") from e


def _write_pages(reader: PdfReader, indices: Iterable[int]) -> bytes:
    writer = PdfWriter()
    for index in indices:
        writer.add_page(reader.pages[index])
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def count_pages(document: bytes) -> int:
    """Quick count of pages using PDF metadata"""
    return len(_open(document).pages)


def split_into_chunks(
    document: bytes, pages_per_chunk: Optional[int] = None
) -> List[PageChunk]:
    """Partition a PDF into standalone documents of at most pages_per_chunk pages.

    Chunks come back in ascending page order and together cover every page
    exactly once. ``start_page``/``end_page`` keep the original 1-indexed
    numbering.
    """
    if pages_per_chunk is None:
        pages_per_chunk = config.PAGES_PER_CHUNK
    if isinstance(pages_per_chunk, bool) or not isinstance(pages_per_chunk, int):
        raise ValueError(f"pages_per_chunk must be an integer, got {pages_per_chunk!r}")
    if pages_per_chunk < 1:
        raise ValueError(f"pages_per_chunk must be positive, got {pages_per_chunk}")

    reader = _open(document)
    total_pages = len(reader.pages)

    chunks = []
    for start in range(0, total_pages, pages_per_chunk):
        end = min(start + pages_per_chunk, total_pages)
        buffer = _write_pages(reader, range(start, end))
        chunks.append(PageChunk(buffer=buffer, start_page=start + 1, end_page=end))
        log.debug(f"Built chunk for pages {start + 1}-{end} ({len(buffer)} bytes)")

    log.info(
        f"Split {total_pages} page(s) into {len(chunks)} chunk(s) of up to {pages_per_chunk}"
    )
    return chunks


def extract_specific_pages(document: bytes, page_numbers: Iterable[int]) -> ExtractedPages:
    """Create a new PDF holding only the requested 1-indexed pages, in ascending order."""
    reader = _open(document)
    total_pages = len(reader.pages)

    valid_pages = sorted({p for p in page_numbers if 1 <= p <= total_pages})
    if not valid_pages:
        raise ValueError("No valid pages specified")

    buffer = _write_pages(reader, (p - 1 for p in valid_pages))
    log.info(f"Extracted {len(valid_pages)} of {total_pages} page(s)")

    return ExtractedPages(
        buffer=buffer,
        pages=valid_pages,
        original_page_count=total_pages,
        extracted_page_count=len(valid_pages),
    )
