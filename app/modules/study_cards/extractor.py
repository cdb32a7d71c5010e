"""PDF text extraction with PyMuPDF."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import fitz  # PyMuPDF

from app.core.logging import get_logger
from app.modules.study_cards.errors import DocumentReadError

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExtractedDocument:
    text: str
    page_count: int


def _extract(payload: bytes) -> ExtractedDocument:
    try:
        with fitz.open(stream=payload, filetype="pdf") as doc:
            pages = [doc.load_page(i).get_text("text") for i in range(doc.page_count)]
    except Exception as exc:
        # FileDataError, mupdf format errors, truncated streams
        raise DocumentReadError() from exc
    return ExtractedDocument(text="\n\n".join(pages), page_count=len(pages))


async def extract_pdf_text(payload: bytes) -> ExtractedDocument:
    """Extract the text of every page; runs in a worker thread."""
    doc = await asyncio.to_thread(_extract, payload)
    logger.info("Extracted %d chars from %d page(s)", len(doc.text), doc.page_count)
    return doc
