"""PDF text extraction using pymupdf."""

import logging

import pymupdf

logger = logging.getLogger(__name__)


def extract_text_from_pdf_bytes(data: bytes) -> str:
    """Extract plain text from an in-memory PDF.

    Args:
        data: Raw PDF bytes.

    Returns:
        Concatenated text from all pages, or "" if the buffer is empty or
        not a readable PDF.
    """
    if not data:
        logger.warning("PDF parse skipped: empty buffer")
        return ""

    text_parts: list[str] = []
    try:
        with pymupdf.open(stream=data, filetype="pdf") as doc:
            for page in doc:
                text_parts.append(page.get_text())
    except Exception as e:
        logger.warning("PDF parse failed: %s", e)
        return ""

    return "\n".join(text_parts)
