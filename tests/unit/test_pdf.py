"""Tests for PDF text extraction from in-memory buffers."""

import pymupdf

from src.web.pdf import extract_text_from_pdf_bytes


def _make_pdf(*pages: str) -> bytes:
    doc = pymupdf.open()
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


class TestExtractTextFromPdfBytes:
    def test_extracts_all_pages(self) -> None:
        data = _make_pdf("UPSC Civil Services 2026", "Last date 14/02/2026")
        text = extract_text_from_pdf_bytes(data)
        assert "UPSC Civil Services 2026" in text
        assert "14/02/2026" in text

    def test_empty_buffer(self) -> None:
        assert extract_text_from_pdf_bytes(b"") == ""

    def test_invalid_buffer(self) -> None:
        assert extract_text_from_pdf_bytes(b"<html>not a pdf</html>") == ""
