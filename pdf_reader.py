"""PDF extraction helpers for document sources."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pypdf import PdfReader

WHITESPACE_PATTERN = re.compile(r"\s+", re.UNICODE)


def extract_pdf_text(file_path: Path, logger: logging.Logger) -> str | None:
    """Extract text from a PDF file as a single line. Returns None for unreadable PDFs."""
    try:
        reader = PdfReader(str(file_path))
        chunks: list[str] = []
        for page in reader.pages:
            text = page.extract_text() or ""
            if text:
                chunks.append(text)
    except Exception as exc:
        logger.warning("Failed to read PDF %s: %s", file_path, exc)
        return None

    # Line breaks and tabs would be rejected by the word validity check.
    full_text = WHITESPACE_PATTERN.sub(" ", " ".join(chunks)).strip()
    if not full_text:
        logger.warning("PDF contains no extractable text: %s", file_path)
        return None
    return full_text
