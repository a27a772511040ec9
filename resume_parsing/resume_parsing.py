from __future__ import annotations  # Plain-text extraction from uploaded resumes

import logging
from io import BytesIO
from typing import Optional

from docx import Document
from pypdf import PdfReader

from config.settings import settings
from interview_session.errors import ValidationFailure

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".docx")
UNREADABLE_MESSAGE = "Couldn't read the resume. Please upload a text-based PDF or DOCX file."


def parse_pdf(data: bytes) -> str:  # Concatenate page text
    reader = PdfReader(BytesIO(data))
    text = []
    for page in reader.pages:
        t = page.extract_text()
        if t:
            text.append(t)
    return "\n".join(text)


def parse_docx(data: bytes) -> str:  # Concatenate paragraph text
    doc = Document(BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs)


def extract_resume_text(filename: Optional[str], data: bytes) -> str:
    """Return the trimmed text of a PDF or DOCX upload.

    Raises ``ValidationFailure`` for unsupported types, oversized files and
    documents without any extractable text.
    """

    name = str(filename or "").lower().strip()
    if not name.endswith(SUPPORTED_EXTENSIONS):
        raise ValidationFailure("Unsupported file format. Please upload a PDF or DOCX file.")
    if not data:
        raise ValidationFailure(UNREADABLE_MESSAGE)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationFailure("File too large. Maximum size is 10MB.")
    try:
        text = parse_pdf(data) if name.endswith(".pdf") else parse_docx(data)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to parse resume %s: %s", filename, exc)
        raise ValidationFailure(UNREADABLE_MESSAGE) from exc
    text = text.strip()
    if not text:
        raise ValidationFailure(UNREADABLE_MESSAGE)
    logger.info("Extracted %d characters from %s", len(text), filename)
    return text


__all__ = ["SUPPORTED_EXTENSIONS", "extract_resume_text", "parse_docx", "parse_pdf"]
