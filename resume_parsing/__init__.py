from __future__ import annotations  # Re-export resume_parsing public API

from .resume_parsing import SUPPORTED_EXTENSIONS, extract_resume_text, parse_docx, parse_pdf  # noqa: F401

__all__ = ["SUPPORTED_EXTENSIONS", "extract_resume_text", "parse_docx", "parse_pdf"]
