"""
Resume text extraction for uploaded files (PDF, DOCX, plain text).
"""

import io
import logging

import docx
from pdfminer.high_level import extract_text

from ..errors import ValidationError

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT = "text/plain"

ALLOWED_TYPES = {
    PDF: ".pdf",
    DOCX: ".docx",
    TEXT: ".txt",
}


def extract_text_from_pdf(data: bytes) -> str:
    return extract_text(io.BytesIO(data))


def extract_text_from_docx(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    return "\n".join(p.text for p in document.paragraphs)


def resolve_type(filename: str, content_type: str | None) -> str:
    """Content type of an upload, falling back to its extension."""
    if content_type in ALLOWED_TYPES:
        return content_type
    lowered = (filename or "").lower()
    for kind, ext in ALLOWED_TYPES.items():
        if lowered.endswith(ext):
            return kind
    raise ValidationError("Only PDF, TXT, or Word (DOCX) files allowed")


def extract_resume_text(filename: str, content_type: str | None, data: bytes) -> str:
    kind = resolve_type(filename, content_type)
    try:
        if kind == PDF:
            return extract_text_from_pdf(data)
        if kind == DOCX:
            return extract_text_from_docx(data)
        return data.decode("utf-8", errors="replace")
    except Exception as e:
        # pdfminer/python-docx raise a zoo of exception types on corrupt input
        logger.warning("[resume] could not read %s: %s", filename, e)
        raise ValidationError("Could not read the uploaded file") from e
