# extract_cv_text.py
# Plain text from an uploaded CV (PDF or Word document).

import io
import os
from typing import Optional

import fitz  # PyMuPDF
from docx import Document
from loguru import logger

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

UNSUPPORTED_MESSAGE = "Please upload a PDF or DOCX file, or paste your CV directly."
NO_PDF_TEXT_MESSAGE = (
    "No text could be extracted from the PDF. The PDF might be scanned or contain only images. "
    "Please try copying and pasting the text directly into the CV field."
)
UNREADABLE_MESSAGE = (
    "Unable to process file. Please try copying and pasting the text directly into the CV field."
)


class DocumentExtractionError(ValueError):
    """The file holds no recoverable text or is not a supported format."""


def _file_kind(filename: str, content_type: Optional[str]) -> str:
    if content_type == PDF_CONTENT_TYPE:
        return "pdf"
    if content_type == DOCX_CONTENT_TYPE:
        return "docx"
    ext = os.path.splitext((filename or "").lower())[1]
    return {".pdf": "pdf", ".docx": "docx", ".txt": "txt", ".text": "txt"}.get(ext, "")


def _extract_pdf_text(data: bytes) -> str:
    pages = []
    with fitz.open(stream=data, filetype="pdf") as doc:
        for page in doc:
            text = page.get_text()
            # Image-only pages have nothing to contribute
            if text.strip():
                pages.append(text)
    return "\n".join(pages).strip()


def _extract_docx_text(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    paragraphs = [p.text for p in doc.paragraphs if p.text.strip()]
    return "\n".join(paragraphs).strip()


def extract_cv_text(data: bytes, filename: str, content_type: Optional[str] = None) -> str:
    """
    Extract plain text from a CV file.

    Args:
        data: Raw file content
        filename: Original filename (used to determine file type)
        content_type: MIME type sent with the upload, if any

    Returns:
        Extracted text content as string

    Raises:
        DocumentExtractionError: If the file type is not supported or no text can be recovered
    """
    kind = _file_kind(filename, content_type)
    if not kind:
        raise DocumentExtractionError(UNSUPPORTED_MESSAGE)

    if kind == "txt":
        text = data.decode("utf-8", errors="ignore").strip()
        if not text:
            raise DocumentExtractionError(UNREADABLE_MESSAGE)
        return text

    try:
        text = _extract_pdf_text(data) if kind == "pdf" else _extract_docx_text(data)
    except Exception as e:
        logger.warning(f"Failed to read {kind} CV {filename!r}: {e}")
        raise DocumentExtractionError(UNREADABLE_MESSAGE) from e

    if not text:
        raise DocumentExtractionError(NO_PDF_TEXT_MESSAGE if kind == "pdf" else UNREADABLE_MESSAGE)

    logger.debug(f"Extracted {len(text)} characters from {filename!r}")
    return text
