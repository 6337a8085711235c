# export_pdf.py
# Render a finished cover letter as a US-letter PDF.

from datetime import date as date_type
from typing import List, Optional

import fitz  # PyMuPDF
from loguru import logger

PAGE_WIDTH, PAGE_HEIGHT = 612, 792  # US letter, points
MARGIN_X = 72
MARGIN_Y = 80
FONT_NAME = "tiro"  # Times-Roman
FONT_SIZE = 12
LINE_HEIGHT = FONT_SIZE * 1.7


class PdfExportError(RuntimeError):
    """The cover letter could not be rendered."""


def wrap_text(text: str, max_width: float, fontname: str = FONT_NAME, fontsize: float = FONT_SIZE) -> List[str]:
    """
    Break text into lines that fit max_width, keeping explicit line breaks.

    A single word wider than the line is placed on its own line untouched.
    """
    lines = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if fitz.get_text_length(candidate, fontname=fontname, fontsize=fontsize) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return lines


def export_cover_letter_pdf(text: str, date: Optional[date_type] = None) -> bytes:
    """
    Render cover letter text to PDF.

    Args:
        text: Finished cover letter
        date: Date printed in the top right corner. Defaults to today.

    Returns:
        PDF document as bytes

    Raises:
        PdfExportError: If there is no text or rendering fails
    """
    if not text or not text.strip():
        raise PdfExportError("Nothing to export: the cover letter is empty")

    date_text = (date or date_type.today()).strftime("%B %d, %Y")
    usable_width = PAGE_WIDTH - 2 * MARGIN_X

    try:
        doc = fitz.open()
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)

        date_width = fitz.get_text_length(date_text, fontname=FONT_NAME, fontsize=FONT_SIZE)
        page.insert_text(
            (PAGE_WIDTH - MARGIN_X - date_width, MARGIN_Y),
            date_text,
            fontname=FONT_NAME,
            fontsize=FONT_SIZE,
        )
        y = MARGIN_Y + 2.5 * LINE_HEIGHT

        for line in wrap_text(text.strip(), usable_width):
            if y > PAGE_HEIGHT - MARGIN_Y:
                page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                y = MARGIN_Y
            if line:
                page.insert_text((MARGIN_X, y), line, fontname=FONT_NAME, fontsize=FONT_SIZE)
            y += LINE_HEIGHT

        pdf_bytes = doc.tobytes()
        page_count = doc.page_count
        doc.close()
    except Exception as e:
        logger.error(f"PDF export failed: {e}")
        raise PdfExportError(f"Failed to render PDF: {e}") from e

    logger.debug(f"Exported cover letter to PDF ({page_count} page(s), {len(pdf_bytes)} bytes)")
    return pdf_bytes
