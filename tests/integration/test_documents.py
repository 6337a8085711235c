"""
Integration tests for CV extraction and PDF export.
Tests: rendered PDF -> extracted text, Word document -> extracted text, and the HTTP wrappers.
"""

import io
from datetime import date

import fitz  # PyMuPDF
import pytest
from docx import Document
from fastapi.testclient import TestClient

import app_fastapi
from export_pdf import PdfExportError, export_cover_letter_pdf, wrap_text
from extract_cv_text import DocumentExtractionError, extract_cv_text

LETTER = "Dear Hiring Manager,\n\nI am writing to apply for the Senior Go engineer role.\n\nSincerely,\nAlex"


def _docx_bytes(*paragraphs):
    doc = Document()
    for text in paragraphs:
        doc.add_paragraph(text)
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def _blank_pdf_bytes():
    doc = fitz.open()
    doc.new_page()
    data = doc.tobytes()
    doc.close()
    return data


@pytest.mark.integration
def test_exported_pdf_contains_letter_and_date():
    pdf_bytes = export_cover_letter_pdf(LETTER, date=date(2024, 3, 5))

    assert pdf_bytes.startswith(b"%PDF")
    text = extract_cv_text(pdf_bytes, "cover-letter.pdf")
    assert "March 05, 2024" in text
    assert "Dear Hiring Manager," in text
    assert "Senior Go engineer" in text


@pytest.mark.integration
def test_long_letter_spans_pages():
    long_letter = "\n\n".join(["This paragraph describes relevant experience in detail."] * 60)

    with fitz.open(stream=export_cover_letter_pdf(long_letter), filetype="pdf") as doc:
        assert doc.page_count > 1


@pytest.mark.integration
def test_export_empty_letter_fails():
    with pytest.raises(PdfExportError):
        export_cover_letter_pdf("   ")


@pytest.mark.unit
def test_wrap_text_respects_width_and_breaks():
    lines = wrap_text("one two three four five six\n\nseven", max_width=60)

    assert "" in lines
    assert lines[-1] == "seven"
    assert all(fitz.get_text_length(line, fontname="tiro", fontsize=12) <= 60 for line in lines if " " in line)


@pytest.mark.integration
def test_extract_docx():
    data = _docx_bytes("Alex Doe", "", "5 years backend")

    assert extract_cv_text(data, "cv.docx") == "Alex Doe\n5 years backend"


@pytest.mark.integration
def test_extract_by_content_type():
    data = _docx_bytes("Alex Doe")
    content_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

    assert extract_cv_text(data, "upload", content_type) == "Alex Doe"


@pytest.mark.integration
def test_image_only_pdf_has_no_text():
    with pytest.raises(DocumentExtractionError, match="No text could be extracted"):
        extract_cv_text(_blank_pdf_bytes(), "scan.pdf")


@pytest.mark.unit
def test_unsupported_format():
    with pytest.raises(DocumentExtractionError, match="PDF or DOCX"):
        extract_cv_text(b"\x89PNG", "photo.png")


@pytest.mark.unit
def test_corrupt_pdf_is_an_extraction_error():
    with pytest.raises(DocumentExtractionError):
        extract_cv_text(b"definitely not a pdf", "cv.pdf")


@pytest.mark.integration
def test_extract_endpoint():
    client = TestClient(app_fastapi.app)
    files = {"file": ("cv.docx", _docx_bytes("Alex Doe"), "application/octet-stream")}

    response = client.post("/api/extract-cv", files=files)

    assert response.status_code == 200
    assert response.json() == {"text": "Alex Doe"}


@pytest.mark.integration
def test_extract_endpoint_rejects_unsupported():
    client = TestClient(app_fastapi.app)
    files = {"file": ("cv.png", b"\x89PNG", "image/png")}

    response = client.post("/api/extract-cv", files=files)

    assert response.status_code == 400
    assert "PDF or DOCX" in response.json()["detail"]


@pytest.mark.integration
def test_export_endpoint():
    client = TestClient(app_fastapi.app)

    response = client.post("/api/export-pdf", json={"coverLetter": LETTER})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


@pytest.mark.integration
def test_export_endpoint_failure_is_generic():
    client = TestClient(app_fastapi.app)

    response = client.post("/api/export-pdf", json={"coverLetter": ""})

    assert response.status_code == 500
    assert response.text == "Error exporting to PDF. Please try again."
