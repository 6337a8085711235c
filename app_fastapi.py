# app_fastapi.py
# FastAPI web application for cover letter generation with fit scoring

from dotenv import load_dotenv
load_dotenv()  # Load environment variables from .env file

from fastapi import FastAPI, File, UploadFile, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

import llm_provider
import config
from export_pdf import PdfExportError, export_cover_letter_pdf
from extract_cv_text import DocumentExtractionError, extract_cv_text
from generate_cover_letter import open_cover_letter_stream
from logger import setup_logger
from score_fit import score_fit

app = FastAPI(title="Job Application Assistant", version="1.0.0")

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

EXPORT_ERROR_MESSAGE = "Error exporting to PDF. Please try again."


def _field(payload: dict, name: str) -> str:
    value = payload.get(name)
    return "" if value is None else str(value)


@app.post("/api/generate")
async def generate(request: Request):
    """
    Score the resume against the job description, then stream a cover letter.

    Body: JSON with **jobDescription**, **resume**, **tone**, **length**.

    The fit score is resolved first and sent in the `x-fit-score` header; the
    body is the model stream forwarded as-is (newline-delimited JSON chunks).
    Any failure before streaming starts returns a 500 with a plain-text message.
    """
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object")

        job_description = _field(payload, "jobDescription")
        resume = _field(payload, "resume")
        tone = payload.get("tone")
        length = payload.get("length")

        provider = llm_provider.get_provider()

        # Score fully before opening the stream so the header is ready for the first byte
        fit_score = await score_fit(provider, job_description, resume)
        stream = await open_cover_letter_stream(provider, job_description, resume, tone, length)
    except Exception as e:
        logger.exception("Cover letter generation request failed")
        return PlainTextResponse(f"An error occurred: {str(e) or 'Unknown error'}", status_code=500)

    logger.info(f"Streaming cover letter (fit score {fit_score}, tone={tone!r}, length={length!r})")
    return StreamingResponse(
        stream,
        media_type="text/plain; charset=utf-8",
        headers={config.FIT_SCORE_HEADER: str(fit_score)},
    )


@app.post("/api/extract-cv")
async def extract_cv(file: UploadFile = File(..., description="CV as PDF or DOCX")):
    """
    Extract plain text from an uploaded CV.

    Returns `{"text": ...}`, or a 400 with a message the user can act on.
    """
    content = await file.read()
    try:
        text = extract_cv_text(content, file.filename or "", file.content_type)
    except DocumentExtractionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"text": text}


@app.post("/api/export-pdf")
async def export_pdf(request: Request):
    """
    Render a finished cover letter as a downloadable PDF.

    Body: JSON with **coverLetter**.
    """
    try:
        payload = await request.json()
        cover_letter = _field(payload, "coverLetter") if isinstance(payload, dict) else ""
        pdf_bytes = export_cover_letter_pdf(cover_letter)
    except (ValueError, PdfExportError) as e:
        logger.error(f"PDF export request failed: {e}")
        return PlainTextResponse(EXPORT_ERROR_MESSAGE, status_code=500)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="cover-letter.pdf"'},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "Job Application Assistant"}


if __name__ == '__main__':
    import uvicorn
    setup_logger("server")

    # For local development, show localhost in the message (0.0.0.0 is not accessible in browser)
    display_host = "localhost" if config.HOST == "0.0.0.0" else config.HOST
    logger.info(f"FastAPI app starting on http://{display_host}:{config.PORT}")
    logger.info(f"API documentation available at http://{display_host}:{config.PORT}/docs")
    uvicorn.run(app, host=config.HOST, port=config.PORT)
