"""FastAPI web server for PDF report generation.

Accepts tabular data plus layout directives as JSON and returns the rendered
PDF either base64-encoded or saved under the output directory.  Saved files
are served from ``/pdf_output``.

Usage:
    python -m pdf_reports.web.app
    # => Uvicorn running on http://localhost:8000
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from pdf_reports.config import CORS_ORIGINS, HOST, OUTPUT_DIR, PORT
from pdf_reports.errors import InvalidPayload, OutputWriteError, ReportError
from pdf_reports.hooks import ReportHooks
from pdf_reports.output import build_filename, build_output, check_output_mode, save_base64_pdf
from pdf_reports.report import ReportAssembler, ReportRequest

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# Host-supplied formatters, title builders and content generators (none by default)
HOOKS = ReportHooks()


class Base64Upload(BaseModel):
    base64: str
    filename: str


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title="PDF Report Generator")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)
app.mount("/pdf_output", StaticFiles(directory=str(OUTPUT_DIR), check_dir=False), name="pdf_output")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError):
    """Map body/query validation failures to a single 400 message."""
    details = "; ".join(f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors())
    logger.info("Rejected request: %s", details)
    return _error(400, f"Invalid request: {details}")


@app.exception_handler(ReportError)
async def report_error_handler(_request: Request, exc: ReportError):
    """Bad input (unknown column, invalid grouping, bad payload) -> 400."""
    logger.warning("PDF generation failed: %s", exc)
    return _error(400, f"PDF generation failed: {exc}")


@app.exception_handler(OutputWriteError)
async def output_error_handler(_request: Request, exc: OutputWriteError):
    """The document was generated but could not be stored -> 500."""
    logger.error("Output failed: %s", exc)
    return _error(500, f"PDF generation failed: {exc}")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/")
def index():
    """Service banner listing the available endpoints."""
    return {
        "service": "PDF Report Generator",
        "endpoints": ["POST /api/generate-pdf", "POST /api/base64-to-pdf", "GET /api/base64-to-pdf"],
    }


@app.post("/api/generate-pdf")
def generate_pdf(report: ReportRequest):
    """Render a report and return it in the requested output mode."""
    mode = check_output_mode(report.output_mode)
    pdf_bytes = ReportAssembler(report, HOOKS).build()
    filename = build_filename(report.filename, report.title)
    return build_output(pdf_bytes, mode, filename)


def _saved_response(request: Request, data: str, filename: str) -> dict:
    path = save_base64_pdf(data, filename)
    return {
        "success": True,
        "message": "PDF file created successfully",
        "file_path": str(path),
        "file_url": str(request.url_for("pdf_output", path=f"/{path.name}")),
    }


@app.post("/api/base64-to-pdf")
def base64_to_pdf(upload: Base64Upload, request: Request):
    """Decode a base64 PDF from a JSON body and store it."""
    return _saved_response(request, upload.base64, upload.filename)


@app.get("/api/base64-to-pdf")
def base64_to_pdf_query(request: Request, base64: str | None = None, filename: str | None = None):
    """Decode a base64 PDF passed as query parameters and store it."""
    if not base64 or not filename:
        raise InvalidPayload("No base64 data or filename provided")
    return _saved_response(request, base64, filename)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main():
    """Start the web server via uvicorn."""
    import uvicorn  # pylint: disable=import-outside-toplevel

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
