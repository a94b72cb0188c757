"""Render a report request JSON file to a PDF without going through the HTTP API.

Reads the same body that ``POST /api/generate-pdf`` accepts and writes the
resulting PDF to disk.  Handy for iterating on grouping and layout options.

Usage:
    python scripts/render_report.py request.json
    python scripts/render_report.py request.json -o out/report.pdf
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure project root is importable
ROOT = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(ROOT / "src"))

from pydantic import ValidationError  # pylint: disable=wrong-import-position

from pdf_reports.errors import ReportError  # pylint: disable=wrong-import-position
from pdf_reports.output import build_filename, write_pdf  # pylint: disable=wrong-import-position
from pdf_reports.report import ReportRequest, generate_report  # pylint: disable=wrong-import-position

logger = logging.getLogger(__name__)


def main():
    """Parse arguments, render the request, and write the PDF."""
    parser = argparse.ArgumentParser(description="Render a report request JSON file to PDF")
    parser.add_argument("request", type=Path, help="Path to a JSON request body")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output PDF path (default: generated name in the output directory)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        payload = json.loads(args.request.read_text(encoding="utf-8"))
        request = ReportRequest.model_validate(payload)
        pdf_bytes = generate_report(request)
        if args.output is not None:
            path = write_pdf(pdf_bytes, args.output.name, args.output.parent)
        else:
            path = write_pdf(pdf_bytes, build_filename(request.filename, request.title))
    except (OSError, json.JSONDecodeError, ValidationError, ReportError) as exc:
        logger.error("Could not render %s: %s", args.request, exc)
        sys.exit(1)

    logger.info("Wrote %s", path)


if __name__ == "__main__":
    main()
