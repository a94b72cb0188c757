"""Shared configuration for PDF report generation and the HTTP service.

Values that vary per deployment are read from the environment (``.env`` at the
project root is loaded first); everything else is a plain constant.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")

# ─── Document Defaults ───────────────────────────────────────────────────────

# Per-request values in a ReportRequest override these
DEFAULT_DOCUMENT = {
    "orientation": "P",  # P = Portrait, L = Landscape
    "unit": "mm",
    "format": "A4",
    "margins": [15, 15, 15],  # left, top, right
    "page_break_margin": 15,
    "creator": "PDF Generator API",
    "author": "PDF Generator",
    "title": "Generated Document",
    "subject": "Generated Document",
    "title_font_size": 16,
    "content_font_size": 10,
    "table_border": 1,
    "table_padding": 5,
    "header_bg": "#f2f2f2",
    "summary_bg": "#e8e8e8",
    "summary_label": "Total",
}

# Title sizing for nested group levels: base - depth * step, floored at the minimum
TITLE_FONT_STEP = 2
MIN_TITLE_FONT_SIZE = 10

# Vertical gap (points) written between consecutive group sections
SECTION_SPACING = 5

# Gap (points) after every title
TITLE_SPACING = 5

# ─── Deployment Settings ─────────────────────────────────────────────────────

# Directory for file-mode output and base64 uploads
OUTPUT_DIR = Path(os.getenv("PDF_OUTPUT_DIR", str(ROOT / "pdf_output")))

# Currency glyph used by the price formatter
CURRENCY_SYMBOL = os.getenv("PDF_CURRENCY_SYMBOL", "€")

# Comma-separated list of allowed CORS origins ("*" allows all)
CORS_ORIGINS = [o.strip() for o in os.getenv("PDF_CORS_ORIGINS", "*").split(",") if o.strip()]

HOST = os.getenv("PDF_HOST", "0.0.0.0")
PORT = int(os.getenv("PDF_PORT", "8000"))
