"""Compiled regex patterns and constant tuples for table processing.

Used by coercion.py (numeric / date parsing), formatting.py (date display),
and the PDF renderer (HTML detection, column widths).
"""

import re

# ─── Summary Operations ──────────────────────────────────────────────────────

# Operations whose values are coerced to numbers before aggregating
NUMERIC_OPERATIONS = ("sum", "avg", "min", "max")

# Human-readable prefix for default summary labels, e.g. "Total Amount"
OPERATION_LABELS = {
    "sum": "Total",
    "avg": "Average",
    "count": "Count",
    "min": "Min",
    "max": "Max",
}

# Category assigned to rows whose grouping value is missing
UNCATEGORIZED = "Uncategorized"


# ─── Numeric Patterns ────────────────────────────────────────────────────────

# A whole string that is a plain decimal number (what the formatters accept)
NUMERIC_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")

# Leading numeric prefix of a string ("12.5abc" -> "12.5"); anything else is 0.0
NUMERIC_PREFIX_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Characters removed from strings before aggregate coercion ("€ 1,200" -> "1200")
AGGREGATE_STRIP_RE = re.compile(r"[^0-9.\-]")


# ─── Date Patterns ───────────────────────────────────────────────────────────

# Tried in order before falling back to free-form parsing
DATE_FORMATS = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%d-%m-%Y",
    "%Y/%m/%d",
)

# ISO calendar date, the only string shape the date formatter rewrites
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DISPLAY_DATE_FORMAT = "%d/%m/%Y"


# ─── Rendering Patterns ──────────────────────────────────────────────────────

# Any markup tag; text containing one is treated as HTML
HTML_TAG_RE = re.compile(r"<[^>]+>")

# Column width such as "20mm", "2.5cm", "1in", "40pt" or a bare number of points
WIDTH_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(mm|cm|in|pt)?\s*$", re.IGNORECASE)
