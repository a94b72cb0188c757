"""Output modes for generated PDFs and base64 persistence.

``B64`` returns the document base64-encoded in the response payload; ``F``
writes it into the output directory under a collision-resistant name
(``<stem>_<YYYYmmdd-HHMMSS>_<8 hex>.pdf``).  Any OSError while writing is
raised as OutputWriteError; nothing is ever reported as saved when the write
failed.
"""

import base64
import binascii
import logging
import re
import uuid
from datetime import datetime
from pathlib import Path

from pdf_reports.config import DEFAULT_DOCUMENT, OUTPUT_DIR
from pdf_reports.errors import InvalidPayload, OutputWriteError

logger = logging.getLogger(__name__)

OUTPUT_MODES = ("B64", "F")

_UNSAFE_CHARS_RE = re.compile(r"[^\w.\-]+")
_DATA_URI_RE = re.compile(r"^data:[^,]*;base64,", re.IGNORECASE)


# ─── Filenames ───────────────────────────────────────────────────────────────


def slugify(text: str) -> str:
    """``"Sales Report 2024"`` -> ``"sales_report_2024"``."""
    slug = _UNSAFE_CHARS_RE.sub("_", text.strip().lower()).strip("._")
    return slug or "document"


def pdf_basename(filename: str) -> str:
    """Strip any directory part and make sure the name ends in ``.pdf``."""
    name = Path(filename.replace("\\", "/")).name
    if not name.lower().endswith(".pdf"):
        name += ".pdf"
    return name


def build_filename(requested: str | None = None, title: str | None = None, now: datetime | None = None) -> str:
    """Collision-resistant output filename from a requested name or the document title."""
    stem = ""
    if requested and requested.strip():
        stem = _UNSAFE_CHARS_RE.sub("_", pdf_basename(requested.strip())[:-4]).strip("._")
    if not stem:
        stem = slugify(title or DEFAULT_DOCUMENT["title"])
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"{stem}_{stamp}_{uuid.uuid4().hex[:8]}.pdf"


# ─── Writing ─────────────────────────────────────────────────────────────────


def write_pdf(data: bytes, filename: str, directory: Path | None = None) -> Path:
    """Write *data* as *filename* (basename only) into *directory*, creating it if needed."""
    target_dir = Path(directory) if directory is not None else OUTPUT_DIR
    path = target_dir / pdf_basename(filename)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise OutputWriteError(f"Failed to write PDF file {path}: {exc}") from exc
    logger.info("Saved PDF %s (%.1f KB)", path, len(data) / 1024)
    return path


def check_output_mode(mode: str) -> str:
    normalized = (mode or "").strip().upper()
    if normalized not in OUTPUT_MODES:
        raise InvalidPayload(f"Invalid output mode: {mode}")
    return normalized


def build_output(pdf_bytes: bytes, mode: str, filename: str, directory: Path | None = None) -> dict:
    """Response payload for *mode* (``B64`` or ``F``)."""
    mode = check_output_mode(mode)
    if mode == "B64":
        return {
            "success": True,
            "message": "PDF generated successfully",
            "filename": filename,
            "base64": base64.b64encode(pdf_bytes).decode("ascii"),
        }
    path = write_pdf(pdf_bytes, filename, directory)
    return {
        "success": True,
        "message": "PDF saved to file successfully",
        "file_path": str(path),
    }


# ─── Base64 Persistence ──────────────────────────────────────────────────────


def decode_base64_pdf(data: str) -> bytes:
    """Strictly decode base64 text, tolerating a data-URI prefix and line breaks.

    Spaces are read as ``+`` because query strings decode ``+`` to a space.
    """
    if not data or not data.strip():
        raise InvalidPayload("No base64 data provided")
    text = re.sub(r"\s+", "", data.replace(" ", "+"))
    text = _DATA_URI_RE.sub("", text)
    try:
        decoded = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidPayload("Invalid base64 data") from exc
    if not decoded:
        raise InvalidPayload("Invalid base64 data")
    return decoded


def save_base64_pdf(data: str, filename: str, directory: Path | None = None) -> Path:
    """Decode *data* and store it as ``<basename>.pdf`` in the output directory."""
    if not filename or not filename.strip():
        raise InvalidPayload("No filename provided")
    return write_pdf(decode_base64_pdf(data), filename.strip(), directory)
