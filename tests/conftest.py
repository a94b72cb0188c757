"""Shared test configuration and fixtures."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from pdf_reports import output

# Load .env from project root for all tests
root = Path(__file__).parent.parent.resolve()
load_dotenv(root / ".env")


@pytest.fixture(autouse=True)
def output_dir(tmp_path, monkeypatch) -> Path:
    """Redirect file-mode output into a per-test temporary directory."""
    directory = tmp_path / "pdf_output"
    monkeypatch.setattr(output, "OUTPUT_DIR", directory)
    return directory
