"""Unit tests for the configuration module."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import importlib
from pathlib import Path

from pdf_reports import config


class TestDocumentDefaults:

    def test_page_defaults(self):
        assert config.DEFAULT_DOCUMENT["orientation"] == "P"
        assert config.DEFAULT_DOCUMENT["format"] == "A4"
        assert config.DEFAULT_DOCUMENT["margins"] == [15, 15, 15]

    def test_table_defaults(self):
        assert config.DEFAULT_DOCUMENT["header_bg"] == "#f2f2f2"
        assert config.DEFAULT_DOCUMENT["table_padding"] == 5

    def test_title_sizing(self):
        assert config.TITLE_FONT_STEP > 0
        assert config.MIN_TITLE_FONT_SIZE <= config.DEFAULT_DOCUMENT["title_font_size"]

    def test_root_is_project_root(self):
        assert (config.ROOT / "src" / "pdf_reports").is_dir()


class TestEnvironmentOverrides:

    def test_env_values(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PDF_OUTPUT_DIR", str(tmp_path / "out"))
        monkeypatch.setenv("PDF_CURRENCY_SYMBOL", "$")
        monkeypatch.setenv("PDF_CORS_ORIGINS", "http://a.example, http://b.example,")
        monkeypatch.setenv("PDF_PORT", "9001")
        try:
            reloaded = importlib.reload(config)
            assert reloaded.OUTPUT_DIR == Path(tmp_path / "out")
            assert reloaded.CURRENCY_SYMBOL == "$"
            assert reloaded.CORS_ORIGINS == ["http://a.example", "http://b.example"]
            assert reloaded.PORT == 9001
        finally:
            monkeypatch.undo()
            importlib.reload(config)
