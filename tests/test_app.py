"""Tests for the FastAPI endpoints and their error mapping."""

# pylint: disable=missing-class-docstring,missing-function-docstring,redefined-outer-name

import base64

import pytest
from fastapi.testclient import TestClient

from pdf_reports import output
from pdf_reports.web.app import app

REQUEST = {
    "columns": ["Cat", "Val"],
    "rows": [["B", 1], ["A", 3], ["A", 2]],
    "column_config": {"Val": {"type": "price", "summaryOperation": "sum"}},
    "group_by": "Cat",
    "sort_by": "Val",
    "title": "Scenario Report",
}


@pytest.fixture
def client():
    return TestClient(app)


class TestIndex:

    def test_banner(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "POST /api/generate-pdf" in response.json()["endpoints"]


# ===========================================================================
# /api/generate-pdf
# ===========================================================================


class TestGeneratePdf:

    def test_base64_output(self, client):
        response = client.post("/api/generate-pdf", json=REQUEST)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["filename"].startswith("scenario_report_")
        assert base64.b64decode(body["base64"]).startswith(b"%PDF")

    def test_file_output(self, client, output_dir):
        response = client.post("/api/generate-pdf", json={**REQUEST, "output_mode": "F", "filename": "mine"})
        assert response.status_code == 200
        saved = list(output_dir.glob("mine_*.pdf"))
        assert len(saved) == 1
        assert response.json()["file_path"] == str(saved[0])
        assert saved[0].read_bytes().startswith(b"%PDF")

    def test_multi_level_with_summaries(self, client):
        payload = {
            **REQUEST,
            "columns": ["Region", "Country", "Amount"],
            "rows": [{"Region": "North", "Country": "Norway", "Amount": 10}, ["South", "", 5]],
            "column_config": {"Amount": "price"},
            "group_by": ["Region", "Country"],
            "sort_by": None,
            "show_summary": True,
            "group_config": {"0": {"showSummary": True, "summaryDefinitions": {"Amount": "sum"}}},
        }
        response = client.post("/api/generate-pdf", json=payload)
        assert response.status_code == 200

    def test_unknown_column(self, client):
        response = client.post("/api/generate-pdf", json={**REQUEST, "group_by": "Nope"})
        assert response.status_code == 400
        error = response.json()["error"]
        assert response.json()["success"] is False
        assert error.startswith("PDF generation failed:")
        assert "'Nope'" in error
        assert "Cat, Val" in error

    def test_unknown_column_type(self, client):
        response = client.post("/api/generate-pdf", json={**REQUEST, "column_config": {"Val": {"type": "currency"}}})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"].startswith("PDF generation failed:")
        assert "currency" in body["error"]

    def test_unknown_column_type_shorthand(self, client):
        response = client.post("/api/generate-pdf", json={**REQUEST, "column_config": None, "column_types": ["string", "money"]})
        assert response.status_code == 400
        assert "money" in response.json()["error"]

    def test_overflowing_numbers_render(self, client):
        # 1e400 is valid JSON that decodes to float("inf")
        body = (
            '{"columns": ["Cat", "Val"], "rows": [["A", 1e400], ["A", 2], ["B", -1e400]],'
            ' "column_config": {"Val": {"type": "price", "summaryOperation": "sum"}},'
            ' "group_by": "Cat", "show_summary": true}'
        )
        response = client.post("/api/generate-pdf", content=body, headers={"Content-Type": "application/json"})
        assert response.status_code == 200
        assert base64.b64decode(response.json()["base64"]).startswith(b"%PDF")

    def test_invalid_group_spec(self, client):
        response = client.post("/api/generate-pdf", json={**REQUEST, "group_by": []})
        assert response.status_code == 400
        assert "grouping" in response.json()["error"] or "group_by" in response.json()["error"]

    def test_invalid_output_mode(self, client):
        response = client.post("/api/generate-pdf", json={**REQUEST, "output_mode": "I"})
        assert response.status_code == 400
        assert "Invalid output mode" in response.json()["error"]

    def test_validation_error(self, client):
        response = client.post("/api/generate-pdf", json={"rows": []})
        assert response.status_code == 400
        body = response.json()
        assert body["error"].startswith("Invalid request:")
        assert "columns" in body["error"]
        assert "base64" not in body

    def test_write_failure_is_500(self, client, tmp_path, monkeypatch):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        monkeypatch.setattr(output, "OUTPUT_DIR", blocker)
        response = client.post("/api/generate-pdf", json={**REQUEST, "output_mode": "F"})
        assert response.status_code == 500
        assert "Failed to write PDF file" in response.json()["error"]


# ===========================================================================
# /api/base64-to-pdf
# ===========================================================================


class TestBase64ToPdf:

    ENCODED = base64.b64encode(b"%PDF-1.4 uploaded").decode()

    def test_post(self, client, output_dir):
        response = client.post("/api/base64-to-pdf", json={"base64": self.ENCODED, "filename": "../upload"})
        assert response.status_code == 200
        body = response.json()
        assert body["file_path"] == str(output_dir / "upload.pdf")
        assert body["file_url"].endswith("/pdf_output/upload.pdf")
        assert (output_dir / "upload.pdf").read_bytes() == b"%PDF-1.4 uploaded"

    def test_get(self, client, output_dir):
        response = client.get("/api/base64-to-pdf", params={"base64": self.ENCODED, "filename": "q.pdf"})
        assert response.status_code == 200
        assert (output_dir / "q.pdf").exists()

    def test_get_without_params(self, client):
        response = client.get("/api/base64-to-pdf")
        assert response.status_code == 400
        assert "No base64 data or filename provided" in response.json()["error"]

    def test_post_missing_fields(self, client):
        response = client.post("/api/base64-to-pdf", json={"base64": self.ENCODED})
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request:")

    def test_invalid_base64(self, client):
        response = client.post("/api/base64-to-pdf", json={"base64": "***", "filename": "x"})
        assert response.status_code == 400
        assert "Invalid base64 data" in response.json()["error"]
