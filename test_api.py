"""
Tests for the Flask API using the test client.
"""

import io

import pytest
from openpyxl import load_workbook

from app import create_app
from bill_parser.document import DocumentReadError, DocumentText
from conftest import ACE_PAGE_1, ACE_PAGE_2, PSEG_PAGE_1, PSEG_PAGE_3


class FakeReader:
    def read_bytes(self, data):
        if data == b"ace":
            return DocumentText.from_pages([ACE_PAGE_1, ACE_PAGE_2])
        if data == b"pseg":
            return DocumentText.from_pages([PSEG_PAGE_1, PSEG_PAGE_3])
        raise DocumentReadError("Failed to extract PDF: corrupt")


@pytest.fixture
def cfg():
    return {
        "logging": {"level": "WARNING"},
        "parser": {"preferred_provider": ""},
        "uploads": {"max_files": 3, "max_content_mb": 1},
        "export": {"file_names": {"gas": "gas_only.xlsx"}},
    }


@pytest.fixture
def client(cfg):
    app = create_app(cfg)
    app.config["TESTING"] = True
    app.config["DOCUMENT_READER"] = FakeReader()
    return app.test_client()


def _files(*items):
    return {"files": [(io.BytesIO(data), name) for name, data in items]}


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_list_providers(client):
    resp = client.get("/api/providers")
    assert resp.get_json() == {"providers": [{"id": "ace", "name": "ACE"}, {"id": "pseg", "name": "PSE&G"}]}


def test_parse_text(client):
    resp = client.post("/api/parse/text", json={
        "full_text": PSEG_PAGE_1 + "\n" + PSEG_PAGE_3,
        "pages": [PSEG_PAGE_1, PSEG_PAGE_3],
    })
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["provider_name"] == "PSE&G"
    assert body["data"]["electric_supply_charges"] == "6882.85"
    assert body["data"]["account_number"] is None
    assert any("Detected: PSE&G" in line for line in body["logs"])
    assert resp.headers["X-Request-Id"]


def test_parse_text_with_no_match(client):
    body = client.post("/api/parse/text", json={"full_text": "hello"}).get_json()
    assert body["success"] is False
    assert body["provider_name"] is None
    assert all(v is None for v in body["data"].values())


def test_parse_text_requires_full_text(client):
    resp = client.post("/api/parse/text", json={"pages": ["x"]})
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_parse_text_rejects_bad_pages(client):
    resp = client.post("/api/parse/text", json={"full_text": "PSEG", "pages": "PSEG"})
    assert resp.status_code == 400


def test_configured_preferred_provider(cfg):
    cfg["parser"]["preferred_provider"] = "pseg"
    client = create_app(cfg).test_client()
    body = client.post("/api/parse/text", json={"full_text": "Atlantic City Electric"}).get_json()
    assert body["attempted"][0] == "pseg"


def test_parse_files(client):
    resp = client.post("/api/parse", data=_files(("a.pdf", b"ace"), ("bad.pdf", b"xx")),
                       content_type="multipart/form-data")
    body = resp.get_json()

    assert resp.status_code == 200
    assert [r["file_name"] for r in body["results"]] == ["a.pdf"]
    assert body["results"][0]["data"]["gas_supply_charges"] == "ACE Doesn't Supply Gas"
    assert body["errors"][0]["file_name"] == "bad.pdf"


def test_parse_files_requires_files(client):
    resp = client.post("/api/parse", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400


def test_parse_files_limit(client):
    resp = client.post("/api/parse", data=_files(*[(f"{i}.pdf", b"ace") for i in range(4)]),
                       content_type="multipart/form-data")
    assert resp.status_code == 400
    assert "limit is 3" in resp.get_json()["error"]


def test_export(client):
    resp = client.post("/api/export?mode=gas", data=_files(("a.pdf", b"ace"), ("p.pdf", b"pseg")),
                       content_type="multipart/form-data")

    assert resp.status_code == 200
    assert "gas_only.xlsx" in resp.headers["Content-Disposition"]
    wb = load_workbook(io.BytesIO(resp.data))
    assert wb.sheetnames == ["ACE", "PSE&G"]
    headers = [c.value for c in wb["PSE&G"][1]]
    assert "Total Gas Supply Charges" in headers
    assert "Total Electric Supply Charges" not in headers


def test_export_bad_mode(client):
    resp = client.post("/api/export?mode=water", data=_files(("a.pdf", b"ace")),
                       content_type="multipart/form-data")
    assert resp.status_code == 400


def test_export_with_nothing_readable(client):
    resp = client.post("/api/export", data=_files(("bad.pdf", b"xx")), content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "No data to export"
