"""
Unit tests for sequential batch processing and PDF text reading.
"""

import pymupdf
import pytesseract
import pytest
from PIL import Image

from bill_parser.batch import BatchProcessor
from bill_parser.document import DocumentReader, DocumentReadError, DocumentText
from conftest import ACE_PAGE_1, ACE_PAGE_2, PSEG_PAGE_1, PSEG_PAGE_3


class FakeReader:
    """Maps upload bytes to canned page lists; unknown bytes fail to decode."""

    def __init__(self, documents):
        self.documents = documents

    def read_bytes(self, data):
        if data not in self.documents:
            raise DocumentReadError("Failed to extract PDF: not a PDF")
        return DocumentText.from_pages(self.documents[data])


@pytest.fixture
def reader():
    return FakeReader({
        b"ace": [ACE_PAGE_1, ACE_PAGE_2],
        b"pseg": [PSEG_PAGE_1, "", PSEG_PAGE_3],
        b"blank": ["Nothing useful here"],
    })


def test_batch_continues_after_a_bad_document(reader):
    progress = []
    report = BatchProcessor(reader=reader).process(
        [("a.pdf", b"ace"), ("broken.pdf", b"%PDF-garbage"), ("p.pdf", b"pseg")],
        progress_callback=lambda pct, name: progress.append((pct, name)),
    )

    assert [r.file_name for r in report.results] == ["a.pdf", "p.pdf"]
    assert [r.provider_name for r in report.results] == ["ACE", "PSE&G"]
    assert [e.file_name for e in report.errors] == ["broken.pdf"]
    assert "not a PDF" in report.errors[0].error
    assert progress == [(33, "a.pdf"), (67, "broken.pdf"), (100, "p.pdf")]


def test_unresolved_document_is_a_result_not_an_error(reader):
    report = BatchProcessor(reader=reader).process([("letter.pdf", b"blank")])

    assert report.errors == []
    record = report.results[0]
    assert record.provider_id is None
    assert record.result.is_empty()


def test_batch_log_lines(reader):
    report = BatchProcessor(reader=reader).process([("a.pdf", b"ace")])

    assert "=== Starting batch processing of 1 file(s) ===" in report.log_lines[0]
    assert "=== Processing complete! Extracted 1 files successfully ===" in report.log_lines[-1]
    assert any("Detected: ACE" in line for line in report.log_lines)


def test_progress_callback_errors_do_not_stop_the_batch(reader):
    def broken_callback(pct, name):
        raise RuntimeError("UI went away")

    report = BatchProcessor(reader=reader).process(
        [("a.pdf", b"ace"), ("p.pdf", b"pseg")], progress_callback=broken_callback
    )
    assert len(report.results) == 2


def test_report_to_dict(reader):
    body = BatchProcessor(reader=reader).process([("a.pdf", b"ace"), ("x.pdf", b"???")]).to_dict()

    assert body["results"][0]["provider_id"] == "ace"
    assert body["results"][0]["data"]["account_number"] == "550012345678"
    assert body["errors"] == [{"file_name": "x.pdf", "error": "Failed to extract PDF: not a PDF"}]
    assert body["logs"]


# --- DocumentReader --------------------------------------------------------

def _make_pdf(*page_texts, **save_options):
    doc = pymupdf.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes(**save_options)
    doc.close()
    return data


def test_reader_extracts_pages_in_order():
    data = _make_pdf("PSEG first page", "Total kWh 79,516")
    document = DocumentReader(ocr_enabled=False).read_bytes(data)

    assert document.page_count == 2
    assert "PSEG first page" in document.pages[0]
    assert "Total kWh 79,516" in document.pages[1]
    assert document.full_text.index("PSEG") < document.full_text.index("79,516")


def test_reader_without_ocr_marks_sparse_text():
    document = DocumentReader(ocr_enabled=False, min_native_chars=1000).read_bytes(_make_pdf("short"))
    assert document.method == "pdf_native_sparse"


def test_reader_rejects_bad_input(tmp_path):
    reader = DocumentReader(ocr_enabled=False)
    with pytest.raises(DocumentReadError):
        reader.read_bytes(b"")
    with pytest.raises(DocumentReadError):
        reader.read_bytes(b"definitely not a pdf")
    with pytest.raises(DocumentReadError):
        reader.read(str(tmp_path / "missing.pdf"))

    txt = tmp_path / "bill.txt"
    txt.write_text("PSEG")
    with pytest.raises(DocumentReadError):
        reader.read(str(txt))


def test_reader_reads_from_disk(tmp_path):
    path = tmp_path / "bill.pdf"
    path.write_bytes(_make_pdf("Atlantic City Electric"))
    document = DocumentReader(ocr_enabled=False).read(str(path))
    assert "Atlantic City Electric" in document.full_text


def test_from_pages_marks_page_breaks():
    document = DocumentText.from_pages(["one", "two"])
    assert document.full_text == "one\ntwo\n"
    assert document.page_count == 2


def test_reader_from_config():
    reader = DocumentReader.from_config({"documents": {"ocr_enabled": False, "min_native_chars": 5, "ocr_dpi": 150}})
    assert reader.ocr_enabled is False
    assert reader.min_native_chars == 5
    assert reader.dpi == 150


def _locked_pdf(text):
    return _make_pdf(
        text,
        encryption=pymupdf.PDF_ENCRYPT_AES_256,
        owner_pw="owner",
        user_pw="secret",
    )


def test_reader_rejects_encrypted_pdf():
    with pytest.raises(DocumentReadError, match="Encrypted PDF"):
        DocumentReader(ocr_enabled=False).read_bytes(_locked_pdf("Atlantic City Electric"))


def test_encrypted_pdf_does_not_stop_the_batch():
    pseg_pdf = _make_pdf(PSEG_PAGE_1, PSEG_PAGE_3)
    report = BatchProcessor(reader=DocumentReader(ocr_enabled=False)).process(
        [("locked.pdf", _locked_pdf(PSEG_PAGE_1)), ("good.pdf", pseg_pdf)]
    )

    assert [e.file_name for e in report.errors] == ["locked.pdf"]
    assert report.errors[0].error == "Encrypted PDF"
    assert [r.file_name for r in report.results] == ["good.pdf"]
    assert report.results[0].provider_id == "pseg"


def test_scanned_pdf_falls_back_to_ocr(monkeypatch):
    calls = []

    def fake_image_to_string(img, config=None):
        assert isinstance(img, Image.Image)
        calls.append(config)
        if len(calls) == 2:
            raise pytesseract.TesseractError(1, "page unreadable")
        return "Total kWh 79,516"

    monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)

    data = _make_pdf("x", "", "")
    document = DocumentReader(min_native_chars=100, dpi=72).read_bytes(data)

    assert document.method == "pdf_ocr"
    assert document.pages == ["Total kWh 79,516", "", "Total kWh 79,516"]
    assert document.page_count == 3
    assert calls == [DocumentReader.OCR_CONFIG] * 3
