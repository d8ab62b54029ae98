"""
Document Text Reader
====================
Decodes bill PDFs into per-page text for the extraction core.

Detection order:
1. PDF with native text -> PyMuPDF extraction
2. PDF without text (scanned) -> OCR via pytesseract
"""

import io
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

import pymupdf  # PyMuPDF 1.26+ uses pymupdf, not fitz
import pytesseract
from PIL import Image

logger = logging.getLogger(__name__)


class DocumentReadError(Exception):
    """The document could not be decoded into text."""


@dataclass(frozen=True)
class DocumentText:
    """Text of one document, page by page."""
    full_text: str
    pages: List[str] = field(default_factory=list)
    page_count: int = 0
    method: str = "pdf_native"

    @classmethod
    def from_pages(cls, pages: List[str], method: str = "pdf_native") -> "DocumentText":
        """Join pages with a newline after each one, marking page breaks."""
        full_text = "".join(f"{page}\n" for page in pages)
        return cls(full_text=full_text, pages=list(pages), page_count=len(pages), method=method)


class DocumentReader:
    """
    Reads PDF bills into DocumentText.

    Native text is preferred; when the whole document holds fewer than
    ``min_native_chars`` characters it is treated as scanned and OCR'd.
    """

    MIN_NATIVE_CHARS = 100
    OCR_CONFIG = '--oem 3 --psm 6'

    def __init__(self, ocr_enabled: bool = True, min_native_chars: Optional[int] = None, dpi: int = 200):
        """
        Args:
            ocr_enabled: Fall back to OCR for PDFs without native text
            min_native_chars: Native text threshold (default 100)
            dpi: DPI for page rendering before OCR
        """
        self.ocr_enabled = ocr_enabled
        self.min_native_chars = self.MIN_NATIVE_CHARS if min_native_chars is None else min_native_chars
        self.dpi = dpi

    @classmethod
    def from_config(cls, cfg: Optional[dict] = None) -> "DocumentReader":
        doc_cfg = (cfg or {}).get("documents", {}) or {}
        return cls(
            ocr_enabled=bool(doc_cfg.get("ocr_enabled", True)),
            min_native_chars=doc_cfg.get("min_native_chars"),
            dpi=int(doc_cfg.get("ocr_dpi", 200)),
        )

    def read(self, file_path: str) -> DocumentText:
        """
        Read a PDF from disk.

        Raises:
            DocumentReadError: missing file, unsupported type or corrupt PDF
        """
        if not os.path.exists(file_path):
            raise DocumentReadError(f"File not found: {file_path}")
        ext = os.path.splitext(file_path)[1].lower()
        if ext != ".pdf":
            raise DocumentReadError(f"Unsupported file type: {ext}")
        with open(file_path, "rb") as f:
            return self.read_bytes(f.read())

    def read_bytes(self, data: bytes) -> DocumentText:
        """Read a PDF held in memory."""
        if not data:
            raise DocumentReadError("Empty document")
        try:
            doc = pymupdf.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentReadError(f"Failed to extract PDF: {e}") from e

        try:
            if doc.needs_pass:
                raise DocumentReadError("Encrypted PDF")
            logger.info(f"PDF loaded successfully, {len(doc)} pages found")
            try:
                pages = [page.get_text("text") or "" for page in doc]
            except Exception as e:
                raise DocumentReadError(f"Failed to extract PDF: {e}") from e
            native_chars = sum(len(p.strip()) for p in pages)

            if native_chars >= self.min_native_chars or not self.ocr_enabled:
                method = "pdf_native" if native_chars >= self.min_native_chars else "pdf_native_sparse"
                logger.info(f"PDF native text: {native_chars} chars (method={method})")
                return DocumentText.from_pages(pages, method=method)

            logger.info(f"PDF has insufficient native text ({native_chars} chars), falling back to OCR")
            return DocumentText.from_pages(self._ocr_pages(doc), method="pdf_ocr")
        finally:
            doc.close()

    def _ocr_pages(self, doc) -> List[str]:
        """OCR every page; a failed page yields empty text."""
        mat = pymupdf.Matrix(self.dpi / 72, self.dpi / 72)
        pages = []
        for page_num, page in enumerate(doc):
            try:
                pix = page.get_pixmap(matrix=mat)
                img = Image.open(io.BytesIO(pix.tobytes("png")))
                pages.append(pytesseract.image_to_string(img, config=self.OCR_CONFIG))
            except Exception as e:
                logger.warning(f"OCR failed for page {page_num + 1}: {e}")
                pages.append("")
        return pages
