"""Bill parsing API: provider listing, text/PDF extraction and spreadsheet export."""

from __future__ import annotations

import io
import logging
from typing import List, Optional, Tuple

from flask import Blueprint, current_app, g, jsonify, request, send_file

from bill_parser import get_default_registry, resolve
from bill_parser.batch import BatchProcessor
from bill_parser.debug_log import DebugLog
from bill_parser.document import DocumentReader
from bill_parser.export import ExportError, ExportMode, export_workbook

logger = logging.getLogger(__name__)

parse_api_bp = Blueprint("parse_api", __name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _app_cfg() -> dict:
    return current_app.config.get("APP_CFG", {}) or {}


def _registry():
    registry = current_app.config.get("PROVIDER_REGISTRY")
    return registry if registry is not None else get_default_registry()


def _preferred_provider(value: Optional[str]) -> Optional[str]:
    """Request value, else the configured default; empty means auto-detect."""
    value = (value or "").strip()
    if value:
        return value
    configured = (_app_cfg().get("parser", {}) or {}).get("preferred_provider") or ""
    return str(configured).strip() or None


def _reader() -> DocumentReader:
    return current_app.config.get("DOCUMENT_READER") or DocumentReader.from_config(_app_cfg())


def _uploaded_documents() -> List[Tuple[str, bytes]]:
    files = [f for f in request.files.getlist("files") if f and f.filename]
    max_files = int((_app_cfg().get("uploads", {}) or {}).get("max_files", 50))
    if len(files) > max_files:
        raise ValueError(f"Too many files ({len(files)}); limit is {max_files}")
    return [(f.filename, f.read()) for f in files]


def _error(message: str, status: int = 400):
    return jsonify({"success": False, "error": message}), status


@parse_api_bp.get("/api/providers")
def list_providers():
    """Registered providers in detection order."""
    return jsonify({"providers": [d.to_summary() for d in _registry()]})


@parse_api_bp.post("/api/parse/text")
def parse_text():
    """
    Extract fields from already-decoded bill text.

    Body: {"full_text": str, "pages": [str, ...], "provider_id": str?}
    """
    payload = request.get_json(silent=True) or {}
    full_text = payload.get("full_text")
    if not isinstance(full_text, str) or not full_text:
        return _error("full_text is required")

    pages = payload.get("pages") or [full_text]
    if not isinstance(pages, list) or not all(isinstance(p, str) for p in pages):
        return _error("pages must be a list of strings")

    log = DebugLog()
    resolution = resolve(
        full_text,
        pages,
        preferred_provider_id=_preferred_provider(payload.get("provider_id")),
        registry=_registry(),
        log_sink=log,
    )
    g.provider_id = resolution.provider_id

    body = resolution.to_dict()
    body["logs"] = log.lines
    return jsonify(body)


@parse_api_bp.post("/api/parse")
def parse_files():
    """Extract fields from uploaded PDF bills (multipart field ``files``)."""
    try:
        documents = _uploaded_documents()
    except ValueError as e:
        return _error(str(e))
    if not documents:
        return _error("No files uploaded")

    try:
        processor = BatchProcessor(reader=_reader(), registry=_registry())
        report = processor.process(
            documents,
            preferred_provider_id=_preferred_provider(request.form.get("provider_id")),
        )
    except Exception as e:
        logger.exception("Batch parse failed")
        return _error(str(e), 500)

    body = report.to_dict()
    body["success"] = True
    return jsonify(body)


@parse_api_bp.post("/api/export")
def export_files():
    """
    Parse uploaded PDF bills and return an .xlsx workbook.

    Query: mode=all|gas|electric
    """
    try:
        mode = ExportMode.parse(request.args.get("mode"))
        documents = _uploaded_documents()
    except (ExportError, ValueError) as e:
        return _error(str(e))
    if not documents:
        return _error("No files uploaded")

    try:
        registry = _registry()
        report = BatchProcessor(reader=_reader(), registry=registry).process(
            documents,
            preferred_provider_id=_preferred_provider(request.form.get("provider_id")),
        )
        data = export_workbook(report.results, mode, registry)
    except ExportError as e:
        return _error(str(e))
    except Exception as e:
        logger.exception("Export failed")
        return _error(str(e), 500)

    names = (_app_cfg().get("export", {}) or {}).get("file_names", {}) or {}
    file_name = names.get(mode.value) or f"utility_bill_{mode.value}_data.xlsx"
    return send_file(
        io.BytesIO(data),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=file_name,
    )
