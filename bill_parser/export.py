"""Spreadsheet export of extracted bill records (one sheet per provider)."""

from __future__ import annotations

import io
import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .models import FIELDS

if TYPE_CHECKING:
    from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

NOT_FOUND = "Not Found"
UNKNOWN_PROVIDER = "Unknown"
MAX_SHEET_TITLE = 31

COMMON_LEADING_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("Service Address", "service_address"),
    ("Total Usage (kWh)", "total_usage_kwh"),
)
GAS_COLUMN = ("Total Gas Supply Charges", "gas_supply_charges")
ELECTRIC_COLUMN = ("Total Electric Supply Charges", "electric_supply_charges")


class ExportError(Exception):
    """Nothing to export."""


class ExportMode(Enum):
    ALL = "all"
    GAS = "gas"
    ELECTRIC = "electric"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ExportMode":
        if not value:
            return cls.ALL
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ExportError(f"Unknown export mode: {value!r}") from None


def _cell(value: Optional[str]) -> str:
    # Sentinels are real answers and are written as-is
    return NOT_FOUND if value is None or value == "" else value


def _charge_columns(mode: ExportMode) -> Tuple[Tuple[str, str], ...]:
    if mode is ExportMode.GAS:
        return (GAS_COLUMN,)
    if mode is ExportMode.ELECTRIC:
        return (ELECTRIC_COLUMN,)
    return (GAS_COLUMN, ELECTRIC_COLUMN)


def _columns_for(definition, mode: ExportMode) -> List[Tuple[str, str]]:
    if definition is None:
        return [(name, name) for name in FIELDS]
    return list(definition.id_columns) + list(COMMON_LEADING_COLUMNS) + list(_charge_columns(mode))


def build_rows(
    records: Sequence,
    mode: ExportMode = ExportMode.ALL,
    registry: Optional[ProviderRegistry] = None,
) -> Dict[str, List[Dict[str, str]]]:
    """
    Group records into per-provider rows.

    Returns:
        {sheet name: [row dict, ...]} in first-seen provider order. Row keys
        are column headers; missing values read "Not Found".
    """
    if registry is None:
        from .registry import get_default_registry
        registry = get_default_registry()

    sheets: Dict[str, List[Dict[str, str]]] = {}
    for record in records:
        definition = registry.get(record.provider_id)
        sheet = definition.name if definition is not None else UNKNOWN_PROVIDER

        row: Dict[str, str] = {"File Name": record.file_name}
        if definition is None:
            row["Provider"] = _cell(record.provider_name)
        for header, field_name in _columns_for(definition, mode):
            row[header] = _cell(getattr(record.result, field_name))

        sheets.setdefault(sheet, []).append(row)
    return sheets


def _style_header(ws, num_cols: int) -> None:
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    for col in range(1, num_cols + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")


def _auto_width(ws) -> None:
    for column in ws.columns:
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        ws.column_dimensions[get_column_letter(column[0].column)].width = min(max_length + 2, 60)


def export_workbook(
    records: Sequence,
    mode: ExportMode = ExportMode.ALL,
    registry: Optional[ProviderRegistry] = None,
) -> bytes:
    """
    Build an .xlsx workbook with one sheet per provider.

    Raises:
        ExportError: ``records`` is empty
    """
    if not records:
        raise ExportError("No data to export")

    sheets = build_rows(records, mode, registry)

    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title=title[:MAX_SHEET_TITLE])
        headers = list(rows[0].keys())
        ws.append(headers)
        for row in rows:
            ws.append([row.get(h, NOT_FOUND) for h in headers])
        _style_header(ws, len(headers))
        _auto_width(ws)

    buf = io.BytesIO()
    wb.save(buf)
    logger.info(f"Exported {len(records)} record(s) to {len(sheets)} sheet(s), mode={mode.value}")
    return buf.getvalue()
