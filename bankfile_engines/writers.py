"""
Spreadsheet and CSV renderers for ``ExportDocument``.

Presentation layer only: each function turns an already built document into
bytes or text and never touches the file system.  XLSX output uses openpyxl
(bold header row, per-column number formats, totals footer, optional
summary sheet); CSV output uses the standard ``csv`` module.
"""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from bankfile_kernel.domain.banking import ColumnDataType
from bankfile_kernel.domain.payments import ExportDocument
from bankfile_kernel.logging_config import get_logger

logger = get_logger("engines.writers")

SUMMARY_SHEET = "Summary"
DEFAULT_CURRENCY_FORMAT = "#,##0.00"
DEFAULT_DATE_FORMAT = "yyyy-mm-dd"
MIN_COLUMN_WIDTH = 12
MAX_COLUMN_WIDTH = 60


def _amount_column_index(document: ExportDocument) -> int | None:
    for i, column in enumerate(document.columns):
        if column.field_name == "amount":
            return i
    return None


def _number_format(data_type: ColumnDataType, explicit: str | None) -> str | None:
    if explicit:
        return explicit
    if data_type is ColumnDataType.CURRENCY:
        return DEFAULT_CURRENCY_FORMAT
    if data_type is ColumnDataType.DATE:
        return DEFAULT_DATE_FORMAT
    return None


def _xlsx_value(value: Any) -> Any:
    if value == "":
        return None
    if isinstance(value, datetime):
        # Excel cells cannot carry a time zone.
        return value.replace(tzinfo=None)
    return value


def render_xlsx(document: ExportDocument, *, include_summary: bool = True) -> bytes:
    """
    Render the document as an XLSX workbook.

    The first sheet is named after the bank's sheet label and holds the
    header row, one row per record and a bold totals row under the amount
    column.  With ``include_summary`` a second sheet lists batch metadata.
    """
    try:
        import openpyxl
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter
    except ImportError as e:
        raise ImportError("XLSX output requires openpyxl. Install with: pip install openpyxl") from e

    bold = Font(bold=True)
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = document.sheet_label

    ws.append(list(document.headers))
    for cell in ws[1]:
        cell.font = bold

    for row in document.rows:
        ws.append([_xlsx_value(v) for v in row])

    first_data_row = 2
    last_data_row = len(document.rows) + 1
    for col_idx, column in enumerate(document.columns, start=1):
        fmt = _number_format(column.data_type, column.number_format)
        if fmt:
            for row_idx in range(first_data_row, last_data_row + 1):
                ws.cell(row=row_idx, column=col_idx).number_format = fmt
        width = max(len(column.header) + 2, MIN_COLUMN_WIDTH)
        if column.max_length:
            width = max(width, min(column.max_length, MAX_COLUMN_WIDTH))
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    amount_idx = _amount_column_index(document)
    if amount_idx is not None:
        footer_row = last_data_row + 1
        total_cell = ws.cell(row=footer_row, column=amount_idx + 1, value=document.total_amount)
        total_cell.font = bold
        total_cell.number_format = _number_format(
            ColumnDataType.CURRENCY, document.columns[amount_idx].number_format
        )
        if amount_idx > 0:
            ws.cell(row=footer_row, column=1, value="Total").font = bold

    if include_summary:
        summary = wb.create_sheet(SUMMARY_SHEET)
        for label, value in _summary_rows(document):
            summary.append([label, _xlsx_value(value)])
            summary.cell(row=summary.max_row, column=1).font = bold
        summary.column_dimensions["A"].width = 20
        summary.column_dimensions["B"].width = 40

    buffer = io.BytesIO()
    wb.save(buffer)
    content = buffer.getvalue()

    logger.info(
        "xlsx_rendered",
        extra={
            "bank_code": document.bank_code,
            "file_name": document.file_name,
            "record_count": document.record_count,
            "size_bytes": len(content),
        },
    )
    return content


def _summary_rows(document: ExportDocument) -> list[tuple[str, Any]]:
    return [
        ("Bank", document.bank_name),
        ("Bank Code", document.bank_code),
        ("Batch Number", document.batch_number),
        ("Generated At", document.generated_at),
        ("Processing Date", document.processing_date),
        ("Same Day", "Yes" if document.same_day else "No"),
        ("Record Count", document.record_count),
        ("Total Amount", document.total_amount),
        ("Currency", document.currency),
        ("Comment", document.comment or ""),
    ]


def _csv_value(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def render_csv(document: ExportDocument, *, include_total: bool = False) -> str:
    """
    Render the document as CSV text (header row first).

    With ``include_total`` a trailing row carries ``Total`` in the first
    column and the batch total under the amount column.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(document.headers)
    for row in document.rows:
        writer.writerow([_csv_value(v) for v in row])

    if include_total:
        footer = [""] * len(document.headers)
        amount_idx = _amount_column_index(document)
        if footer:
            footer[0] = "Total"
        if amount_idx is not None:
            footer[amount_idx] = _csv_value(document.total_amount)
        writer.writerow(footer)

    return buffer.getvalue()
