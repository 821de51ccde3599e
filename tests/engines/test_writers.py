"""
Tests for the XLSX and CSV renderers.

Rendered workbooks are read back with openpyxl.
"""

import csv
import io
from datetime import date, datetime
from decimal import Decimal

import openpyxl
import pytest

from bankfile_engines.exporter import export_batch
from bankfile_engines.writers import render_csv, render_xlsx
from tests.factories import MONDAY_MORNING, make_payment


@pytest.fixture
def document(registry):
    payments = [
        make_payment(id="1", payee_name="Aisha", amount=Decimal("1200.50")),
        make_payment(id="2", payee_name="Omar", amount=Decimal("800"), national_or_residency_id=None),
    ]
    return export_batch(
        bank_code="ALRAJHI",
        payments=payments,
        registry=registry,
        now=MONDAY_MORNING,
        batch_number="B7",
    )


def _load(content: bytes):
    return openpyxl.load_workbook(io.BytesIO(content))


class TestRenderXlsx:

    def test_sheet_and_header(self, document):
        wb = _load(render_xlsx(document))
        ws = wb["Payments"]
        headers = [c.value for c in ws[1]]
        assert headers == list(document.headers)
        assert all(c.font.bold for c in ws[1])

    def test_data_rows(self, document):
        ws = _load(render_xlsx(document))["Payments"]
        assert ws.cell(row=2, column=5).value == "Aisha"
        assert ws.cell(row=2, column=3).value == pytest.approx(1200.50)
        assert ws.cell(row=3, column=6).value is None

    def test_amount_number_format(self, document):
        ws = _load(render_xlsx(document))["Payments"]
        assert ws.cell(row=2, column=3).number_format == "#,##0.00"

    def test_totals_footer(self, document):
        ws = _load(render_xlsx(document))["Payments"]
        assert ws.cell(row=4, column=1).value == "Total"
        assert ws.cell(row=4, column=3).value == pytest.approx(2000.50)
        assert ws.cell(row=4, column=3).font.bold

    def test_summary_sheet(self, document):
        wb = _load(render_xlsx(document))
        summary = {row[0]: row[1] for row in wb["Summary"].iter_rows(values_only=True)}
        assert summary["Bank"] == "Al Rajhi Bank"
        assert summary["Batch Number"] == "B7"
        assert summary["Record Count"] == 2
        assert summary["Same Day"] == "Yes"
        assert summary["Generated At"] == datetime(2024, 1, 8, 10, 0)

    def test_summary_sheet_optional(self, document):
        wb = _load(render_xlsx(document, include_summary=False))
        assert wb.sheetnames == ["Payments"]

    def test_sheet_label_per_bank(self, registry):
        doc = export_batch(
            bank_code="NCB",
            payments=[make_payment(bank_code="NCB")],
            registry=registry,
            now=MONDAY_MORNING,
        )
        assert _load(render_xlsx(doc)).sheetnames[0] == "BulkPayments"


class TestRenderCsv:

    def test_rows(self, document):
        rows = list(csv.reader(io.StringIO(render_csv(document))))
        assert rows[0] == list(document.headers)
        assert rows[1][2] == "1200.50"
        assert rows[2][2] == "800.00"
        assert rows[2][5] == ""
        assert len(rows) == 3

    def test_total_row(self, document):
        rows = list(csv.reader(io.StringIO(render_csv(document, include_total=True))))
        assert rows[-1][0] == "Total"
        assert rows[-1][2] == "2000.50"

    def test_dates_use_iso_format(self, document):
        from bankfile_engines.writers import _csv_value

        assert _csv_value(date(2024, 1, 8)) == "2024-01-08"
