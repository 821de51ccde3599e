"""
Module: bankfile_engines.exporter
Responsibility:
    Map a validated batch of payment records onto a bank's export schema and
    produce an ``ExportDocument``: ordered headers, typed rows, totals and a
    deterministic file name.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Serialising the document to
    bytes is the job of ``bankfile_engines.writers``; delivering it is out of
    scope.

Invariants enforced:
    - Headers and every row follow the schema in ascending ``position``.
    - ``total_amount`` is the sum of the included amounts and
      ``record_count == len(rows)``.
    - Column values are resolved through a table keyed by ``field_name``;
      adding a bank is a data change, never a new branch here.
    - Identical inputs (records, comment, batch number, ``now``) give an
      identical document.

Failure modes:
    - Unknown bank code -> ``UnknownBankError`` (the only raise).
    - Column resolution never raises: absent values fall back to the
      column's default, then to an empty cell.

Usage:
    from bankfile_engines.exporter import export_batch

    document = export_batch(
        bank_code="ALRAJHI", payments=records, registry=registry,
        now=clock.now(), comment="January payroll",
    )
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from bankfile_config.registry import BankRegistry
from bankfile_engines.identifier import normalize_identifier, placeholder_identifier
from bankfile_engines.schedule import evaluate_schedule
from bankfile_engines.tracer import traced_engine
from bankfile_kernel.domain.banking import BankDefinition, ColumnDataType, ColumnDefinition
from bankfile_kernel.domain.payments import ExportDocument, PaymentRecord
from bankfile_kernel.logging_config import get_logger

logger = get_logger("engines.exporter")

CENT = Decimal("0.01")
EMPTY_CELL = ""


@dataclass(frozen=True)
class _RowContext:
    record: PaymentRecord
    bank: BankDefinition
    column: ColumnDefinition
    comment: str | None
    export_date: date


def _text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _bank_name(ctx: _RowContext) -> Any:
    return ctx.column.default_value or ctx.bank.display_name


def _iban(ctx: _RowContext) -> Any:
    normalized = normalize_identifier(ctx.record.structured_account_id)
    if normalized:
        return normalized
    # Unverified; the validator has already accepted the record without one.
    return placeholder_identifier(ctx.bank.identifier_prefix, ctx.record.id)


def _description(ctx: _RowContext) -> Any:
    comment = _text(ctx.comment)
    if comment:
        return comment
    name = _text(ctx.record.payee_name)
    return f"Payment for {name}" if name else None


FIELD_RESOLVERS: dict[str, Callable[[_RowContext], Any]] = {
    "bank_name": _bank_name,
    "iban": _iban,
    "amount": lambda ctx: ctx.record.amount,
    "description": _description,
    "employee_name": lambda ctx: _text(ctx.record.payee_name),
    "national_id": lambda ctx: _text(ctx.record.national_or_residency_id),
    "beneficiary_address": lambda ctx: None,
    "payment_id": lambda ctx: ctx.record.id,
    "project_reference": lambda ctx: _text(ctx.record.project_reference),
    "value_date": lambda ctx: ctx.export_date,
}


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


def _coerce_cell(value: Any, column: ColumnDefinition) -> Any:
    """Convert a resolved value to the column's cell type."""
    if value is None or value == "":
        return EMPTY_CELL

    if column.data_type is ColumnDataType.CURRENCY:
        amount = _to_decimal(value)
        if amount is None:
            return EMPTY_CELL
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)

    if column.data_type is ColumnDataType.NUMBER:
        number = _to_decimal(value)
        return EMPTY_CELL if number is None else number

    if column.data_type is ColumnDataType.DATE:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return str(value)

    text = str(value)
    if column.max_length is not None:
        text = text[: column.max_length]
    return text


def resolve_cell(
    record: PaymentRecord,
    bank: BankDefinition,
    column: ColumnDefinition,
    *,
    comment: str | None,
    export_date: date,
) -> Any:
    """Resolve one typed cell; unknown fields and absent values use the default."""
    resolver = FIELD_RESOLVERS.get(column.field_name)
    value = None
    if resolver is not None:
        value = resolver(_RowContext(record, bank, column, comment, export_date))
    if value is None or value == "":
        value = column.default_value
    return _coerce_cell(value, column)


def build_file_name(bank: BankDefinition, export_date: date, batch_number: str) -> str:
    """``{bankCode}_{YYYYMMDD}_{batchNumber}{extension}``."""
    return f"{bank.code}_{export_date:%Y%m%d}_{batch_number}{bank.file_extension}"


def generate_batch_number(now: datetime) -> str:
    """Timestamp-derived batch token; uniqueness is the caller's concern."""
    return f"BATCH{now:%H%M%S}"


@traced_engine("exporter", "1.0", fingerprint_fields=("bank_code", "batch_number", "now"))
def export_batch(
    bank_code: str,
    payments: Sequence[PaymentRecord],
    registry: BankRegistry,
    *,
    now: datetime,
    comment: str | None = None,
    batch_number: str | None = None,
) -> ExportDocument:
    """
    Build the export document for an already validated batch.

    The exporter does not re-validate; callers gate on
    ``BatchValidationSummary.can_export`` first.

    Raises:
        UnknownBankError: if ``bank_code`` is not in the registry.
    """
    bank = registry.require(bank_code)
    schedule = evaluate_schedule(bank, now=now, zone=registry.zone)
    local_now = schedule.evaluated_at
    export_date = local_now.date()
    batch_number = batch_number or generate_batch_number(local_now)

    rows = tuple(
        tuple(
            resolve_cell(
                record, bank, column, comment=comment, export_date=export_date
            )
            for column in bank.export_schema
        )
        for record in payments
    )
    total_amount = sum(
        (p.amount for p in payments if p.amount is not None), Decimal("0")
    )

    document = ExportDocument(
        file_name=build_file_name(bank, export_date, batch_number),
        sheet_label=bank.sheet_label,
        headers=bank.headers,
        rows=rows,
        total_amount=total_amount,
        record_count=len(rows),
        bank_code=bank.code,
        bank_name=bank.display_name,
        batch_number=batch_number,
        generated_at=local_now,
        columns=bank.export_schema,
        currency=registry.currency,
        comment=_text(comment),
        same_day=schedule.can_accept_today,
        processing_date=schedule.next_processing_date,
    )

    logger.info(
        "bank_file_exported",
        extra={
            "bank_code": bank.code,
            "file_name": document.file_name,
            "record_count": document.record_count,
            "total_amount": str(total_amount),
            "same_day": document.same_day,
        },
    )
    return document
