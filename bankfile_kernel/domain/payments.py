"""
Payment records, validation results and the export document.

Responsibility:
    Plain data passed across the engine boundary.  ``PaymentRecord`` is
    supplied by the caller; everything else is produced fresh by an engine
    call and never persisted here.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.

Invariants enforced:
    - Monetary amounts are ``Decimal``, never ``float``.
    - A result's ``is_valid`` is derived from its error list; warnings and
      suggestions never affect validity.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from bankfile_kernel.domain.banking import ColumnDefinition


@dataclass(frozen=True)
class PaymentRecord:
    """
    One payee disbursement as supplied by the caller.

    Optional fields may be ``None``; the validator reports what is missing.
    ``amount`` is coerced to ``Decimal`` through ``str`` so that floats do
    not carry binary noise into totals.
    """

    id: str
    payee_name: str | None
    amount: Decimal | None
    bank_code: str | None = None
    structured_account_id: str | None = None
    national_or_residency_id: str | None = None
    project_reference: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str):
            object.__setattr__(self, "id", str(self.id))
        if self.amount is not None and not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(
                    f"Payment {self.id}: invalid amount {self.amount!r}"
                ) from e

    @property
    def is_exportable_amount(self) -> bool:
        """True if the amount is present, finite and strictly positive."""
        return (
            self.amount is not None and self.amount.is_finite() and self.amount > 0
        )


# ---------------------------------------------------------------------------
# Identifier validation
# ---------------------------------------------------------------------------


class IdentifierErrorKind(str, Enum):
    """Distinguishes a malformed identifier from a wrong checksum."""

    MALFORMED = "MALFORMED"
    CHECKSUM = "CHECKSUM"


@dataclass(frozen=True)
class IdentifierValidation:
    """
    Outcome of structured account identifier (IBAN) validation.

    Guarantees:
        - ``error_kind`` is None exactly when ``errors`` is empty.
        - Decoded parts are populated only for valid identifiers.
    """

    normalized: str
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    error_kind: IdentifierErrorKind | None = None
    check_digits: str | None = None
    bank_prefix: str | None = None
    account_number: str | None = None
    resolved_bank_code: str | None = None
    resolved_bank_name: str | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def is_bank_recognized(self) -> bool:
        return self.resolved_bank_code is not None


@dataclass(frozen=True)
class NationalIdValidation:
    """Outcome of a national/residency ID check."""

    normalized: str
    errors: tuple[str, ...] = ()
    id_type: str | None = None  # "CITIZEN" or "RESIDENT"

    @property
    def is_valid(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Payment validation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationResult:
    """
    Validation outcome for one payment record.

    ``field_status`` is a read-only map flagging which logical areas passed
    (payee_name, amount, bank_details, identifier, national_id).
    """

    payment_id: str
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    field_status: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "field_status", MappingProxyType(dict(self.field_status))
        )

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass(frozen=True)
class BatchValidationSummary:
    """
    Aggregate over per-record results plus batch-level checks.

    Guarantees:
        - ``results`` preserves the order of the submitted records.
        - ``is_valid`` is False if any batch-level error exists or any
          record is invalid.
    """

    bank_code: str
    results: tuple[ValidationResult, ...]
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    bank_name: str | None = None
    total_amount: Decimal = Decimal("0")

    @property
    def is_valid(self) -> bool:
        return not self.errors and all(r.is_valid for r in self.results)

    @property
    def can_export(self) -> bool:
        return self.is_valid

    @property
    def total_count(self) -> int:
        return len(self.results)

    @property
    def valid_count(self) -> int:
        return sum(1 for r in self.results if r.is_valid)

    @property
    def invalid_count(self) -> int:
        return self.total_count - self.valid_count

    @property
    def warning_count(self) -> int:
        """Number of records carrying at least one warning."""
        return sum(1 for r in self.results if r.has_warnings)

    @property
    def hard_error_count(self) -> int:
        return len(self.errors) + sum(len(r.errors) for r in self.results)

    def result_for(self, payment_id: str) -> ValidationResult | None:
        for r in self.results:
            if r.payment_id == payment_id:
                return r
        return None

    def common_errors(self, limit: int = 5) -> list[tuple[str, int]]:
        """Most frequent record-level errors with occurrence counts."""
        counts = Counter(e for r in self.results for e in r.errors)
        return counts.most_common(limit)

    def common_warnings(self, limit: int = 5) -> list[tuple[str, int]]:
        """Most frequent record-level warnings with occurrence counts."""
        counts = Counter(w for r in self.results for w in r.warnings)
        return counts.most_common(limit)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bank_code": self.bank_code,
            "bank_name": self.bank_name,
            "is_valid": self.is_valid,
            "summary": {
                "total": self.total_count,
                "valid": self.valid_count,
                "invalid": self.invalid_count,
                "with_warnings": self.warning_count,
                "total_amount": str(self.total_amount),
            },
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "results": [
                {
                    "payment_id": r.payment_id,
                    "is_valid": r.is_valid,
                    "errors": list(r.errors),
                    "warnings": list(r.warnings),
                    "suggestions": list(r.suggestions),
                }
                for r in self.results
            ],
        }


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScheduleStatus:
    """Whether a bank accepts a submission at a given instant."""

    bank_code: str
    evaluated_at: datetime  # bank-local wall clock
    weekday: str
    is_working_day: bool
    can_accept_today: bool
    cutoff_at: datetime
    time_until_cutoff: timedelta | None
    next_processing_date: date | None


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExportDocument:
    """
    Bank-specific tabular export, ready for an external writer.

    Guarantees:
        - ``headers`` and every row follow the schema's position order.
        - ``total_amount`` is the sum of included amounts and
          ``record_count == len(rows)``.
    """

    file_name: str
    sheet_label: str
    headers: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]
    total_amount: Decimal
    record_count: int
    bank_code: str
    bank_name: str
    batch_number: str
    generated_at: datetime
    columns: tuple[ColumnDefinition, ...] = ()
    currency: str = "SAR"
    comment: str | None = None
    same_day: bool = False
    processing_date: date | None = None
