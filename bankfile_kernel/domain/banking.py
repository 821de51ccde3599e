"""
Bank catalogue value types.

Responsibility:
    Immutable descriptions of a receiving bank, its export column layout and
    the rule thresholds applied when validating payments for it.

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.  Instances are built by
    ``bankfile_config.loader`` from the registry dataset and shared read-only
    by every engine.

Invariants enforced:
    - ``identifier_prefix`` is a 2-character numeric string.
    - Column positions within one schema are unique, contiguous and 1-based.
    - ``max_bulk_records`` is positive when bounded.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from enum import Enum

# datetime.weekday() order
WEEKDAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# Logical source fields a column may map onto.
EXPORT_FIELDS: frozenset[str] = frozenset({
    "bank_name",
    "iban",
    "amount",
    "description",
    "employee_name",
    "national_id",
    "beneficiary_address",
    "payment_id",
    "project_reference",
    "value_date",
})


class ColumnDataType(str, Enum):
    """Cell type of an exported column."""

    TEXT = "TEXT"
    NUMBER = "NUMBER"
    DATE = "DATE"
    CURRENCY = "CURRENCY"


@dataclass(frozen=True)
class ColumnDefinition:
    """
    One exported column, ordered by ``position`` within a bank schema.

    ``default_value`` is used when the source field is absent for a record.
    """

    position: int
    field_name: str
    header: str
    data_type: ColumnDataType = ColumnDataType.TEXT
    required: bool = False
    max_length: int | None = None
    min_length: int | None = None
    default_value: str | None = None
    arabic_header: str | None = None
    number_format: str | None = None

    def __post_init__(self) -> None:
        if self.position < 1:
            raise ValueError(f"Column position must be >= 1, got {self.position}")
        if (
            self.max_length is not None
            and self.min_length is not None
            and self.max_length < self.min_length
        ):
            raise ValueError(
                f"Column '{self.header}': max_length cannot be less than min_length"
            )


@dataclass(frozen=True)
class BankDefinition:
    """
    A supported receiving bank and its processing rules.

    Contract:
        Frozen; loaded once from the registry dataset and never mutated.
    Guarantees:
        - ``export_schema`` is stored in ascending ``position`` order.
        - ``working_days`` holds canonical English weekday names.
    """

    code: str
    display_name: str
    identifier_prefix: str
    supports_bulk: bool
    max_bulk_records: int | None
    cutoff_time: time
    working_days: frozenset[str]
    export_schema: tuple[ColumnDefinition, ...]
    short_name: str = ""
    arabic_name: str = ""
    swift_code: str | None = None
    aliases: tuple[str, ...] = ()
    processing_time: str = ""
    file_extension: str = ".xlsx"
    sheet_label: str = "Payments"

    def __post_init__(self) -> None:
        if len(self.identifier_prefix) != 2 or not self.identifier_prefix.isdigit():
            raise ValueError(
                f"Bank {self.code}: identifier_prefix must be 2 digits, "
                f"got {self.identifier_prefix!r}"
            )
        if self.max_bulk_records is not None and self.max_bulk_records < 1:
            raise ValueError(
                f"Bank {self.code}: max_bulk_records must be positive"
            )
        unknown_days = set(self.working_days) - set(WEEKDAY_NAMES)
        if unknown_days:
            raise ValueError(
                f"Bank {self.code}: unknown working days {sorted(unknown_days)}"
            )

        ordered = tuple(sorted(self.export_schema, key=lambda c: c.position))
        positions = [c.position for c in ordered]
        if positions != list(range(1, len(ordered) + 1)):
            raise ValueError(
                f"Bank {self.code}: column positions must be contiguous from 1, "
                f"got {positions}"
            )
        object.__setattr__(self, "export_schema", ordered)

    @property
    def has_bulk_limit(self) -> bool:
        """True if the bank caps the number of records per batch."""
        return self.max_bulk_records is not None

    @property
    def headers(self) -> tuple[str, ...]:
        return tuple(c.header for c in self.export_schema)

    def is_working_day(self, weekday_name: str) -> bool:
        return weekday_name in self.working_days


@dataclass(frozen=True)
class RuleLimits:
    """Thresholds used by the payment rule validator."""

    min_payee_name_length: int = 2
    max_payee_name_length: int = 100
    max_amount: Decimal = Decimal("999999999.99")
    high_value_threshold: Decimal = Decimal("50000")
    small_amount_threshold: Decimal = Decimal("1")
    review_suggestion_threshold: Decimal = Decimal("10000")


DEFAULT_LIMITS = RuleLimits()
