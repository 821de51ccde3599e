"""Domain value objects for the bank file engine."""

from bankfile_kernel.domain.banking import (
    DEFAULT_LIMITS,
    EXPORT_FIELDS,
    WEEKDAY_NAMES,
    BankDefinition,
    ColumnDataType,
    ColumnDefinition,
    RuleLimits,
)
from bankfile_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from bankfile_kernel.domain.payments import (
    BatchValidationSummary,
    ExportDocument,
    IdentifierErrorKind,
    IdentifierValidation,
    NationalIdValidation,
    PaymentRecord,
    ScheduleStatus,
    ValidationResult,
)

__all__ = [
    "DEFAULT_LIMITS",
    "EXPORT_FIELDS",
    "WEEKDAY_NAMES",
    "BankDefinition",
    "BatchValidationSummary",
    "Clock",
    "ColumnDataType",
    "ColumnDefinition",
    "DeterministicClock",
    "ExportDocument",
    "IdentifierErrorKind",
    "IdentifierValidation",
    "NationalIdValidation",
    "PaymentRecord",
    "RuleLimits",
    "ScheduleStatus",
    "SystemClock",
    "ValidationResult",
]
