"""
Registry dataset validator (``bankfile_config.validator``).

Responsibility
--------------
Checks the raw registry document (as parsed from YAML) for structural
integrity before any ``BankDefinition`` is built, so that a broken dataset
is reported as one complete list of problems instead of the first
constructor error.

Invariants enforced
-------------------
* Bank codes and aliases are unique (case-insensitive).
* Identifier prefixes are 2-digit numeric strings and unique.
* Cutoff times parse as ``HH:MM``; working days are English weekday names.
* Column positions are unique and contiguous from 1; data types and field
  names are known.

Failure modes
-------------
* Errors (``RegistryValidationResult.errors``) -> the registry MUST NOT be
  loaded; the loader raises ``RegistryConfigError``.
* Warnings -> the registry loads; the loader logs them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from bankfile_kernel.domain.banking import EXPORT_FIELDS, WEEKDAY_NAMES, ColumnDataType

_DATA_TYPES = frozenset(t.value for t in ColumnDataType)


@dataclass
class RegistryValidationResult:
    """
    Result of registry dataset validation.

    ``is_valid`` is True only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_registry_data(data: dict[str, Any]) -> RegistryValidationResult:
    """
    Validate a raw registry document.

    Postconditions:
        - Returns every error and warning found; never raises for bad data.
    """
    result = RegistryValidationResult()

    banks = data.get("banks")
    if not isinstance(banks, list) or not banks:
        result.add_error("Registry must declare at least one bank under 'banks'")
        return result

    default_schema = data.get("default_schema")
    if default_schema is not None:
        _validate_schema("default_schema", default_schema, result)

    _validate_limits(data.get("limits") or {}, result)

    seen_codes: dict[str, str] = {}
    seen_prefixes: dict[str, str] = {}
    for idx, bank in enumerate(banks):
        if not isinstance(bank, dict):
            result.add_error(f"banks[{idx}] must be a mapping")
            continue
        label = str(bank.get("code") or f"banks[{idx}]")
        _validate_bank_fields(label, bank, result)
        _validate_unique_names(label, bank, seen_codes, result)

        prefix = bank.get("identifier_prefix")
        if isinstance(prefix, str) and prefix in seen_prefixes:
            result.add_error(
                f"Bank {label}: identifier_prefix {prefix} already used by "
                f"{seen_prefixes[prefix]}"
            )
        elif isinstance(prefix, str):
            seen_prefixes[prefix] = label

        schema = bank.get("export_schema")
        if schema is None:
            if default_schema is None:
                result.add_error(
                    f"Bank {label}: no export_schema and no default_schema declared"
                )
        else:
            _validate_schema(f"Bank {label}", schema, result)

    return result


def _validate_bank_fields(
    label: str, bank: dict[str, Any], result: RegistryValidationResult
) -> None:
    for key in ("code", "display_name", "identifier_prefix", "cutoff_time"):
        if not bank.get(key):
            result.add_error(f"Bank {label}: missing required key '{key}'")

    prefix = bank.get("identifier_prefix")
    if prefix is not None and (
        not isinstance(prefix, str) or len(prefix) != 2 or not prefix.isdigit()
    ):
        result.add_error(
            f"Bank {label}: identifier_prefix must be a quoted 2-digit string, "
            f"got {prefix!r}"
        )

    cutoff = bank.get("cutoff_time")
    if cutoff is not None and not _is_hhmm(cutoff):
        result.add_error(
            f"Bank {label}: cutoff_time must be a quoted 'HH:MM' string, got {cutoff!r}"
        )

    days = bank.get("working_days") or []
    unknown = [d for d in days if d not in WEEKDAY_NAMES]
    if unknown:
        result.add_error(f"Bank {label}: unknown working days {unknown}")
    if not days:
        result.add_warning(f"Bank {label}: no working days; it can never accept a batch")

    max_records = bank.get("max_bulk_records")
    if max_records is not None and (
        isinstance(max_records, bool) or not isinstance(max_records, int) or max_records < 1
    ):
        result.add_error(
            f"Bank {label}: max_bulk_records must be a positive integer or null"
        )

    supports_bulk = bank.get("supports_bulk", True)
    if not isinstance(supports_bulk, bool):
        result.add_error(f"Bank {label}: supports_bulk must be true or false")
    elif not supports_bulk and max_records is not None:
        result.add_warning(
            f"Bank {label}: supports_bulk is false; max_bulk_records is ignored"
        )


def _validate_unique_names(
    label: str,
    bank: dict[str, Any],
    seen: dict[str, str],
    result: RegistryValidationResult,
) -> None:
    names = [bank.get("code")] + list(bank.get("aliases") or [])
    for name in names:
        if not name:
            continue
        key = str(name).strip().upper()
        if key in seen:
            result.add_error(
                f"Bank {label}: code or alias {name} already used by {seen[key]}"
            )
        else:
            seen[key] = label


def _validate_schema(
    label: str, columns: Any, result: RegistryValidationResult
) -> None:
    if not isinstance(columns, list) or not columns:
        result.add_error(f"{label}: export schema must be a non-empty list")
        return

    positions: list[int] = []
    for col in columns:
        if not isinstance(col, dict):
            result.add_error(f"{label}: every column must be a mapping")
            continue
        header = col.get("header") or "?"
        position = col.get("position")
        if isinstance(position, bool) or not isinstance(position, int):
            result.add_error(f"{label}: column '{header}' has no integer position")
        else:
            positions.append(position)
        if not col.get("header"):
            result.add_error(f"{label}: column at position {position} has no header")
        if col.get("field") not in EXPORT_FIELDS:
            result.add_error(
                f"{label}: column '{header}' maps unknown field {col.get('field')!r}"
            )
        data_type = col.get("data_type", "TEXT")
        if data_type not in _DATA_TYPES:
            result.add_error(
                f"{label}: column '{header}' has unknown data_type {data_type!r}"
            )
        min_len, max_len = col.get("min_length"), col.get("max_length")
        if min_len is not None and max_len is not None and max_len < min_len:
            result.add_error(
                f"{label}: column '{header}' max_length is below min_length"
            )

    if len(positions) != len(set(positions)):
        result.add_error(f"{label}: duplicate column positions {sorted(positions)}")
    elif sorted(positions) != list(range(1, len(positions) + 1)):
        result.add_error(
            f"{label}: column positions must be contiguous from 1, got {sorted(positions)}"
        )


def _validate_limits(limits: dict[str, Any], result: RegistryValidationResult) -> None:
    low = limits.get("min_payee_name_length")
    high = limits.get("max_payee_name_length")
    if low is not None and high is not None and int(high) < int(low):
        result.add_error("limits: max_payee_name_length is below min_payee_name_length")


def _is_hhmm(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError:
        return False
    return True
