"""
Registry Loader (``bankfile_config.loader``).

Responsibility
--------------
Loads the bank registry YAML document, validates it with
``bankfile_config.validator`` and parses it into frozen ``BankDefinition``
instances held by a ``BankRegistry``.  Services should obtain the registry
through ``bankfile_config.get_bank_registry()``.

Invariants enforced
-------------------
* No registry is built from a document with validation errors.
* Every parsed object is a frozen dataclass from the kernel domain.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  canonical document for change detection and audit.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Structurally invalid document  -> ``RegistryConfigError`` with every
  error found.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from bankfile_config.registry import BankRegistry
from bankfile_config.validator import validate_registry_data
from bankfile_kernel.domain.banking import (
    BankDefinition,
    ColumnDataType,
    ColumnDefinition,
    RuleLimits,
)
from bankfile_kernel.exceptions import RegistryConfigError
from bankfile_kernel.logging_config import get_logger

logger = get_logger("config.loader")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_time(value: Any) -> time:
    """Parse an ``HH:MM`` string (or pass through a ``time``)."""
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return datetime.strptime(value, "%H:%M").time()
    raise ValueError(f"Cannot parse time from {value!r}")


def parse_column(data: dict[str, Any]) -> ColumnDefinition:
    """Parse a ColumnDefinition from a dict."""
    default = data.get("default")
    return ColumnDefinition(
        position=data["position"],
        field_name=data["field"],
        header=data["header"],
        data_type=ColumnDataType(data.get("data_type", "TEXT")),
        required=bool(data.get("required", False)),
        max_length=data.get("max_length"),
        min_length=data.get("min_length"),
        default_value=str(default) if default is not None else None,
        arabic_header=data.get("arabic_header"),
        number_format=data.get("number_format"),
    )


def parse_schema(columns: list[dict[str, Any]]) -> tuple[ColumnDefinition, ...]:
    return tuple(parse_column(c) for c in columns)


def parse_bank(
    data: dict[str, Any],
    default_schema: tuple[ColumnDefinition, ...] = (),
) -> BankDefinition:
    """
    Parse a ``BankDefinition`` from a dict.

    Banks that declare no ``export_schema`` receive ``default_schema``.

    Raises:
        KeyError: if required keys are missing.
        ValueError: if a value violates a ``BankDefinition`` invariant.
    """
    schema_data = data.get("export_schema")
    schema = parse_schema(schema_data) if schema_data is not None else default_schema
    file_format = data.get("file_format") or {}

    return BankDefinition(
        code=str(data["code"]).strip().upper(),
        display_name=data["display_name"],
        identifier_prefix=data["identifier_prefix"],
        supports_bulk=data.get("supports_bulk", True),
        max_bulk_records=data.get("max_bulk_records"),
        cutoff_time=parse_time(data["cutoff_time"]),
        working_days=frozenset(data.get("working_days") or ()),
        export_schema=schema,
        short_name=data.get("short_name", ""),
        arabic_name=data.get("arabic_name", ""),
        swift_code=data.get("swift_code"),
        aliases=tuple(str(a).strip().upper() for a in data.get("aliases") or ()),
        processing_time=data.get("processing_time", ""),
        file_extension=file_format.get("extension", ".xlsx"),
        sheet_label=file_format.get("sheet_label", "Payments"),
    )


def parse_limits(data: dict[str, Any]) -> RuleLimits:
    """Parse RuleLimits, keeping defaults for keys that are not given."""
    defaults = RuleLimits()
    return RuleLimits(
        min_payee_name_length=int(
            data.get("min_payee_name_length", defaults.min_payee_name_length)
        ),
        max_payee_name_length=int(
            data.get("max_payee_name_length", defaults.max_payee_name_length)
        ),
        max_amount=Decimal(str(data.get("max_amount", defaults.max_amount))),
        high_value_threshold=Decimal(
            str(data.get("high_value_threshold", defaults.high_value_threshold))
        ),
        small_amount_threshold=Decimal(
            str(data.get("small_amount_threshold", defaults.small_amount_threshold))
        ),
        review_suggestion_threshold=Decimal(
            str(
                data.get(
                    "review_suggestion_threshold",
                    defaults.review_suggestion_threshold,
                )
            )
        ),
    )


def build_registry(data: dict[str, Any], source: str = "<memory>") -> BankRegistry:
    """
    Validate a raw registry document and build a ``BankRegistry``.

    Raises:
        RegistryConfigError: if validation reports any error.
    """
    validation = validate_registry_data(data)
    for warning in validation.warnings:
        logger.warning(
            "registry_config_warning",
            extra={"source": source, "detail": warning},
        )
    if not validation.is_valid:
        raise RegistryConfigError(source, validation.errors)

    default_schema = parse_schema(data.get("default_schema") or [])
    banks = [parse_bank(b, default_schema) for b in data["banks"]]

    return BankRegistry(
        banks,
        version=str(data.get("version", "")),
        checksum=compute_checksum(data),
        timezone=data.get("timezone", "Asia/Riyadh"),
        currency=data.get("currency", "SAR"),
        limits=parse_limits(data.get("limits") or {}),
        source=source,
    )


def load_registry(path: Path) -> BankRegistry:
    """Load, validate and build the registry stored at ``path``."""
    return build_registry(load_yaml_file(path), source=str(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
