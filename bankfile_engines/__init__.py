"""
Module: bankfile_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    ``bankfile_services``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import bankfile_kernel and bankfile_config (read-only registry).
    MUST NOT import bankfile_services.

Invariants enforced:
    - Purity: engines never read the process clock; ``now`` is a parameter.
    - Decimal-only arithmetic for amounts and totals.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Batch validation, schedule evaluation and export are traced via
    ``@traced_engine`` (see ``bankfile_engines.tracer``), emitting
    BANKFILE_ENGINE_TRACE log records.

Usage:
    from bankfile_engines import validate_batch, export_batch, render_xlsx
"""

from bankfile_kernel.logging_config import get_logger

logger = get_logger("engines")

from bankfile_engines.exporter import (
    FIELD_RESOLVERS,
    build_file_name,
    export_batch,
    generate_batch_number,
    resolve_cell,
)
from bankfile_engines.identifier import (
    format_identifier,
    mask_identifier,
    mod97_remainder,
    normalize_identifier,
    placeholder_identifier,
    validate_identifier,
)
from bankfile_engines.national_id import national_id_check_digit, validate_national_id
from bankfile_engines.payment_rules import validate_batch, validate_payment
from bankfile_engines.schedule import (
    describe_time_until_cutoff,
    evaluate_schedule,
    next_processing_date,
)
from bankfile_engines.tracer import compute_input_fingerprint, traced_engine
from bankfile_engines.writers import render_csv, render_xlsx

__all__ = [
    "FIELD_RESOLVERS",
    "build_file_name",
    "compute_input_fingerprint",
    "describe_time_until_cutoff",
    "evaluate_schedule",
    "export_batch",
    "format_identifier",
    "generate_batch_number",
    "mask_identifier",
    "mod97_remainder",
    "national_id_check_digit",
    "next_processing_date",
    "normalize_identifier",
    "placeholder_identifier",
    "render_csv",
    "render_xlsx",
    "resolve_cell",
    "traced_engine",
    "validate_batch",
    "validate_identifier",
    "validate_national_id",
    "validate_payment",
]
