"""
Module: bankfile_engines.payment_rules
Responsibility:
    Validate payment records against the rules of a target bank, one record
    at a time and as a batch (empty batch, bulk-size ceiling, mixed banks).

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Uses the read-only
    ``BankRegistry`` and the identifier / national-ID engines.

Invariants enforced:
    - Every check runs independently; all violations are collected so the
      caller sees the complete list in one pass.
    - A record is valid iff it has no errors.  Warnings and suggestions
      never change validity.
    - Batch-level errors (empty batch, size ceiling, unknown target bank)
      live on the summary and leave each record's lists untouched.
    - Referential transparency: identical inputs give identical output; no
      state is kept between calls.

Failure modes:
    - Nothing is raised for bad data; an unknown target bank becomes a
      batch-level error so the report is still complete.

Usage:
    from bankfile_engines.payment_rules import validate_batch

    summary = validate_batch(payments=records, bank_code="ALRAJHI", registry=registry)
    if summary.can_export:
        ...
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from bankfile_config.registry import BankRegistry, normalize_bank_code
from bankfile_engines.identifier import validate_identifier
from bankfile_engines.national_id import validate_national_id
from bankfile_engines.tracer import traced_engine
from bankfile_kernel.domain.banking import RuleLimits
from bankfile_kernel.domain.payments import (
    BatchValidationSummary,
    PaymentRecord,
    ValidationResult,
)
from bankfile_kernel.logging_config import get_logger

logger = get_logger("engines.payment_rules")

NO_PAYMENTS_SELECTED = "No payments selected"


def _canonical_code(code: str, registry: BankRegistry) -> str:
    """Registry code for ``code`` (aliases resolved), or the normalized raw value."""
    bank = registry.get_by_code(code)
    return bank.code if bank else normalize_bank_code(code)


def validate_payment(
    payment: PaymentRecord,
    target_bank_code: str,
    registry: BankRegistry,
    *,
    limits: RuleLimits | None = None,
) -> ValidationResult:
    """
    Validate one payment record for submission to ``target_bank_code``.

    Args:
        payment: Record supplied by the caller.
        target_bank_code: Code (or alias) of the bank the file is for.
        registry: Bank catalogue.
        limits: Rule thresholds; defaults to ``registry.limits``.

    Returns:
        ValidationResult with errors, warnings, suggestions and per-area
        pass flags.
    """
    limits = limits or registry.limits
    errors: list[str] = []
    warnings: list[str] = []
    suggestions: list[str] = []
    status = {
        "payee_name": True,
        "amount": True,
        "bank_details": True,
        "identifier": True,
        "national_id": True,
    }

    # Payee name
    name = (payment.payee_name or "").strip()
    if len(name) < limits.min_payee_name_length:
        errors.append(
            "Payee name is required and must be at least "
            f"{limits.min_payee_name_length} characters"
        )
        status["payee_name"] = False
    elif len(name) > limits.max_payee_name_length:
        errors.append(
            f"Payee name cannot exceed {limits.max_payee_name_length} characters"
        )
        status["payee_name"] = False

    # Amount
    amount = payment.amount
    amount_in_range = False
    if amount is None or not amount.is_finite() or amount <= 0:
        errors.append("Payment amount must be greater than 0")
        status["amount"] = False
    elif amount > limits.max_amount:
        errors.append(f"Payment amount exceeds maximum limit of {limits.max_amount:,}")
        status["amount"] = False
    else:
        amount_in_range = True
        if amount < limits.small_amount_threshold:
            warnings.append("Very small payment amount")
        if amount > limits.high_value_threshold:
            warnings.append("High-value payment may require additional verification")

    # Structured account identifier
    if payment.structured_account_id and payment.structured_account_id.strip():
        identifier = validate_identifier(payment.structured_account_id, registry)
        errors.extend(identifier.errors)
        warnings.extend(identifier.warnings)
        status["identifier"] = identifier.is_valid

    # Bank assignment
    if not (payment.bank_code and payment.bank_code.strip()):
        warnings.append("Bank information not specified")
        suggestions.append("Assign bank details before processing")
    elif _canonical_code(payment.bank_code, registry) != _canonical_code(
        target_bank_code, registry
    ):
        record_bank = registry.get_by_code(payment.bank_code)
        label = record_bank.display_name if record_bank else payment.bank_code.strip()
        errors.append(f"Payment assigned to a different bank ({label})")
        status["bank_details"] = False

    # National / residency ID
    if payment.national_or_residency_id and payment.national_or_residency_id.strip():
        national_id = validate_national_id(payment.national_or_residency_id)
        warnings.extend(national_id.errors)
        status["national_id"] = national_id.is_valid

    # Project
    if not (payment.project_reference and payment.project_reference.strip()):
        warnings.append("No project assigned")

    if warnings and not errors:
        suggestions.append("Review warnings before processing")
    if amount_in_range and amount > limits.review_suggestion_threshold:
        suggestions.append("Consider reviewing high-value payments")

    return ValidationResult(
        payment_id=payment.id,
        errors=tuple(errors),
        warnings=tuple(warnings),
        suggestions=tuple(suggestions),
        field_status=status,
    )


@traced_engine("payment_rules", "1.0", fingerprint_fields=("bank_code",))
def validate_batch(
    payments: Sequence[PaymentRecord],
    bank_code: str,
    registry: BankRegistry,
    *,
    limits: RuleLimits | None = None,
) -> BatchValidationSummary:
    """
    Validate every record plus the batch as a whole.

    Batch checks:
        - Empty batch -> single error, no record results.
        - Unknown target bank -> batch error.
        - Bank without bulk support given more than one record -> batch error.
        - More records than ``max_bulk_records`` -> batch error naming the
          limit and the actual count.
        - More than one distinct non-empty record bank code -> batch warning.
    """
    target_bank = registry.get_by_code(bank_code)
    canonical_target = target_bank.code if target_bank else normalize_bank_code(bank_code)
    bank_name = target_bank.display_name if target_bank else None

    if not payments:
        logger.info(
            "payment_batch_validated",
            extra={"bank_code": canonical_target, "payment_count": 0, "is_valid": False},
        )
        return BatchValidationSummary(
            bank_code=canonical_target,
            results=(),
            errors=(NO_PAYMENTS_SELECTED,),
            bank_name=bank_name,
        )

    count = len(payments)
    batch_errors: list[str] = []
    batch_warnings: list[str] = []

    if target_bank is None:
        batch_errors.append(f"Unknown bank code: {bank_code}")
    else:
        if not target_bank.supports_bulk and count > 1:
            batch_errors.append(
                f"{target_bank.display_name} does not accept bulk payment files"
            )
        if target_bank.has_bulk_limit and count > target_bank.max_bulk_records:
            batch_errors.append(
                f"Batch of {count} payments exceeds {target_bank.display_name} "
                f"limit of {target_bank.max_bulk_records} payments per batch"
            )

    distinct_banks = {
        _canonical_code(p.bank_code, registry)
        for p in payments
        if p.bank_code and p.bank_code.strip()
    }
    if len(distinct_banks) > 1:
        batch_warnings.append(
            f"Batch contains payments for {len(distinct_banks)} different banks"
        )

    results = tuple(
        validate_payment(p, canonical_target, registry, limits=limits)
        for p in payments
    )
    total_amount = sum(
        (p.amount for p in payments if p.is_exportable_amount), Decimal("0")
    )

    summary = BatchValidationSummary(
        bank_code=canonical_target,
        results=results,
        errors=tuple(batch_errors),
        warnings=tuple(batch_warnings),
        bank_name=bank_name,
        total_amount=total_amount,
    )

    logger.info(
        "payment_batch_validated",
        extra={
            "bank_code": canonical_target,
            "payment_count": count,
            "valid_count": summary.valid_count,
            "invalid_count": summary.invalid_count,
            "batch_error_count": len(batch_errors),
            "total_amount": str(total_amount),
            "is_valid": summary.is_valid,
        },
    )
    return summary
